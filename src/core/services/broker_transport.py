"""
Broker transports used by the ConnectionManager.

A transport opens one broker session and reports its asynchronous outcomes
through the callbacks handed to open(). Callbacks may arrive on a network
thread; MqttTransport hands them to the event hub so they run on the loop.
"""
import logging
import ssl
from dataclasses import dataclass
from typing import Callable, Optional

import paho.mqtt.client as mqtt

from core.event_hub import event_hub, EventHub
from core.models.config_data import BrokerConfig

logger = logging.getLogger(__name__)


class TransportError(Exception):
    """Raised when the transport cannot open a session or hand off a message."""


@dataclass
class TransportCallbacks:
    on_success: Callable[[], None]
    on_failure: Callable[[str], None]
    on_connection_lost: Callable[[str], None]
    on_message: Callable[[str, str], None]  # (topic, payload)


class BrokerTransport:
    """Interface for one broker session."""

    def open(self, config: BrokerConfig, callbacks: TransportCallbacks) -> None:
        raise NotImplementedError

    def subscribe(self, topic: str) -> None:
        raise NotImplementedError

    def publish(self, topic: str, payload: str) -> None:
        raise NotImplementedError

    def close(self) -> None:
        raise NotImplementedError


class MqttTransport(BrokerTransport):
    """paho-mqtt session, over websockets or plain TCP."""

    def __init__(self, hub: EventHub = event_hub):
        self._hub = hub
        self._client: Optional[mqtt.Client] = None
        self._callbacks: Optional[TransportCallbacks] = None
        self._established = False
        self._closed = False

    def open(self, config: BrokerConfig, callbacks: TransportCallbacks) -> None:
        self._callbacks = callbacks
        client = mqtt.Client(
            mqtt.CallbackAPIVersion.VERSION2,
            client_id=config.client_id,
            transport=config.transport,
        )
        if config.transport == "websockets":
            client.ws_set_options(path=config.ws_path)
        if config.use_tls:
            client.tls_set(cert_reqs=ssl.CERT_REQUIRED)
        client.connect_timeout = config.connect_timeout_s
        client.on_connect = self._on_connect
        client.on_connect_fail = self._on_connect_fail
        client.on_disconnect = self._on_disconnect
        client.on_message = self._on_message
        self._client = client

        try:
            client.connect_async(config.host, config.port, keepalive=config.keepalive_s)
            client.loop_start()
        except (OSError, ValueError) as e:
            raise TransportError(str(e)) from e

    def subscribe(self, topic: str) -> None:
        if self._client is None:
            raise TransportError("Transport is not open")
        result, _mid = self._client.subscribe(topic)
        if result != mqtt.MQTT_ERR_SUCCESS:
            raise TransportError(f"Subscribe to {topic} failed: {mqtt.error_string(result)}")

    def publish(self, topic: str, payload: str) -> None:
        if self._client is None:
            raise TransportError("Transport is not open")
        try:
            info = self._client.publish(topic, payload, qos=0, retain=False)
        except (OSError, ValueError) as e:
            raise TransportError(str(e)) from e
        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            raise TransportError(f"Publish to {topic} failed: {mqtt.error_string(info.rc)}")

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        client = self._client
        if client is None:
            return
        try:
            if self._established:
                client.disconnect()
        finally:
            client.loop_stop()

    # paho callbacks, invoked on the network thread

    def _on_connect(self, client, userdata, flags, reason_code, properties):
        if self._closed or self._callbacks is None:
            return
        if reason_code.is_failure:
            self._hub.call_in_loop(self._callbacks.on_failure, f"Connection refused: {reason_code}")
            return
        self._established = True
        self._hub.call_in_loop(self._callbacks.on_success)

    def _on_connect_fail(self, client, userdata):
        if self._closed or self._callbacks is None:
            return
        self._hub.call_in_loop(self._callbacks.on_failure, "Could not reach broker")

    def _on_disconnect(self, client, userdata, flags, reason_code, properties):
        if self._closed or self._callbacks is None or not self._established:
            return
        self._established = False
        self._hub.call_in_loop(self._callbacks.on_connection_lost, str(reason_code))

    def _on_message(self, client, userdata, message):
        if self._closed or self._callbacks is None:
            return
        payload = message.payload.decode("utf-8", errors="replace")
        self._hub.call_in_loop(self._callbacks.on_message, message.topic, payload)


def create_mqtt_transport() -> BrokerTransport:
    return MqttTransport()

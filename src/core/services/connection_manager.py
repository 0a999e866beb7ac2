import logging
from typing import Callable, Optional

from core.config_loader import config_loader
from core.event_hub import event_hub, EventHub, CONNECTION_STATE, CONNECTION_ERROR, BROKER_MESSAGE
from core.models.config_data import BrokerConfig
from core.models.connection_state import ConnectionState
from core.services.broker_transport import (
    BrokerTransport,
    TransportCallbacks,
    TransportError,
    create_mqtt_transport,
)

logger = logging.getLogger(__name__)

NO_MESSAGE_YET = "No message received yet"


class ConnectionManager:
    """
    Owns the broker session lifecycle.

    State is only ever changed here; other components read `state` and
    observe the `connection_state` topic. Failures and losses are reported,
    never raised, and no session is re-established without an explicit
    connect().
    """

    def __init__(
        self,
        config: BrokerConfig,
        transport_factory: Callable[[], BrokerTransport] = create_mqtt_transport,
        hub: EventHub = event_hub,
    ):
        self.base_config = config
        self.transport_factory = transport_factory
        self._hub = hub
        self._state = ConnectionState.DISCONNECTED
        self._session_config: Optional[BrokerConfig] = None
        self._transport: Optional[BrokerTransport] = None
        self._session_id = 0
        self.last_error: Optional[str] = None
        self.last_message: str = NO_MESSAGE_YET

        if config.reconnect:
            logger.info("Broker 'reconnect' is enabled in config; sessions are still only restored by an explicit connect")

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state is ConnectionState.CONNECTED

    @property
    def client_id(self) -> Optional[str]:
        return self._session_config.client_id if self._session_config else None

    @property
    def config(self) -> BrokerConfig:
        """Config of the current (or last) session, else the base config."""
        return self._session_config or self.base_config

    def connect(self) -> bool:
        """
        Begin establishing a session. Returns False when a session is already
        connecting or connected (no second session is started).
        """
        if self._state in (ConnectionState.CONNECTING, ConnectionState.CONNECTED):
            logger.debug(f"connect() ignored while {self._state.value}")
            return False

        self._session_id += 1
        session_id = self._session_id
        self._session_config = self.base_config.with_new_client_id()
        self.last_error = None
        self._set_state(ConnectionState.CONNECTING)
        logger.info(
            f"Connecting to broker {self._session_config.host}:{self._session_config.port} "
            f"as {self._session_config.client_id}"
        )

        transport = self.transport_factory()
        self._transport = transport
        callbacks = TransportCallbacks(
            on_success=lambda: self._on_success(session_id),
            on_failure=lambda reason: self._on_failure(session_id, reason),
            on_connection_lost=lambda reason: self._on_connection_lost(session_id, reason),
            on_message=lambda topic, payload: self._on_message(session_id, topic, payload),
        )
        try:
            transport.open(self._session_config, callbacks)
        except TransportError as e:
            self._on_failure(session_id, str(e))
        return True

    def disconnect(self) -> bool:
        """Tear down a connected session. Returns False (no-op) when not connected."""
        if self._state is not ConnectionState.CONNECTED:
            logger.debug(f"disconnect() ignored while {self._state.value}")
            return False
        logger.info("Disconnecting from broker")
        self._release_transport()
        self._set_state(ConnectionState.DISCONNECTED)
        return True

    def toggle(self) -> ConnectionState:
        """Disconnect when connected, otherwise connect."""
        if self._state is ConnectionState.CONNECTED:
            self.disconnect()
        else:
            self.connect()
        return self._state

    def shutdown(self):
        """Release any session, including one still being established."""
        if self._state is ConnectionState.DISCONNECTED and self._transport is None:
            return
        logger.info("Closing broker session")
        self._release_transport()
        if self._state is not ConnectionState.DISCONNECTED:
            self._set_state(ConnectionState.DISCONNECTED)

    def publish(self, topic: str, payload: str) -> None:
        """Hand a payload to the live session. Raises TransportError if there is none."""
        if self._transport is None or self._state is not ConnectionState.CONNECTED:
            raise TransportError("No active broker session")
        self._transport.publish(topic, payload)

    # Transport callbacks. Anything from a superseded session is ignored.

    def _on_success(self, session_id: int):
        if session_id != self._session_id or self._state is not ConnectionState.CONNECTING:
            return
        self._set_state(ConnectionState.CONNECTED)
        logger.info("Connected to broker")
        topic = self.config.subscribe_topic
        try:
            self._transport.subscribe(topic)
            logger.info(f"Subscribed to {topic}")
        except TransportError as e:
            logger.warning(f"Subscribe to {topic} failed: {e}")
            self._report_error(str(e))

    def _on_failure(self, session_id: int, reason: str):
        if session_id != self._session_id or self._state is not ConnectionState.CONNECTING:
            return
        logger.warning(f"Connection failed: {reason}")
        self._release_transport()
        self._report_error(reason)
        self._set_state(ConnectionState.FAILED)
        self._set_state(ConnectionState.DISCONNECTED)

    def _on_connection_lost(self, session_id: int, reason: str):
        if session_id != self._session_id or self._state is not ConnectionState.CONNECTED:
            return
        logger.warning(f"Connection lost: {reason}")
        self._release_transport()
        self._report_error(reason)
        self._set_state(ConnectionState.DISCONNECTED)

    def _on_message(self, session_id: int, topic: str, payload: str):
        if session_id != self._session_id or self._state is not ConnectionState.CONNECTED:
            return
        logger.debug(f"Message received on {topic}: {payload}")
        self.last_message = payload
        self._hub.send_all_on_topic(BROKER_MESSAGE, payload)

    def _release_transport(self):
        transport, self._transport = self._transport, None
        if transport is None:
            return
        try:
            transport.close()
        except Exception as e:
            logger.warning(f"Error while closing broker transport: {e}")

    def _report_error(self, reason: str):
        self.last_error = reason
        self._hub.send_all_on_topic(CONNECTION_ERROR, reason)

    def _set_state(self, state: ConnectionState):
        self._state = state
        self._hub.send_all_on_topic(CONNECTION_STATE, state)


# Global instance
connection_manager = ConnectionManager(config_loader.get_broker_config())

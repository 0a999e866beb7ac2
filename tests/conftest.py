"""Pytest configuration and fixtures for test suite."""

from typing import List, Optional

import pytest

from core.event_hub import init_event_hub
from core.models.config_data import BrokerConfig
from core.processing.telemetry_pipeline import telemetry_pipeline
from core.services.broker_transport import BrokerTransport, TransportCallbacks, TransportError
from core.services.connection_manager import connection_manager, NO_MESSAGE_YET
from core.services.telemetry_publisher import telemetry_publisher


class FakeTransport(BrokerTransport):
    """In-memory broker session. Tests fire the asynchronous outcomes by hand."""

    def __init__(self):
        self.config: Optional[BrokerConfig] = None
        self.callbacks: Optional[TransportCallbacks] = None
        self.subscriptions: List[str] = []
        self.published: List[tuple[str, str]] = []
        self.closed = False
        self.open_error: Optional[str] = None
        self.publish_error: Optional[str] = None

    def open(self, config: BrokerConfig, callbacks: TransportCallbacks) -> None:
        if self.open_error:
            raise TransportError(self.open_error)
        self.config = config
        self.callbacks = callbacks

    def subscribe(self, topic: str) -> None:
        self.subscriptions.append(topic)

    def publish(self, topic: str, payload: str) -> None:
        if self.publish_error:
            raise TransportError(self.publish_error)
        self.published.append((topic, payload))

    def close(self) -> None:
        self.closed = True

    # Broker-side events

    def succeed(self):
        self.callbacks.on_success()

    def fail(self, reason: str = "refused"):
        self.callbacks.on_failure(reason)

    def lose(self, reason: str = "keepalive timeout"):
        self.callbacks.on_connection_lost(reason)

    def deliver(self, topic: str, payload: str):
        self.callbacks.on_message(topic, payload)


class FakeTransportFactory:
    def __init__(self):
        self.created: List[FakeTransport] = []
        self.open_error: Optional[str] = None

    def __call__(self) -> FakeTransport:
        transport = FakeTransport()
        transport.open_error = self.open_error
        self.created.append(transport)
        return transport

    @property
    def last(self) -> FakeTransport:
        return self.created[-1]


@pytest.fixture
def fake_transports() -> FakeTransportFactory:
    return FakeTransportFactory()


@pytest.fixture(autouse=True)
def reset_global_services(fake_transports):
    """Put the process-wide singletons back to a clean, offline state around each test.

    The global connection manager never opens a real broker session in tests:
    its transport factory is replaced by the in-memory fake.
    """
    init_event_hub(None)
    connection_manager.shutdown()
    original_factory = connection_manager.transport_factory
    connection_manager.transport_factory = fake_transports
    connection_manager.last_error = None
    connection_manager.last_message = NO_MESSAGE_YET
    telemetry_publisher.reset_counters()
    telemetry_pipeline.reset()

    yield

    telemetry_pipeline.stop()
    connection_manager.shutdown()
    connection_manager.transport_factory = original_factory
    init_event_hub(None)

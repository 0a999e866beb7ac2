import uuid
from dataclasses import dataclass, field, replace


@dataclass(frozen=True)
class BrokerConfig:
    host: str = "picomqtt.local"
    port: int = 81
    client_id: str = ""
    subscribe_topic: str = "button/state"
    publish_topic: str = "expo/barometer/altitude"
    client_id_prefix: str = "mqtt"
    transport: str = "websockets"  # "websockets" or "tcp"
    ws_path: str = "/mqtt"
    use_tls: bool = False
    connect_timeout_s: float = 5.0
    keepalive_s: int = 60
    # Parsed and exposed, but sessions are only ever re-established by an explicit connect()
    reconnect: bool = False

    def with_new_client_id(self) -> "BrokerConfig":
        """Return a copy carrying a freshly generated client identifier."""
        return replace(self, client_id=f"{self.client_id_prefix}_{uuid.uuid4().hex[:12]}")


@dataclass
class sensorConfigData:
    update_interval_ms: int = 1000
    serial_port: str = ""
    serial_baud: int = 9600


@dataclass
class locationConfigData:
    permission_granted: bool = True
    update_interval_ms: int = 1000


@dataclass
class configData:
    broker: BrokerConfig = field(default_factory=BrokerConfig)
    sensor: sensorConfigData = field(default_factory=sensorConfigData)
    location: locationConfigData = field(default_factory=locationConfigData)
    emulation: bool = True
    auto_connect: bool = True

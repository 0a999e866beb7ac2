import dataclasses
import json

import pytest

from core.config_loader import ConfigLoader, config_loader
from core.models.config_data import BrokerConfig


@pytest.fixture
def loader():
    yield config_loader
    config_loader.reload_config()


class TestConfigLoader:
    """Test configuration loading and access."""

    def test_config_loads(self) -> None:
        broker = config_loader.get_broker_config()
        assert broker.subscribe_topic == "button/state"
        assert broker.publish_topic == "expo/barometer/altitude"
        assert isinstance(broker.port, int)

    def test_emulation_mode(self) -> None:
        assert isinstance(config_loader.get_emulation_mode(), bool)

    def test_sensor_defaults(self) -> None:
        assert config_loader.get_sensor_config().update_interval_ms > 0

    def test_config_singleton(self) -> None:
        assert ConfigLoader() is config_loader

    def test_load_custom_file(self, loader, tmp_path) -> None:
        path = tmp_path / "broker_config.json"
        path.write_text(json.dumps({
            "emulation": False,
            "auto_connect": False,
            "broker": {"host": "10.0.0.5", "port": 1883, "transport": "tcp", "reconnect": True},
            "sensor": {"serial_port": "/dev/ttyACM0", "update_interval_ms": 250},
            "location": {"permission_granted": False},
        }))
        loader.load_config(path)

        broker = loader.get_broker_config()
        assert broker.host == "10.0.0.5"
        assert broker.port == 1883
        assert broker.transport == "tcp"
        assert broker.reconnect is True
        assert broker.subscribe_topic == "button/state"  # default kept
        assert loader.get_emulation_mode() is False
        assert loader.get_auto_connect() is False
        assert loader.get_sensor_config().serial_port == "/dev/ttyACM0"
        assert loader.get_sensor_config().update_interval_ms == 250
        assert loader.get_location_config().permission_granted is False

    def test_string_flags_are_coerced(self, loader, tmp_path) -> None:
        path = tmp_path / "broker_config.json"
        path.write_text(json.dumps({
            "emulation": "false",
            "auto_connect": "false",
            "broker": {"use_tls": "true", "reconnect": "0"},
            "location": {"permission_granted": "no"},
        }))
        loader.load_config(path)

        assert loader.get_emulation_mode() is False
        assert loader.get_auto_connect() is False
        assert loader.get_broker_config().use_tls is True
        assert loader.get_broker_config().reconnect is False
        assert loader.get_location_config().permission_granted is False

    def test_unrecognised_flag_keeps_default(self, loader, tmp_path) -> None:
        path = tmp_path / "broker_config.json"
        path.write_text(json.dumps({"auto_connect": "sometimes"}))
        loader.load_config(path)
        assert loader.get_auto_connect() is True

    def test_unknown_transport_falls_back(self, loader, tmp_path) -> None:
        path = tmp_path / "broker_config.json"
        path.write_text(json.dumps({"broker": {"transport": "carrier-pigeon"}}))
        loader.load_config(path)
        assert loader.get_broker_config().transport == "websockets"

    def test_invalid_json_uses_defaults(self, loader, tmp_path) -> None:
        path = tmp_path / "broker_config.json"
        path.write_text("{not json")
        loader.load_config(path)
        assert loader.get_broker_config() == BrokerConfig()

    def test_missing_file_uses_defaults(self, loader, tmp_path) -> None:
        loader.load_config(tmp_path / "missing.json")
        assert loader.get_broker_config() == BrokerConfig()
        assert loader.get_emulation_mode() is True


class TestBrokerConfig:

    def test_immutable(self) -> None:
        with pytest.raises(dataclasses.FrozenInstanceError):
            BrokerConfig().host = "elsewhere"

    def test_new_client_id_is_unique(self) -> None:
        base = BrokerConfig(client_id_prefix="baro")
        ids = {base.with_new_client_id().client_id for _ in range(50)}
        assert len(ids) == 50
        assert all(i.startswith("baro_") for i in ids)
        assert base.client_id == ""

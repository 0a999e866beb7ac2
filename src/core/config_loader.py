import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import Optional

from core.models.config_data import BrokerConfig, configData, locationConfigData, sensorConfigData

logger = logging.getLogger(__name__)


class ConfigLoader:
    """Loads broker, sensor and location configuration from a JSON file."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(ConfigLoader, cls).__new__(cls)
            cls._instance._config = configData()
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if not self._initialized:
            self._config = self._get_default_config()
            self.load_config()
            self._initialized = True

    @staticmethod
    def get_config_path() -> Path:
        """Get the path to the broker_config.json file."""
        # Config file should be in the project root/config directory
        return Path(__file__).parent.parent.parent / "config" / "broker_config.json"

    def load_config(self, config_path: Optional[Path] = None):
        """Load configuration from JSON file, falling back to defaults on any problem."""
        config_path = config_path or self.get_config_path()

        # Start from defaults so a partial file still yields a full config
        self._config = self._get_default_config()

        if not config_path.exists():
            logger.error(f"Configuration file not found: {config_path}")
            return

        try:
            with open(config_path, 'r') as f:
                json_data = json.load(f)

            broker_cfg = json_data.get("broker", {})
            defaults = BrokerConfig()
            self._config.broker = BrokerConfig(
                host=broker_cfg.get("host", defaults.host),
                port=int(broker_cfg.get("port", defaults.port)),
                subscribe_topic=broker_cfg.get("subscribe_topic", defaults.subscribe_topic),
                publish_topic=broker_cfg.get("publish_topic", defaults.publish_topic),
                client_id_prefix=broker_cfg.get("client_id_prefix", defaults.client_id_prefix),
                transport=broker_cfg.get("transport", defaults.transport),
                ws_path=broker_cfg.get("ws_path", defaults.ws_path),
                use_tls=self._as_bool(broker_cfg.get("use_tls"), defaults.use_tls),
                connect_timeout_s=float(broker_cfg.get("connect_timeout_s", defaults.connect_timeout_s)),
                keepalive_s=int(broker_cfg.get("keepalive_s", defaults.keepalive_s)),
                reconnect=self._as_bool(broker_cfg.get("reconnect"), defaults.reconnect),
            )
            if self._config.broker.transport not in ("websockets", "tcp"):
                logger.warning(f"Unknown broker transport '{self._config.broker.transport}', using websockets")
                self._config.broker = replace(self._config.broker, transport="websockets")

            sensor_cfg = json_data.get("sensor", {})
            self._config.sensor = sensorConfigData(
                update_interval_ms=int(sensor_cfg.get("update_interval_ms", 1000)),
                serial_port=sensor_cfg.get("serial_port", ""),
                serial_baud=int(sensor_cfg.get("serial_baud", 9600)),
            )

            location_cfg = json_data.get("location", {})
            self._config.location = locationConfigData(
                permission_granted=self._as_bool(location_cfg.get("permission_granted"), True),
                update_interval_ms=int(location_cfg.get("update_interval_ms", 1000)),
            )

            self._config.emulation = self._as_bool(json_data.get("emulation"), True)
            self._config.auto_connect = self._as_bool(json_data.get("auto_connect"), True)
            logger.info(f"Configuration loaded from {config_path}")

        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse configuration file: {e}")
            self._config = self._get_default_config()

        except Exception as e:
            logger.error(f"Unexpected error loading configuration: {e}")
            self._config = self._get_default_config()

    @staticmethod
    def _as_bool(value, default: bool) -> bool:
        """Read a JSON flag. Strings such as "false" or "0" count as False."""
        if value is None:
            return default
        if isinstance(value, str):
            text = value.strip().lower()
            if text in ("true", "1", "yes", "on"):
                return True
            if text in ("false", "0", "no", "off"):
                return False
            logger.warning(f"Unrecognised boolean '{value}' in configuration, using {default}")
            return default
        return bool(value)

    @staticmethod
    def _get_default_config() -> configData:
        """Return default configuration."""
        return configData()

    def get_emulation_mode(self) -> bool:
        """Get the emulation mode setting."""
        return self._config.emulation

    def get_auto_connect(self) -> bool:
        return self._config.auto_connect

    def get_broker_config(self) -> BrokerConfig:
        return self._config.broker

    def get_sensor_config(self) -> sensorConfigData:
        return self._config.sensor

    def get_location_config(self) -> locationConfigData:
        return self._config.location

    def reload_config(self):
        """Reload configuration from file."""
        self.load_config()
        logger.info("Configuration reloaded")


# Global singleton instance
config_loader = ConfigLoader()

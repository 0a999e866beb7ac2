# External libs
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

# Internal libs
from core.config_loader import config_loader
from core.event_hub import init_event_hub
from core.processing.telemetry_pipeline import telemetry_pipeline
from core.services.connection_manager import connection_manager
from core.services.location_provider import location_provider
from core.services.sensor_feed import BarometerFeed, CancelHandle, EmulatedBarometer
from core.services.serial_handler import SerialBarometer

logger = logging.getLogger(__name__)


class ServiceManager:

    def __init__(self):
        self.running = False
        self.feed: Optional[BarometerFeed] = None
        self._location_cancel: Optional[CancelHandle] = None

    @staticmethod
    def create_feed(emulation: bool) -> BarometerFeed:
        sensor_cfg = config_loader.get_sensor_config()
        if emulation:
            return EmulatedBarometer(update_interval_ms=sensor_cfg.update_interval_ms)
        if not sensor_cfg.serial_port:
            logger.warning("No serial port configured for the barometer")
        return SerialBarometer(
            sensor_cfg.serial_port,
            baudrate=sensor_cfg.serial_baud,
            update_interval_ms=sensor_cfg.update_interval_ms,
        )

    async def start_services(self, emulation: bool = True):
        """Start the barometer pipeline, the location watch and (optionally) the broker session.
        Args:
            emulation: When True, read synthetic pressure instead of the serial barometer.
        """
        logger.info("Starting background services...")
        loop = asyncio.get_running_loop()

        # Init Event Hub
        init_event_hub(loop)
        self.running = True

        # Altitude pipeline
        self.feed = self.create_feed(emulation)
        telemetry_pipeline.start(self.feed)

        # Location (display only)
        self._location_cancel = location_provider.watch(lambda fix: None)

        # Broker session
        if config_loader.get_auto_connect():
            connection_manager.connect()

        logger.info("Background services started.")

    def stop_services(self):
        """Release the sensor subscription, location watch and broker session."""
        self.running = False
        try:
            telemetry_pipeline.stop()
            if self._location_cancel:
                self._location_cancel()
                self._location_cancel = None
        finally:
            connection_manager.shutdown()
            init_event_hub(None)
        logger.info("Background services stopped.")

    @asynccontextmanager
    async def session(self, emulation: bool = True):
        """Run services for the duration of the block; teardown happens on every exit path."""
        try:
            await self.start_services(emulation=emulation)
            yield self
        finally:
            self.stop_services()


service_manager = ServiceManager()

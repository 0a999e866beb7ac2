import logging
from typing import Optional

from core.event_hub import event_hub, EventHub, ALTITUDE_SAMPLE, SENSOR_STATUS
from core.models.circular_buffer import HistoryWindow
from core.models.samples import AltitudeSample, PressureSample
from core.processing.altitude_estimator import estimate, has_reading
from core.services.sensor_feed import BarometerFeed, CancelHandle
from core.services.telemetry_publisher import TelemetryPublisher, telemetry_publisher

logger = logging.getLogger(__name__)


class TelemetryPipeline:
    """
    Reacts to each pressure sample: estimate altitude, append to the history
    window, then publish if the broker is connected. The three steps run in
    that order for one sample before the next sample is handled.
    """

    def __init__(self, publisher: TelemetryPublisher, hub: EventHub = event_hub):
        self.publisher = publisher
        self.history = HistoryWindow()
        self._hub = hub
        self._feed: Optional[BarometerFeed] = None
        self._cancel: Optional[CancelHandle] = None
        self._started_at_ms: Optional[int] = None
        self.sensor_available: Optional[bool] = None
        self.skipped_count = 0
        self.warmup_count = 0

    @property
    def running(self) -> bool:
        return self._cancel is not None

    @property
    def feed(self) -> Optional[BarometerFeed]:
        return self._feed

    def start(self, feed: BarometerFeed) -> bool:
        """Subscribe to the feed. Returns False and stays idle if the sensor is unavailable."""
        if self.running:
            return True
        self._feed = feed
        self.sensor_available = feed.is_available()
        self._hub.send_all_on_topic(SENSOR_STATUS, self.sensor_available)
        if not self.sensor_available:
            logger.warning(f"Barometer unavailable ({type(feed).__name__}); altitude pipeline idle")
            return False
        self._cancel = feed.subscribe(self.handle_sample)
        logger.info("TelemetryPipeline started")
        return True

    def stop(self):
        """Cancel the feed subscription. The next start() counts elapsed time afresh."""
        cancel, self._cancel = self._cancel, None
        self._started_at_ms = None
        if cancel:
            cancel()
            logger.info("TelemetryPipeline stopped")

    def reset(self):
        """Stop and forget the history window and counters."""
        self.stop()
        self.history = HistoryWindow()
        self.skipped_count = 0
        self.warmup_count = 0

    def handle_sample(self, sample: PressureSample) -> Optional[AltitudeSample]:
        if not has_reading(sample.pressure_hpa):
            # Warm-up: no altitude yet, nothing to show or send
            self.warmup_count += 1
            logger.debug("Pressure reading not available yet")
            return None

        if self._started_at_ms is None:
            self._started_at_ms = sample.captured_at_ms
        altitude = AltitudeSample(
            altitude_m=estimate(sample.pressure_hpa),
            elapsed_seconds=max(0, (sample.captured_at_ms - self._started_at_ms) // 1000),
            captured_at_ms=sample.captured_at_ms,
        )

        self.history.append(altitude)
        self._hub.send_all_on_topic(ALTITUDE_SAMPLE, altitude)

        if self.publisher.connection.is_connected:
            self.publisher.publish(altitude)
        else:
            self.skipped_count += 1
        return altitude

    def latest(self) -> Optional[AltitudeSample]:
        return self.history.latest()


# Global instance
telemetry_pipeline = TelemetryPipeline(telemetry_publisher)

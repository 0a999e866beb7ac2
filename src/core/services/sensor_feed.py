import threading
import time
import logging
import math
import random
from typing import Callable, List, Optional

from core.event_hub import event_hub, EventHub, PRESSURE_SAMPLE
from core.models.samples import PressureSample

logger = logging.getLogger(__name__)

CancelHandle = Callable[[], None]


def now_ms() -> int:
    return int(time.time() * 1000)


class BarometerFeed:
    """
    Base class for pressure sources.

    Readings are produced on a background thread and delivered through the
    event hub, so subscribers run on the hub's loop once it is initialised.
    The reader thread runs only while at least one subscription is live.
    """

    def __init__(self, update_interval_ms: int = 1000, hub: EventHub = event_hub):
        self.update_interval_ms = update_interval_ms
        self._hub = hub
        self._handlers: List[Callable] = []
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()

    def is_available(self) -> bool:
        raise NotImplementedError

    def set_update_interval(self, interval_ms: int):
        if interval_ms <= 0:
            raise ValueError(f"Update interval must be positive, got {interval_ms}")
        self.update_interval_ms = interval_ms

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def subscribe(self, on_sample: Callable[[PressureSample], None]) -> CancelHandle:
        def handler(topic, sample):
            on_sample(sample)

        self._handlers.append(handler)
        self._hub.subscribe(PRESSURE_SAMPLE, handler)
        if not self.running:
            self._start()

        cancelled = False

        def cancel():
            nonlocal cancelled
            if cancelled:
                return
            cancelled = True
            self._hub.unsubscribe(PRESSURE_SAMPLE, handler)
            self._handlers.remove(handler)
            if not self._handlers:
                self._stop()

        return cancel

    def _start(self):
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name=type(self).__name__, daemon=True)
        self._thread.start()
        logger.info(f"{type(self).__name__} started (interval: {self.update_interval_ms} ms)")

    def _stop(self):
        self._stop_event.set()
        thread, self._thread = self._thread, None
        if thread and thread is not threading.current_thread():
            thread.join(timeout=2.0)
        logger.info(f"{type(self).__name__} stopped")

    def _emit(self, pressure_hpa: Optional[float]):
        self._hub.send_all_on_topic(PRESSURE_SAMPLE, PressureSample(pressure_hpa, now_ms()))

    def _run(self):
        raise NotImplementedError


class EmulatedBarometer(BarometerFeed):
    """Synthetic pressure: slow oscillation around a base value plus noise."""

    def __init__(self, update_interval_ms: int = 1000, base_pressure_hpa: float = 1000.0,
                 warmup_samples: int = 1, hub: EventHub = event_hub):
        super().__init__(update_interval_ms, hub)
        self.base_pressure_hpa = base_pressure_hpa
        self.warmup_samples = warmup_samples

    def is_available(self) -> bool:
        return True

    def _run(self):
        start_time = time.time()
        emitted = 0
        while not self._stop_event.is_set():
            if emitted < self.warmup_samples:
                # Sensor still warming up
                self._emit(None)
            else:
                self._emit(self.sample_pressure(time.time() - start_time))
            emitted += 1
            self._stop_event.wait(self.update_interval_ms / 1000)

    def sample_pressure(self, elapsed: float) -> float:
        # ~2 hPa swing is roughly +/- 17 m of altitude
        return self.base_pressure_hpa + 2.0 * math.sin(elapsed / 30) + random.uniform(-0.05, 0.05)

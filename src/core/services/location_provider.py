import logging
import math
import threading
from typing import Callable, Optional, Set

from core.config_loader import config_loader
from core.event_hub import event_hub, EventHub, LOCATION_FIX
from core.models.location_fix import LocationFix, PermissionState
from core.services.sensor_feed import CancelHandle, now_ms

logger = logging.getLogger(__name__)


class EmulatedLocationProvider:
    """
    Permission-gated location source used for display only.
    Denied permission is reported as state; watch() then returns None.
    """

    def __init__(self, permission_granted: bool = True, update_interval_ms: int = 1000,
                 origin: tuple[float, float] = (47.2692, 11.4041), hub: EventHub = event_hub):
        self._permission_granted = permission_granted
        self.permission = PermissionState.UNDETERMINED
        self.update_interval_ms = update_interval_ms
        self.origin = origin
        self.latest_fix: Optional[LocationFix] = None
        self._hub = hub
        self._threads: Set[threading.Thread] = set()

    @property
    def active_watches(self) -> int:
        return sum(1 for thread in self._threads if thread.is_alive())

    def request_permission(self) -> PermissionState:
        if self.permission is PermissionState.UNDETERMINED:
            self.permission = PermissionState.GRANTED if self._permission_granted else PermissionState.DENIED
            if self.permission is PermissionState.DENIED:
                logger.warning("Location permission denied; location display disabled")
        return self.permission

    def watch(self, on_fix: Callable[[LocationFix], None]) -> Optional[CancelHandle]:
        if self.request_permission() is not PermissionState.GRANTED:
            return None

        def handler(topic, fix):
            self.latest_fix = fix
            on_fix(fix)

        # Each watch owns its thread and stop event
        stop_event = threading.Event()
        thread = threading.Thread(target=self._run, args=(stop_event,), name="EmulatedLocation", daemon=True)
        self._hub.subscribe(LOCATION_FIX, handler)
        self._threads.add(thread)
        thread.start()

        def cancel():
            if stop_event.is_set():
                return
            stop_event.set()
            self._hub.unsubscribe(LOCATION_FIX, handler)
            if thread is not threading.current_thread():
                thread.join(timeout=2.0)
            self._threads.discard(thread)

        return cancel

    def fix_at(self, step: int) -> LocationFix:
        # Slow circle of ~50 m radius around the origin
        angle = step / 60 * 2 * math.pi
        lat = self.origin[0] + 0.00045 * math.sin(angle)
        lon = self.origin[1] + 0.00066 * math.cos(angle)
        heading = (math.degrees(angle) + 90) % 360
        return LocationFix(latitude=lat, longitude=lon, heading=heading, speed=1.4, captured_at_ms=now_ms())

    def _run(self, stop_event: threading.Event):
        step = 0
        while not stop_event.is_set():
            self._hub.send_all_on_topic(LOCATION_FIX, self.fix_at(step))
            step += 1
            stop_event.wait(self.update_interval_ms / 1000)


def create_location_provider() -> EmulatedLocationProvider:
    cfg = config_loader.get_location_config()
    return EmulatedLocationProvider(permission_granted=cfg.permission_granted,
                                    update_interval_ms=cfg.update_interval_ms)


# Global instance
location_provider = create_location_provider()

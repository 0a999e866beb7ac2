import threading

from core.event_hub import EventHub
from core.models.location_fix import PermissionState
from core.services.location_provider import EmulatedLocationProvider


class TestLocationProvider:

    def test_denied_permission_is_state_not_error(self) -> None:
        provider = EmulatedLocationProvider(permission_granted=False, hub=EventHub())
        assert provider.watch(lambda fix: None) is None
        assert provider.permission == PermissionState.DENIED
        assert provider.latest_fix is None

    def test_permission_undetermined_until_requested(self) -> None:
        provider = EmulatedLocationProvider(hub=EventHub())
        assert provider.permission == PermissionState.UNDETERMINED
        assert provider.request_permission() == PermissionState.GRANTED

    def test_watch_delivers_fixes(self) -> None:
        provider = EmulatedLocationProvider(update_interval_ms=5, hub=EventHub())
        got_fix = threading.Event()
        cancel = provider.watch(lambda fix: got_fix.set())

        assert cancel is not None
        assert got_fix.wait(timeout=5.0)
        cancel()
        assert provider.latest_fix is not None

    def test_fix_fields(self) -> None:
        provider = EmulatedLocationProvider(origin=(47.0, 11.0), hub=EventHub())
        fix = provider.fix_at(0)
        assert abs(fix.latitude - 47.0) < 0.001
        assert abs(fix.longitude - 11.0) < 0.001
        assert 0 <= fix.heading < 360
        assert fix.speed >= 0

    def test_watches_stop_independently(self) -> None:
        provider = EmulatedLocationProvider(update_interval_ms=5, hub=EventHub())
        second_fix = threading.Event()
        cancel_first = provider.watch(lambda fix: None)
        cancel_second = provider.watch(lambda fix: second_fix.set())
        assert provider.active_watches == 2

        cancel_first()
        assert provider.active_watches == 1
        second_fix.clear()
        assert second_fix.wait(timeout=5.0)

        cancel_second()
        assert provider.active_watches == 0

    def test_cancel_twice(self) -> None:
        provider = EmulatedLocationProvider(update_interval_ms=5, hub=EventHub())
        cancel = provider.watch(lambda fix: None)
        cancel()
        cancel()
        assert provider.active_watches == 0

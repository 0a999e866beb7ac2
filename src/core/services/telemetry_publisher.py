import logging
from typing import Dict, Optional

from core.event_hub import event_hub, EventHub, PUBLISH_OUTCOME
from core.models.connection_state import ConnectionState
from core.models.publish_outcome import DropReason, PublishOutcome
from core.models.samples import AltitudeSample
from core.services.broker_transport import TransportError
from core.services.connection_manager import ConnectionManager, connection_manager

logger = logging.getLogger(__name__)


def format_telemetry_message(sample: AltitudeSample) -> str:
    """Teleplot line: altitude|<unix seconds>|<meters, 2dp>"""
    return f"altitude|{sample.captured_at_ms / 1000}|{sample.altitude_m:.2f}"


class TelemetryPublisher:
    """
    Emits one telemetry line per accepted sample, fire-and-forget.
    Nothing is queued: a sample that cannot be sent right now is dropped.
    """

    def __init__(self, connection: ConnectionManager, hub: EventHub = event_hub):
        self.connection = connection
        self._hub = hub
        self.sent_count = 0
        self.dropped_counts: Dict[DropReason, int] = {reason: 0 for reason in DropReason}
        self.last_outcome: Optional[PublishOutcome] = None

    def publish(self, sample: AltitudeSample) -> PublishOutcome:
        if self.connection.state is not ConnectionState.CONNECTED:
            outcome = PublishOutcome.dropped(DropReason.NOT_CONNECTED)
            logger.debug(f"Dropped altitude sample: broker {self.connection.state.value}")
            return self._record(outcome)

        payload = format_telemetry_message(sample)
        topic = self.connection.config.publish_topic
        try:
            self.connection.publish(topic, payload)
        except TransportError as e:
            logger.warning(f"Publish to {topic} failed: {e}")
            return self._record(PublishOutcome.dropped(DropReason.TRANSPORT_ERROR, payload, str(e)))

        logger.debug(f"Published {payload} to {topic}")
        return self._record(PublishOutcome.sent_with(payload))

    def reset_counters(self):
        self.sent_count = 0
        self.dropped_counts = {reason: 0 for reason in DropReason}
        self.last_outcome = None

    def _record(self, outcome: PublishOutcome) -> PublishOutcome:
        if outcome.sent:
            self.sent_count += 1
        else:
            self.dropped_counts[outcome.reason] += 1
        self.last_outcome = outcome
        self._hub.send_all_on_topic(PUBLISH_OUTCOME, outcome)
        return outcome


# Global instance
telemetry_publisher = TelemetryPublisher(connection_manager)

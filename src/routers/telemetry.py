from fastapi import APIRouter

from core.models.publish_outcome import DropReason
from core.processing.telemetry_pipeline import telemetry_pipeline
from schemas import OutcomeResponse, TelemetryStatsResponse

router = APIRouter(prefix="/telemetry", tags=["telemetry"])


@router.get("", response_model=TelemetryStatsResponse)
async def get_telemetry_stats() -> TelemetryStatsResponse:
    """Publish counters since startup."""
    publisher = telemetry_pipeline.publisher
    last = publisher.last_outcome
    return TelemetryStatsResponse(
        sent=publisher.sent_count,
        dropped_not_connected=publisher.dropped_counts[DropReason.NOT_CONNECTED],
        dropped_transport_error=publisher.dropped_counts[DropReason.TRANSPORT_ERROR],
        skipped_disconnected=telemetry_pipeline.skipped_count,
        last_outcome=OutcomeResponse(
            sent=last.sent, reason=last.reason, payload=last.payload, detail=last.detail
        ) if last else None,
    )

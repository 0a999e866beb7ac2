from fastapi import APIRouter

from core.processing.telemetry_pipeline import telemetry_pipeline
from schemas import SensorStatusResponse

router = APIRouter(prefix="/sensor", tags=["sensor"])


@router.get("", response_model=SensorStatusResponse)
async def get_sensor_status() -> SensorStatusResponse:
    """
    Barometer status. `available` is null until the pipeline has been started.
    """
    feed = telemetry_pipeline.feed
    return SensorStatusResponse(
        available=telemetry_pipeline.sensor_available,
        running=telemetry_pipeline.running,
        update_interval_ms=feed.update_interval_ms if feed else None,
        warmup_samples=telemetry_pipeline.warmup_count,
    )

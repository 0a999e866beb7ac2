from fastapi import APIRouter, HTTPException

from core.processing.telemetry_pipeline import telemetry_pipeline
from schemas import AltitudeResponse, HistoryResponse, Point

router = APIRouter(prefix="/altitude", tags=["altitude"])


@router.get("", response_model=AltitudeResponse, responses={
    404: {
        "description": "No altitude has been computed yet.",
        "content": {
            "application/json": {
                "example": {"detail": "No altitude sample available yet"}
            }
        }
    }
})
async def get_latest_altitude() -> AltitudeResponse:
    """Latest altitude derived from the barometer."""
    sample = telemetry_pipeline.latest()
    if sample is None:
        raise HTTPException(status_code=404, detail="No altitude sample available yet")
    return AltitudeResponse(
        altitude_m=sample.altitude_m,
        elapsed_seconds=sample.elapsed_seconds,
        captured_at_ms=sample.captured_at_ms,
    )


@router.get("/history", response_model=HistoryResponse)
async def get_altitude_history() -> HistoryResponse:
    """
    Recent altitude window, oldest first.
    `time` is the elapsed seconds since the pipeline started.
    """
    history = telemetry_pipeline.history
    samples = history.snapshot()
    altitudes, elapsed = history.series()
    return HistoryResponse(
        capacity=history.capacity,
        list=[Point(time=s.elapsed_seconds, value=s.altitude_m) for s in samples],
        altitudes=altitudes,
        elapsed_seconds=elapsed,
    )

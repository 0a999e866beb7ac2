from fastapi import APIRouter

from core.services.location_provider import location_provider
from schemas import LocationFixResponse, LocationResponse

router = APIRouter(prefix="/location", tags=["location"])


@router.get("", response_model=LocationResponse)
async def get_location() -> LocationResponse:
    """Location permission state and the latest fix, if any. Denial is not an error."""
    fix = location_provider.latest_fix
    return LocationResponse(
        permission=location_provider.permission,
        fix=LocationFixResponse(
            latitude=fix.latitude,
            longitude=fix.longitude,
            heading=fix.heading,
            speed=fix.speed,
            captured_at_ms=fix.captured_at_ms,
        ) if fix else None,
    )

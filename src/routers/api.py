from fastapi import APIRouter

from routers import altitude, connection, location, sensor, telemetry

router = APIRouter()

# include sub-routers
router.include_router(connection.router)
router.include_router(altitude.router)
router.include_router(telemetry.router)
router.include_router(sensor.router)
router.include_router(location.router)

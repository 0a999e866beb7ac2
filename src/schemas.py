from typing import List, Optional
from pydantic import BaseModel
from core.models.connection_state import ConnectionState
from core.models.location_fix import PermissionState
from core.models.publish_outcome import DropReason


class AppHealthOK(BaseModel):
    status: str
    app: str


class Point(BaseModel):
    time: float
    value: float


class AltitudeResponse(BaseModel):
    altitude_m: float
    elapsed_seconds: int
    captured_at_ms: int


class HistoryResponse(BaseModel):
    capacity: int
    list: List[Point]
    altitudes: List[float]
    elapsed_seconds: List[int]


class ConnectionStatusResponse(BaseModel):
    state: ConnectionState
    host: str
    port: int
    client_id: Optional[str]
    subscribe_topic: str
    publish_topic: str
    last_error: Optional[str]


class MessageResponse(BaseModel):
    message: str


class OutcomeResponse(BaseModel):
    sent: bool
    reason: Optional[DropReason]
    payload: Optional[str]
    detail: str


class TelemetryStatsResponse(BaseModel):
    sent: int
    dropped_not_connected: int
    dropped_transport_error: int
    skipped_disconnected: int
    last_outcome: Optional[OutcomeResponse]


class SensorStatusResponse(BaseModel):
    available: Optional[bool]
    running: bool
    update_interval_ms: Optional[int]
    warmup_samples: int


class LocationFixResponse(BaseModel):
    latitude: float
    longitude: float
    heading: Optional[float]
    speed: Optional[float]
    captured_at_ms: int


class LocationResponse(BaseModel):
    permission: PermissionState
    fix: Optional[LocationFixResponse]

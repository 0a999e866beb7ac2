"""Location data models."""
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class PermissionState(Enum):
    UNDETERMINED = "undetermined"
    GRANTED = "granted"
    DENIED = "denied"


@dataclass(frozen=True)
class LocationFix:
    latitude: float
    longitude: float
    heading: Optional[float]
    speed: Optional[float]
    captured_at_ms: int

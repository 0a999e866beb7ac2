"""
Sensor sample data models.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class PressureSample:
    """
    Data class representing a single barometer reading.
    pressure_hpa is None while the sensor is still warming up.
    """
    pressure_hpa: Optional[float]
    captured_at_ms: int


@dataclass(frozen=True)
class AltitudeSample:
    """
    Altitude derived from one PressureSample.
    elapsed_seconds is counted from the start of the pipeline session.
    """
    altitude_m: float
    elapsed_seconds: int
    captured_at_ms: int

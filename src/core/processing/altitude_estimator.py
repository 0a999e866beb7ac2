"""
Barometric altitude estimation (troposphere approximation).

Uses a fixed sea-level reference pressure; no calibration against the actual
local sea-level pressure is performed, so absolute altitudes drift with the
weather. Relative changes over short periods are still meaningful.
"""
import math
from typing import Optional

SEA_LEVEL_PRESSURE_HPA = 1013.25
_SCALE_M = 44330.0
_EXPONENT = 1 / 5.255


def estimate(pressure_hpa: Optional[float]) -> float:
    """
    Convert a pressure reading in hPa to an altitude in meters.

    Returns 0.0 when there is no usable reading (None while the sensor warms
    up, NaN, or a non-positive value). Callers must not treat that 0.0 as a
    real altitude.
    """
    if pressure_hpa is None:
        return 0.0
    if math.isnan(pressure_hpa) or pressure_hpa <= 0:
        return 0.0
    return _SCALE_M * (1 - (pressure_hpa / SEA_LEVEL_PRESSURE_HPA) ** _EXPONENT)


def has_reading(pressure_hpa: Optional[float]) -> bool:
    """True when estimate() would compute a physical value for this reading."""
    return pressure_hpa is not None and not math.isnan(pressure_hpa) and pressure_hpa > 0

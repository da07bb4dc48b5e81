"""Unit conversions and small geodesy helpers.

All helpers are total: non-numeric or non-finite input yields ``None`` (or 0
for the UTC offset) rather than raising.
"""

from __future__ import annotations

import math
from typing import Any, Iterable

from cbcweather.domain import COMPASS_LABELS

EARTH_RADIUS_KM = 6371.0
KM_TO_MILES = 0.621371
KNOTS_TO_MPH = 1.15078
MILES_PER_DEGREE_LAT = 69.0


def _finite(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with ties going up, as browser ``Math.round`` does."""
    scale = 10 ** digits
    return math.floor(value * scale + 0.5) / scale


def format_one_decimal(value: float) -> str:
    return f"{round_half_up(value, 1):.1f}"


def celsius_to_fahrenheit(value: Any) -> float | None:
    celsius = _finite(value)
    if celsius is None:
        return None
    return celsius * 9 / 5 + 32


def knots_to_mph(value: Any) -> float | None:
    knots = _finite(value)
    if knots is None:
        return None
    return knots * KNOTS_TO_MPH


def approx_utc_offset_hours(longitude: Any) -> int:
    """Approximate a UTC offset from longitude at 15 degrees per hour.

    This ignores real timezone boundaries and daylight saving time. Station
    lookup and local-day bucketing both use it, so the two stay consistent.
    """

    lon = _finite(longitude)
    if lon is None:
        return 0
    return int(round_half_up(lon / 15))


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points using the haversine formula."""

    lat1_rad, lon1_rad = math.radians(lat1), math.radians(lon1)
    lat2_rad, lon2_rad = math.radians(lat2), math.radians(lon2)

    dlat = lat2_rad - lat1_rad
    dlon = lon2_rad - lon1_rad

    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def haversine_miles(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    return haversine_km(lat1, lon1, lat2, lon2) * KM_TO_MILES


def circular_mean_degrees(directions: Iterable[float]) -> float | None:
    """Average compass bearings through their unit vectors.

    Returns a bearing in ``[0, 360)`` or ``None`` for an empty input.
    """

    radians = [math.radians(deg) for deg in directions]
    if not radians:
        return None
    mean_sin = sum(math.sin(r) for r in radians) / len(radians)
    mean_cos = sum(math.cos(r) for r in radians) / len(radians)
    mean = math.degrees(math.atan2(mean_sin, mean_cos)) % 360.0
    # -1e-15 % 360 can round up to exactly 360.0
    return 0.0 if mean >= 360.0 else mean


def compass_label(degrees: Any) -> str:
    """Map a bearing onto one of the 16 compass points (22.5 degrees each)."""

    deg = _finite(degrees)
    if deg is None:
        return ""
    index = math.floor((deg % 360) / 22.5 + 0.5) % 16
    return COMPASS_LABELS[index]


__all__ = [
    "approx_utc_offset_hours",
    "celsius_to_fahrenheit",
    "circular_mean_degrees",
    "compass_label",
    "format_one_decimal",
    "haversine_km",
    "haversine_miles",
    "knots_to_mph",
    "round_half_up",
]

"""Domain vocabularies for count-day weather reports."""

from .categories import (
    CLOUD_COVER_ALIASES,
    COMPASS_LABELS,
    UNKNOWN_LABEL,
    WIND_CALM,
    WIND_DIRECTIONS,
    WIND_VARIABLE,
    CloudCover,
    HalfDay,
    Intensity,
    WaterState,
    normalize_cloud_cover,
)

__all__ = [
    "CLOUD_COVER_ALIASES",
    "COMPASS_LABELS",
    "CloudCover",
    "HalfDay",
    "Intensity",
    "UNKNOWN_LABEL",
    "WIND_CALM",
    "WIND_DIRECTIONS",
    "WIND_VARIABLE",
    "WaterState",
    "normalize_cloud_cover",
]

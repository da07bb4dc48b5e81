"""Categorical vocabularies used by the count-day weather report."""

from __future__ import annotations

from enum import Enum


class CloudCover(str, Enum):
    """Cloud cover categories accepted on the count-day report."""

    CLEAR = "Clear"
    CLOUDY = "Cloudy"
    FOGGY = "Foggy"
    LOCAL_FOG = "Local Fog"
    PARTLY_CLEAR = "Partly Clear"
    PARTLY_CLOUDY = "Partly Cloudy"
    UNKNOWN = "Unknown"

    @property
    def severity(self) -> int:
        """Rank used when folding observations; fog always dominates."""
        return _CLOUD_SEVERITY[self]


_CLOUD_SEVERITY = {
    CloudCover.UNKNOWN: 0,
    CloudCover.CLEAR: 1,
    CloudCover.PARTLY_CLEAR: 2,
    CloudCover.PARTLY_CLOUDY: 3,
    CloudCover.CLOUDY: 4,
    CloudCover.FOGGY: 5,
    CloudCover.LOCAL_FOG: 6,
}


class Intensity(str, Enum):
    """Rain or snow intensity for a half-day period."""

    NONE = "None"
    LIGHT = "Light"
    HEAVY = "Heavy"
    UNKNOWN = "Unknown"

    @property
    def rank(self) -> int:
        return _INTENSITY_RANK[self]


# Unknown shares rank 0 with None so it can never raise a running maximum.
_INTENSITY_RANK = {
    Intensity.NONE: 0,
    Intensity.UNKNOWN: 0,
    Intensity.LIGHT: 1,
    Intensity.HEAVY: 2,
}


class WaterState(str, Enum):
    """Still/moving water presence on count day."""

    NONE = "None"
    SOME = "Some"
    MANY = "Many"
    UNKNOWN = "Unknown"


class HalfDay(str, Enum):
    """AM (00:00-11:59 local) or PM (12:00-23:59 local)."""

    AM = "AM"
    PM = "PM"


COMPASS_LABELS: tuple[str, ...] = (
    "N",
    "NNE",
    "NE",
    "ENE",
    "E",
    "ESE",
    "SE",
    "SSE",
    "S",
    "SSW",
    "SW",
    "WSW",
    "W",
    "WNW",
    "NW",
    "NNW",
)

WIND_VARIABLE = "Variable"
WIND_CALM = "Calm"
UNKNOWN_LABEL = "Unknown"

WIND_DIRECTIONS: tuple[str, ...] = COMPASS_LABELS + (WIND_VARIABLE, WIND_CALM, UNKNOWN_LABEL)

# Legacy and alternate spellings seen in stored drafts, keyed by lower-case text.
CLOUD_COVER_ALIASES: dict[str, CloudCover] = {
    "unknown": CloudCover.UNKNOWN,
    "clear": CloudCover.CLEAR,
    "cavok": CloudCover.CLEAR,
    "fog": CloudCover.FOGGY,
    "foggy": CloudCover.FOGGY,
    "local fog": CloudCover.LOCAL_FOG,
    "bcfg": CloudCover.LOCAL_FOG,
    "mostly clear": CloudCover.PARTLY_CLEAR,
    "partly clear": CloudCover.PARTLY_CLEAR,
    "partly cloudy": CloudCover.PARTLY_CLOUDY,
    "mostly cloudy": CloudCover.CLOUDY,
    "overcast": CloudCover.CLOUDY,
    "cloudy": CloudCover.CLOUDY,
}


def normalize_cloud_cover(value: object) -> CloudCover:
    """Map any stored cloud-cover text onto the current category set.

    Unrecognized, empty or non-string values resolve to ``CloudCover.UNKNOWN``.
    """

    if isinstance(value, CloudCover):
        return value
    if not isinstance(value, str):
        return CloudCover.UNKNOWN
    return CLOUD_COVER_ALIASES.get(value.strip().lower(), CloudCover.UNKNOWN)


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

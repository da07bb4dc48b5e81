"""Fold a batch of METAR observations into count-day report values.

Observations are bucketed into the station-local calendar day of the count
date (see :mod:`cbcweather.services.local_time`). Numeric fields become
min/max ranges, wind direction a circular mean (or ``Variable``), and cloud
cover plus rain/snow intensity are summarized per AM/PM half.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Iterable, Optional

from cbcweather.domain import WIND_VARIABLE, CloudCover, HalfDay, Intensity
from cbcweather.models.observation import Observation
from cbcweather.models.report import AggregationResult, DerivedReportPatch
from cbcweather.services.conversions import (
    approx_utc_offset_hours,
    celsius_to_fahrenheit,
    circular_mean_degrees,
    compass_label,
    format_one_decimal,
    knots_to_mph,
)
from cbcweather.services.local_time import classify_local_day

logger = logging.getLogger("cbcweather.aggregator")

LOCAL_FOG_CODES = ("BCFG",)
FOG_CODES = ("FG",)
RAIN_CODES = ("RA", "DZ", "SHRA", "TSRA", "FZRA")
SNOW_CODES = ("SN", "SG", "SHSN")

_COVER_SEVERITY = {
    "OVC": 5,
    "OVX": 5,
    "BKN": 4,
    "SCT": 3,
    "FEW": 2,
    "CLR": 1,
    "CAVOK": 1,
}

_COVER_CATEGORY = {
    "OVC": CloudCover.CLOUDY,
    "OVX": CloudCover.CLOUDY,
    "BKN": CloudCover.CLOUDY,
    "SCT": CloudCover.PARTLY_CLOUDY,
    "FEW": CloudCover.PARTLY_CLEAR,
    "CLR": CloudCover.CLEAR,
    "CAVOK": CloudCover.CLEAR,
}


def cloud_category(observation: Observation) -> CloudCover:
    """Cloud category for one observation; fog codes win over cloud layers."""

    wx = observation.wx_string
    if any(code in wx for code in LOCAL_FOG_CODES):
        return CloudCover.LOCAL_FOG
    if any(code in wx for code in FOG_CODES):
        return CloudCover.FOGGY

    covers = [layer.cover for layer in observation.clouds if layer.cover]
    if not covers:
        return CloudCover.CLEAR

    worst = max(covers, key=lambda cover: _COVER_SEVERITY.get(cover, 0))
    return _COVER_CATEGORY.get(worst, CloudCover.UNKNOWN)


def precipitation_intensity(wx_string: str, codes: Iterable[str]) -> Intensity:
    """Intensity of the phenomena in ``codes`` within one present-weather string.

    Any ``+`` in the string marks heavy; otherwise a match is light.
    """

    wx = (wx_string or "").upper()
    if not any(code in wx for code in codes):
        return Intensity.NONE
    return Intensity.HEAVY if "+" in wx else Intensity.LIGHT


def worst_cloud(current: CloudCover, candidate: CloudCover) -> CloudCover:
    return current if current.severity >= candidate.severity else candidate


def max_intensity(current: Intensity, candidate: Intensity) -> Intensity:
    return candidate if candidate.rank > current.rank else current


@dataclass
class _HalfDayBucket:
    """A half with no observations reports Unknown cloud and no precipitation."""

    cloud: CloudCover = CloudCover.UNKNOWN
    rain: Intensity = Intensity.NONE
    snow: Intensity = Intensity.NONE

    def add(self, observation: Observation) -> None:
        self.cloud = worst_cloud(self.cloud, cloud_category(observation))
        self.rain = max_intensity(
            self.rain, precipitation_intensity(observation.wx_string, RAIN_CODES)
        )
        self.snow = max_intensity(
            self.snow, precipitation_intensity(observation.wx_string, SNOW_CODES)
        )


@dataclass
class _Accumulator:
    temps_f: list[float] = field(default_factory=list)
    winds_mph: list[float] = field(default_factory=list)
    snow_in: list[float] = field(default_factory=list)
    directions: list[float] = field(default_factory=list)
    variable_wind: bool = False
    halves: dict[HalfDay, _HalfDayBucket] = field(
        default_factory=lambda: {HalfDay.AM: _HalfDayBucket(), HalfDay.PM: _HalfDayBucket()}
    )
    used: int = 0

    def add(self, observation: Observation, half: HalfDay) -> None:
        self.used += 1

        temp_f = celsius_to_fahrenheit(observation.temp_c)
        if temp_f is not None:
            self.temps_f.append(temp_f)

        mph = knots_to_mph(observation.wind_speed_kt)
        if mph is not None:
            self.winds_mph.append(mph)

        if observation.snow_depth_in is not None:
            self.snow_in.append(observation.snow_depth_in)

        if observation.is_variable_wind:
            self.variable_wind = True
        elif isinstance(observation.wind_direction, float):
            self.directions.append(observation.wind_direction)

        self.halves[half].add(observation)

    def wind_direction(self) -> Optional[str]:
        if self.variable_wind:
            return WIND_VARIABLE
        mean = circular_mean_degrees(self.directions)
        if mean is None:
            return None
        return compass_label(mean)


def _range(values: list[float]) -> tuple[Optional[str], Optional[str]]:
    if not values:
        return None, None
    return format_one_decimal(min(values)), format_one_decimal(max(values))


def _half_fields(bucket: _HalfDayBucket) -> tuple[str, str, str]:
    return bucket.cloud.value, bucket.rain.value, bucket.snow.value


def aggregate_count_day_observations(
    observations: Iterable[Observation], target_date_iso: str, station_longitude: float
) -> AggregationResult:
    """Summarize the observations that fall on the station-local count date."""

    offset = approx_utc_offset_hours(station_longitude)
    acc = _Accumulator()
    skipped = 0

    for observation in observations:
        slot = classify_local_day(observation.obs_time, target_date_iso, offset)
        if slot is None:
            skipped += 1
            continue
        acc.add(observation, slot.half_of_day)

    logger.debug(
        "Aggregated %s observations for %s (offset %+d h, %s outside the day)",
        acc.used,
        target_date_iso,
        offset,
        skipped,
    )
    if acc.used == 0:
        return AggregationResult(patch=None, used_count=0)

    temp_min, temp_max = _range(acc.temps_f)
    wind_min, wind_max = _range(acc.winds_mph)
    snow_min, snow_max = _range(acc.snow_in)
    am_cloud, am_rain, am_snow = _half_fields(acc.halves[HalfDay.AM])
    pm_cloud, pm_rain, pm_snow = _half_fields(acc.halves[HalfDay.PM])

    patch = DerivedReportPatch(
        temp_min_f=temp_min,
        temp_max_f=temp_max,
        wind_min_mph=wind_min,
        wind_max_mph=wind_max,
        snow_min_in=snow_min,
        snow_max_in=snow_max,
        wind_dir=acc.wind_direction(),
        cloud_cover_am=am_cloud,
        cloud_cover_pm=pm_cloud,
        am_rain=am_rain,
        pm_rain=pm_rain,
        am_snow=am_snow,
        pm_snow=pm_snow,
    )
    return AggregationResult(patch=patch, used_count=acc.used)


__all__ = [
    "aggregate_count_day_observations",
    "cloud_category",
    "max_intensity",
    "precipitation_intensity",
    "worst_cloud",
]

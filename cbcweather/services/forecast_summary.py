"""Short text summary of the forecast for a count date."""

from __future__ import annotations

import math
from typing import Any, Optional

from cbcweather.models.forecast import Forecast
from cbcweather.services.conversions import round_half_up

SUMMARY_SEPARATOR = " • "

_WEATHER_CODE_TEXT = {
    0: "clear sky",
    1: "mainly clear",
    2: "partly cloudy",
    3: "broken clouds",
    45: "fog",
    48: "fog",
    51: "drizzle",
    53: "drizzle",
    55: "drizzle",
    56: "freezing drizzle",
    57: "freezing drizzle",
    61: "light precip",
    63: "moderate precip",
    65: "heavy precip",
    66: "freezing precip",
    67: "freezing precip",
    71: "snow",
    73: "snow",
    75: "snow",
    77: "snow grains",
    80: "showers",
    81: "showers",
    82: "showers",
    85: "snow showers",
    86: "snow showers",
    95: "thunderstorm",
    96: "thunderstorm",
    99: "thunderstorm",
}

_INCH_UNITS = {"in", "inch", "inches"}


def _number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def weather_code_text(code: Any) -> str:
    """Describe a WMO weather code; unknown codes read as ``weather``."""

    number = _number(code)
    if number is None:
        return ""
    if number.is_integer():
        return _WEATHER_CODE_TEXT.get(int(number), "weather")
    return "weather"


def _series_value(series: dict[str, list[Any]], name: str, idx: int) -> Any:
    values = series.get(name) or []
    return values[idx] if idx < len(values) else None


def summarize_count_day(
    forecast: Forecast, date_iso: Optional[str], *, passed: bool, units: str = "us"
) -> str:
    """Join description, high/low and precipitation for ``date_iso``.

    Empty when the date is unknown, not yet passed, or absent from the series.
    """

    if not date_iso or not passed:
        return ""
    times = forecast.daily.get("time")
    if not isinstance(times, list) or date_iso not in times:
        return ""
    idx = times.index(date_iso)

    t_max = _number(_series_value(forecast.daily, "temperature_2m_max", idx))
    t_min = _number(_series_value(forecast.daily, "temperature_2m_min", idx))
    precip = _number(_series_value(forecast.daily, "precipitation_sum", idx))
    description = weather_code_text(_series_value(forecast.daily, "weathercode", idx))

    metric = units == "metric"
    temp_unit = forecast.daily_units.get("temperature_2m_max") or ("°C" if metric else "°F")
    precip_unit = forecast.daily_units.get("precipitation_sum") or ("mm" if metric else "in")

    parts = []
    if description:
        parts.append(description)
    if t_max is not None and t_min is not None:
        parts.append(f"{round_half_up(t_max):.0f} / {round_half_up(t_min):.0f}{temp_unit}")
    if precip is not None:
        if str(precip_unit).lower() in _INCH_UNITS:
            parts.append(f'Precip: {precip:.2f}"')
        else:
            parts.append(f"Precip: {precip:.2f} {precip_unit}")
    return SUMMARY_SEPARATOR.join(parts)


__all__ = ["summarize_count_day", "weather_code_text"]

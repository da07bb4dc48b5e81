"""Place UTC observation timestamps into a station-local calendar day."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
import math
from typing import Any

from cbcweather.domain import HalfDay

HOUR_SECONDS = 3600
DAY_SECONDS = 24 * HOUR_SECONDS


@dataclass(frozen=True)
class LocalDaySlot:
    """Local hour and half-day an observation falls into."""

    hour_local: int
    half_of_day: HalfDay


def parse_iso_date(value: Any) -> date | None:
    """Return the calendar date for a strict ``YYYY-MM-DD`` string."""

    if not isinstance(value, str) or len(value) != 10:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def classify_local_day(
    obs_time_epoch_seconds: Any, target_date_iso: str, utc_offset_hours: int
) -> LocalDaySlot | None:
    """Classify an observation against the local calendar day of ``target_date_iso``.

    The date string already names a local date, so the offset shifts the
    observation rather than the day boundary. Returns ``None`` when the
    observation falls outside ``[00:00, 24:00)`` local time or when either input
    is unusable.
    """

    if obs_time_epoch_seconds is None or isinstance(obs_time_epoch_seconds, bool):
        return None
    try:
        obs_seconds = float(obs_time_epoch_seconds)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(obs_seconds):
        return None

    target = parse_iso_date(target_date_iso)
    if target is None:
        return None

    day_start = datetime.combine(target, time(0, 0), tzinfo=timezone.utc).timestamp()
    obs_local = obs_seconds + utc_offset_hours * HOUR_SECONDS
    delta = obs_local - day_start
    if delta < 0 or delta >= DAY_SECONDS:
        return None

    hour_local = int(delta // HOUR_SECONDS)
    half = HalfDay.AM if hour_local < 12 else HalfDay.PM
    return LocalDaySlot(hour_local=hour_local, half_of_day=half)


def local_day_end_utc(target_date_iso: str, utc_offset_hours: int) -> datetime | None:
    """UTC instant of local 23:59:59 on the target date."""

    target = parse_iso_date(target_date_iso)
    if target is None:
        return None
    local_end = datetime.combine(target, time(23, 59, 59), tzinfo=timezone.utc)
    return local_end - timedelta(hours=utc_offset_hours)


def is_date_passed(date_iso: str | None, today: date) -> bool:
    """True when ``date_iso`` is strictly before ``today``."""

    target = parse_iso_date(date_iso)
    return target is not None and target < today


__all__ = [
    "LocalDaySlot",
    "classify_local_day",
    "is_date_passed",
    "local_day_end_utc",
    "parse_iso_date",
]

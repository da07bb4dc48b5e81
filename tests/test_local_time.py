from datetime import date, datetime, timezone

from cbcweather.domain import HalfDay
from cbcweather.services.local_time import (
    classify_local_day,
    is_date_passed,
    local_day_end_utc,
    parse_iso_date,
)


def _epoch(*args):
    return datetime(*args, tzinfo=timezone.utc).timestamp()


def test_local_midnight_is_hour_zero_am():
    # offset -8: local midnight on Dec 21 is 08:00 UTC
    slot = classify_local_day(_epoch(2024, 12, 21, 8, 0, 0), "2024-12-21", -8)

    assert slot is not None
    assert slot.hour_local == 0
    assert slot.half_of_day == HalfDay.AM


def test_last_second_of_local_day_is_pm():
    slot = classify_local_day(_epoch(2024, 12, 22, 7, 59, 59), "2024-12-21", -8)

    assert slot is not None
    assert slot.hour_local == 23
    assert slot.half_of_day == HalfDay.PM


def test_next_local_midnight_is_discarded():
    assert classify_local_day(_epoch(2024, 12, 22, 8, 0, 0), "2024-12-21", -8) is None
    assert classify_local_day(_epoch(2024, 12, 21, 7, 59, 59), "2024-12-21", -8) is None


def test_noon_starts_pm():
    slot = classify_local_day(_epoch(2024, 12, 21, 20, 0, 0), "2024-12-21", -8)

    assert slot.hour_local == 12
    assert slot.half_of_day == HalfDay.PM


def test_unusable_inputs_return_none():
    assert classify_local_day(None, "2024-12-21", 0) is None
    assert classify_local_day("soon", "2024-12-21", 0) is None
    assert classify_local_day(_epoch(2024, 12, 21, 1), "12/21/2024", 0) is None
    assert classify_local_day(_epoch(2024, 12, 21, 1), "", 0) is None


def test_local_day_end_shifts_by_offset():
    end = local_day_end_utc("2024-12-21", -8)

    assert end == datetime(2024, 12, 22, 7, 59, 59, tzinfo=timezone.utc)
    assert local_day_end_utc("not-a-date", -8) is None


def test_date_passed_is_strict():
    today = date(2024, 12, 21)

    assert is_date_passed("2024-12-20", today)
    assert not is_date_passed("2024-12-21", today)
    assert not is_date_passed("2024-12-22", today)
    assert not is_date_passed(None, today)
    assert not is_date_passed("2024-02-30", today)


def test_parse_iso_date_is_strict():
    assert parse_iso_date("2024-12-21") == date(2024, 12, 21)
    assert parse_iso_date("2024-1-2") is None
    assert parse_iso_date(20241221) is None

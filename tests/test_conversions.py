import math

import pytest

from cbcweather.services.conversions import (
    approx_utc_offset_hours,
    celsius_to_fahrenheit,
    circular_mean_degrees,
    compass_label,
    format_one_decimal,
    haversine_miles,
    knots_to_mph,
    round_half_up,
)


def test_unit_conversions_hit_reference_points():
    assert knots_to_mph(0) == 0
    assert celsius_to_fahrenheit(0) == 32
    assert celsius_to_fahrenheit(100) == 212
    assert knots_to_mph(10) == pytest.approx(11.5078)


@pytest.mark.parametrize("value", [None, "abc", float("nan"), float("inf"), True])
def test_conversions_propagate_missing_data(value):
    assert celsius_to_fahrenheit(value) is None
    assert knots_to_mph(value) is None


def test_approx_utc_offset_uses_fifteen_degrees_per_hour():
    assert approx_utc_offset_hours(-122.0) == -8
    assert approx_utc_offset_hours(-116.2) == -8
    assert approx_utc_offset_hours(7.5) == 1
    assert approx_utc_offset_hours(-7.5) == 0
    assert approx_utc_offset_hours(0) == 0
    assert approx_utc_offset_hours(float("nan")) == 0
    assert approx_utc_offset_hours(None) == 0


def test_round_half_up_and_one_decimal_format():
    assert round_half_up(2.5) == 3
    assert round_half_up(-2.5) == -2
    assert format_one_decimal(32) == "32.0"
    assert format_one_decimal(9.2062) == "9.2"
    assert format_one_decimal(13.80936) == "13.8"


def test_circular_mean_wraps_through_north():
    mean = circular_mean_degrees([350, 10])

    assert mean == pytest.approx(0.0, abs=1e-9) or mean == pytest.approx(360.0, abs=1e-9)
    assert compass_label(mean) == "N"


def test_circular_mean_of_empty_input_is_none():
    assert circular_mean_degrees([]) is None


def test_circular_mean_of_single_bearing_is_that_bearing():
    assert circular_mean_degrees([270]) == pytest.approx(270.0)
    assert compass_label(circular_mean_degrees([260, 270, 280])) == "W"


def test_compass_label_boundaries():
    assert compass_label(0) == "N"
    assert compass_label(11.24) == "N"
    assert compass_label(11.25) == "NNE"
    assert compass_label(270) == "W"
    assert compass_label(348.75) == "N"
    assert compass_label(359.9) == "N"
    assert compass_label(360) == "N"
    assert compass_label(None) == ""


def test_haversine_one_degree_latitude():
    miles = haversine_miles(40.0, -105.0, 41.0, -105.0)

    assert math.isclose(miles, 69.09, rel_tol=0.01)

"""Service-layer helpers for the CBC Weather backend."""

from .aggregator import (
    aggregate_count_day_observations,
    cloud_category,
    precipitation_intensity,
)
from .cancellation import CancellationToken, OperationCancelled
from .circles import CircleIndex, format_iso_to_mdy, normalize_date_to_iso, parse_lat_lon
from .conversions import (
    approx_utc_offset_hours,
    celsius_to_fahrenheit,
    circular_mean_degrees,
    compass_label,
    haversine_miles,
    knots_to_mph,
)
from .forecast_cache import ForecastCache
from .forecast_summary import summarize_count_day, weather_code_text
from .local_time import classify_local_day, is_date_passed, local_day_end_utc
from .pipeline import CountDayPipeline, run_count_day
from .prefill import merge_prefill, normalize_form
from .report_export import render_report_csv, report_csv_filename
from .report_store import ReportStore, make_report_key
from .station_locator import (
    BoundingBox,
    bounding_box_around,
    find_nearest_observing_station,
    locate_stations,
)

__all__ = [
    "BoundingBox",
    "CancellationToken",
    "CircleIndex",
    "CountDayPipeline",
    "ForecastCache",
    "OperationCancelled",
    "ReportStore",
    "aggregate_count_day_observations",
    "approx_utc_offset_hours",
    "bounding_box_around",
    "celsius_to_fahrenheit",
    "circular_mean_degrees",
    "classify_local_day",
    "cloud_category",
    "compass_label",
    "find_nearest_observing_station",
    "format_iso_to_mdy",
    "haversine_miles",
    "is_date_passed",
    "knots_to_mph",
    "local_day_end_utc",
    "locate_stations",
    "make_report_key",
    "merge_prefill",
    "normalize_date_to_iso",
    "normalize_form",
    "parse_lat_lon",
    "precipitation_intensity",
    "render_report_csv",
    "report_csv_filename",
    "run_count_day",
    "summarize_count_day",
    "weather_code_text",
]

"""Pydantic models for the CBC Weather backend."""

from .circle import Circle, SearchCandidate
from .countday import CountDayState, FetchStatus, PipelineStage, StageStatus
from .forecast import Forecast, ForecastSummary, GeocodeResult
from .observation import CloudLayer, Observation
from .report import (
    AggregationResult,
    DerivedReportPatch,
    PrefillRequest,
    ReportForm,
    SavedReport,
)
from .station import Station, StationSearchResult

__all__ = [
    "AggregationResult",
    "Circle",
    "CloudLayer",
    "CountDayState",
    "DerivedReportPatch",
    "FetchStatus",
    "Forecast",
    "ForecastSummary",
    "GeocodeResult",
    "Observation",
    "PipelineStage",
    "PrefillRequest",
    "ReportForm",
    "SavedReport",
    "SearchCandidate",
    "StageStatus",
    "Station",
    "StationSearchResult",
]

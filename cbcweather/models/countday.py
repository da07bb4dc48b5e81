"""State models exposed by the count-day reconstruction pipeline."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from cbcweather.models.report import DerivedReportPatch
from cbcweather.models.station import Station


class PipelineStage(str, Enum):
    """Position of the pipeline in its lookup/fetch sequence."""

    IDLE = "idle"
    STATION_LOOKUP_IN_FLIGHT = "station_lookup_in_flight"
    STATION_LOOKUP_DONE = "station_lookup_done"
    OBSERVATION_FETCH_IN_FLIGHT = "observation_fetch_in_flight"
    OBSERVATION_FETCH_DONE = "observation_fetch_done"
    NOT_APPLICABLE = "not_applicable"
    ABORTED = "aborted"


class FetchStatus(str, Enum):
    """Outcome of one network-backed stage."""

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    NOT_FOUND = "not_found"
    ERROR = "error"


class StageStatus(BaseModel):
    """Loading/error flags for a single stage."""

    status: FetchStatus = Field(default=FetchStatus.IDLE)
    error: Optional[str] = Field(default=None)

    @property
    def loading(self) -> bool:
        return self.status == FetchStatus.LOADING


class CountDayState(BaseModel):
    """Snapshot of everything the presentation layer needs."""

    stage: PipelineStage = Field(default=PipelineStage.IDLE)
    count_date: Optional[str] = Field(default=None)
    station: Optional[Station] = Field(default=None)
    stations: list[Station] = Field(default_factory=list)
    station_status: StageStatus = Field(default_factory=StageStatus)
    patch: Optional[DerivedReportPatch] = Field(default=None)
    used_count: int = Field(default=0)
    observation_status: StageStatus = Field(default_factory=StageStatus)


__all__ = ["CountDayState", "FetchStatus", "PipelineStage", "StageStatus"]

"""Count-day reconstruction: station lookup, observation fetch and aggregation."""

from __future__ import annotations

from datetime import date, datetime
import logging
from typing import Callable, Optional, Protocol

from cbcweather.config import settings
from cbcweather.ingestors.errors import UpstreamServiceError
from cbcweather.models.countday import (
    CountDayState,
    FetchStatus,
    PipelineStage,
    StageStatus,
)
from cbcweather.models.observation import Observation
from cbcweather.models.station import Station
from cbcweather.services.aggregator import aggregate_count_day_observations
from cbcweather.services.cancellation import CancellationToken, OperationCancelled
from cbcweather.services.conversions import approx_utc_offset_hours
from cbcweather.services.local_time import is_date_passed, local_day_end_utc
from cbcweather.services.station_locator import StationSource, locate_stations

logger = logging.getLogger("cbcweather.pipeline")

IN_FLIGHT_STAGES = (
    PipelineStage.STATION_LOOKUP_IN_FLIGHT,
    PipelineStage.OBSERVATION_FETCH_IN_FLIGHT,
)


class ObservationSource(Protocol):
    """Anything able to return raw reports for a station and time window."""

    async def fetch_observations(
        self, station_id: str, hours: int, end: datetime
    ) -> list[Observation]:
        ...


def _error_text(exc: Exception) -> str:
    return str(exc) or exc.__class__.__name__


class CountDayPipeline:
    """Sequence station lookup and observation aggregation for one selection.

    Selecting a new circle restarts from the station lookup; changing only the
    count date reuses the resolved station and refetches observations. Every
    in-flight call carries a cancellation token, and a superseded call never
    writes to :attr:`state`.
    """

    def __init__(
        self,
        station_source: StationSource,
        observation_source: ObservationSource,
        *,
        radius_miles: float | None = None,
        lookback_hours: int | None = None,
        today: Callable[[], date] | None = None,
    ) -> None:
        self.station_source = station_source
        self.observation_source = observation_source
        self.radius_miles = radius_miles if radius_miles is not None else settings.station_radius_miles
        self.lookback_hours = (
            lookback_hours if lookback_hours is not None else settings.metar_lookback_hours
        )
        self._today = today or date.today
        self._state = CountDayState()
        self._station_token: Optional[CancellationToken] = None
        self._observation_token: Optional[CancellationToken] = None

    @property
    def state(self) -> CountDayState:
        """Snapshot of the current state; mutating it has no effect."""
        return self._state.model_copy(deep=True)

    def _update(self, **changes) -> None:
        self._state = self._state.model_copy(update=changes)

    def _cancel_observation_fetch(self) -> None:
        if self._observation_token is not None:
            self._observation_token.cancel()
            self._observation_token = None

    def _cancel_station_lookup(self) -> None:
        if self._station_token is not None:
            self._station_token.cancel()
            self._station_token = None

    def cancel(self) -> None:
        """Abort whatever is in flight and leave the pipeline idle-but-aborted."""

        was_in_flight = self._state.stage in IN_FLIGHT_STAGES
        self._cancel_station_lookup()
        self._cancel_observation_fetch()
        if was_in_flight:
            self._update(
                stage=PipelineStage.ABORTED,
                station_status=_settle(self._state.station_status),
                observation_status=_settle(self._state.observation_status),
            )
            logger.info("Count-day pipeline aborted")

    async def select_circle(
        self, lat: float, lon: float, count_date: Optional[str]
    ) -> CountDayState:
        """Resolve the station around a new center, then reconstruct the count day."""

        self._cancel_station_lookup()
        self._cancel_observation_fetch()
        token = CancellationToken()
        self._station_token = token

        self._state = CountDayState(
            stage=PipelineStage.STATION_LOOKUP_IN_FLIGHT,
            count_date=count_date,
            station_status=StageStatus(status=FetchStatus.LOADING),
        )

        try:
            result = await token.guard(
                locate_stations(self.station_source, lat, lon, self.radius_miles)
            )
        except OperationCancelled:
            logger.debug("Superseded station lookup for %.4f,%.4f discarded", lat, lon)
            return self.state
        except UpstreamServiceError as exc:
            self._fail_station_lookup(token, exc)
            return self.state
        except Exception as exc:  # noqa: BLE001 - any source failure becomes stage state
            logger.exception("Unexpected station lookup failure")
            self._fail_station_lookup(token, exc)
            return self.state

        self._station_token = None
        status = FetchStatus.READY if result.nearest else FetchStatus.NOT_FOUND
        self._update(
            stage=PipelineStage.STATION_LOOKUP_DONE,
            station=result.nearest,
            stations=result.stations,
            station_status=StageStatus(status=status),
        )
        if result.nearest is None:
            logger.info(
                "No station within %.1f mi of %.4f,%.4f", self.radius_miles, lat, lon
            )
            return self.state

        return await self._run_observation_stage(result.nearest)

    def _fail_station_lookup(self, token: CancellationToken, exc: Exception) -> None:
        if token.cancelled:
            return
        self._station_token = None
        logger.warning("Station lookup failed: %s", exc)
        self._update(
            stage=PipelineStage.STATION_LOOKUP_DONE,
            station=None,
            stations=[],
            station_status=StageStatus(status=FetchStatus.ERROR, error=_error_text(exc)),
        )

    async def set_count_date(self, count_date: Optional[str]) -> CountDayState:
        """Switch the target date, reusing the already resolved station."""

        self._cancel_observation_fetch()
        self._update(count_date=count_date)

        station = self._state.station
        if self._state.stage == PipelineStage.STATION_LOOKUP_IN_FLIGHT or station is None:
            # the running lookup picks up the new date when it finishes
            return self.state
        return await self._run_observation_stage(station)

    async def _run_observation_stage(self, station: Station) -> CountDayState:
        count_date = self._state.count_date
        if not is_date_passed(count_date, self._today()):
            self._update(
                stage=PipelineStage.NOT_APPLICABLE,
                patch=None,
                used_count=0,
                observation_status=StageStatus(),
            )
            logger.debug("Count date %r not in the past; skipping observations", count_date)
            return self.state

        offset = approx_utc_offset_hours(station.longitude)
        end = local_day_end_utc(count_date, offset)

        token = CancellationToken()
        self._observation_token = token
        self._update(
            stage=PipelineStage.OBSERVATION_FETCH_IN_FLIGHT,
            patch=None,
            used_count=0,
            observation_status=StageStatus(status=FetchStatus.LOADING),
        )

        try:
            observations = await token.guard(
                self.observation_source.fetch_observations(
                    station.station_id, self.lookback_hours, end
                )
            )
        except OperationCancelled:
            logger.debug("Superseded observation fetch for %s discarded", station.station_id)
            return self.state
        except UpstreamServiceError as exc:
            self._fail_observation_fetch(token, exc)
            return self.state
        except Exception as exc:  # noqa: BLE001 - any source failure becomes stage state
            logger.exception("Unexpected observation fetch failure")
            self._fail_observation_fetch(token, exc)
            return self.state

        self._observation_token = None
        result = aggregate_count_day_observations(observations, count_date, station.longitude)
        status = FetchStatus.READY if result.patch is not None else FetchStatus.NOT_FOUND
        self._update(
            stage=PipelineStage.OBSERVATION_FETCH_DONE,
            patch=result.patch,
            used_count=result.used_count,
            observation_status=StageStatus(status=status),
        )
        logger.info(
            "Count day %s at %s: %s of %s observations used",
            count_date,
            station.station_id,
            result.used_count,
            len(observations),
        )
        return self.state

    def _fail_observation_fetch(self, token: CancellationToken, exc: Exception) -> None:
        if token.cancelled:
            return
        self._observation_token = None
        logger.warning("Observation fetch failed: %s", exc)
        self._update(
            stage=PipelineStage.OBSERVATION_FETCH_DONE,
            patch=None,
            used_count=0,
            observation_status=StageStatus(status=FetchStatus.ERROR, error=_error_text(exc)),
        )


def _settle(status: StageStatus) -> StageStatus:
    if status.loading:
        return StageStatus()
    return status


async def run_count_day(
    station_source: StationSource,
    observation_source: ObservationSource,
    lat: float,
    lon: float,
    count_date: Optional[str],
    *,
    radius_miles: float | None = None,
    today: Callable[[], date] | None = None,
) -> CountDayState:
    """Run one full pipeline pass for a single request."""

    pipeline = CountDayPipeline(
        station_source, observation_source, radius_miles=radius_miles, today=today
    )
    return await pipeline.select_circle(lat, lon, count_date)


__all__ = ["CountDayPipeline", "ObservationSource", "run_count_day"]

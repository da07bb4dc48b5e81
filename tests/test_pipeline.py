from datetime import date, datetime, timedelta, timezone

import anyio
import pytest

from cbcweather.ingestors import UpstreamResponseError, UpstreamTimeoutError
from cbcweather.models import FetchStatus, Observation, PipelineStage, Station
from cbcweather.services.cancellation import CancellationToken, OperationCancelled
from cbcweather.services.pipeline import CountDayPipeline, run_count_day

CENTER = (45.5, -122.0)
OTHER_CENTER = (47.6, -122.3)
TODAY = date(2025, 1, 5)


def _local(day, hour):
    local = datetime(2024, 12, day, hour, tzinfo=timezone.utc)
    return (local + timedelta(hours=8)).timestamp()


def _station(station_id, lat, lon):
    return Station(station_id=station_id, site=station_id, latitude=lat, longitude=lon, site_types=["METAR"])


class FakeStationSource:
    def __init__(self, stations=None, error=None, gate_lat=None):
        self.stations = stations if stations is not None else [_station("KPDX", 45.55, -122.0)]
        self.error = error
        self.gate_lat = gate_lat
        self.gate = anyio.Event()
        self.started = anyio.Event()
        self.calls = []

    async def query_stations_in_bounding_box(self, bbox):
        self.calls.append(bbox)
        center_lat = (bbox.min_lat + bbox.max_lat) / 2
        if self.gate_lat is not None and abs(center_lat - self.gate_lat) < 1e-6:
            self.started.set()
            await self.gate.wait()
        if self.error:
            raise self.error
        return [st for st in self.stations if bbox.min_lat <= st.latitude <= bbox.max_lat]


class FakeObservationSource:
    def __init__(self, observations=None, error=None, gate_end=None):
        self.observations = observations if observations is not None else [
            Observation(obs_time=_local(21, 6), temp_c=2, wind_speed_kt=10, wind_direction=270),
            Observation(obs_time=_local(21, 15), temp_c=7, wind_speed_kt=8, wind_direction=260),
            Observation(obs_time=_local(22, 10), temp_c=0, wind_speed_kt=5, wind_direction=90),
        ]
        self.error = error
        self.gate_end = gate_end
        self.gate = anyio.Event()
        self.started = anyio.Event()
        self.calls = []

    async def fetch_observations(self, station_id, hours, end):
        self.calls.append((station_id, hours, end))
        if self.gate_end is not None and end == self.gate_end:
            self.started.set()
            await self.gate.wait()
        if self.error:
            raise self.error
        return list(self.observations)


def _pipeline(stations=None, observations=None):
    return CountDayPipeline(
        stations or FakeStationSource(),
        observations or FakeObservationSource(),
        radius_miles=15,
        lookback_hours=30,
        today=lambda: TODAY,
    )


@pytest.mark.anyio
async def test_station_then_observations_produce_patch():
    observations = FakeObservationSource()
    pipeline = _pipeline(observations=observations)

    state = await pipeline.select_circle(*CENTER, "2024-12-21")

    assert state.stage == PipelineStage.OBSERVATION_FETCH_DONE
    assert state.station.station_id == "KPDX"
    assert state.station_status.status == FetchStatus.READY
    assert state.observation_status.status == FetchStatus.READY
    assert state.used_count == 2
    assert state.patch.temp_min_f == "35.6"
    assert state.patch.temp_max_f == "44.6"
    station_id, hours, end = observations.calls[0]
    assert (station_id, hours) == ("KPDX", 30)
    assert end == datetime(2024, 12, 22, 7, 59, 59, tzinfo=timezone.utc)


@pytest.mark.anyio
@pytest.mark.parametrize("count_date", ["2025-01-05", "2025-12-20", None, "sometime"])
async def test_unpassed_or_unknown_dates_skip_observations(count_date):
    observations = FakeObservationSource()
    pipeline = _pipeline(observations=observations)

    state = await pipeline.select_circle(*CENTER, count_date)

    assert state.stage == PipelineStage.NOT_APPLICABLE
    assert state.station.station_id == "KPDX"
    assert state.patch is None
    assert state.observation_status.status == FetchStatus.IDLE
    assert observations.calls == []


@pytest.mark.anyio
async def test_moving_to_future_date_skips_observation_fetch():
    observations = FakeObservationSource()
    pipeline = _pipeline(observations=observations)
    await pipeline.select_circle(*CENTER, "2024-12-21")

    state = await pipeline.set_count_date("2025-12-20")

    assert state.stage == PipelineStage.NOT_APPLICABLE
    assert state.station.station_id == "KPDX"
    assert state.patch is None
    assert len(observations.calls) == 1


@pytest.mark.anyio
async def test_no_station_is_not_found_not_error():
    observations = FakeObservationSource()
    pipeline = _pipeline(stations=FakeStationSource(stations=[]), observations=observations)

    state = await pipeline.select_circle(*CENTER, "2024-12-21")

    assert state.stage == PipelineStage.STATION_LOOKUP_DONE
    assert state.station is None
    assert state.station_status.status == FetchStatus.NOT_FOUND
    assert state.station_status.error is None
    assert observations.calls == []


@pytest.mark.anyio
async def test_station_lookup_failure_is_reported_as_error():
    source = FakeStationSource(error=UpstreamResponseError("Station info failed (503)", status_code=503))
    observations = FakeObservationSource()
    pipeline = _pipeline(stations=source, observations=observations)

    state = await pipeline.select_circle(*CENTER, "2024-12-21")

    assert state.station is None
    assert state.station_status.status == FetchStatus.ERROR
    assert state.station_status.error == "Station info failed (503)"
    assert observations.calls == []


@pytest.mark.anyio
async def test_observation_failure_keeps_station_and_reports_error():
    pipeline = _pipeline(observations=FakeObservationSource(error=UpstreamTimeoutError("METAR request timed out")))

    state = await pipeline.select_circle(*CENTER, "2024-12-21")

    assert state.station.station_id == "KPDX"
    assert state.observation_status.status == FetchStatus.ERROR
    assert state.observation_status.error == "METAR request timed out"
    assert state.patch is None


@pytest.mark.anyio
async def test_no_observations_in_day_is_not_found():
    pipeline = _pipeline(observations=FakeObservationSource(observations=[]))

    state = await pipeline.select_circle(*CENTER, "2024-12-21")

    assert state.stage == PipelineStage.OBSERVATION_FETCH_DONE
    assert state.observation_status.status == FetchStatus.NOT_FOUND
    assert state.used_count == 0
    assert state.patch is None


@pytest.mark.anyio
async def test_date_change_reuses_resolved_station():
    stations = FakeStationSource()
    observations = FakeObservationSource()
    pipeline = _pipeline(stations=stations, observations=observations)

    await pipeline.select_circle(*CENTER, "2024-12-21")
    state = await pipeline.set_count_date("2024-12-22")

    assert len(stations.calls) == 1
    assert len(observations.calls) == 2
    assert state.count_date == "2024-12-22"
    assert state.used_count == 1
    assert state.patch.wind_dir == "E"


@pytest.mark.anyio
async def test_superseded_station_lookup_never_updates_state():
    stations = FakeStationSource(
        stations=[_station("KPDX", 45.55, -122.0), _station("KSEA", 47.45, -122.3)],
        gate_lat=CENTER[0],
    )
    pipeline = _pipeline(stations=stations)
    first_results = []

    async def select_first():
        first_results.append(await pipeline.select_circle(*CENTER, "2024-12-21"))

    async with anyio.create_task_group() as tg:
        tg.start_soon(select_first)
        await stations.started.wait()
        state = await pipeline.select_circle(*OTHER_CENTER, "2024-12-21")
        stations.gate.set()

    assert state.station.station_id == "KSEA"
    assert pipeline.state.station.station_id == "KSEA"
    assert pipeline.state.stage == PipelineStage.OBSERVATION_FETCH_DONE
    assert len(first_results) == 1
    assert len(stations.calls) == 2


@pytest.mark.anyio
async def test_superseded_observation_fetch_is_discarded():
    first_end = datetime(2024, 12, 22, 7, 59, 59, tzinfo=timezone.utc)
    observations = FakeObservationSource(gate_end=first_end)
    pipeline = _pipeline(observations=observations)

    async with anyio.create_task_group() as tg:
        tg.start_soon(pipeline.select_circle, *CENTER, "2024-12-21")
        await observations.started.wait()
        await pipeline.set_count_date("2024-12-22")
        observations.gate.set()

    state = pipeline.state
    assert state.count_date == "2024-12-22"
    assert state.used_count == 1
    assert state.observation_status.status == FetchStatus.READY


@pytest.mark.anyio
async def test_cancel_while_in_flight_marks_aborted():
    stations = FakeStationSource(gate_lat=CENTER[0])
    pipeline = _pipeline(stations=stations)

    async with anyio.create_task_group() as tg:
        tg.start_soon(pipeline.select_circle, *CENTER, "2024-12-21")
        await stations.started.wait()
        pipeline.cancel()

    state = pipeline.state
    assert state.stage == PipelineStage.ABORTED
    assert state.station is None
    assert state.station_status.status == FetchStatus.IDLE


@pytest.mark.anyio
async def test_state_snapshot_is_detached():
    pipeline = _pipeline()
    await pipeline.select_circle(*CENTER, "2024-12-21")

    snapshot = pipeline.state
    snapshot.stations.clear()

    assert len(pipeline.state.stations) == 1


@pytest.mark.anyio
async def test_run_count_day_single_pass():
    state = await run_count_day(
        FakeStationSource(), FakeObservationSource(), *CENTER, "2024-12-21", radius_miles=15, today=lambda: TODAY
    )

    assert state.used_count == 2


@pytest.mark.anyio
async def test_cancellation_token_discards_late_result():
    token = CancellationToken()
    gate = anyio.Event()

    async def slow():
        await gate.wait()
        return "late"

    async with anyio.create_task_group() as tg:

        async def guarded():
            with pytest.raises(OperationCancelled):
                await token.guard(slow())

        tg.start_soon(guarded)
        await anyio.sleep(0)
        token.cancel()

    assert token.cancelled
    with pytest.raises(OperationCancelled):
        token.raise_if_cancelled()

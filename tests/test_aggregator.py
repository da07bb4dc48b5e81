from datetime import datetime, timedelta, timezone

from cbcweather.domain import CloudCover, Intensity
from cbcweather.models import Observation
from cbcweather.services.aggregator import (
    aggregate_count_day_observations,
    cloud_category,
    max_intensity,
    precipitation_intensity,
)

COUNT_DATE = "2024-12-21"
STATION_LON = -122.0  # offset -8 h


def _local(hour, minute=0):
    """Epoch seconds for a local clock time on the count date at offset -8."""
    local = datetime(2024, 12, 21, hour, minute, tzinfo=timezone.utc)
    return (local + timedelta(hours=8)).timestamp()


def _obs(**record):
    return Observation.model_validate(record)


def test_end_to_end_count_day_scenario():
    observations = [
        _obs(obsTime=_local(6), temp=2, wspd=10, wdir=270, wxString="-RA", clouds=[{"cover": "OVC"}]),
        _obs(obsTime=_local(9), temp=4, wspd=12, wdir=280),
        _obs(obsTime=_local(15), temp=7, wspd=8, wdir=260, wxString="FG"),
    ]

    result = aggregate_count_day_observations(observations, COUNT_DATE, STATION_LON)
    patch = result.patch

    assert result.used_count == 3
    assert patch.temp_min_f == "35.6"
    assert patch.temp_max_f == "44.6"
    assert patch.wind_min_mph == "9.2"
    assert patch.wind_max_mph == "13.8"
    assert patch.wind_dir == "W"
    assert patch.cloud_cover_am == "Cloudy"
    assert patch.am_rain == "Light"
    assert patch.am_snow == "None"
    assert patch.cloud_cover_pm == "Foggy"
    assert patch.pm_rain == "None"
    assert patch.snow_min_in is None
    assert patch.snow_max_in is None


def test_batch_outside_the_local_day_yields_no_patch():
    observations = [
        _obs(obsTime=_local(0) - 1, temp=1),
        _obs(obsTime=_local(0) + 24 * 3600, temp=1),
    ]

    result = aggregate_count_day_observations(observations, COUNT_DATE, STATION_LON)

    assert result.patch is None
    assert result.used_count == 0


def test_empty_batch_yields_no_patch():
    result = aggregate_count_day_observations([], COUNT_DATE, STATION_LON)

    assert result.patch is None
    assert result.used_count == 0


def test_variable_wind_overrides_numeric_directions():
    observations = [
        _obs(obsTime=_local(7), wdir=90),
        _obs(obsTime=_local(8), wdir="VRB"),
        _obs(obsTime=_local(9), wdir=100),
    ]

    result = aggregate_count_day_observations(observations, COUNT_DATE, STATION_LON)

    assert result.patch.wind_dir == "Variable"


def test_wind_direction_mean_wraps_north():
    observations = [_obs(obsTime=_local(7), wdir=350), _obs(obsTime=_local(8), wdir=10)]

    result = aggregate_count_day_observations(observations, COUNT_DATE, STATION_LON)

    assert result.patch.wind_dir == "N"


def test_missing_numeric_fields_are_omitted_not_zeroed():
    result = aggregate_count_day_observations([_obs(obsTime=_local(10))], COUNT_DATE, STATION_LON)
    patch = result.patch

    assert result.used_count == 1
    assert patch.temp_min_f is None
    assert patch.wind_min_mph is None
    assert patch.wind_dir is None
    assert patch.cloud_cover_am == "Clear"


def test_half_without_observations_reports_unknown_cloud_and_no_precip():
    result = aggregate_count_day_observations(
        [_obs(obsTime=_local(10), wxString="-RA", clouds=[{"cover": "BKN"}])], COUNT_DATE, STATION_LON
    )
    patch = result.patch

    assert (patch.cloud_cover_am, patch.am_rain, patch.am_snow) == ("Cloudy", "Light", "None")
    assert (patch.cloud_cover_pm, patch.pm_rain, patch.pm_snow) == ("Unknown", "None", "None")


def test_snow_depth_range_and_pm_snow_intensity():
    observations = [
        _obs(obsTime=_local(13), snow=2, wxString="-SN"),
        _obs(obsTime=_local(17), snow=3.25, wxString="+SN BR"),
    ]

    patch = aggregate_count_day_observations(observations, COUNT_DATE, STATION_LON).patch

    assert patch.snow_min_in == "2.0"
    assert patch.snow_max_in == "3.3"
    assert patch.pm_snow == "Heavy"
    assert patch.am_snow == "None"
    assert patch.cloud_cover_am == "Unknown"


def test_fog_dominates_any_cloud_layer():
    fog = _obs(wxString="FG", clouds=[{"cover": "CLR"}])
    local_fog = _obs(wxString="BCFG", clouds=[{"cover": "OVC"}])

    assert cloud_category(fog) == CloudCover.FOGGY
    assert cloud_category(local_fog) == CloudCover.LOCAL_FOG


def test_cloud_category_picks_most_severe_layer():
    assert cloud_category(_obs(clouds=[{"cover": "FEW"}, {"cover": "SCT"}])) == CloudCover.PARTLY_CLOUDY
    assert cloud_category(_obs(clouds=[{"cover": "FEW"}])) == CloudCover.PARTLY_CLEAR
    assert cloud_category(_obs(clouds=[{"cover": "CAVOK"}])) == CloudCover.CLEAR
    assert cloud_category(_obs(clouds=[{"cover": "OVX"}])) == CloudCover.CLOUDY
    assert cloud_category(_obs(clouds=[])) == CloudCover.CLEAR
    assert cloud_category(_obs(clouds=[{"cover": "XYZ"}])) == CloudCover.UNKNOWN


def test_half_day_keeps_worst_cloud_category():
    observations = [
        _obs(obsTime=_local(7), clouds=[{"cover": "OVC"}]),
        _obs(obsTime=_local(8), wxString="BCFG"),
        _obs(obsTime=_local(9), wxString="FG"),
    ]

    patch = aggregate_count_day_observations(observations, COUNT_DATE, STATION_LON).patch

    assert patch.cloud_cover_am == "Local Fog"


def test_precipitation_intensity_reads_whole_weather_string():
    assert precipitation_intensity("", ("RA",)) == Intensity.NONE
    assert precipitation_intensity("RA", ("RA",)) == Intensity.LIGHT
    assert precipitation_intensity("-DZ", ("RA", "DZ")) == Intensity.LIGHT
    assert precipitation_intensity("+TSRA", ("TSRA",)) == Intensity.HEAVY
    assert precipitation_intensity("-SN +RA", ("RA",)) == Intensity.HEAVY
    assert precipitation_intensity("BR", ("RA",)) == Intensity.NONE


def test_plus_anywhere_makes_both_families_heavy():
    observations = [_obs(obsTime=_local(8), wxString="+SN -RA")]

    patch = aggregate_count_day_observations(observations, COUNT_DATE, STATION_LON).patch

    assert patch.am_snow == "Heavy"
    assert patch.am_rain == "Heavy"


def test_unknown_intensity_never_raises_running_maximum():
    assert max_intensity(Intensity.NONE, Intensity.UNKNOWN) == Intensity.NONE
    assert max_intensity(Intensity.LIGHT, Intensity.UNKNOWN) == Intensity.LIGHT
    assert max_intensity(Intensity.NONE, Intensity.LIGHT) == Intensity.LIGHT
    assert max_intensity(Intensity.HEAVY, Intensity.LIGHT) == Intensity.HEAVY

"""Find the nearest observation-capable station around a circle center."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from typing import Iterable, Optional, Protocol

from cbcweather.models.station import Station, StationSearchResult
from cbcweather.services.conversions import MILES_PER_DEGREE_LAT, haversine_miles

logger = logging.getLogger("cbcweather.station_locator")


@dataclass(frozen=True)
class BoundingBox:
    """Latitude/longitude box used for station metadata queries."""

    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float

    def to_param(self) -> str:
        """Render as ``minLat,minLon,maxLat,maxLon``."""
        return f"{self.min_lat},{self.min_lon},{self.max_lat},{self.max_lon}"


class StationSource(Protocol):
    """Anything able to list stations inside a bounding box."""

    async def query_stations_in_bounding_box(self, bbox: BoundingBox) -> list[Station]:
        ...


def bounding_box_around(lat: float, lon: float, radius_miles: float) -> BoundingBox:
    """Flat-earth box that contains every point within ``radius_miles``."""

    lat_delta = radius_miles / MILES_PER_DEGREE_LAT
    lon_delta = radius_miles / max(
        MILES_PER_DEGREE_LAT * math.cos(math.radians(lat)), 0.0001
    )
    return BoundingBox(
        min_lat=lat - lat_delta,
        max_lat=lat + lat_delta,
        min_lon=lon - lon_delta,
        max_lon=lon + lon_delta,
    )


def rank_stations_within_radius(
    stations: Iterable[Station], lat: float, lon: float, radius_miles: float
) -> list[Station]:
    """Attach distances, drop stations beyond the radius and sort nearest first."""

    ranked: list[Station] = []
    for station in stations:
        miles = haversine_miles(lat, lon, station.latitude, station.longitude)
        if not math.isfinite(miles) or miles > radius_miles:
            continue
        ranked.append(station.model_copy(update={"distance_miles": miles}))

    ranked.sort(key=lambda st: st.distance_miles)
    return ranked


def select_nearest_observing(ranked: list[Station]) -> Optional[Station]:
    """Prefer the closest METAR station, else the closest station of any kind."""

    for station in ranked:
        if station.reports_observations:
            return station
    return ranked[0] if ranked else None


async def locate_stations(
    source: StationSource, lat: float, lon: float, radius_miles: float
) -> StationSearchResult:
    """Query ``source`` around a center and rank what comes back.

    Upstream errors propagate unchanged; the caller decides how to surface them.
    """

    bbox = bounding_box_around(lat, lon, radius_miles)
    candidates = await source.query_stations_in_bounding_box(bbox)
    ranked = rank_stations_within_radius(candidates, lat, lon, radius_miles)
    nearest = select_nearest_observing(ranked)
    logger.info(
        "Stations near %.4f,%.4f: %s in box, %s within %.1f mi, nearest=%s",
        lat,
        lon,
        len(candidates),
        len(ranked),
        radius_miles,
        nearest.station_id if nearest else None,
    )
    return StationSearchResult(nearest=nearest, stations=ranked, radius_miles=radius_miles)


async def find_nearest_observing_station(
    source: StationSource, lat: float, lon: float, radius_miles: float
) -> Optional[Station]:
    result = await locate_stations(source, lat, lon, radius_miles)
    return result.nearest


__all__ = [
    "BoundingBox",
    "StationSource",
    "bounding_box_around",
    "find_nearest_observing_station",
    "locate_stations",
    "rank_stations_within_radius",
    "select_nearest_observing",
]

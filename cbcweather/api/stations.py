"""Nearest-station lookup endpoint."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query, status

from cbcweather.api.dependencies import api_error, get_aviation_client
from cbcweather.config import settings
from cbcweather.ingestors import AviationWeatherClient, UpstreamServiceError
from cbcweather.models import StationSearchResult
from cbcweather.services import locate_stations

router = APIRouter(prefix="/api/v1", tags=["stations"])

logger = logging.getLogger("cbcweather.api.stations")


@router.get(
    "/stations/nearest",
    response_model=StationSearchResult,
    summary="Find the nearest observing station around a point",
)
async def get_nearest_station(
    lat: float = Query(..., ge=-90, le=90),
    lon: float = Query(..., ge=-180, le=180),
    radius_miles: float | None = Query(default=None, gt=0, le=250),
    client: AviationWeatherClient = Depends(get_aviation_client),
) -> StationSearchResult:
    radius = radius_miles if radius_miles is not None else settings.station_radius_miles
    try:
        result = await locate_stations(client, lat, lon, radius)
    except UpstreamServiceError as exc:
        raise api_error(status.HTTP_502_BAD_GATEWAY, "upstream_error", str(exc)) from exc

    if result.nearest is None:
        raise api_error(
            status.HTTP_404_NOT_FOUND,
            "station_not_found",
            f"No station within {radius:g} miles",
        )
    return result

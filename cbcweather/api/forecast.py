"""Forecast, geocoding and count-date summary endpoints."""

from __future__ import annotations

from datetime import date
import logging
from typing import Literal

from fastapi import APIRouter, Depends, Query, status

from cbcweather.api.dependencies import (
    api_error,
    get_circle,
    get_forecast_cache,
    get_forecast_ingestor,
    get_today,
)
from cbcweather.ingestors import ForecastIngestor, UpstreamServiceError
from cbcweather.models import Circle, Forecast, ForecastSummary, GeocodeResult
from cbcweather.services import ForecastCache, is_date_passed, summarize_count_day

router = APIRouter(prefix="/api/v1", tags=["forecast"])

logger = logging.getLogger("cbcweather.api.forecast")


def _upstream_error(exc: UpstreamServiceError):
    return api_error(status.HTTP_502_BAD_GATEWAY, "upstream_error", str(exc))


@router.get("/forecast", response_model=Forecast, summary="Hourly and daily forecast for a point")
async def get_forecast(
    lat: float = Query(..., ge=-90, le=90),
    lon: float = Query(..., ge=-180, le=180),
    days: int | None = Query(default=None, ge=1, le=16),
    units: Literal["us", "metric"] = Query(default="us"),
    cache: ForecastCache = Depends(get_forecast_cache),
) -> Forecast:
    try:
        return await cache.get(lat, lon, days=days, units=units)
    except UpstreamServiceError as exc:
        raise _upstream_error(exc) from exc


@router.get("/geocode", response_model=list[GeocodeResult], summary="Search place names")
async def geocode(
    q: str = Query(..., min_length=1),
    count: int = Query(default=10, ge=1, le=50),
    ingestor: ForecastIngestor = Depends(get_forecast_ingestor),
) -> list[GeocodeResult]:
    try:
        return await ingestor.geocode(q.strip(), count=count)
    except UpstreamServiceError as exc:
        raise _upstream_error(exc) from exc


@router.get(
    "/circles/{circle_id}/forecast-summary",
    response_model=ForecastSummary,
    summary="One-line forecast summary for the circle's count date",
)
async def get_forecast_summary(
    units: Literal["us", "metric"] = Query(default="us"),
    circle: Circle = Depends(get_circle),
    cache: ForecastCache = Depends(get_forecast_cache),
    today: date = Depends(get_today),
) -> ForecastSummary:
    date_iso = circle.count_date or ""
    passed = is_date_passed(circle.count_date, today)
    if not passed:
        return ForecastSummary(date_iso=date_iso, passed=False, summary="")

    try:
        forecast = await cache.get(circle.latitude, circle.longitude, units=units)
    except UpstreamServiceError as exc:
        raise _upstream_error(exc) from exc

    summary = summarize_count_day(forecast, date_iso, passed=passed, units=units)
    logger.debug("Forecast summary for %s: %r", circle.circle_id, summary)
    return ForecastSummary(date_iso=date_iso, passed=passed, summary=summary)

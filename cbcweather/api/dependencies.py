"""Shared FastAPI dependencies for the CBC Weather routers."""

from __future__ import annotations

from datetime import date
import logging
from typing import Optional

from fastapi import Depends, HTTPException, Path, status

from cbcweather.config import settings
from cbcweather.db import SessionLocal
from cbcweather.ingestors import AviationWeatherClient, ForecastIngestor
from cbcweather.models import Circle
from cbcweather.services import CircleIndex, ForecastCache, ReportStore

logger = logging.getLogger("cbcweather.api")

_circle_index: Optional[CircleIndex] = None
_forecast_cache: Optional[ForecastCache] = None


def api_error(status_code: int, code: str, message: str) -> HTTPException:
    return HTTPException(status_code=status_code, detail={"code": code, "message": message})


def get_circle_index() -> CircleIndex:
    """Return the process-wide circle index, loading it on first use."""

    global _circle_index
    if _circle_index is None:
        _circle_index = CircleIndex.load_file(settings.circles_path)
    return _circle_index


def reset_circle_index(index: Optional[CircleIndex] = None) -> None:
    global _circle_index
    _circle_index = index


def get_aviation_client() -> AviationWeatherClient:
    return AviationWeatherClient()


def get_forecast_ingestor() -> ForecastIngestor:
    return ForecastIngestor()


def get_forecast_cache(
    ingestor: ForecastIngestor = Depends(get_forecast_ingestor),
) -> ForecastCache:
    global _forecast_cache
    if _forecast_cache is None:
        _forecast_cache = ForecastCache(ingestor)
    return _forecast_cache


def get_report_store() -> ReportStore:
    return ReportStore(SessionLocal)


def get_today() -> date:
    return date.today()


def get_circle(
    circle_id: str = Path(..., description="Circle identifier"),
    index: CircleIndex = Depends(get_circle_index),
) -> Circle:
    circle = index.get(circle_id)
    if circle is None:
        raise api_error(
            status.HTTP_404_NOT_FOUND, "circle_not_found", f"Unknown circle {circle_id!r}"
        )
    return circle


__all__ = [
    "api_error",
    "get_aviation_client",
    "get_circle",
    "get_circle_index",
    "get_forecast_cache",
    "get_forecast_ingestor",
    "get_report_store",
    "get_today",
    "reset_circle_index",
]

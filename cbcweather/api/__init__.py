"""API routers for the CBC Weather backend."""

from fastapi import APIRouter

from cbcweather.config import settings

from .circles import router as circles_router
from .health import router as health_router
from .reports import router as reports_router
from .stations import router as stations_router

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(circles_router)
api_router.include_router(stations_router)
api_router.include_router(reports_router)

if settings.enable_forecast:
    from .forecast import router as forecast_router

    api_router.include_router(forecast_router)

__all__ = ["api_router"]

"""Configuration settings for the CBC Weather backend."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

logger = logging.getLogger("cbcweather.config")

DEFAULT_CORS_ORIGINS = (
    "https://hydrospheric0.github.io",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
)


def _get_bool(env_var: str, default: bool = False) -> bool:
    """Parse an environment variable into a boolean with a default."""

    value = os.getenv(env_var)
    if value is None:
        return default

    return value.lower() in {"1", "true", "yes", "on"}


def _get_list(env_var: str, default: tuple[str, ...]) -> list[str]:
    value = os.getenv(env_var)
    if value is None:
        return list(default)
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class Settings:
    """Application configuration loaded from environment variables."""

    cbcweather_env: str = os.getenv("CBCWEATHER_ENV", "local")
    log_level: str = os.getenv("CBCWEATHER_LOG_LEVEL", "INFO")
    enable_forecast: bool = _get_bool("ENABLE_FORECAST", default=True)

    # Aviation weather (station metadata + METAR observations)
    awc_base_url: str = os.getenv("AWC_BASE_URL", "https://aviationweather.gov").rstrip("/")
    awc_timeout: float = float(os.getenv("AWC_TIMEOUT", "15.0"))
    station_radius_miles: float = float(os.getenv("STATION_RADIUS_MILES", "15.0"))
    metar_lookback_hours: int = int(os.getenv("METAR_LOOKBACK_HOURS", "30"))

    # Forecast + geocoding
    forecast_base_url: str = os.getenv(
        "FORECAST_BASE_URL", "https://api.open-meteo.com/v1/forecast"
    )
    geocode_base_url: str = os.getenv(
        "GEOCODE_BASE_URL", "https://geocoding-api.open-meteo.com/v1/search"
    )
    forecast_timeout: float = float(os.getenv("FORECAST_TIMEOUT", "10.0"))
    forecast_cache_ttl_seconds: float = float(os.getenv("FORECAST_CACHE_TTL_SECONDS", "900"))
    forecast_days: int = int(os.getenv("FORECAST_DAYS", "8"))

    # Static circle dataset
    circles_path: str = os.getenv("CBC_CIRCLES_PATH", "data/cbc_circles_merged.geojson")

    # Report drafts
    db_url: str = os.getenv("CBCWEATHER_DB_URL", "sqlite:///./cbcweather.db")

    cors_allowed_origins: list[str] = field(
        default_factory=lambda: _get_list("CORS_ALLOWED_ORIGINS", DEFAULT_CORS_ORIGINS)
    )


settings = Settings()

if settings.station_radius_miles <= 0:
    logger.warning(
        "STATION_RADIUS_MILES=%s is not positive; station lookups will find nothing",
        settings.station_radius_miles,
    )

__all__ = ["settings", "Settings"]

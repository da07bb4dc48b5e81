"""Forecast and geocoding ingestion using Open-Meteo."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from cbcweather.config import settings
from cbcweather.ingestors.errors import (
    UpstreamResponseError,
    UpstreamServiceError,
    UpstreamTimeoutError,
)
from cbcweather.models.forecast import Forecast, GeocodeResult

logger = logging.getLogger("cbcweather.ingestors.open_meteo")

HOURLY_FIELDS = (
    "temperature_2m",
    "precipitation_probability",
    "cloud_cover",
    "rain",
    "wind_speed_10m",
    "wind_direction_10m",
)
DAILY_FIELDS = (
    "weathercode",
    "precipitation_sum",
    "rain_sum",
    "temperature_2m_max",
    "temperature_2m_min",
    "wind_speed_10m_max",
    "wind_direction_10m_dominant",
)

UNIT_PARAMS = {
    "us": {
        "temperature_unit": "fahrenheit",
        "wind_speed_unit": "mph",
        "precipitation_unit": "inch",
    },
    "metric": {
        "temperature_unit": "celsius",
        "wind_speed_unit": "kmh",
        "precipitation_unit": "mm",
    },
}


def normalize_units(units: str | None) -> str:
    return "metric" if str(units or "us").lower() == "metric" else "us"


class ForecastIngestor:
    """Fetch multi-day hourly/daily forecasts and geocode place names."""

    def __init__(
        self,
        *,
        base_url: str | None = None,
        geocode_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url or settings.forecast_base_url
        self.geocode_url = geocode_url or settings.geocode_base_url
        self.timeout = timeout or settings.forecast_timeout
        self.transport = transport

    async def _get(self, url: str, params: dict[str, Any], label: str) -> Any:
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport
            ) as client:
                response = await client.get(url, params=params)
                response.raise_for_status()
        except httpx.TimeoutException as exc:
            logger.error("%s request timed out: %s", label, exc)
            raise UpstreamTimeoutError(f"{label} timed out") from exc
        except httpx.HTTPStatusError as exc:
            logger.error(
                "%s service returned error: status=%s body=%s",
                label,
                exc.response.status_code,
                exc.response.text[:200],
            )
            raise UpstreamResponseError(
                f"{label} failed ({exc.response.status_code})",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.RequestError as exc:
            logger.error("%s request failed: %s", label, exc)
            raise UpstreamServiceError(f"{label} request failed") from exc

        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamResponseError(f"{label} returned invalid JSON") from exc

    async def get_forecast(
        self, lat: float, lon: float, *, days: int = 8, units: str = "us"
    ) -> Forecast:
        params: dict[str, Any] = {
            "latitude": lat,
            "longitude": lon,
            "hourly": ",".join(HOURLY_FIELDS),
            "daily": ",".join(DAILY_FIELDS),
            "timezone": "auto",
            "forecast_days": days,
            **UNIT_PARAMS[normalize_units(units)],
        }
        payload = await self._get(self.base_url, params, "Forecast")
        if not isinstance(payload, dict):
            raise UpstreamResponseError("Forecast returned an unexpected payload")

        payload.setdefault("latitude", lat)
        payload.setdefault("longitude", lon)
        try:
            forecast = Forecast.model_validate(payload)
        except ValidationError as exc:
            raise UpstreamResponseError("Forecast returned an unexpected payload") from exc
        logger.debug(
            "Forecast ingested for %s,%s: %s hourly points",
            lat,
            lon,
            len(forecast.hourly.get("time", [])),
        )
        return forecast

    async def geocode(self, query: str, *, count: int = 10) -> list[GeocodeResult]:
        params = {"name": query, "count": count, "language": "en", "format": "json"}
        payload = await self._get(self.geocode_url, params, "Geocoding")
        results = payload.get("results") if isinstance(payload, dict) else None
        if not isinstance(results, list):
            return []

        places: list[GeocodeResult] = []
        for item in results:
            if not isinstance(item, dict):
                continue
            try:
                places.append(
                    GeocodeResult.model_validate({**item, "id": str(item.get("id") or "")})
                )
            except ValidationError:
                logger.debug("Skipping malformed geocoding result: %s", item)
        return places


__all__ = ["ForecastIngestor", "normalize_units"]

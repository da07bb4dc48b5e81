"""Station metadata and METAR ingestion from the AviationWeather.gov data API."""

from __future__ import annotations

from datetime import datetime, timezone
import logging
import math
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from cbcweather.config import settings
from cbcweather.ingestors.errors import (
    UpstreamResponseError,
    UpstreamServiceError,
    UpstreamTimeoutError,
)
from cbcweather.models.observation import Observation
from cbcweather.models.station import Station
from cbcweather.services.station_locator import BoundingBox

logger = logging.getLogger("cbcweather.ingestors.aviation_weather")

STATION_INFO_PATH = "/api/data/stationinfo"
METAR_PATH = "/api/data/metar"


def _clean_params(params: dict[str, Any]) -> dict[str, str]:
    cleaned: dict[str, str] = {}
    for key, value in params.items():
        if value is None:
            continue
        text = str(value).strip()
        if text:
            cleaned[key] = text
    return cleaned


def _format_utc(instant: datetime) -> str:
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _parse_station_feature(feature: Any) -> Optional[Station]:
    if not isinstance(feature, dict):
        return None
    props = feature.get("properties") or {}
    geometry = feature.get("geometry") or {}

    station_id = str(props.get("icaoId") or "").strip()
    if not station_id:
        return None

    coords = geometry.get("coordinates") if geometry.get("type") == "Point" else None
    if not isinstance(coords, (list, tuple)) or len(coords) < 2:
        return None
    try:
        lon = float(coords[0])
        lat = float(coords[1])
    except (TypeError, ValueError):
        return None
    if not (math.isfinite(lat) and math.isfinite(lon)):
        return None

    site_types = props.get("siteType")
    if not isinstance(site_types, list):
        site_types = []

    return Station(
        station_id=station_id,
        site=str(props.get("site") or "").strip(),
        latitude=lat,
        longitude=lon,
        site_types=[str(tag) for tag in site_types],
    )


class AviationWeatherClient:
    """Query stations and raw observations from AviationWeather.gov."""

    def __init__(
        self,
        *,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.awc_base_url).rstrip("/")
        self.timeout = timeout or settings.awc_timeout
        self.transport = transport

    async def _get_json(self, path: str, params: dict[str, Any], label: str) -> Any:
        url = f"{self.base_url}{path}"
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport
            ) as client:
                response = await client.get(
                    url, params=_clean_params(params), headers={"Cache-Control": "no-store"}
                )
                response.raise_for_status()
        except httpx.TimeoutException as exc:
            logger.error("%s request timed out: %s", label, exc)
            raise UpstreamTimeoutError(f"{label} timed out") from exc
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code
            logger.error(
                "%s returned error: status=%s body=%s",
                label,
                status_code,
                exc.response.text[:200],
            )
            raise UpstreamResponseError(
                f"{label} failed ({status_code})", status_code=status_code
            ) from exc
        except httpx.RequestError as exc:
            logger.error("%s request failed: %s", label, exc)
            raise UpstreamServiceError(f"{label} request failed") from exc

        try:
            return response.json()
        except ValueError as exc:
            logger.error("%s returned invalid JSON: %s", label, exc)
            raise UpstreamResponseError(f"{label} returned invalid JSON") from exc

    async def query_stations_in_bounding_box(self, bbox: BoundingBox) -> list[Station]:
        """Return every station the service lists inside ``bbox``."""

        payload = await self._get_json(
            STATION_INFO_PATH,
            {"bbox": bbox.to_param(), "format": "geojson"},
            "Station info",
        )
        features = payload.get("features") if isinstance(payload, dict) else None
        if not isinstance(features, list):
            return []

        stations: list[Station] = []
        for feature in features:
            station = _parse_station_feature(feature)
            if station:
                stations.append(station)

        logger.debug("Parsed %s stations for bbox %s", len(stations), bbox.to_param())
        return stations

    async def fetch_observations(
        self, station_id: str, hours: int, end: datetime
    ) -> list[Observation]:
        """Return the METAR reports for ``station_id`` in the ``hours`` before ``end``."""

        payload = await self._get_json(
            METAR_PATH,
            {"ids": station_id, "format": "json", "hours": hours, "date": _format_utc(end)},
            "METAR request",
        )
        if not isinstance(payload, list):
            return []

        observations: list[Observation] = []
        for record in payload:
            if not isinstance(record, dict):
                continue
            try:
                observations.append(Observation.model_validate(record))
            except ValidationError as exc:
                logger.debug("Skipping malformed METAR record: %s", exc)

        logger.debug("Ingested %s METARs for %s", len(observations), station_id)
        return observations


__all__ = ["AviationWeatherClient"]

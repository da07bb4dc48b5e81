"""Time-bounded cache for forecast responses."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging
import time
from typing import Callable, Optional, Protocol

from cbcweather.config import settings
from cbcweather.ingestors.open_meteo import normalize_units
from cbcweather.models.forecast import Forecast

logger = logging.getLogger("cbcweather.forecast_cache")


class ForecastSource(Protocol):
    async def get_forecast(
        self, lat: float, lon: float, *, days: int = 8, units: str = "us"
    ) -> Forecast:
        ...


@dataclass
class CachedForecast:
    forecast: Forecast
    expires_at: float


def forecast_cache_key(lat: float, lon: float, days: int, units: str) -> str:
    return f"{float(lat):.5f},{float(lon):.5f}:days={int(days)}:units={units}"


class ForecastCache:
    """Per-process forecast cache keyed by point, day count and units.

    Callers asking for the same key while a fetch is running share that fetch.
    A failed fetch leaves nothing behind, so the next call retries.
    """

    def __init__(
        self,
        source: ForecastSource,
        *,
        ttl_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.source = source
        self.ttl_seconds = (
            ttl_seconds if ttl_seconds is not None else settings.forecast_cache_ttl_seconds
        )
        self._clock = clock
        self._entries: dict[str, CachedForecast] = {}
        self._pending: dict[str, asyncio.Future] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def peek(self, key: str) -> Optional[Forecast]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires_at <= self._clock():
            del self._entries[key]
            return None
        return entry.forecast

    def prune(self) -> int:
        """Drop every expired entry and return how many were removed."""

        now = self._clock()
        expired = [key for key, entry in self._entries.items() if entry.expires_at <= now]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug("Pruned %s expired forecasts", len(expired))
        return len(expired)

    async def get(
        self, lat: float, lon: float, *, days: int | None = None, units: str = "us"
    ) -> Forecast:
        days = int(days or settings.forecast_days)
        units = normalize_units(units)
        key = forecast_cache_key(lat, lon, days, units)

        cached = self.peek(key)
        if cached is not None:
            logger.debug("Forecast cache hit for %s", key)
            return cached

        pending = self._pending.get(key)
        if pending is not None:
            return await asyncio.shield(pending)

        future: asyncio.Future = asyncio.get_running_loop().create_future()
        self._pending[key] = future
        try:
            forecast = await self.source.get_forecast(lat, lon, days=days, units=units)
        except asyncio.CancelledError:
            self._entries.pop(key, None)
            future.cancel()
            raise
        except Exception as exc:
            self._entries.pop(key, None)
            logger.warning("Forecast fetch for %s failed: %s", key, exc)
            future.set_exception(exc)
            # mark retrieved; waiters still receive it
            future.exception()
            raise
        else:
            self.prune()
            if self.ttl_seconds > 0:
                self._entries[key] = CachedForecast(
                    forecast=forecast, expires_at=self._clock() + self.ttl_seconds
                )
            future.set_result(forecast)
            return forecast
        finally:
            self._pending.pop(key, None)


__all__ = ["CachedForecast", "ForecastCache", "forecast_cache_key"]

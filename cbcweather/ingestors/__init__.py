"""Upstream data ingestors for CBC Weather."""

from .aviation_weather import AviationWeatherClient
from .errors import UpstreamResponseError, UpstreamServiceError, UpstreamTimeoutError
from .open_meteo import ForecastIngestor

__all__ = [
    "AviationWeatherClient",
    "ForecastIngestor",
    "UpstreamResponseError",
    "UpstreamServiceError",
    "UpstreamTimeoutError",
]

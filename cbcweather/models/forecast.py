"""Forecast and geocoding models for the Open-Meteo provider."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class Forecast(BaseModel):
    """Hourly and daily forecast series keyed by ISO timestamps."""

    latitude: float = Field(..., description="Latitude of the forecast point")
    longitude: float = Field(..., description="Longitude of the forecast point")
    timezone: Optional[str] = Field(default=None)
    hourly: dict[str, list[Any]] = Field(default_factory=dict)
    hourly_units: dict[str, str] = Field(default_factory=dict)
    daily: dict[str, list[Any]] = Field(default_factory=dict)
    daily_units: dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(extra="ignore")


class GeocodeResult(BaseModel):
    """Place candidate returned by the geocoding service."""

    id: str = Field(default="")
    name: str = Field(...)
    admin1: Optional[str] = Field(default=None)
    country: Optional[str] = Field(default=None)
    latitude: float = Field(...)
    longitude: float = Field(...)
    timezone: Optional[str] = Field(default=None)

    model_config = ConfigDict(extra="ignore")


class ForecastSummary(BaseModel):
    """One-line description of the forecast for a count date."""

    date_iso: str = Field(default="")
    passed: bool = Field(default=False)
    summary: str = Field(default="")


__all__ = ["Forecast", "ForecastSummary", "GeocodeResult"]

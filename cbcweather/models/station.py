"""Models for aviation weather stations near a count circle."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Station(BaseModel):
    """Weather station candidate returned by a station metadata query."""

    station_id: str = Field(..., description="ICAO-style station identifier")
    site: str = Field(default="", description="Human-readable site name")
    latitude: float = Field(..., description="Latitude in decimal degrees")
    longitude: float = Field(..., description="Longitude in decimal degrees")
    site_types: list[str] = Field(
        default_factory=list, description="Capability tags such as METAR or TAF"
    )
    distance_miles: Optional[float] = Field(
        default=None, description="Great-circle distance from the queried center"
    )

    model_config = ConfigDict(extra="ignore")

    @property
    def reports_observations(self) -> bool:
        """True when the station advertises METAR observation reports."""
        return any("metar" in str(tag).lower() for tag in self.site_types)


class StationSearchResult(BaseModel):
    """Nearest observing station plus every station inside the radius."""

    nearest: Optional[Station] = Field(default=None)
    stations: list[Station] = Field(
        default_factory=list, description="In-radius stations, nearest first"
    )
    radius_miles: float = Field(..., description="Search radius used")


__all__ = ["Station", "StationSearchResult"]

"""Christmas Bird Count circle models."""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_CIRCLE_RADIUS_MILES = 7.5


class Circle(BaseModel):
    """Count circle resolved from the static dataset."""

    circle_id: str = Field(..., description="Stable circle identifier")
    name: str = Field(..., description="Display name")
    abbrev: str = Field(default="", description="Circle abbreviation")
    latitude: float = Field(..., description="Center latitude")
    longitude: float = Field(..., description="Center longitude")
    radius_miles: float = Field(
        default=DEFAULT_CIRCLE_RADIUS_MILES, description="Buffer radius in miles"
    )
    count_date_raw: str = Field(default="", description="Count date as found in the dataset")
    count_date: Optional[str] = Field(
        default=None, description="Count date normalized to YYYY-MM-DD"
    )
    properties: dict[str, Any] = Field(
        default_factory=dict, description="Remaining dataset attributes"
    )

    model_config = ConfigDict(frozen=True)


class SearchCandidate(BaseModel):
    """A search hit: either a known circle or a typed-in coordinate."""

    source: Literal["cbc", "coordinates"] = Field(...)
    label: str = Field(...)
    latitude: float = Field(...)
    longitude: float = Field(...)
    circle: Optional[Circle] = Field(default=None)


__all__ = ["Circle", "DEFAULT_CIRCLE_RADIUS_MILES", "SearchCandidate"]

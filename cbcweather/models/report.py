"""Count-day report form and derived prefill models."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from cbcweather.domain import UNKNOWN_LABEL, WIND_DIRECTIONS, Intensity, WaterState

INTENSITY_LABELS: tuple[str, ...] = tuple(item.value for item in Intensity)
WATER_LABELS: tuple[str, ...] = tuple(item.value for item in WaterState)


def _canonical_label(value: Any, labels: tuple[str, ...]) -> Optional[str]:
    """Match ``value`` case-insensitively against ``labels``; blank stays unset."""

    if value is None or value == "":
        return value
    if not isinstance(value, str):
        raise ValueError("must be a string")
    text = value.strip()
    for label in labels:
        if label.lower() == text.lower():
            return label
    raise ValueError(f"{text!r} is not one of: {', '.join(labels)}")


class DerivedReportPatch(BaseModel):
    """Values reconstructed from station observations.

    Fields left as ``None`` carry no data and are never merged into a form.
    """

    temp_min_f: Optional[str] = Field(default=None)
    temp_max_f: Optional[str] = Field(default=None)
    wind_min_mph: Optional[str] = Field(default=None)
    wind_max_mph: Optional[str] = Field(default=None)
    snow_min_in: Optional[str] = Field(default=None)
    snow_max_in: Optional[str] = Field(default=None)
    wind_dir: Optional[str] = Field(
        default=None, description="16-point compass label or Variable"
    )
    cloud_cover_am: Optional[str] = Field(default=None)
    cloud_cover_pm: Optional[str] = Field(default=None)
    am_rain: Optional[str] = Field(default=None)
    pm_rain: Optional[str] = Field(default=None)
    am_snow: Optional[str] = Field(default=None)
    pm_snow: Optional[str] = Field(default=None)

    model_config = ConfigDict(frozen=True)

    def filled_fields(self) -> dict[str, str]:
        """Return only the fields that hold derived data."""
        return self.model_dump(exclude_none=True)


class AggregationResult(BaseModel):
    """Outcome of folding one observation batch for a count date."""

    patch: Optional[DerivedReportPatch] = Field(default=None)
    used_count: int = Field(default=0, description="Observations inside the local day")


class ReportForm(BaseModel):
    """User-editable count-day weather report."""

    weather: Optional[str] = Field(default="", description="Free-text weather note")
    temp_min_f: Optional[str] = Field(default="")
    temp_max_f: Optional[str] = Field(default="")
    wind_dir: Optional[str] = Field(default=UNKNOWN_LABEL)
    wind_min_mph: Optional[str] = Field(default="")
    wind_max_mph: Optional[str] = Field(default="")
    snow_min_in: Optional[str] = Field(default="")
    snow_max_in: Optional[str] = Field(default="")
    still_water: Optional[str] = Field(default=UNKNOWN_LABEL)
    moving_water: Optional[str] = Field(default=UNKNOWN_LABEL)
    cloud_cover_am: Optional[str] = Field(default=UNKNOWN_LABEL)
    cloud_cover_pm: Optional[str] = Field(default=UNKNOWN_LABEL)
    am_rain: Optional[str] = Field(default=UNKNOWN_LABEL)
    am_snow: Optional[str] = Field(default=UNKNOWN_LABEL)
    pm_rain: Optional[str] = Field(default=UNKNOWN_LABEL)
    pm_snow: Optional[str] = Field(default=UNKNOWN_LABEL)

    model_config = ConfigDict(extra="ignore")

    @field_validator("wind_dir", mode="before")
    @classmethod
    def _check_wind_dir(cls, value: Any) -> Optional[str]:
        return _canonical_label(value, WIND_DIRECTIONS)

    @field_validator("still_water", "moving_water", mode="before")
    @classmethod
    def _check_water(cls, value: Any) -> Optional[str]:
        return _canonical_label(value, WATER_LABELS)

    @field_validator("am_rain", "am_snow", "pm_rain", "pm_snow", mode="before")
    @classmethod
    def _check_intensity(cls, value: Any) -> Optional[str]:
        return _canonical_label(value, INTENSITY_LABELS)


class SavedReport(BaseModel):
    """Report draft as persisted for one circle and count date."""

    key: str = Field(..., description="Composite storage key")
    circle_name: str = Field(default="")
    abbrev: str = Field(default="")
    date_iso: str = Field(default="")
    saved_at: Optional[datetime] = Field(
        default=None, description="Last save time (UTC); None when never saved"
    )
    form: ReportForm = Field(default_factory=ReportForm)


class PrefillRequest(BaseModel):
    """Form state plus derived patch to reconcile."""

    form: ReportForm = Field(default_factory=ReportForm)
    patch: DerivedReportPatch = Field(default_factory=DerivedReportPatch)


__all__ = [
    "AggregationResult",
    "DerivedReportPatch",
    "PrefillRequest",
    "ReportForm",
    "SavedReport",
]

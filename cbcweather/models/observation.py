"""Raw station observation (METAR) models."""

from __future__ import annotations

from datetime import datetime, timezone
import math
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

VARIABLE_WIND = "VRB"


def _finite_or_none(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


class CloudLayer(BaseModel):
    """Single reported cloud layer."""

    cover: str = Field(default="", description="Coverage code such as FEW, BKN, OVC")
    base: Optional[float] = Field(default=None, description="Layer base in feet AGL")

    model_config = ConfigDict(extra="ignore")

    @field_validator("cover", mode="before")
    @classmethod
    def _upper_cover(cls, value: Any) -> str:
        return str(value or "").strip().upper()

    @field_validator("base", mode="before")
    @classmethod
    def _coerce_base(cls, value: Any) -> float | None:
        return _finite_or_none(value)


class Observation(BaseModel):
    """Point-in-time station report as returned by the METAR data API.

    Every field is optional; malformed values are coerced to ``None`` instead of
    failing validation so a single bad record cannot spoil a batch.
    """

    station_id: Optional[str] = Field(default=None, alias="icaoId")
    obs_time: Optional[float] = Field(
        default=None, alias="obsTime", description="Observation time, seconds since epoch (UTC)"
    )
    temp_c: Optional[float] = Field(default=None, alias="temp")
    wind_speed_kt: Optional[float] = Field(default=None, alias="wspd")
    wind_direction: Optional[Union[float, Literal["VRB"]]] = Field(
        default=None, alias="wdir", description="Degrees true, or VRB for variable wind"
    )
    snow_depth_in: Optional[float] = Field(default=None, alias="snow")
    wx_string: str = Field(default="", alias="wxString")
    clouds: list[CloudLayer] = Field(default_factory=list)
    raw_text: Optional[str] = Field(default=None, alias="rawOb")

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @field_validator("obs_time", mode="before")
    @classmethod
    def _coerce_obs_time(cls, value: Any) -> float | None:
        number = _finite_or_none(value)
        if number is not None or not isinstance(value, str):
            return number
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed.timestamp()

    @field_validator("temp_c", "wind_speed_kt", "snow_depth_in", mode="before")
    @classmethod
    def _coerce_number(cls, value: Any) -> float | None:
        return _finite_or_none(value)

    @field_validator("wind_direction", mode="before")
    @classmethod
    def _coerce_wind_direction(cls, value: Any) -> float | str | None:
        if isinstance(value, str) and value.strip().upper() == VARIABLE_WIND:
            return VARIABLE_WIND
        return _finite_or_none(value)

    @field_validator("wx_string", mode="before")
    @classmethod
    def _coerce_wx(cls, value: Any) -> str:
        return str(value or "").strip().upper()

    @field_validator("clouds", mode="before")
    @classmethod
    def _coerce_clouds(cls, value: Any) -> list:
        if not isinstance(value, list):
            return []
        return [layer for layer in value if isinstance(layer, (dict, CloudLayer))]

    @property
    def is_variable_wind(self) -> bool:
        return self.wind_direction == VARIABLE_WIND


__all__ = ["CloudLayer", "Observation", "VARIABLE_WIND"]

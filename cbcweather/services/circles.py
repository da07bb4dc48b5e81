"""Circle dataset ingestion, lookup and search."""

from __future__ import annotations

from datetime import date
import json
import logging
import math
from pathlib import Path
import re
from typing import Any, Iterable, Mapping, Optional

from cbcweather.models.circle import DEFAULT_CIRCLE_RADIUS_MILES, Circle, SearchCandidate

logger = logging.getLogger("cbcweather.circles")

NAME_KEYS = ("Name", "CircleName", "CIRCLE_NAME", "Abbrev", "ABBREV")
ABBREV_KEYS = ("Abbrev", "ABBREV")
COUNT_DATE_KEYS = (
    "Count_Date",
    "COUNT_DATE",
    "CountDate",
    "Count Date",
    "Cnt_dt",
    "date",
    "date_label",
)
RADIUS_KEYS = ("BUFF_DIST", "BuffDist", "BUFFDIST")
LATITUDE_KEYS = ("Latitude", "LATITUDE", "Lat")
LONGITUDE_KEYS = ("Longitude", "LONGITUDE", "Lon", "Lng")

PERSON_FIELDS = frozenset(
    {
        "FirstName",
        "LastName",
        "EmailAddress",
        "Email",
        "email",
        "Phone",
        "PhoneNumber",
        "contact_email",
        "contact_phone",
        "compiler",
        "Compiler",
    }
)

MIN_QUERY_CHARS = 2
ABBREV_PENALTY = 2000

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_MDY_DATE_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{2,4})$")
_LAT_LON_RE = re.compile(r"^(-?\d+(?:\.\d+)?)\s*[ ,]\s*(-?\d+(?:\.\d+)?)$")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")


def first_present(properties: Mapping[str, Any], keys: Iterable[str]) -> Any:
    """Return the first alias whose value is present and non-blank."""

    for key in keys:
        value = properties.get(key)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def _as_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def normalize_date_to_iso(raw: Any) -> Optional[str]:
    """Normalize ``YYYY-MM-DD`` or ``M/D/YY(YY)`` to ISO; anything else is None."""

    text = str(raw or "").strip()
    if not text:
        return None

    if _ISO_DATE_RE.match(text):
        year, month, day = (int(part) for part in text.split("-"))
    else:
        match = _MDY_DATE_RE.match(text)
        if not match:
            return None
        month, day, year = (int(part) for part in match.groups())
        if year < 100:
            year += 2000

    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return None


def format_iso_to_mdy(iso: Any) -> str:
    text = str(iso or "").strip()
    if not _ISO_DATE_RE.match(text):
        return ""
    year, month, day = text.split("-")
    return f"{month}/{day}/{year}"


def parse_lat_lon(text: Any) -> Optional[tuple[float, float]]:
    """Parse ``"lat, lon"`` or ``"lat lon"`` within valid coordinate ranges."""

    match = _LAT_LON_RE.match(str(text or "").strip())
    if not match:
        return None
    lat = float(match.group(1))
    lon = float(match.group(2))
    if not (-90 <= lat <= 90 and -180 <= lon <= 180):
        return None
    return lat, lon


def strip_person_fields(properties: Mapping[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in properties.items() if key not in PERSON_FIELDS}


def _feature_point(feature: Mapping[str, Any]) -> tuple[Optional[float], Optional[float]]:
    geometry = feature.get("geometry") or {}
    if not isinstance(geometry, dict) or geometry.get("type") != "Point":
        return None, None
    coords = geometry.get("coordinates")
    if not isinstance(coords, (list, tuple)) or len(coords) < 2:
        return None, None
    return _as_float(coords[1]), _as_float(coords[0])


def circle_from_feature(feature: Any) -> Optional[Circle]:
    """Resolve one GeoJSON feature into a :class:`Circle`, or None if unusable."""

    if not isinstance(feature, dict):
        return None
    raw = feature.get("properties") or {}
    if not isinstance(raw, dict):
        return None
    properties = strip_person_fields(raw)

    name = str(first_present(properties, NAME_KEYS) or "").strip()
    abbrev = str(first_present(properties, ABBREV_KEYS) or "").strip()

    lat = _as_float(first_present(properties, LATITUDE_KEYS))
    lon = _as_float(first_present(properties, LONGITUDE_KEYS))
    if lat is None or lon is None:
        geo_lat, geo_lon = _feature_point(feature)
        lat = lat if lat is not None else geo_lat
        lon = lon if lon is not None else geo_lon

    if not name or lat is None or lon is None:
        return None

    radius = _as_float(first_present(properties, RADIUS_KEYS))
    count_date_raw = str(first_present(properties, COUNT_DATE_KEYS) or "").strip()

    circle_id = properties.get("Circle_id")
    if circle_id is None or str(circle_id).strip() == "":
        circle_id = f"{abbrev}:{lat},{lon}"

    return Circle(
        circle_id=str(circle_id).strip(),
        name=name,
        abbrev=abbrev,
        latitude=lat,
        longitude=lon,
        radius_miles=radius if radius is not None else DEFAULT_CIRCLE_RADIUS_MILES,
        count_date_raw=count_date_raw,
        count_date=normalize_date_to_iso(count_date_raw),
        properties=properties,
    )


def normalize_for_search(value: Any) -> str:
    return _NON_ALNUM_RE.sub("", str(value or "").lower())


def _words(value: Any) -> list[str]:
    return [word for word in _NON_ALNUM_RE.split(str(value or "").lower()) if word]


def _score_match(haystack: str, needle: str, needle_norm: str, penalty: int) -> Optional[int]:
    hay_norm = normalize_for_search(haystack)
    if not hay_norm:
        return None
    if hay_norm.startswith(needle_norm):
        return penalty
    idx = hay_norm.find(needle_norm)
    if idx != -1:
        return penalty + 50 + idx
    for position, word in enumerate(_words(haystack)):
        if word.startswith(needle):
            return penalty + 120 + position
    return None


class CircleIndex:
    """In-memory index of count circles, built once per process."""

    def __init__(self, circles: Iterable[Circle] = ()) -> None:
        self._circles: list[Circle] = []
        self._by_id: dict[str, Circle] = {}
        for circle in circles:
            self._circles.append(circle)
            self._by_id.setdefault(circle.circle_id, circle)

    def __len__(self) -> int:
        return len(self._circles)

    def __iter__(self):
        return iter(self._circles)

    @classmethod
    def from_geojson(cls, payload: Any) -> "CircleIndex":
        features = payload.get("features") if isinstance(payload, dict) else None
        if not isinstance(features, list):
            features = []

        circles = []
        skipped = 0
        for feature in features:
            circle = circle_from_feature(feature)
            if circle is None:
                skipped += 1
                continue
            circles.append(circle)

        if skipped:
            logger.debug("Skipped %s circle features without name or coordinates", skipped)
        return cls(circles)

    @classmethod
    def load_file(cls, path: str | Path) -> "CircleIndex":
        """Load the dataset at ``path``; a missing file yields an empty index."""

        dataset = Path(path)
        if not dataset.exists():
            logger.warning("Circle dataset not found at %s; index is empty", dataset)
            return cls()

        with dataset.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
        index = cls.from_geojson(payload)
        logger.info("Loaded %s circles from %s", len(index), dataset)
        return index

    def get(self, circle_id: str) -> Optional[Circle]:
        return self._by_id.get(circle_id)

    def search(self, query: str, limit: int = 10) -> list[Circle]:
        """Rank circles by name, then abbreviation, match quality."""

        raw = str(query or "").strip()
        needle = raw.lower()
        needle_norm = normalize_for_search(raw)
        if len(needle) < MIN_QUERY_CHARS or len(needle_norm) < MIN_QUERY_CHARS:
            return []

        scored: list[tuple[float, int, Circle]] = []
        for order, circle in enumerate(self._circles):
            candidates = [
                score
                for score in (
                    _score_match(circle.name, needle, needle_norm, 0),
                    _score_match(circle.abbrev, needle, needle_norm, ABBREV_PENALTY),
                )
                if score is not None
            ]
            if not candidates:
                continue
            score = min(candidates) + min(25.0, len(circle.name) / 10)
            scored.append((score, order, circle))

        scored.sort(key=lambda item: (item[0], item[1]))
        return [circle for _, _, circle in scored[:limit]]

    def search_candidates(self, query: str, limit: int = 10) -> list[SearchCandidate]:
        """Coordinates win outright; otherwise return circle matches."""

        point = parse_lat_lon(query)
        if point is not None:
            lat, lon = point
            return [
                SearchCandidate(
                    source="coordinates",
                    label=f"{lat:.4f}, {lon:.4f}",
                    latitude=lat,
                    longitude=lon,
                )
            ]

        return [
            SearchCandidate(
                source="cbc",
                label=circle.name,
                latitude=circle.latitude,
                longitude=circle.longitude,
                circle=circle,
            )
            for circle in self.search(query, limit=limit)
        ]


__all__ = [
    "CircleIndex",
    "PERSON_FIELDS",
    "circle_from_feature",
    "first_present",
    "format_iso_to_mdy",
    "normalize_date_to_iso",
    "normalize_for_search",
    "parse_lat_lon",
    "strip_person_fields",
]

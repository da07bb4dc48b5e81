"""Circle search, detail and count-day reconstruction endpoints."""

from __future__ import annotations

from datetime import date
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from cbcweather.api.dependencies import get_aviation_client, get_circle, get_circle_index, get_today
from cbcweather.ingestors import AviationWeatherClient
from cbcweather.models import Circle, CountDayState, SearchCandidate
from cbcweather.services import CircleIndex, normalize_date_to_iso, run_count_day

router = APIRouter(prefix="/api/v1", tags=["circles"])

logger = logging.getLogger("cbcweather.api.circles")


def resolve_count_date(circle: Circle, override: Optional[str]) -> Optional[str]:
    """Use a supplied date when given, else the circle's own count date."""

    if override is not None and override.strip():
        return normalize_date_to_iso(override)
    return circle.count_date


@router.get(
    "/circles/search",
    response_model=list[SearchCandidate],
    summary="Search circles by name or abbreviation, or parse coordinates",
)
async def search_circles(
    q: str = Query(..., description="Circle name, abbreviation or 'lat, lon'"),
    limit: int = Query(default=10, ge=1, le=50),
    index: CircleIndex = Depends(get_circle_index),
) -> list[SearchCandidate]:
    results = index.search_candidates(q, limit=limit)
    logger.debug("Circle search %r returned %s candidates", q, len(results))
    return results


@router.get("/circles/{circle_id}", response_model=Circle, summary="Get circle detail")
async def get_circle_detail(circle: Circle = Depends(get_circle)) -> Circle:
    return circle


@router.get(
    "/circles/{circle_id}/countday",
    response_model=CountDayState,
    summary="Reconstruct count-day conditions from the nearest station",
)
async def get_count_day(
    date_override: Optional[str] = Query(
        default=None, alias="date", description="Count date override (YYYY-MM-DD or M/D/YYYY)"
    ),
    circle: Circle = Depends(get_circle),
    client: AviationWeatherClient = Depends(get_aviation_client),
    today: date = Depends(get_today),
) -> CountDayState:
    """Run station lookup and observation aggregation once for the circle."""

    count_date = resolve_count_date(circle, date_override)
    state = await run_count_day(
        client,
        client,
        circle.latitude,
        circle.longitude,
        count_date,
        today=lambda: today,
    )
    logger.info(
        "Count day for %s (%s): stage=%s used=%s",
        circle.circle_id,
        count_date,
        state.stage.value,
        state.used_count,
    )
    return state

"""Count-day report draft endpoints."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from cbcweather.api.circles import resolve_count_date
from cbcweather.api.dependencies import api_error, get_circle, get_report_store
from cbcweather.models import Circle, PrefillRequest, ReportForm, SavedReport
from cbcweather.services import (
    ReportStore,
    merge_prefill,
    render_report_csv,
    report_csv_filename,
)

router = APIRouter(prefix="/api/v1", tags=["reports"])

logger = logging.getLogger("cbcweather.api.reports")


def _report_date(circle: Circle, date_override: Optional[str]) -> str:
    return resolve_count_date(circle, date_override) or ""


@router.get(
    "/circles/{circle_id}/report",
    response_model=SavedReport,
    summary="Load the saved report draft for a circle and date",
)
async def get_report(
    date_override: Optional[str] = Query(default=None, alias="date", description="Count date override"),
    circle: Circle = Depends(get_circle),
    store: ReportStore = Depends(get_report_store),
) -> SavedReport:
    return store.load(circle.name, circle.abbrev, _report_date(circle, date_override))


@router.put(
    "/circles/{circle_id}/report",
    response_model=SavedReport,
    summary="Save the report draft for a circle and date",
)
async def put_report(
    form: ReportForm,
    date_override: Optional[str] = Query(default=None, alias="date", description="Count date override"),
    circle: Circle = Depends(get_circle),
    store: ReportStore = Depends(get_report_store),
) -> SavedReport:
    return store.save(circle.name, circle.abbrev, _report_date(circle, date_override), form)


@router.post(
    "/circles/{circle_id}/report/prefill",
    response_model=ReportForm,
    summary="Fill unset form fields from a derived patch",
)
async def prefill_report(
    request: PrefillRequest, circle: Circle = Depends(get_circle)
) -> ReportForm:
    """Pure merge; nothing is saved."""

    return merge_prefill(request.form, request.patch)


@router.get(
    "/circles/{circle_id}/report.csv",
    summary="Export the saved report draft as CSV",
    response_class=Response,
)
async def export_report_csv(
    date_override: Optional[str] = Query(default=None, alias="date", description="Count date override"),
    circle: Circle = Depends(get_circle),
    store: ReportStore = Depends(get_report_store),
) -> Response:
    report = store.load(circle.name, circle.abbrev, _report_date(circle, date_override))
    if report.saved_at is None:
        raise api_error(
            status.HTTP_404_NOT_FOUND,
            "report_not_saved",
            "Save the report before exporting it",
        )

    filename = report_csv_filename(report)
    logger.info("Exporting report %s as %s", report.key, filename)
    return Response(
        content=render_report_csv(report),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )

"""One-row CSV export of a saved count-day report."""

from __future__ import annotations

import csv
import io
import re

from cbcweather.models.report import ReportForm, SavedReport

FILENAME_MAX = 120
FILENAME_SUFFIX = "_weather_report.csv"

CSV_FIELDNAMES = [
    "circle_name",
    "abbrev",
    "date_iso",
    "saved_at_iso",
    *[name for name in ReportForm.model_fields if name != "weather"],
]


def _iso_z(report: SavedReport) -> str:
    if report.saved_at is None:
        return ""
    return report.saved_at.strftime("%Y-%m-%dT%H:%M:%S.") + f"{report.saved_at.microsecond // 1000:03d}Z"


def report_csv_row(report: SavedReport) -> dict[str, str]:
    row = {
        "circle_name": report.circle_name,
        "abbrev": report.abbrev,
        "date_iso": report.date_iso,
        "saved_at_iso": _iso_z(report),
    }
    form = report.form.model_dump()
    for name in CSV_FIELDNAMES[4:]:
        value = form.get(name)
        row[name] = "" if value is None else str(value)
    return row


def render_report_csv(report: SavedReport) -> str:
    """Header plus one data row; fields with quotes, commas or newlines are quoted."""

    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=CSV_FIELDNAMES, lineterminator="\n")
    writer.writeheader()
    writer.writerow(report_csv_row(report))
    return buffer.getvalue()


def report_csv_filename(report: SavedReport) -> str:
    base = f"{report.circle_name or 'cbc'}_{report.abbrev or ''}_{report.date_iso or ''}"
    base = re.sub(r"\s+", "_", base)
    base = re.sub(r"[^A-Za-z0-9_\-]+", "", base)
    base = re.sub(r"_+", "_", base).strip("_")
    base = base[:FILENAME_MAX]
    return f"{base or 'countday'}{FILENAME_SUFFIX}"


__all__ = ["CSV_FIELDNAMES", "render_report_csv", "report_csv_filename", "report_csv_row"]

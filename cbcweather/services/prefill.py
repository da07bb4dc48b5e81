"""Merge derived count-day values into a user-owned report form."""

from __future__ import annotations

from typing import Any

from cbcweather.domain import UNKNOWN_LABEL, normalize_cloud_cover
from cbcweather.models.report import DerivedReportPatch, ReportForm

CLOUD_FIELDS = ("cloud_cover_am", "cloud_cover_pm")


def is_fillable(value: Any) -> bool:
    """Empty, missing or ``Unknown`` fields may receive derived values."""
    return value is None or value == "" or value == UNKNOWN_LABEL


def normalize_form(form: ReportForm) -> ReportForm:
    """Re-map both cloud-cover fields onto the current category set."""

    updates = {name: normalize_cloud_cover(getattr(form, name)).value for name in CLOUD_FIELDS}
    return form.model_copy(update=updates)


def merge_prefill(current: ReportForm, patch: DerivedReportPatch | None) -> ReportForm:
    """Fill only the unset fields of ``current`` from ``patch``.

    Values the user (or an earlier save) already chose always win. Cloud-cover
    fields are normalized on every call, whether or not the patch touched them.
    Applying the same patch twice gives the same form as applying it once.
    """

    updates: dict[str, str] = {}
    if patch is not None:
        for name, value in patch.filled_fields().items():
            if name not in ReportForm.model_fields:
                continue
            if is_fillable(getattr(current, name)):
                updates[name] = value

    return normalize_form(current.model_copy(update=updates))


__all__ = ["CLOUD_FIELDS", "is_fillable", "merge_prefill", "normalize_form"]

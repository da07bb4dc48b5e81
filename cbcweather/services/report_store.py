"""Persistence for count-day report drafts."""

from __future__ import annotations

from datetime import datetime, timezone
import logging
import re
from typing import Any, Callable, Optional

from pydantic import ValidationError
from sqlalchemy.orm import Session

from cbcweather import db_models
from cbcweather.models.report import ReportForm, SavedReport
from cbcweather.services.prefill import normalize_form

logger = logging.getLogger("cbcweather.report_store")

KEY_PREFIX = "countday"
KEY_PART_MAX = 200

_WHITESPACE_RE = re.compile(r"\s+")


def safe_key_part(value: Any) -> str:
    """Collapse whitespace, trim and cap one key component."""

    text = _WHITESPACE_RE.sub(" ", str(value or "")).strip()
    return text[:KEY_PART_MAX]


def make_report_key(circle_name: Any, abbrev: Any, date_iso: Any) -> str:
    parts = (safe_key_part(circle_name), safe_key_part(abbrev), safe_key_part(date_iso))
    return "|".join((KEY_PREFIX, *parts))


def _form_from_json(data: Any) -> ReportForm:
    if not isinstance(data, dict):
        return ReportForm()
    try:
        return ReportForm.model_validate(data)
    except ValidationError as exc:
        logger.warning("Stored report form is malformed, using defaults: %s", exc)
        return ReportForm()


class ReportStore:
    """Load and save report drafts keyed by circle name, abbreviation and date."""

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def load(self, circle_name: str, abbrev: str, date_iso: str) -> SavedReport:
        """Return the saved draft, or an unsaved default form when none exists.

        Stored cloud-cover values are re-normalized on the way out.
        """

        key = make_report_key(circle_name, abbrev, date_iso)
        with self._session_factory() as session:
            record = session.get(db_models.ReportRecord, key)
            if record is None:
                return SavedReport(
                    key=key,
                    circle_name=str(circle_name or ""),
                    abbrev=str(abbrev or ""),
                    date_iso=str(date_iso or ""),
                )
            return SavedReport(
                key=key,
                circle_name=record.circle_name,
                abbrev=record.abbrev,
                date_iso=record.date_iso,
                saved_at=_as_utc(record.saved_at),
                form=normalize_form(_form_from_json(record.form)),
            )

    def save(
        self,
        circle_name: str,
        abbrev: str,
        date_iso: str,
        form: ReportForm,
        *,
        now: Optional[datetime] = None,
    ) -> SavedReport:
        """Insert or overwrite the draft and stamp it with the save time."""

        key = make_report_key(circle_name, abbrev, date_iso)
        saved_at = now or datetime.now(timezone.utc)
        form_data = form.model_dump()

        with self._session_factory() as session:
            record = session.get(db_models.ReportRecord, key)
            if record is None:
                record = db_models.ReportRecord(key=key)
                session.add(record)
            record.circle_name = str(circle_name or "")
            record.abbrev = str(abbrev or "")
            record.date_iso = str(date_iso or "")
            record.saved_at = saved_at.astimezone(timezone.utc).replace(tzinfo=None)
            record.form = form_data
            session.commit()

        logger.info("Saved count-day report %s", key)
        return SavedReport(
            key=key,
            circle_name=str(circle_name or ""),
            abbrev=str(abbrev or ""),
            date_iso=str(date_iso or ""),
            saved_at=_as_utc(saved_at),
            form=form,
        )


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


__all__ = ["ReportStore", "make_report_key", "safe_key_part"]

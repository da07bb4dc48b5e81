"""SQLAlchemy ORM models for the CBC Weather backend."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from cbcweather.db import Base


class ReportRecord(Base):
    """Saved count-day weather report draft, one per circle and date."""

    __tablename__ = "countday_reports"
    __table_args__ = (Index("ix_countday_reports_date_iso", "date_iso"),)

    key: Mapped[str] = mapped_column(String(640), primary_key=True)
    circle_name: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    abbrev: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    date_iso: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    saved_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    form: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

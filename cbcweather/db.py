"""Database configuration and helpers for the CBC Weather backend."""

from __future__ import annotations

import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from cbcweather.config import settings

DATABASE_URL = settings.db_url

engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {},
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

logger = logging.getLogger("cbcweather.db")


def init_db(bind=None) -> None:
    """Create database tables if they do not exist."""

    import cbcweather.db_models  # noqa: F401 - models are imported for side effects

    Base.metadata.create_all(bind=bind or engine)
    logger.debug("Report tables ensured on %s", (bind or engine).url)

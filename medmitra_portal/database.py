# medmitra_portal/database.py
"""
Local store for portal sessions and encounter drafts. Nothing clinical is
kept here; the backend owns patient data.
"""
from __future__ import annotations
from datetime import datetime, timezone
from typing import Any, Dict

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, declarative_base
from .config import settings

if not settings.DATABASE_URL:
    raise RuntimeError("DATABASE_URL is not configured (check your .env).")


def utcnow() -> datetime:
    """Naive UTC timestamp, the form the DateTime columns store."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _engine_options(url: str) -> Dict[str, Any]:
    if url.startswith("sqlite"):
        # request threads and scheduler jobs share the file
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "pool_timeout": settings.DB_POOL_TIMEOUT,
        "pool_recycle": settings.DB_POOL_RECYCLE,
    }


engine = create_engine(settings.DATABASE_URL, pool_pre_ping=True, future=True,
                       **_engine_options(settings.DATABASE_URL))

if engine.dialect.name == "sqlite":
    @event.listens_for(engine, "connect")
    def _sqlite_foreign_keys(dbapi_connection, _record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

SessionLocal = sessionmaker(bind=engine, autoflush=False, future=True)

Base = declarative_base()


def init_db():
    from . import models  # noqa: F401  (registers the tables)
    Base.metadata.create_all(bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

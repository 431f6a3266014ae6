# backend/rentdesk/db.py
from __future__ import annotations

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from .config import settings


class Base(DeclarativeBase):
    pass


def _engine_kwargs(url: str) -> dict:
    kw: dict = {"pool_pre_ping": True, "future": True}
    if url.startswith("sqlite"):
        # request handlers and the test client use different threads
        kw["connect_args"] = {"check_same_thread": False}
    return kw


engine = create_engine(settings.database_url, **_engine_kwargs(settings.database_url))

# ORM objects stay loaded across the workflow's per-step commits.
SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
    expire_on_commit=False,
    future=True,
)


def get_db():
    """
    Request-scoped session.

    A failed statement leaves the transaction unusable on Postgres, so any
    exception escaping the handler rolls back before the session is closed.
    """
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

"""Engine and session factory for the vacancies / activity-log tables.

The URL comes from ``GIGBOARD_DATABASE_URL`` (or ``DATABASE_URL``) and falls
back to ``sqlite:///./gigboard.db``. ``GIGBOARD_DB_ECHO=1`` echoes SQL;
``GIGBOARD_DB_POOL_SIZE`` / ``GIGBOARD_DB_MAX_OVERFLOW`` size the pool on
server databases.
"""
from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

import gigboard.config  # noqa: F401  loads .env before the URL is read

LOGGER = logging.getLogger(__name__)

DEFAULT_URL = "sqlite:///./gigboard.db"


def database_url() -> str:
    url = os.getenv("GIGBOARD_DATABASE_URL") or os.getenv("DATABASE_URL") or DEFAULT_URL
    # hosted Postgres often hands out postgres:// URLs; route them to psycopg 3
    if url.startswith("postgres://"):
        url = "postgresql+psycopg://" + url[len("postgres://"):]
    elif url.startswith("postgresql://"):
        url = "postgresql+psycopg://" + url[len("postgresql://"):]
    return url


def make_engine(url: str | None = None) -> Engine:
    url = url or database_url()
    kwargs = {
        "echo": os.getenv("GIGBOARD_DB_ECHO", "0") == "1",
        "pool_pre_ping": True,
    }
    if not url.startswith("sqlite"):
        kwargs["pool_size"] = int(os.getenv("GIGBOARD_DB_POOL_SIZE", "5"))
        kwargs["max_overflow"] = int(os.getenv("GIGBOARD_DB_MAX_OVERFLOW", "10"))
    return create_engine(url, **kwargs)


ENGINE: Engine = make_engine()
SessionLocal = sessionmaker(bind=ENGINE, autoflush=False, expire_on_commit=False)


@contextmanager
def get_session() -> Iterator[Session]:
    """Yield a session and always close it. Callers commit themselves."""
    session: Session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def current_engine_url() -> str:
    return ENGINE.url.render_as_string(hide_password=True)


def test_connection() -> bool:
    try:
        with ENGINE.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        LOGGER.warning("database unreachable url=%s error=%s", current_engine_url(), e)
        return False
    return True

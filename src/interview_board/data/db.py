"""Engine and session handling for the interview board database.

One engine and one session factory are built lazily per process from
``DB_URL`` (defaulting to ``database.db`` at the project root). SQLite
connections are opened with foreign keys enforced and may be shared
across the request threadpool. ``reset_engine`` drops both so the next
access re-reads ``DB_URL``; tests rely on it to point the app at a
temporary file.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from sqlalchemy import create_engine, event
from sqlalchemy.engine import URL, Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker


class Base(DeclarativeBase):
    """Declarative base shared by users, experiences and reactions."""


_engine: Engine | None = None
_SessionLocal: sessionmaker[Session] | None = None

_DEFAULT_DB_FILENAME = "database.db"


def get_database_url() -> str:
    """Return ``DB_URL`` if set, else a SQLite file at the project root."""
    configured = os.getenv("DB_URL")
    if configured:
        return configured

    db_file = Path(__file__).resolve().parents[3] / _DEFAULT_DB_FILENAME
    return URL.create("sqlite", database=str(db_file)).render_as_string(hide_password=False)


def _on_sqlite_connect(dbapi_connection, _connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _build_engine(url: str) -> Engine:
    is_sqlite = url.startswith("sqlite")
    # Sync handlers run in a threadpool, so SQLite connections cross threads
    connect_args = {"check_same_thread": False} if is_sqlite else {}
    engine = create_engine(url, future=True, connect_args=connect_args)
    if is_sqlite:
        event.listen(engine, "connect", _on_sqlite_connect)
    return engine


def _create_tables(engine: Engine) -> None:
    # Model modules must be imported so their tables exist on Base.metadata
    from interview_board.data.models import experience, reaction, user  # noqa: F401

    Base.metadata.create_all(bind=engine)


def _get_engine() -> Engine:
    global _engine
    if _engine is None:
        _engine = _build_engine(get_database_url())
        _create_tables(_engine)
    return _engine


def _get_session_factory() -> sessionmaker[Session]:
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(bind=_get_engine(), autoflush=False, expire_on_commit=False)
    return _SessionLocal


def init_db() -> None:
    """Build the engine and create any missing tables."""
    _get_engine()


def reset_engine() -> None:
    """Dispose the engine and forget the session factory."""
    global _engine, _SessionLocal
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionLocal = None


@contextmanager
def get_session() -> Iterator[Session]:
    """Yield a session; commit on success, roll back on error, always close."""
    session = _get_session_factory()()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()

"""SQLite engine and session plumbing shared by the persistence helpers."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker

from mealsync.config import get_settings
from mealsync.db.models import Base

logger = logging.getLogger(__name__)

_engine: Optional[Engine] = None
_sessions: Optional[sessionmaker[Session]] = None


def _sqlite_pragmas(dbapi_connection, _connection_record) -> None:
    # pysqlite must not emit its own deferred BEGIN; _begin_immediate does it.
    dbapi_connection.isolation_level = None
    # Meal -> recipe SET NULL and list -> item cascades rely on this.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _begin_immediate(connection) -> None:
    # Write lock from the first read; the purchase toggle and find-or-create rely on it.
    connection.exec_driver_sql("BEGIN IMMEDIATE")


def _build_engine(db_path: Path) -> Engine:
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(
        f"sqlite:///{db_path}",
        future=True,
        echo=False,
        # Request handlers run in a threadpool and toggles may arrive from any of them.
        connect_args={"check_same_thread": False},
    )
    event.listen(engine, "connect", _sqlite_pragmas)
    event.listen(engine, "begin", _begin_immediate)
    try:
        Base.metadata.create_all(engine)
    except OperationalError as exc:
        # Two processes racing to create the schema on a fresh file.
        if "already exists" not in str(exc).lower():
            raise
        logger.debug("Schema already present at %s: %s", db_path, exc)
    return engine


def get_engine(database_path: Optional[Path] = None) -> Engine:
    """Return the process-wide engine, creating tables on first use."""

    global _engine, _sessions

    if _engine is None:
        db_path = database_path or get_settings().database_path
        _engine = _build_engine(db_path)
        _sessions = sessionmaker(bind=_engine, autoflush=False, autocommit=False, future=True)
        logger.debug("Opened household database at %s", db_path)
    return _engine


def get_session() -> Session:
    if _sessions is None:
        get_engine()
    assert _sessions is not None  # for mypy
    return _sessions()


@contextmanager
def session_scope() -> Iterator[Session]:
    """Yield a session that commits on success and rolls back on any error.

    Every helper in :mod:`mealsync.db` opens exactly one scope, so a grocery
    list and its items, or a toggle's read and write, land in one transaction.
    """

    session = get_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def reset_repository_state() -> None:
    """Dispose the cached engine so the next call rereads settings (used by tests)."""

    global _engine, _sessions
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _sessions = None


__all__ = ["get_engine", "get_session", "session_scope", "reset_repository_state"]

"""
Database engine, session factory, and metadata shared across the application.
"""

from __future__ import annotations

import logging
from typing import Any, Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.orm import DeclarativeMeta, Session, declarative_base, sessionmaker

from roombook.core.config import settings

logger = logging.getLogger(__name__)

_DEFAULT_POOL_KWARGS: dict[str, Any] = {
    "pool_size": 5,
    "max_overflow": 10,
    "pool_timeout": 5,
    "pool_recycle": 300,
    "pool_pre_ping": True,
    "future": True,
}


def _engine_kwargs(url: str) -> dict[str, Any]:
    if url.startswith("sqlite"):
        # SQLite ignores pool sizing; allow the session to cross threads for asyncio.to_thread
        return {"connect_args": {"check_same_thread": False}, "future": True}
    return dict(_DEFAULT_POOL_KWARGS)


def build_engine(url: str, echo: bool = False) -> Engine:
    """Create an engine for the given URL with dialect-appropriate settings."""
    new_engine = create_engine(url, echo=echo, **_engine_kwargs(url))
    if url.startswith("sqlite"):
        event.listen(new_engine, "connect", _enable_sqlite_foreign_keys)
        enable_sqlite_write_locking(new_engine)
    return new_engine


def _enable_sqlite_foreign_keys(dbapi_connection: Any, _connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _disable_pysqlite_autobegin(dbapi_connection: Any, _connection_record: Any) -> None:
    # pysqlite defers BEGIN until the first DML; take over transaction control
    dbapi_connection.isolation_level = None


def _begin_immediate(conn: Connection) -> None:
    conn.exec_driver_sql("BEGIN IMMEDIATE")


def enable_sqlite_write_locking(sqlite_engine: Engine) -> None:
    """
    Start every SQLite transaction with BEGIN IMMEDIATE.

    The database write lock is then held from the first statement, so the
    resource lock, conflict check and insert of a booking run as one
    serialized unit. A second writer waits on the busy timeout until the
    first commits and then sees its row.
    """
    event.listen(sqlite_engine, "connect", _disable_pysqlite_autobegin)
    event.listen(sqlite_engine, "begin", _begin_immediate)


engine = build_engine(settings.database_url, echo=settings.database_echo)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base: DeclarativeMeta = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """Get database session with proper cleanup."""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def init_db(bind: Engine | None = None) -> None:
    """Create all tables (development and SQLite deployments)."""
    import roombook.models  # noqa: F401

    target = bind or engine
    Base.metadata.create_all(bind=target)
    logger.info("Database schema ensured on %s", target.url.render_as_string(hide_password=True))


__all__ = ["Base", "SessionLocal", "build_engine", "enable_sqlite_write_locking", "engine", "get_db", "init_db"]

"""
Declarative base plus engine and session factories.

Nothing here opens a connection at import time: callers build an engine
with ``create_db_engine`` and hand sessions from ``create_session_factory``
to the services that need them.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from ..core.config import Settings, settings as default_settings
from .session_utils import get_dialect_name

logger = logging.getLogger(__name__)

Base = declarative_base()


def _build_engine_kwargs(db_url: str, config: Settings) -> dict[str, Any]:
    kwargs: dict[str, Any] = {"echo": config.db_echo, "future": True}
    if db_url.startswith("sqlite"):
        # SQLite connections may be shared with test threads.
        kwargs["connect_args"] = {"check_same_thread": False, "timeout": config.db_pool_timeout}
        return kwargs

    kwargs.update(
        pool_size=config.db_pool_size,
        max_overflow=config.db_max_overflow,
        pool_timeout=config.db_pool_timeout,
        pool_pre_ping=True,
    )
    return kwargs


def _add_pool_events(engine: Engine) -> None:
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection: Any, _connection_record: Any) -> None:
        if engine.dialect.name == "sqlite":
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()
            # Transactions are begun explicitly by the "begin" listener below.
            dbapi_connection.isolation_level = None
        logger.debug("Database connection established")

    if engine.dialect.name == "sqlite":

        @event.listens_for(engine, "begin")
        def _on_begin(conn: Any) -> None:
            # SQLite has no row locks: take the database write lock up front so
            # a read-check-insert sequence cannot interleave with another writer.
            conn.exec_driver_sql("BEGIN IMMEDIATE")

    @event.listens_for(engine, "checkout")
    def _on_checkout(_dbapi_connection: Any, _connection_record: Any, _proxy: Any) -> None:
        logger.debug("Connection checked out from pool")

    @event.listens_for(engine, "checkin")
    def _on_checkin(_dbapi_connection: Any, _connection_record: Any) -> None:
        logger.debug("Connection returned to pool")


def create_db_engine(db_url: Optional[str] = None, config: Optional[Settings] = None) -> Engine:
    """Create an engine for ``db_url`` (defaults to the configured database)."""
    cfg = config or default_settings
    url = db_url or cfg.get_database_url()
    engine = create_engine(url, **_build_engine_kwargs(url, cfg))
    _add_pool_events(engine)
    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    """Create every mapped table that does not exist yet."""
    from .. import models  # noqa: F401  (registers mappers on Base)

    Base.metadata.create_all(bind=engine)


__all__ = [
    "Base",
    "create_db_engine",
    "create_session_factory",
    "get_dialect_name",
    "init_db",
]

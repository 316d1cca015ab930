"""Database engine factory for the bookings store."""

from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.pool import QueuePool, StaticPool

from ..core.config import Settings, settings

logger = logging.getLogger(__name__)


def _is_memory_sqlite(db_url: str) -> bool:
    url = make_url(db_url)
    return url.database in (None, "", ":memory:")


def _install_sqlite_transaction_hooks(engine: Engine) -> None:
    """
    Make every SQLite transaction take the write lock up front.

    pysqlite's own deferred BEGIN lets two writers both hold SHARED locks and
    then fail with "database is locked" when upgrading. BEGIN IMMEDIATE makes
    the second writer wait on the busy timeout instead, so the partial unique
    index decides the race for the same slot.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection: Any, _connection_record: Any) -> None:
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn: Any) -> None:
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def _add_pool_events(engine: Engine, pool_name: str) -> None:
    @event.listens_for(engine, "connect")
    def _on_connect(_dbapi_connection: Any, _connection_record: Any) -> None:
        logger.debug("[%s] Database connection established", pool_name)

    @event.listens_for(engine, "checkout")
    def _on_checkout(
        _dbapi_connection: Any, _connection_record: Any, _connection_proxy: Any
    ) -> None:
        logger.debug("[%s] Connection checked out from pool", pool_name)

    @event.listens_for(engine, "invalidate")
    def _on_invalidate(_dbapi_connection: Any, _connection_record: Any, exception: Any) -> None:
        logger.warning(
            "[%s] Connection invalidated",
            pool_name,
            extra={
                "event": "db_connection_invalidated",
                "exception": str(exception) if exception else "unknown",
            },
        )


def _create_sqlite_engine(db_url: str, config: Settings) -> Engine:
    connect_args = {
        "check_same_thread": False,
        "timeout": config.sqlite_busy_timeout_seconds,
    }
    if _is_memory_sqlite(db_url):
        engine = create_engine(
            db_url,
            poolclass=StaticPool,
            connect_args=connect_args,
            echo=config.sql_echo,
            future=True,
        )
    else:
        engine = create_engine(
            db_url,
            connect_args=connect_args,
            echo=config.sql_echo,
            future=True,
        )
    _install_sqlite_transaction_hooks(engine)
    return engine


def _create_server_engine(db_url: str, config: Settings) -> Engine:
    return create_engine(
        db_url,
        poolclass=QueuePool,
        pool_size=config.db_pool_size,
        max_overflow=config.db_max_overflow,
        pool_timeout=config.db_pool_timeout,
        pool_pre_ping=True,
        pool_use_lifo=True,
        echo=config.sql_echo,
        future=True,
        connect_args={"options": f"-c statement_timeout={config.db_statement_timeout_ms}"},
    )


def build_engine(
    db_url: Optional[str] = None,
    *,
    config: Optional[Settings] = None,
    pool_name: str = "API",
) -> Engine:
    """Create an engine for ``db_url`` (defaults to the configured URL)."""
    cfg = config or settings
    url = db_url or cfg.get_database_url()
    backend = make_url(url).get_backend_name()

    if backend == "sqlite":
        engine = _create_sqlite_engine(url, cfg)
    else:
        engine = _create_server_engine(url, cfg)

    _add_pool_events(engine, pool_name)
    logger.info("[%s] Engine created for %s backend", pool_name, backend)
    return engine


__all__ = ["build_engine"]

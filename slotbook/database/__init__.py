"""
Database engine, session factory, and metadata shared across the engine.
"""

from __future__ import annotations

import logging
import random
import time
from typing import Callable, Generator, Optional, TypeVar

from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from ..core.exceptions import RepositoryException
from .engines import build_engine

logger = logging.getLogger(__name__)

engine: Engine = build_engine()

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)

Base = declarative_base()


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


T = TypeVar("T")
# Only transient disconnects are retried; constraint violations never are.
_RETRYABLE_ERROR_SNIPPETS = (
    "server closed the connection",
    "ssl connection has been closed unexpectedly",
    "connection reset by peer",
)


def _operational_cause(exc: BaseException) -> Optional[OperationalError]:
    """The OperationalError behind ``exc``, looking through repository wrapping."""
    if isinstance(exc, OperationalError):
        return exc
    if isinstance(exc, RepositoryException) and isinstance(exc.__cause__, OperationalError):
        return exc.__cause__
    return None


def _is_retryable_db_error(exc: BaseException) -> bool:
    operational = _operational_cause(exc)
    if operational is None:
        return False
    message = str(operational).lower()
    return any(snippet in message for snippet in _RETRYABLE_ERROR_SNIPPETS)


def _retry_delay(attempt: int) -> float:
    base = 0.1 * (2 ** (attempt - 1))
    return base + random.uniform(0, 0.05 * attempt)


def with_db_retry(
    op_name: str,
    func: Callable[[], T],
    *,
    max_attempts: int = 3,
    session: Optional[Session] = None,
) -> T:
    """
    Execute a read-only DB operation with retries for transient disconnects.

    Repositories wrap driver errors in RepositoryException; the wrapped
    OperationalError decides whether the attempt is retried. When ``session``
    is given it is rolled back before each retry so the next attempt starts
    on a clean transaction.
    """

    attempt = 1
    while True:
        try:
            return func()
        except (OperationalError, RepositoryException) as exc:
            if attempt >= max_attempts or not _is_retryable_db_error(exc):
                raise

            delay = _retry_delay(attempt)
            logger.warning(
                "Transient DB failure detected, retrying",
                extra={
                    "event": "db_retry",
                    "op": op_name,
                    "attempt": attempt,
                    "delay": delay,
                    "error": str(exc),
                },
            )
            if session is not None:
                session.rollback()
            time.sleep(delay)
            attempt += 1


__all__ = [
    "Base",
    "SessionLocal",
    "engine",
    "get_db",
    "with_db_retry",
]

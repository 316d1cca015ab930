# tests/conftest.py
"""
Shared pytest fixtures.

Every test gets a fresh in-memory SQLite database with the full schema.
Tests that need real concurrent writers use ``file_engine`` instead, which
points at a SQLite file under the test's tmp_path.
"""

import os

# Configure settings BEFORE any slotbook imports
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ.setdefault("LOG_LEVEL", "DEBUG")

from datetime import date
from typing import Any, Callable, Dict, Iterator, Optional

import pytest
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from slotbook.database import Base
from slotbook.database.engines import build_engine
from slotbook.models import Provider, Service
from slotbook.services.base import BaseService
from slotbook.services.catalog_service import CatalogService

# 2026-10-19 is a Monday; scenario dates are pinned relative to it
MONDAY = date(2026, 10, 19)
TUESDAY = date(2026, 10, 20)


def _session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


@pytest.fixture
def engine() -> Iterator[Engine]:
    eng = build_engine("sqlite+pysqlite:///:memory:", pool_name="TEST")
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def db(engine: Engine) -> Iterator[Session]:
    session = _session_factory(engine)()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def file_engine(tmp_path) -> Iterator[Engine]:
    """Engine over a SQLite file so several threads can hold their own connections."""
    eng = build_engine(f"sqlite+pysqlite:///{tmp_path / 'slotbook.db'}", pool_name="TEST_FILE")
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def file_session_factory(file_engine: Engine) -> sessionmaker:
    return _session_factory(file_engine)


@pytest.fixture
def provider_factory(db: Session) -> Callable[..., Provider]:
    def _make(
        working_hours: Optional[Dict[str, Any]] = None,
        name: str = "Dana Whitfield",
    ) -> Provider:
        hours = {"monday": "09:00-17:00"} if working_hours is None else working_hours
        return CatalogService(db).create_provider({"name": name, "working_hours": hours})

    return _make


@pytest.fixture
def service_factory(db: Session) -> Callable[..., Service]:
    def _make(duration_minutes: int = 60, name: str = "Consultation") -> Service:
        return CatalogService(db).create_service(
            {"name": name, "duration_minutes": duration_minutes}
        )

    return _make


@pytest.fixture
def monday() -> date:
    return MONDAY


@pytest.fixture
def tuesday() -> date:
    return TUESDAY


@pytest.fixture
def monday_provider(provider_factory) -> Provider:
    return provider_factory({"monday": "09:00-17:00"})


@pytest.fixture
def hour_service(service_factory) -> Service:
    return service_factory(60)


@pytest.fixture(autouse=True)
def _reset_service_metrics() -> Iterator[None]:
    BaseService._class_metrics.clear()
    yield
    BaseService._class_metrics.clear()

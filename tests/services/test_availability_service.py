"""Read-path retries in AvailabilityService."""

from datetime import date

import pytest
from sqlalchemy.exc import OperationalError

import slotbook.database as database
from slotbook.core.exceptions import RepositoryException
from slotbook.services.availability_service import AvailabilityService

MONDAY = date(2026, 10, 19)


def _flaky_execute(db, monkeypatch, message, failures=1):
    """Make the first ``failures`` statements on ``db`` fail with ``message``."""
    real_execute = db.execute
    state = {"calls": 0}

    def execute(*args, **kwargs):
        state["calls"] += 1
        if state["calls"] <= failures:
            raise OperationalError("SELECT", {}, Exception(message))
        return real_execute(*args, **kwargs)

    monkeypatch.setattr(db, "execute", execute)
    return state


@pytest.fixture
def availability(db):
    return AvailabilityService(db)


@pytest.fixture(autouse=True)
def _no_backoff(monkeypatch):
    monkeypatch.setattr(database.time, "sleep", lambda _: None)


@pytest.fixture
def rollbacks(db, monkeypatch):
    real_rollback = db.rollback
    calls = []

    def rollback():
        calls.append(True)
        real_rollback()

    monkeypatch.setattr(db, "rollback", rollback)
    return calls


class TestReadRetries:
    def test_slot_listing_recovers_from_dropped_connection(
        self, db, availability, monday_provider, hour_service, monkeypatch, rollbacks
    ):
        repository = availability.slot_generator.booking_repository
        original = repository.get_confirmed_starts
        starts_calls = []

        def counted(*args, **kwargs):
            starts_calls.append(args)
            return original(*args, **kwargs)

        monkeypatch.setattr(repository, "get_confirmed_starts", counted)
        _flaky_execute(db, monkeypatch, "server closed the connection unexpectedly")

        slots = availability.generate_available_slots(
            monday_provider.id, hour_service.id, 1, today=MONDAY
        )

        assert slots[0] == "2026-10-19 09:00:00"
        assert slots[-1] == "2026-10-19 16:00:00"
        assert len(starts_calls) == 2
        assert len(rollbacks) == 1

    def test_booking_count_recovers_from_dropped_connection(
        self, db, availability, monday_provider, hour_service, monkeypatch, rollbacks
    ):
        availability.create_booking("u1", monday_provider.id, hour_service.id, "2026-10-19 10:00")
        _flaky_execute(db, monkeypatch, "connection reset by peer")

        assert availability.count_bookings("u1") == 1
        assert len(rollbacks) == 1

    def test_non_transient_failures_surface_immediately(
        self, db, availability, monday_provider, hour_service, monkeypatch, rollbacks
    ):
        state = _flaky_execute(db, monkeypatch, "database is locked", failures=5)

        with pytest.raises(RepositoryException) as exc_info:
            availability.generate_available_slots(
                monday_provider.id, hour_service.id, 1, today=MONDAY
            )

        assert isinstance(exc_info.value.__cause__, OperationalError)
        assert state["calls"] == 1
        assert rollbacks == []

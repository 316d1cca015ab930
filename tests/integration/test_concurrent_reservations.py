"""
Concurrent create_booking calls for one provider/start key.

Each worker thread uses its own session and connection against a SQLite
file, so the partial unique index is the only thing deciding the race.
"""

from concurrent.futures import ThreadPoolExecutor
import threading

import pytest

from slotbook.core.exceptions import SlotAlreadyBookedException
from slotbook.models import Booking
from slotbook.repositories.booking_repository import BookingRepository
from slotbook.services.availability_service import AvailabilityService
from slotbook.services.catalog_service import CatalogService

WORKERS = 8
START = "2026-10-19 10:00:00"


@pytest.fixture
def catalog_ids(file_session_factory):
    session = file_session_factory()
    try:
        catalog = CatalogService(session)
        provider = catalog.create_provider(
            {"name": "Dana Whitfield", "working_hours": {"monday": "09:00-17:00"}}
        )
        service = catalog.create_service({"name": "Consultation", "duration_minutes": 60})
        return provider.id, service.id
    finally:
        session.close()


def _race(file_session_factory, provider_id, service_id, start=START):
    barrier = threading.Barrier(WORKERS)

    def attempt(index):
        session = file_session_factory()
        try:
            barrier.wait(timeout=10)
            try:
                booking = AvailabilityService(session).create_booking(
                    f"user-{index}", provider_id, service_id, start
                )
                return booking.id
            except SlotAlreadyBookedException as exc:
                return exc
        finally:
            session.close()

    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        return list(pool.map(attempt, range(WORKERS)))


@pytest.mark.integration
class TestConcurrentReservations:
    def test_exactly_one_winner(self, file_session_factory, catalog_ids):
        results = _race(file_session_factory, *catalog_ids)

        winners = [r for r in results if isinstance(r, str)]
        losers = [r for r in results if isinstance(r, SlotAlreadyBookedException)]
        assert len(winners) == 1
        assert len(losers) == WORKERS - 1

        session = file_session_factory()
        try:
            rows = session.query(Booking).all()
            assert [row.id for row in rows] == winners
        finally:
            session.close()

    def test_unique_index_decides_when_every_precheck_passes(
        self, file_session_factory, catalog_ids, monkeypatch
    ):
        # Every worker's availability read is stale
        monkeypatch.setattr(BookingRepository, "is_available", lambda self, *args: True)

        results = _race(file_session_factory, *catalog_ids)

        assert sum(isinstance(r, str) for r in results) == 1
        losers = [r for r in results if isinstance(r, SlotAlreadyBookedException)]
        assert len(losers) == WORKERS - 1
        assert all(exc.code == "SLOT_ALREADY_BOOKED" for exc in losers)

    def test_different_keys_do_not_conflict(self, file_session_factory, catalog_ids):
        provider_id, service_id = catalog_ids

        def book(hour):
            session = file_session_factory()
            try:
                return AvailabilityService(session).create_booking(
                    f"user-{hour}", provider_id, service_id, f"2026-10-19 {hour:02d}:00:00"
                ).id
            finally:
                session.close()

        with ThreadPoolExecutor(max_workers=WORKERS) as pool:
            ids = list(pool.map(book, range(9, 17)))

        assert len(set(ids)) == 8

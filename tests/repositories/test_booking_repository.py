from datetime import datetime, timedelta
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from slotbook.core.exceptions import (
    BookingStateException,
    NotFoundException,
    RepositoryException,
    SlotAlreadyBookedException,
)
from slotbook.models import Booking, BookingStatus
from slotbook.repositories.booking_repository import (
    BookingRepository,
    is_confirmed_slot_violation,
)

START = datetime(2026, 10, 19, 10, 0)


@pytest.fixture
def repo(db):
    return BookingRepository(db)


@pytest.fixture
def reserve(repo, monday_provider, hour_service):
    def _reserve(start=START, user_id="user-1"):
        return repo.reserve(user_id, monday_provider.id, hour_service.id, start)

    return _reserve


class TestReserve:
    def test_reserve_creates_confirmed_booking(self, repo, reserve, monday_provider):
        booking = reserve()
        assert booking.id and len(booking.id) == 26
        assert booking.status == BookingStatus.CONFIRMED.value
        assert booking.start_datetime == START
        assert repo.is_available(monday_provider.id, START) is False
        assert repo.is_available(monday_provider.id, START + timedelta(minutes=30)) is True

    def test_microseconds_are_dropped(self, repo, reserve, monday_provider):
        booking = reserve(START.replace(microsecond=123456))
        assert booking.start_datetime == START
        assert repo.is_available(monday_provider.id, START.replace(microsecond=999)) is False

    def test_second_confirmed_booking_for_same_key_conflicts(self, db, repo, reserve):
        first = reserve()
        with pytest.raises(SlotAlreadyBookedException) as exc_info:
            reserve(user_id="user-2")
        assert exc_info.value.message == "Slot already booked"
        assert isinstance(exc_info.value.__cause__, IntegrityError)

        # The savepoint keeps the outer transaction alive
        db.commit()
        assert db.query(Booking).count() == 1
        assert repo.get_active_by_id(first.id) is not None

    def test_cancelled_rows_do_not_block_the_slot(self, db, repo, reserve):
        first = reserve()
        repo.release(first.id)
        second = reserve(user_id="user-2")
        db.commit()
        statuses = sorted(b.status for b in db.query(Booking).all())
        assert statuses == ["cancelled", "confirmed"]
        assert second.is_confirmed

    def test_other_integrity_errors_are_not_masked(self, repo, hour_service):
        with pytest.raises(RepositoryException):
            repo.reserve("user-1", "01JNOSUCHPROVIDER000000000", hour_service.id, START)


class TestReleaseAndPurge:
    def test_release_keeps_row_and_frees_slot(self, repo, reserve, monday_provider):
        booking = reserve()
        released = repo.release(booking.id, cancelled_by_id="admin-7")
        assert released.status == "cancelled"
        assert released.cancelled_by_id == "admin-7"
        assert released.cancelled_at is not None
        assert repo.is_available(monday_provider.id, START) is True
        assert repo.get_active_by_id(booking.id) is not None

    def test_release_defaults_actor_to_owner(self, repo, reserve):
        booking = reserve(user_id="owner-1")
        assert repo.release(booking.id).cancelled_by_id == "owner-1"

    def test_release_unknown(self, repo):
        with pytest.raises(NotFoundException):
            repo.release("01JUNKNOWN0000000000000000")

    def test_purge_requires_cancelled(self, repo, reserve):
        booking = reserve()
        with pytest.raises(BookingStateException) as exc_info:
            repo.purge(booking.id)
        assert exc_info.value.message == "Only cancelled bookings can be deleted"

    def test_purge_removes_row(self, db, repo, reserve):
        booking = reserve()
        repo.release(booking.id)
        repo.purge(booking.id)
        db.commit()
        assert repo.get_by_id(booking.id) is None
        with pytest.raises(NotFoundException):
            repo.purge(booking.id)


class TestQueries:
    def test_soft_deleted_rows_are_invisible(self, db, repo, reserve, monday_provider):
        booking = reserve()
        booking.deleted_at = datetime(2026, 10, 1, 12, 0)
        db.flush()
        assert repo.get_active_by_id(booking.id) is None
        assert repo.is_available(monday_provider.id, START) is True
        assert repo.count_user_bookings("user-1") == 0
        assert repo.get_all_bookings() == []

    def test_confirmed_starts_in_range(self, repo, reserve, monday_provider):
        reserve(START)
        reserve(START + timedelta(hours=2))
        cancelled = reserve(START + timedelta(hours=4))
        repo.release(cancelled.id)
        reserve(START + timedelta(days=1))

        starts = repo.get_confirmed_starts(
            monday_provider.id, START.replace(hour=0), START.replace(hour=0) + timedelta(days=1)
        )
        assert starts == {START, START + timedelta(hours=2)}

        bookings = repo.get_provider_bookings_between(
            monday_provider.id, START.replace(hour=0), START.replace(hour=0) + timedelta(days=1)
        )
        assert [b.start_datetime for b in bookings] == [START, START + timedelta(hours=2)]

    def test_user_listing_is_ascending_and_paged(self, repo, reserve):
        for hours in (3, 1, 2):
            reserve(START + timedelta(hours=hours), user_id="user-1")
        reserve(START, user_id="user-2")

        page_one = repo.get_user_bookings("user-1", page=1, limit=2)
        page_two = repo.get_user_bookings("user-1", page=2, limit=2)
        assert [b.start_datetime.hour for b in page_one] == [11, 12]
        assert [b.start_datetime.hour for b in page_two] == [13]
        assert repo.count_user_bookings("user-1") == 3

    def test_admin_listing_is_descending(self, repo, reserve):
        for hours in (0, 2, 1):
            reserve(START + timedelta(hours=hours), user_id=f"user-{hours}")
        bookings = repo.get_all_bookings(page=1, limit=50)
        assert [b.start_datetime.hour for b in bookings] == [12, 11, 10]
        assert repo.count_all_bookings() == 3

    def test_storage_failures_become_repository_exceptions(self):
        session = MagicMock()
        session.query.side_effect = OperationalError("SELECT", {}, Exception("disk I/O error"))
        with pytest.raises(RepositoryException):
            BookingRepository(session).get_active_by_id("01JABC")


class TestConstraintDetection:
    def _error(self, orig):
        return IntegrityError("INSERT INTO bookings", {}, orig)

    def test_postgres_constraint_name(self):
        orig = MagicMock()
        orig.diag.constraint_name = "uq_bookings_provider_start_confirmed"
        assert is_confirmed_slot_violation(self._error(orig))

        orig.diag.constraint_name = "bookings_provider_id_fkey"
        assert not is_confirmed_slot_violation(self._error(orig))

    def test_sqlite_message(self):
        orig = Exception(
            "UNIQUE constraint failed: bookings.provider_id, bookings.start_datetime"
        )
        assert is_confirmed_slot_violation(self._error(orig))
        assert not is_confirmed_slot_violation(
            self._error(Exception("FOREIGN KEY constraint failed"))
        )

# slotbook/repositories/booking_repository.py
"""
Booking Repository (the booking ledger)

Owns every read and write of the bookings table:
- Exact-key availability checks for a provider start time
- Atomic reservation guarded by the confirmed-slot partial unique index
- Release (cancel) and purge (hard delete)
- Per-user and admin listings, excluding soft-deleted rows

``reserve`` is the only place that decides a race for a slot. Two callers
may both see ``is_available`` return True; the database lets exactly one
INSERT through and the other gets SlotAlreadyBookedException.
"""

from datetime import datetime
import logging
from typing import List, Optional, Set

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Query, Session

from ..core.exceptions import (
    BookingStateException,
    NotFoundException,
    RepositoryException,
    SlotAlreadyBookedException,
)
from ..core.timezone_utils import local_now, truncate_to_second
from ..models.booking import CONFIRMED_SLOT_INDEX, Booking, BookingStatus
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)

# SQLite reports unique index violations by column list, not index name
_SQLITE_SLOT_VIOLATION = "bookings.provider_id, bookings.start_datetime"


def is_confirmed_slot_violation(integrity_error: IntegrityError) -> bool:
    """True when an IntegrityError was raised by the confirmed-slot unique index."""
    constraint_name = ""
    orig = getattr(integrity_error, "orig", None)
    diag = getattr(orig, "diag", None)

    if diag is not None:
        constraint_name = getattr(diag, "constraint_name", "") or ""
    if constraint_name:
        return constraint_name == CONFIRMED_SLOT_INDEX

    text = str(orig if orig is not None else integrity_error)
    return CONFIRMED_SLOT_INDEX in text or _SQLITE_SLOT_VIOLATION in text


class BookingRepository(BaseRepository[Booking]):
    """Data access for bookings, including the race-safe reservation."""

    def __init__(self, db: Session):
        super().__init__(db, Booking)
        self.logger = logging.getLogger(__name__)

    def _active(self) -> Query:
        return self.db.query(Booking).filter(Booking.deleted_at.is_(None))

    def _confirmed(self) -> Query:
        return self._active().filter(Booking.status == BookingStatus.CONFIRMED.value)

    # Lookups

    def get_active_by_id(self, booking_id: str) -> Optional[Booking]:
        """Booking by id unless it has been soft-deleted."""
        try:
            return self._active().filter(Booking.id == booking_id).first()
        except SQLAlchemyError as e:
            self.logger.error("Error getting booking %s: %s", booking_id, e)
            raise RepositoryException(f"Failed to retrieve booking: {e}") from e

    def is_available(self, provider_id: str, start_datetime: datetime) -> bool:
        """No confirmed, non-deleted booking holds this exact provider/start key."""
        start = truncate_to_second(start_datetime)
        query = self._confirmed().filter(
            Booking.provider_id == provider_id,
            Booking.start_datetime == start,
        )
        try:
            return not self.db.query(query.exists()).scalar()
        except SQLAlchemyError as e:
            self.logger.error("Error checking availability for provider %s: %s", provider_id, e)
            raise RepositoryException(f"Failed to check availability: {e}") from e

    def get_confirmed_starts(
        self, provider_id: str, range_start: datetime, range_end: datetime
    ) -> Set[datetime]:
        """Start times of confirmed bookings with ``range_start <= start < range_end``."""
        try:
            rows = self.db.execute(
                select(Booking.start_datetime).where(
                    Booking.provider_id == provider_id,
                    Booking.status == BookingStatus.CONFIRMED.value,
                    Booking.deleted_at.is_(None),
                    Booking.start_datetime >= range_start,
                    Booking.start_datetime < range_end,
                )
            ).scalars()
            return {truncate_to_second(value) for value in rows}
        except SQLAlchemyError as e:
            self.logger.error("Error loading confirmed starts for provider %s: %s", provider_id, e)
            raise RepositoryException(f"Failed to load confirmed bookings: {e}") from e

    def get_provider_bookings_between(
        self, provider_id: str, range_start: datetime, range_end: datetime
    ) -> List[Booking]:
        """Confirmed bookings for a provider in ``[range_start, range_end)``, oldest first."""
        query = (
            self._confirmed()
            .filter(
                Booking.provider_id == provider_id,
                Booking.start_datetime >= range_start,
                Booking.start_datetime < range_end,
            )
            .order_by(Booking.start_datetime.asc())
        )
        return self._execute_query(query)

    # Listings

    def get_user_bookings(self, user_id: str, page: int = 1, limit: int = 20) -> List[Booking]:
        """A user's bookings (any status), earliest start first."""
        query = (
            self._active()
            .filter(Booking.user_id == user_id)
            .order_by(Booking.start_datetime.asc(), Booking.id.asc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return self._execute_query(query)

    def count_user_bookings(self, user_id: str) -> int:
        query = self.db.query(func.count(Booking.id)).filter(
            Booking.user_id == user_id,
            Booking.deleted_at.is_(None),
        )
        return int(self._execute_scalar(query) or 0)

    def get_all_bookings(self, page: int = 1, limit: int = 50) -> List[Booking]:
        """Every booking (any status), latest start first."""
        query = (
            self._active()
            .order_by(Booking.start_datetime.desc(), Booking.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return self._execute_query(query)

    def count_all_bookings(self) -> int:
        query = self.db.query(func.count(Booking.id)).filter(Booking.deleted_at.is_(None))
        return int(self._execute_scalar(query) or 0)

    # Writes

    def reserve(
        self,
        user_id: str,
        provider_id: str,
        service_id: str,
        start_datetime: datetime,
    ) -> Booking:
        """
        Insert a confirmed booking for the provider/start key.

        The INSERT runs inside a SAVEPOINT so a losing racer leaves the
        caller's transaction usable. Does NOT commit.

        Raises:
            SlotAlreadyBookedException: a confirmed booking already holds the key
            RepositoryException: any other integrity or storage failure
        """
        start = truncate_to_second(start_datetime)
        booking = Booking(
            user_id=user_id,
            provider_id=provider_id,
            service_id=service_id,
            start_datetime=start,
            status=BookingStatus.CONFIRMED.value,
        )
        try:
            with self.db.begin_nested():
                self.db.add(booking)
                self.db.flush()
        except IntegrityError as exc:
            if is_confirmed_slot_violation(exc):
                raise SlotAlreadyBookedException(
                    details={
                        "provider_id": provider_id,
                        "start_datetime": str(start),
                    }
                ) from exc
            self.logger.error("Integrity error reserving booking: %s", exc, exc_info=True)
            raise RepositoryException(f"Integrity constraint violated: {exc}") from exc
        except SQLAlchemyError as exc:
            self.logger.error("Error reserving booking: %s", exc)
            raise RepositoryException(f"Failed to reserve booking: {exc}") from exc
        return booking

    def release(self, booking_id: str, *, cancelled_by_id: Optional[str] = None) -> Booking:
        """
        Mark a booking cancelled, keeping the row.

        The slot becomes available again because every availability check
        filters on confirmed status.
        """
        booking = self.get_active_by_id(booking_id)
        if booking is None:
            raise NotFoundException(f"Booking {booking_id} not found", code="BOOKING_NOT_FOUND")
        try:
            booking.cancel(cancelled_by_id or booking.user_id, at=local_now())
            self.db.flush()
        except SQLAlchemyError as e:
            self.logger.error("Error releasing booking %s: %s", booking_id, e)
            raise RepositoryException(f"Failed to cancel booking: {e}") from e
        return booking

    def purge(self, booking_id: str) -> None:
        """Hard delete a cancelled booking."""
        booking = self.get_active_by_id(booking_id)
        if booking is None:
            raise NotFoundException(f"Booking {booking_id} not found", code="BOOKING_NOT_FOUND")
        if booking.status != BookingStatus.CANCELLED.value:
            raise BookingStateException(
                "Only cancelled bookings can be deleted",
                current_state=str(booking.status),
                trigger="purge",
            )
        try:
            self.db.execute(delete(Booking).where(Booking.id == booking_id))
            self.db.flush()
        except SQLAlchemyError as e:
            self.logger.error("Error purging booking %s: %s", booking_id, e)
            raise RepositoryException(f"Failed to delete booking: {e}") from e

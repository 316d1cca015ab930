# slotbook/services/booking_service.py
"""
Booking Service for the slotbook engine.

Coordinates the booking gate, the ledger and the lifecycle:
- create: gate -> availability pre-check -> reservation
- cancel / hard delete: not-found -> authorization -> lifecycle -> ledger
- listings for one user or for an admin

Each write runs in its own transaction. A conflict found by the
pre-check and one lost at the unique index are the same
SlotAlreadyBookedException to callers; only the logging differs.
"""

import logging
from typing import Any, List, Optional

from sqlalchemy.orm import Session

from ..core.config import Settings, settings
from ..core.enums import RoleName
from ..core.exceptions import NotFoundException, SlotAlreadyBookedException, ValidationException
from ..core.ulid_helper import is_valid_ulid
from ..models.booking import Booking
from ..repositories.booking_repository import BookingRepository
from ..repositories.factory import RepositoryFactory
from .base import BaseService
from .booking_lifecycle import BookingLifecycle, BookingTrigger
from .booking_validation import BookingValidator, parse_booking_datetime
from .catalog_service import CatalogService

logger = logging.getLogger(__name__)


class BookingService(BaseService):
    """Creates, cancels, purges and lists bookings."""

    def __init__(
        self,
        db: Session,
        booking_repository: Optional[BookingRepository] = None,
        catalog: Optional[CatalogService] = None,
        validator: Optional[BookingValidator] = None,
        *,
        config: Optional[Settings] = None,
    ):
        super().__init__(db)
        self.config = config or settings
        self.repository = booking_repository or RepositoryFactory.create_booking_repository(db)
        self.catalog = catalog or CatalogService(db)
        self.validator = validator or BookingValidator()

    # Lookups

    def get_booking_or_404(self, booking_id: str) -> Booking:
        booking = None
        if is_valid_ulid(booking_id):
            booking = self.repository.get_active_by_id(booking_id)
        if booking is None:
            raise NotFoundException(f"Booking {booking_id} not found", code="BOOKING_NOT_FOUND")
        return booking

    # Writes

    @BaseService.measure_operation("create_booking")
    def create_booking(
        self, user_id: str, provider_id: str, service_id: str, raw_start: Any
    ) -> Booking:
        """
        Validate and reserve a booking.

        Raises:
            NotFoundException: unknown provider or service
            ValidationException: unparseable start
            BusinessRuleException: start outside the provider's working hours
            SlotAlreadyBookedException: slot already held by a confirmed booking
        """
        provider = self.catalog.get_provider(provider_id)
        service = self.catalog.get_service(service_id)
        start = self.validator.validate(provider, service, raw_start)
        BookingLifecycle.transition(None, BookingTrigger.CREATE)

        with self.transaction():
            if not self.repository.is_available(provider.id, start):
                self.logger.info(
                    "Slot %s for provider %s already booked (pre-check)",
                    start,
                    provider.id,
                    extra={"provider_id": provider.id, "race": False},
                )
                raise SlotAlreadyBookedException(
                    details={"provider_id": provider.id, "start_datetime": str(start)}
                )

            try:
                booking = self.repository.reserve(user_id, provider.id, service.id, start)
            except SlotAlreadyBookedException:
                self.logger.warning(
                    "Lost reservation race for provider %s at %s",
                    provider.id,
                    start,
                    extra={"provider_id": provider.id, "race": True},
                )
                raise

        self.log_operation(
            "create_booking",
            booking_id=booking.id,
            provider_id=provider.id,
            user_id=user_id,
        )
        return booking

    @BaseService.measure_operation("cancel_booking")
    def cancel_booking(self, booking_id: str, actor_user_id: str, actor_is_admin: bool) -> Booking:
        """Move a confirmed booking to cancelled, freeing its slot."""
        with self.transaction():
            booking = self.get_booking_or_404(booking_id)
            BookingLifecycle.authorize(booking, actor_user_id, actor_is_admin)
            BookingLifecycle.transition(BookingLifecycle.state_of(booking), BookingTrigger.CANCEL)
            booking = self.repository.release(booking.id, cancelled_by_id=actor_user_id)

        self.log_operation(
            "cancel_booking",
            booking_id=booking.id,
            actor_user_id=actor_user_id,
            actor_role=self._role(actor_is_admin),
        )
        return booking

    @BaseService.measure_operation("hard_delete_booking")
    def hard_delete_booking(
        self, booking_id: str, actor_user_id: str, actor_is_admin: bool
    ) -> None:
        """Remove a cancelled booking row."""
        with self.transaction():
            booking = self.get_booking_or_404(booking_id)
            BookingLifecycle.authorize(booking, actor_user_id, actor_is_admin)
            BookingLifecycle.transition(BookingLifecycle.state_of(booking), BookingTrigger.PURGE)
            self.repository.purge(booking.id)

        self.log_operation(
            "hard_delete_booking",
            booking_id=booking_id,
            actor_user_id=actor_user_id,
            actor_role=self._role(actor_is_admin),
        )

    # Reads

    def is_slot_available(self, provider_id: str, raw_start: Any) -> bool:
        provider = self.catalog.get_provider(provider_id)
        start = parse_booking_datetime(raw_start)
        return self.repository.is_available(provider.id, start)

    def list_bookings(
        self, for_user_id: Optional[str], page: int = 1, limit: Optional[int] = None
    ) -> List[Booking]:
        """
        Bookings for one user (earliest first) or, with ``for_user_id=None``,
        every booking (latest first). Soft-deleted and purged rows never appear.
        """
        if for_user_id is None:
            page_size = self._check_paging(page, limit, self.config.admin_page_size)
            return self.repository.get_all_bookings(page=page, limit=page_size)
        page_size = self._check_paging(page, limit, self.config.default_page_size)
        return self.repository.get_user_bookings(for_user_id, page=page, limit=page_size)

    def count_bookings(self, for_user_id: Optional[str]) -> int:
        if for_user_id is None:
            return self.repository.count_all_bookings()
        return self.repository.count_user_bookings(for_user_id)

    # Helpers

    @staticmethod
    def _check_paging(page: int, limit: Optional[int], default_limit: int) -> int:
        if isinstance(page, bool) or not isinstance(page, int) or page < 1:
            raise ValidationException(
                "page must be a positive integer", code="INVALID_PAGE", details={"page": page}
            )
        if limit is None:
            return default_limit
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise ValidationException(
                "limit must be a positive integer", code="INVALID_LIMIT", details={"limit": limit}
            )
        return limit

    @staticmethod
    def _role(actor_is_admin: bool) -> str:
        return (RoleName.ADMIN if actor_is_admin else RoleName.USER).value

# slotbook/services/availability_service.py
"""
Availability Service: the engine's public entry point.

Wires the catalog, the slot generator and the booking service together
for one database session. Hosts (HTTP handlers, CLIs, jobs) create one
instance per request and call:

- generate_available_slots: bookable start times as "YYYY-MM-DD HH:MM:SS"
- create_booking / cancel_booking / hard_delete_booking
- list_bookings / count_bookings / is_slot_available

Read paths are retried on transient disconnects; writes never are.
"""

from datetime import date
import logging
from typing import Any, List, Optional

from sqlalchemy.orm import Session

from ..core.config import Settings, settings
from ..core.constants import DATETIME_FORMAT
from ..database import with_db_retry
from ..models.booking import Booking
from ..repositories.factory import RepositoryFactory
from .base import BaseService
from .booking_service import BookingService
from .catalog_service import CatalogService
from .slot_generator import SlotGenerator

logger = logging.getLogger(__name__)


class AvailabilityService(BaseService):
    def __init__(
        self,
        db: Session,
        *,
        catalog: Optional[CatalogService] = None,
        slot_generator: Optional[SlotGenerator] = None,
        booking_service: Optional[BookingService] = None,
        config: Optional[Settings] = None,
    ):
        super().__init__(db)
        self.config = config or settings
        booking_repository = RepositoryFactory.create_booking_repository(db)
        self.catalog = catalog or CatalogService(db)
        self.slot_generator = slot_generator or SlotGenerator(
            db, booking_repository, config=self.config
        )
        self.booking_service = booking_service or BookingService(
            db, booking_repository, self.catalog, config=self.config
        )

    @BaseService.measure_operation("generate_available_slots")
    def generate_available_slots(
        self,
        provider_id: str,
        service_id: str,
        horizon_days: Optional[int] = None,
        *,
        today: Optional[date] = None,
    ) -> List[str]:
        """
        Bookable start times for a provider and service.

        Args:
            provider_id: Provider to schedule
            service_id: Service whose duration each slot must fit
            horizon_days: Days to scan starting today (default from settings)
            today: Override for the first day of the horizon

        Returns:
            Chronological "YYYY-MM-DD HH:MM:SS" strings

        Raises:
            NotFoundException: unknown provider or service
            ValidationException: horizon out of range
        """

        def _load() -> List[str]:
            provider = self.catalog.get_provider(provider_id)
            service = self.catalog.get_service(service_id)
            slots = self.slot_generator.generate(provider, service, horizon_days, today=today)
            return [slot.strftime(DATETIME_FORMAT) for slot in slots]

        return with_db_retry("generate_available_slots", _load, session=self.db)

    def create_booking(
        self, user_id: str, provider_id: str, service_id: str, datetime_string: Any
    ) -> Booking:
        return self.booking_service.create_booking(
            user_id, provider_id, service_id, datetime_string
        )

    def cancel_booking(self, booking_id: str, actor_user_id: str, actor_is_admin: bool) -> Booking:
        return self.booking_service.cancel_booking(booking_id, actor_user_id, actor_is_admin)

    def hard_delete_booking(
        self, booking_id: str, actor_user_id: str, actor_is_admin: bool
    ) -> None:
        self.booking_service.hard_delete_booking(booking_id, actor_user_id, actor_is_admin)

    def list_bookings(
        self, for_user_id: Optional[str], page: int = 1, limit: Optional[int] = None
    ) -> List[Booking]:
        """A user's bookings, or every booking when ``for_user_id`` is None."""
        return with_db_retry(
            "list_bookings",
            lambda: self.booking_service.list_bookings(for_user_id, page=page, limit=limit),
            session=self.db,
        )

    def count_bookings(self, for_user_id: Optional[str]) -> int:
        return with_db_retry(
            "count_bookings",
            lambda: self.booking_service.count_bookings(for_user_id),
            session=self.db,
        )

    def is_slot_available(self, provider_id: str, datetime_string: Any) -> bool:
        return with_db_retry(
            "is_slot_available",
            lambda: self.booking_service.is_slot_available(provider_id, datetime_string),
            session=self.db,
        )

# slotbook/services/slot_generator.py
"""
Slot Generator for the slotbook engine.

Turns a provider's weekly schedule, a service duration and the confirmed
bookings in range into the ordered list of bookable start times.

Rules:
- Candidates start exactly at opening time and advance by a fixed step
  (``settings.slot_step_minutes``), independent of the service duration
- A candidate is kept only if ``start + duration <= close``
- A candidate is dropped if a confirmed, non-deleted booking holds the
  same provider/start key; cancelled bookings never block a slot
- The horizon is half-open: ``[today, today + horizon_days)``

Results are recomputed on every call and never cached.
"""

from datetime import date, datetime, timedelta
import logging
from typing import AbstractSet, List, Optional

from sqlalchemy.orm import Session

from ..core.config import Settings, settings
from ..core.enums import Weekday
from ..core.exceptions import ValidationException
from ..core.timezone_utils import local_today
from ..domain.working_hours import WorkingHoursSchedule, WorkingInterval
from ..models.provider import Provider
from ..models.service import Service
from ..repositories.booking_repository import BookingRepository
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)


def candidate_starts(
    interval: WorkingInterval, day: date, duration_minutes: int, step_minutes: int
) -> List[datetime]:
    """Every step-aligned start on ``day`` whose service fits before closing."""
    opens_at, closes_at = interval.bounds_on(day)
    step = timedelta(minutes=step_minutes)
    duration = timedelta(minutes=duration_minutes)

    starts: List[datetime] = []
    current = opens_at
    while current + duration <= closes_at:
        starts.append(current)
        current += step
    return starts


class SlotGenerator(BaseService):
    """Computes available start times for one provider and service."""

    def __init__(
        self,
        db: Session,
        booking_repository: Optional[BookingRepository] = None,
        *,
        config: Optional[Settings] = None,
    ):
        super().__init__(db)
        self.config = config or settings
        self.booking_repository = (
            booking_repository or RepositoryFactory.create_booking_repository(db)
        )

    @property
    def step_minutes(self) -> int:
        return self.config.slot_step_minutes

    def validate_horizon(self, horizon_days: Optional[int]) -> int:
        """Return the effective horizon, rejecting values outside 1..max."""
        if horizon_days is None:
            return self.config.default_horizon_days
        if isinstance(horizon_days, bool) or not isinstance(horizon_days, int):
            raise ValidationException(
                "horizon_days must be an integer",
                code="INVALID_HORIZON",
                details={"horizon_days": repr(horizon_days)},
            )
        if not 1 <= horizon_days <= self.config.max_horizon_days:
            raise ValidationException(
                f"horizon_days must be between 1 and {self.config.max_horizon_days}",
                code="INVALID_HORIZON",
                details={"horizon_days": horizon_days},
            )
        return horizon_days

    def _slots_for_day(
        self,
        schedule: WorkingHoursSchedule,
        duration_minutes: int,
        day: date,
        booked: AbstractSet[datetime],
    ) -> List[datetime]:
        interval = schedule.interval_for(Weekday.from_date(day))
        if interval is None:
            return []
        return [
            start
            for start in candidate_starts(interval, day, duration_minutes, self.step_minutes)
            if start not in booked
        ]

    def generate_for_day(self, provider: Provider, service: Service, day: date) -> List[datetime]:
        """Available starts on a single calendar day."""
        day_start = datetime.combine(day, datetime.min.time())
        booked = self.booking_repository.get_confirmed_starts(
            provider.id, day_start, day_start + timedelta(days=1)
        )
        return self._slots_for_day(provider.schedule, service.duration_minutes, day, booked)

    @BaseService.measure_operation("generate_slots")
    def generate(
        self,
        provider: Provider,
        service: Service,
        horizon_days: Optional[int] = None,
        *,
        today: Optional[date] = None,
    ) -> List[datetime]:
        """
        Available starts from ``today`` through ``today + horizon_days - 1``.

        Args:
            provider: Provider whose schedule is used
            service: Service whose duration each slot must fit
            horizon_days: Number of calendar days to cover (default from settings)
            today: First day of the horizon (defaults to the current date)

        Returns:
            Chronologically ordered, de-duplicated start datetimes
        """
        days = self.validate_horizon(horizon_days)
        first_day = today or local_today()
        range_start = datetime.combine(first_day, datetime.min.time())
        range_end = range_start + timedelta(days=days)

        booked = self.booking_repository.get_confirmed_starts(provider.id, range_start, range_end)

        schedule = provider.schedule
        slots: List[datetime] = []
        for offset in range(days):
            day = first_day + timedelta(days=offset)
            slots.extend(self._slots_for_day(schedule, service.duration_minutes, day, booked))

        self.logger.debug(
            "Generated %d slots for provider %s service %s over %d days",
            len(slots),
            provider.id,
            service.id,
            days,
        )
        return slots

# slotbook/services/booking_validation.py
"""
Pre-creation booking gate.

Checks run in a fixed order and stop at the first failure:
1. The requested start parses as a naive date-time
2. The provider works on that weekday (and the entry is well formed)
3. ``open <= start < close``
4. ``start + duration <= close``

Availability is not checked here; the booking service runs the ledger
pre-check and reservation after the gate passes.
"""

from datetime import datetime
from typing import Any, List, Optional

from ..core.constants import ACCEPTED_DATETIME_FORMATS, DATETIME_FORMAT_HINT
from ..core.enums import Weekday
from ..core.exceptions import (
    BusinessRuleException,
    InvalidDateTimeFormatException,
    MalformedWorkingHoursException,
    OutsideWorkingHoursException,
    ProviderClosedException,
    ServiceExceedsWorkingHoursException,
    ValidationException,
)
from ..core.timezone_utils import truncate_to_second
from ..models.provider import Provider
from ..models.service import Service


def parse_booking_datetime(raw: Any) -> datetime:
    """
    Parse a requested start.

    Accepts ``YYYY-MM-DD HH:MM:SS``, ``YYYY-MM-DD HH:MM`` and the same with a
    ``T`` separator. Timezone offsets are rejected.
    """
    if isinstance(raw, str):
        candidate = raw.strip()
        for fmt in ACCEPTED_DATETIME_FORMATS:
            try:
                return truncate_to_second(datetime.strptime(candidate, fmt))
            except ValueError:
                continue
    raise InvalidDateTimeFormatException(raw, DATETIME_FORMAT_HINT)


class BookingValidator:
    """Runs the booking gate against a provider's schedule and a service."""

    def validate(self, provider: Provider, service: Service, raw_start: Any) -> datetime:
        """
        Return the parsed start, or raise the first failing check.

        Raises:
            InvalidDateTimeFormatException: unparseable start
            ProviderClosedException: no hours configured for that weekday
            MalformedWorkingHoursException: hours configured but unparseable
            OutsideWorkingHoursException: start before opening or at/after closing
            ServiceExceedsWorkingHoursException: service would run past closing
        """
        start = parse_booking_datetime(raw_start)
        self.check_working_hours(provider, service, start)
        return start

    def check_working_hours(self, provider: Provider, service: Service, start: datetime) -> None:
        schedule = provider.schedule
        weekday = Weekday.from_date(start)

        if not schedule.is_open_on(weekday):
            raise ProviderClosedException(weekday.value)

        interval = schedule.interval_for(weekday)
        if interval is None:
            raise MalformedWorkingHoursException(
                weekday.value, schedule.malformed_value(weekday) or ""
            )

        if not interval.contains(start):
            raise OutsideWorkingHoursException(interval.label)

        if not interval.fits(start, service.duration_minutes):
            raise ServiceExceedsWorkingHoursException(interval.label, service.duration_minutes)

    def collect_errors(
        self,
        provider: Optional[Provider],
        service: Optional[Service],
        raw_start: Any,
    ) -> List[str]:
        """
        Run the gate without raising.

        Returns the failure messages (empty when the request would pass).
        Missing entities are reported as "Invalid provider"/"Invalid service";
        working-hours checks need both entities and a parsed start.
        """
        errors: List[str] = []
        if provider is None:
            errors.append("Invalid provider")
        if service is None:
            errors.append("Invalid service")

        start: Optional[datetime] = None
        try:
            start = parse_booking_datetime(raw_start)
        except ValidationException as exc:
            errors.append(exc.message)

        if provider is not None and service is not None and start is not None:
            try:
                self.check_working_hours(provider, service, start)
            except BusinessRuleException as exc:
                errors.append(exc.message)
        return errors

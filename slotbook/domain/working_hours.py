# slotbook/domain/working_hours.py
"""
Weekly working-hours schedule for a provider.

The stored form is a JSON object mapping day names to "HH:MM-HH:MM"
strings, e.g. ``{"monday": "09:00-17:00", "saturday": "10:00-14:00"}``.
A missing key or an empty string means the provider is closed that day.

``WorkingHoursSchedule`` parses that mapping once into a fixed table keyed
by ``Weekday``. Entries that are configured but unparseable are remembered
separately so the booking gate can report them as malformed rather than
closed.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
import re
from typing import Any, Dict, List, Mapping, Optional

from ..core.constants import WORKING_HOURS_PATTERN
from ..core.enums import Weekday

_HOURS_RE = re.compile(WORKING_HOURS_PATTERN)


@dataclass(frozen=True)
class FieldError:
    """One validation failure, addressed by the offending key."""

    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


@dataclass(frozen=True)
class WorkingInterval:
    """Half-open ``[open, close)`` time-of-day range on a single day."""

    open: time
    close: time

    def __post_init__(self) -> None:
        if self.open >= self.close:
            raise ValueError(
                f"Opening time {self.open:%H:%M} must be before closing time {self.close:%H:%M}"
            )

    @property
    def label(self) -> str:
        return f"{self.open:%H:%M}-{self.close:%H:%M}"

    def bounds_on(self, day: date) -> tuple[datetime, datetime]:
        """Return the opening and closing datetimes for a calendar day."""
        return datetime.combine(day, self.open), datetime.combine(day, self.close)

    def contains(self, start: datetime) -> bool:
        """True when ``open <= start < close`` on the start's own day."""
        opens_at, closes_at = self.bounds_on(start.date())
        return opens_at <= start < closes_at

    def fits(self, start: datetime, duration_minutes: int) -> bool:
        """True when a service starting at ``start`` ends no later than closing."""
        _, closes_at = self.bounds_on(start.date())
        return start + timedelta(minutes=duration_minutes) <= closes_at


def _parse_clock(hours: str, minutes: str) -> Optional[time]:
    hh, mm = int(hours), int(minutes)
    if not (0 <= hh <= 23 and 0 <= mm <= 59):
        return None
    return time(hh, mm)


def parse_interval(raw: str) -> Optional[WorkingInterval]:
    """Parse ``"HH:MM-HH:MM"``; None when the format, range or order is wrong."""
    if not isinstance(raw, str):
        return None
    match = _HOURS_RE.match(raw.strip())
    if not match:
        return None
    opens = _parse_clock(match.group(1), match.group(2))
    closes = _parse_clock(match.group(3), match.group(4))
    if opens is None or closes is None or opens >= closes:
        return None
    return WorkingInterval(open=opens, close=closes)


def validate_working_hours(raw: Optional[Mapping[str, Any]]) -> List[FieldError]:
    """
    Validate a raw weekday -> "HH:MM-HH:MM" mapping.

    Returns every problem found (empty list when valid). Keys are matched
    case-insensitively; empty values mean "closed" and are accepted.
    """
    if raw is None:
        return []
    if not isinstance(raw, Mapping):
        return [FieldError("working_hours", "must be an object keyed by weekday")]

    errors: List[FieldError] = []
    seen: Dict[Weekday, str] = {}
    for key, value in raw.items():
        weekday = Weekday.parse(key)
        if weekday is None:
            errors.append(FieldError(str(key), "is not a valid weekday"))
            continue
        if weekday in seen:
            errors.append(FieldError(str(key), f"duplicates {seen[weekday]!r}"))
            continue
        seen[weekday] = str(key)

        if value is None or value == "":
            continue
        if not isinstance(value, str):
            errors.append(FieldError(str(key), "must be a string in HH:MM-HH:MM format"))
            continue

        match = _HOURS_RE.match(value.strip())
        if not match:
            errors.append(FieldError(str(key), f"{value!r} is not in HH:MM-HH:MM format"))
            continue

        opens = _parse_clock(match.group(1), match.group(2))
        closes = _parse_clock(match.group(3), match.group(4))
        if opens is None:
            errors.append(FieldError(str(key), "opening time is out of range"))
        if closes is None:
            errors.append(FieldError(str(key), "closing time is out of range"))
        if opens is not None and closes is not None and opens >= closes:
            errors.append(FieldError(str(key), "opening time must be before closing time"))
    return errors


class WorkingHoursSchedule:
    """Typed, 7-entry view over a provider's weekly working hours."""

    def __init__(
        self,
        intervals: Optional[Mapping[Weekday, WorkingInterval]] = None,
        *,
        malformed: Optional[Mapping[Weekday, str]] = None,
    ) -> None:
        self._intervals: Dict[Weekday, WorkingInterval] = dict(intervals or {})
        self._malformed: Dict[Weekday, str] = dict(malformed or {})

    @classmethod
    def from_mapping(cls, raw: Optional[Mapping[str, Any]]) -> "WorkingHoursSchedule":
        """
        Build a schedule from the stored mapping without raising.

        Unknown day names are ignored. Non-empty values that do not parse are
        kept as malformed so ``is_open_on`` still reports the day as configured.
        """
        intervals: Dict[Weekday, WorkingInterval] = {}
        malformed: Dict[Weekday, str] = {}
        for key, value in (raw or {}).items():
            weekday = Weekday.parse(key)
            if weekday is None or value is None or value == "":
                continue
            interval = parse_interval(value)
            if interval is None:
                malformed[weekday] = str(value)
            else:
                intervals[weekday] = interval
        return cls(intervals, malformed=malformed)

    @staticmethod
    def _resolve(weekday: Weekday | str) -> Optional[Weekday]:
        if isinstance(weekday, Weekday):
            return weekday
        return Weekday.parse(weekday)

    def is_open_on(self, weekday: Weekday | str) -> bool:
        day = self._resolve(weekday)
        if day is None:
            return False
        return day in self._intervals or day in self._malformed

    def interval_for(self, weekday: Weekday | str) -> Optional[WorkingInterval]:
        day = self._resolve(weekday)
        if day is None:
            return None
        return self._intervals.get(day)

    def malformed_value(self, weekday: Weekday | str) -> Optional[str]:
        day = self._resolve(weekday)
        if day is None:
            return None
        return self._malformed.get(day)

    def open_days(self) -> List[Weekday]:
        return [day for day in Weekday if day in self._intervals]

    def to_mapping(self) -> Dict[str, str]:
        """Render the canonical lower-case mapping (valid days only, in week order)."""
        return {day.value: self._intervals[day].label for day in self.open_days()}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WorkingHoursSchedule):
            return NotImplemented
        return self._intervals == other._intervals and self._malformed == other._malformed

    def __repr__(self) -> str:
        return f"<WorkingHoursSchedule {self.to_mapping()}>"

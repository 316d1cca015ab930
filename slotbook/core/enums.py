# slotbook/core/enums.py
"""
Core enums for the slotbook engine.

Weekday keys are the canonical form of the per-day working-hours table.
Day names coming from callers are normalized case-insensitively into
these members; nothing else in the engine compares raw day strings.
"""

from datetime import date
from enum import Enum
from typing import Optional


class Weekday(str, Enum):
    """Days of the week in ISO order (Monday first)."""

    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @classmethod
    def from_date(cls, value: date) -> "Weekday":
        """Return the weekday of a date (or datetime)."""
        return _ORDERED[value.weekday()]

    @classmethod
    def parse(cls, name: str) -> Optional["Weekday"]:
        """Case-insensitive lookup by day name; None when it is not a weekday."""
        if not isinstance(name, str):
            return None
        try:
            return cls(name.strip().lower())
        except ValueError:
            return None


_ORDERED = tuple(Weekday)


class RoleName(str, Enum):
    """Actor roles the lifecycle's authorization gate distinguishes."""

    ADMIN = "admin"
    USER = "user"

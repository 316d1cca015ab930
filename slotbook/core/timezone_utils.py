"""
Clock helpers for the engine's single implicit timezone.

All datetimes handled by the engine are naive and whole-second. Stored rows,
generated slots and parsed requests go through ``truncate_to_second`` so the
(provider_id, start_datetime) key compares exactly.
"""

from datetime import date, datetime


def truncate_to_second(value: datetime) -> datetime:
    """Drop microseconds (and any tzinfo) from a datetime."""
    return value.replace(microsecond=0, tzinfo=None)


def local_now() -> datetime:
    """Current wall-clock time, naive, whole-second."""
    return truncate_to_second(datetime.now())


def local_today() -> date:
    """Today's date in the engine's timezone."""
    return local_now().date()

# slotbook/schemas/provider.py
"""
Provider schemas.

Working hours are validated here, at the write boundary, and normalized to
lower-case weekday keys. Empty values (closed days) are dropped so the
stored mapping only lists open days.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import Field, field_validator

from ..core.constants import MAX_NAME_LENGTH, MIN_NAME_LENGTH
from ..core.enums import Weekday
from ..domain.working_hours import validate_working_hours
from ._strict_base import StrictModel, StrictRequestModel


def _normalize_working_hours(value: Any) -> Dict[str, str]:
    errors = validate_working_hours(value)
    if errors:
        raise ValueError("; ".join(str(error) for error in errors))
    normalized: Dict[str, str] = {}
    for key, hours in (value or {}).items():
        if not hours:
            continue
        weekday = Weekday.parse(key)
        if weekday is None:
            continue
        normalized[weekday.value] = hours.strip()
    return {day.value: normalized[day.value] for day in Weekday if day.value in normalized}


class ProviderCreate(StrictRequestModel):
    name: str = Field(..., min_length=MIN_NAME_LENGTH, max_length=MAX_NAME_LENGTH)
    working_hours: Dict[str, Any] = Field(
        default_factory=dict,
        description='Weekday -> "HH:MM-HH:MM"; missing or empty means closed',
    )

    @field_validator("working_hours", mode="before")
    @classmethod
    def _validate_working_hours(cls, value: Any) -> Dict[str, str]:
        return _normalize_working_hours(value)


class WorkingHoursUpdate(StrictRequestModel):
    """Full replacement of a provider's weekly schedule."""

    working_hours: Dict[str, Any]

    @field_validator("working_hours", mode="before")
    @classmethod
    def _validate_working_hours(cls, value: Any) -> Dict[str, str]:
        return _normalize_working_hours(value)


class ProviderResponse(StrictModel):
    id: str
    name: str
    working_hours: Dict[str, str]
    created_at: datetime
    updated_at: Optional[datetime] = None

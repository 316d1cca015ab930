# slotbook/schemas/booking.py
"""
Booking schemas.

``start_datetime`` travels as the raw string the caller sent; parsing it is
the first step of the booking gate so a bad value surfaces as the gate's
"Invalid datetime format" error rather than a schema error.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field, field_serializer

from ..core.constants import DATETIME_FORMAT, DATETIME_FORMAT_HINT
from ._strict_base import StrictModel, StrictRequestModel


class BookingCreate(StrictRequestModel):
    provider_id: str = Field(..., min_length=1)
    service_id: str = Field(..., min_length=1)
    start_datetime: str = Field(..., description=f"Requested start, {DATETIME_FORMAT_HINT}")


class BookingResponse(StrictModel):
    id: str
    user_id: str
    provider_id: str
    service_id: str
    start_datetime: datetime
    status: str
    created_at: datetime
    updated_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancelled_by_id: Optional[str] = None

    @field_serializer("start_datetime")
    def _format_start(self, value: datetime) -> str:
        return value.strftime(DATETIME_FORMAT)

"""Pydantic request/response schemas for the slotbook engine."""

from .booking import BookingCreate, BookingResponse
from .provider import ProviderCreate, ProviderResponse, WorkingHoursUpdate
from .service import ServiceCreate, ServiceResponse

__all__ = [
    "BookingCreate",
    "BookingResponse",
    "ProviderCreate",
    "ProviderResponse",
    "ServiceCreate",
    "ServiceResponse",
    "WorkingHoursUpdate",
]

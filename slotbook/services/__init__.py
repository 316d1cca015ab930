"""
Service layer for the slotbook engine.

``AvailabilityService`` is the entry point; the other services are its
collaborators and can be used on their own.
"""

from .availability_service import AvailabilityService
from .base import BaseService
from .booking_lifecycle import BookingLifecycle, BookingState, BookingTrigger
from .booking_service import BookingService
from .booking_validation import BookingValidator, parse_booking_datetime
from .catalog_service import CatalogService
from .slot_generator import SlotGenerator

__all__ = [
    "AvailabilityService",
    "BaseService",
    "BookingLifecycle",
    "BookingService",
    "BookingState",
    "BookingTrigger",
    "BookingValidator",
    "CatalogService",
    "SlotGenerator",
    "parse_booking_datetime",
]

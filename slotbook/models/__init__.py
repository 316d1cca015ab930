"""
Database models for the slotbook engine.

- Provider: a bookable resource with weekly working hours
- Service: a bookable offering with a fixed duration
- Booking: a reservation of one provider start time for one service
"""

from .booking import Booking, BookingStatus
from .provider import Provider
from .service import Service

__all__ = [
    "Booking",
    "BookingStatus",
    "Provider",
    "Service",
]

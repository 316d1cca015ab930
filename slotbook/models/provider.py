# slotbook/models/provider.py
"""
Provider model.

A provider owns a weekly working-hours schedule stored as JSON
(weekday name -> "HH:MM-HH:MM"). The schedule is validated on write by
the catalog service and parsed on read through ``schedule``.
"""

from sqlalchemy import JSON, Column, DateTime, String
from sqlalchemy.orm import relationship

from ..core.timezone_utils import local_now
from ..core.ulid_helper import generate_ulid
from ..database import Base
from ..domain.working_hours import WorkingHoursSchedule


class Provider(Base):
    """Someone (or something) that can be booked for a service."""

    __tablename__ = "providers"

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)
    name = Column(String(255), nullable=False)
    working_hours = Column(JSON, nullable=False, default=dict)

    created_at = Column(DateTime, nullable=False, default=local_now)
    updated_at = Column(DateTime, nullable=True, onupdate=local_now)

    bookings = relationship("Booking", back_populates="provider", passive_deletes=True)

    @property
    def schedule(self) -> WorkingHoursSchedule:
        """Typed view over ``working_hours``."""
        return WorkingHoursSchedule.from_mapping(self.working_hours or {})

    def __repr__(self) -> str:
        return f"<Provider {self.id}: {self.name}>"

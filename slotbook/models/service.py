# slotbook/models/service.py
"""Service model: a named offering that occupies a fixed block of minutes."""

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, String

from ..core.constants import MAX_SERVICE_DURATION, MIN_SERVICE_DURATION
from ..core.timezone_utils import local_now
from ..core.ulid_helper import generate_ulid
from ..database import Base


class Service(Base):
    __tablename__ = "services"

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)
    name = Column(String(255), nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    created_at = Column(DateTime, nullable=False, default=local_now)

    __table_args__ = (
        CheckConstraint(
            f"duration_minutes >= {MIN_SERVICE_DURATION} AND duration_minutes <= {MAX_SERVICE_DURATION}",
            name="ck_services_duration_range",
        ),
    )

    def __repr__(self) -> str:
        return f"<Service {self.id}: {self.name} ({self.duration_minutes} min)>"

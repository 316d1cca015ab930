# slotbook/models/booking.py
"""
Booking model for the slotbook engine.

A booking reserves one provider start time for one service. Rows are
created ``confirmed``; cancelling keeps the row with status ``cancelled``;
purging removes it.

The no-double-booking rule lives in the database: the partial unique index
``uq_bookings_provider_start_confirmed`` covers (provider_id, start_datetime)
for confirmed rows only, so cancelled rows may share a slot with a newer
confirmed booking.
"""

from datetime import datetime
from enum import Enum
import logging
from typing import Any, Optional

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, String, text
from sqlalchemy.orm import relationship

from ..core.timezone_utils import local_now
from ..core.ulid_helper import generate_ulid
from ..database import Base

logger = logging.getLogger(__name__)

CONFIRMED_SLOT_INDEX = "uq_bookings_provider_start_confirmed"


class BookingStatus(str, Enum):
    """Persisted booking statuses."""

    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class Booking(Base):
    """Reservation of a provider's start time."""

    __tablename__ = "bookings"

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)

    # Opaque id issued by the external auth system
    user_id = Column(String(64), nullable=False, index=True)
    provider_id = Column(
        String(26), ForeignKey("providers.id", ondelete="RESTRICT"), nullable=False
    )
    service_id = Column(String(26), ForeignKey("services.id", ondelete="RESTRICT"), nullable=False)

    start_datetime = Column(DateTime, nullable=False, index=True)
    status = Column(String(20), nullable=False, default=BookingStatus.CONFIRMED.value)

    created_at = Column(DateTime, nullable=False, default=local_now)
    updated_at = Column(DateTime, nullable=True, onupdate=local_now)
    cancelled_at = Column(DateTime, nullable=True)
    cancelled_by_id = Column(String(64), nullable=True)
    deleted_at = Column(DateTime, nullable=True)

    provider = relationship("Provider", back_populates="bookings")
    service = relationship("Service")

    __table_args__ = (
        CheckConstraint("status IN ('confirmed', 'cancelled')", name="ck_bookings_status"),
        Index(
            CONFIRMED_SLOT_INDEX,
            "provider_id",
            "start_datetime",
            unique=True,
            sqlite_where=text("status = 'confirmed'"),
            postgresql_where=text("status = 'confirmed'"),
        ),
        Index("ix_bookings_user_start", "user_id", "start_datetime"),
    )

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        if not self.status:
            self.status = BookingStatus.CONFIRMED.value

    @property
    def is_confirmed(self) -> bool:
        return self.status == BookingStatus.CONFIRMED.value

    def cancel(self, cancelled_by_user_id: str, at: Optional[datetime] = None) -> None:
        """Mark this booking cancelled. State checks belong to the lifecycle."""
        self.status = BookingStatus.CANCELLED.value
        self.cancelled_at = at or local_now()
        self.cancelled_by_id = cancelled_by_user_id
        logger.info("Booking %s cancelled by user %s", self.id, cancelled_by_user_id)

    def __repr__(self) -> str:
        return (
            f"<Booking {self.id}: user={self.user_id}, provider={self.provider_id}, "
            f"start={self.start_datetime}, status={self.status}>"
        )

# slotbook/services/booking_lifecycle.py
"""
Booking lifecycle state machine.

    (none) --create--> CONFIRMED --cancel--> CANCELLED --purge--> PURGED

PURGED is terminal and never persisted (the row is gone). No transition
skips a state, and repeating a transition is a rejection rather than a
no-op.
"""

from enum import Enum
from typing import Dict, Optional, Tuple

from ..core.exceptions import BookingAuthorizationException, BookingStateException
from ..models.booking import Booking, BookingStatus


class BookingState(str, Enum):
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    PURGED = "purged"


class BookingTrigger(str, Enum):
    CREATE = "create"
    CANCEL = "cancel"
    PURGE = "purge"


_TRANSITIONS: Dict[Tuple[Optional[BookingState], BookingTrigger], BookingState] = {
    (None, BookingTrigger.CREATE): BookingState.CONFIRMED,
    (BookingState.CONFIRMED, BookingTrigger.CANCEL): BookingState.CANCELLED,
    (BookingState.CANCELLED, BookingTrigger.PURGE): BookingState.PURGED,
}

_REJECTIONS: Dict[BookingTrigger, str] = {
    BookingTrigger.CREATE: "Booking already exists",
    BookingTrigger.CANCEL: "Booking is already cancelled",
    BookingTrigger.PURGE: "Only cancelled bookings can be deleted",
}


class BookingLifecycle:
    """Validates lifecycle transitions and the actor gate in front of them."""

    @staticmethod
    def state_of(booking: Booking) -> BookingState:
        return BookingState(BookingStatus(booking.status).value)

    @staticmethod
    def transition(current: Optional[BookingState], trigger: BookingTrigger) -> BookingState:
        """Return the next state, or raise BookingStateException."""
        target = _TRANSITIONS.get((current, trigger))
        if target is not None:
            return target

        if current is BookingState.PURGED:
            message = "Booking has been deleted"
        else:
            message = _REJECTIONS[trigger]
        raise BookingStateException(
            message,
            current_state=current.value if current is not None else "none",
            trigger=trigger.value,
        )

    @staticmethod
    def can_modify(booking: Booking, actor_user_id: str, actor_is_admin: bool) -> bool:
        """Admins may modify any booking; users only their own."""
        return actor_is_admin or booking.user_id == actor_user_id

    @classmethod
    def authorize(cls, booking: Booking, actor_user_id: str, actor_is_admin: bool) -> None:
        if not cls.can_modify(booking, actor_user_id, actor_is_admin):
            raise BookingAuthorizationException(str(booking.id), actor_user_id)

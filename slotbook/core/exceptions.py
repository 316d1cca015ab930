# slotbook/core/exceptions.py
"""
Domain-specific exceptions for the slotbook engine.

These exceptions provide clear, business-focused error messages
that can be caught and handled appropriately at the API layer.
Each category maps to one HTTP status through ``to_http_exception``.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status

HTTP_422_UNPROCESSABLE: int = getattr(status, "HTTP_422_UNPROCESSABLE_CONTENT", 422)


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        """Convert to an HTTPException carrying the structured detail payload."""
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ValidationException(DomainException):
    """Raised when input is malformed (bad datetime, missing fields)."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data."""

    status_code = status.HTTP_409_CONFLICT


class BusinessRuleException(DomainException):
    """Raised when a business rule rejects an otherwise well-formed request."""

    status_code = HTTP_422_UNPROCESSABLE


class ForbiddenException(DomainException):
    """Raised when the actor lacks permission for an action."""

    status_code = status.HTTP_403_FORBIDDEN


class ServiceException(DomainException):
    """Raised when a service operation fails."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message or "An error occurred processing your request",
                "code": self.code,
                "details": self.details if self.details else {},
            },
        )


# Booking validation gate


class InvalidDateTimeFormatException(ValidationException):
    """Raised when the requested start cannot be parsed."""

    def __init__(self, raw_value: Any, expected: str = "YYYY-MM-DD HH:MM:SS"):
        super().__init__(
            message=f"Invalid datetime format. Expected format: {expected}",
            code="INVALID_DATETIME_FORMAT",
            details={"value": str(raw_value)},
        )


class ProviderClosedException(BusinessRuleException):
    """Raised when the provider has no working hours on the requested weekday."""

    def __init__(self, weekday: str):
        super().__init__(
            message=f"Provider does not work on {weekday}",
            code="PROVIDER_CLOSED_THAT_DAY",
            details={"weekday": weekday},
        )


class MalformedWorkingHoursException(BusinessRuleException):
    """Raised when a configured day cannot be parsed at booking time."""

    def __init__(self, weekday: str, raw_value: str):
        super().__init__(
            message="Invalid working hours format for provider",
            code="MALFORMED_WORKING_HOURS",
            details={"weekday": weekday, "value": raw_value},
        )


class OutsideWorkingHoursException(BusinessRuleException):
    """Raised when the requested start is before opening or at/after closing."""

    def __init__(self, window: str):
        super().__init__(
            message=f"Booking time is outside provider working hours ({window})",
            code="OUTSIDE_WORKING_HOURS",
            details={"working_hours": window},
        )


class ServiceExceedsWorkingHoursException(BusinessRuleException):
    """Raised when the service would still be running at closing time."""

    def __init__(self, window: str, duration_minutes: int):
        super().__init__(
            message="Service duration extends beyond provider closing time",
            code="SERVICE_EXCEEDS_WORKING_HOURS",
            details={"working_hours": window, "duration_minutes": duration_minutes},
        )


# Booking ledger and lifecycle


class SlotAlreadyBookedException(ConflictException):
    """Raised when a confirmed booking already holds the provider/start key."""

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message or "Slot already booked",
            code="SLOT_ALREADY_BOOKED",
            details=details or {},
        )


class BookingStateException(BusinessRuleException):
    """Raised when a lifecycle transition is not allowed from the current state."""

    def __init__(self, message: str, *, current_state: str, trigger: str):
        super().__init__(
            message=message,
            code="BOOKING_STATE",
            details={"current_state": current_state, "trigger": trigger},
        )


class BookingAuthorizationException(ForbiddenException):
    """Raised when the actor is neither an admin nor the booking's owner."""

    def __init__(self, booking_id: str, actor_user_id: str):
        super().__init__(
            message="You are not allowed to modify this booking",
            code="BOOKING_FORBIDDEN",
            details={"booking_id": booking_id, "actor_user_id": actor_user_id},
        )


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    This exception is used when data access operations fail,
    such as database connection issues, query failures, or
    constraint violations other than the booking slot key.
    """

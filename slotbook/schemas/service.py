# slotbook/schemas/service.py
"""Service schemas."""

from datetime import datetime

from pydantic import Field

from ..core.constants import (
    MAX_NAME_LENGTH,
    MAX_SERVICE_DURATION,
    MIN_NAME_LENGTH,
    MIN_SERVICE_DURATION,
)
from ._strict_base import StrictModel, StrictRequestModel


class ServiceCreate(StrictRequestModel):
    name: str = Field(..., min_length=MIN_NAME_LENGTH, max_length=MAX_NAME_LENGTH)
    duration_minutes: int = Field(
        ...,
        strict=True,
        ge=MIN_SERVICE_DURATION,
        le=MAX_SERVICE_DURATION,
        description="Length of one booking in minutes",
    )


class ServiceResponse(StrictModel):
    id: str
    name: str
    duration_minutes: int
    created_at: datetime

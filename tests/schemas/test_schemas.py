from datetime import datetime

import pytest
from pydantic import ValidationError

from slotbook.models import Booking
from slotbook.schemas import BookingCreate, BookingResponse, ProviderCreate, ServiceCreate


class TestRequestSchemas:
    def test_provider_create_drops_closed_days(self):
        payload = ProviderCreate(
            name="Dana", working_hours={"Sunday": "", "monday": " 09:00-17:00 "}
        )
        assert payload.working_hours == {"monday": "09:00-17:00"}

    def test_provider_create_error_lists_fields(self):
        with pytest.raises(ValidationError) as exc_info:
            ProviderCreate(name="Dana", working_hours={"monday": "09:00-24:00"})
        assert "monday" in str(exc_info.value)

    def test_blank_names_are_rejected(self):
        with pytest.raises(ValidationError):
            ServiceCreate(name="   ", duration_minutes=30)

    def test_booking_create_keeps_raw_start(self):
        payload = BookingCreate(provider_id="p", service_id="s", start_datetime="tomorrow")
        assert payload.start_datetime == "tomorrow"


class TestBookingResponse:
    def test_serializes_start_in_wire_format(self):
        booking = Booking(
            id="01JABCDEFGHJKMNPQRSTVWXYZ0",
            user_id="user-1",
            provider_id="01JPROVIDERAAAAAAAAAAAAAAA",
            service_id="01JSERVICEAAAAAAAAAAAAAAAA",
            start_datetime=datetime(2026, 10, 19, 9, 30),
            created_at=datetime(2026, 10, 1, 8, 0),
        )
        data = BookingResponse.model_validate(booking).model_dump()
        assert data["start_datetime"] == "2026-10-19 09:30:00"
        assert data["status"] == "confirmed"

from datetime import date, time
from decimal import Decimal

from pydantic import ValidationError
import pytest

from salon_booking.schemas.booking import (
    BookingCancel,
    BookingCreate,
    BookingStatusUpdate,
    StylistSummary,
)
from salon_booking.schemas.customer import CustomerProfileUpdate


class TestBookingCreate:
    def test_parses_date_and_hh_mm(self):
        data = BookingCreate(
            service_ids=["a", "b"], booking_date="2030-01-02", start_time="09:30", notes="  hi  "
        )
        assert data.booking_date == date(2030, 1, 2)
        assert data.start_time == time(9, 30)
        assert data.notes == "hi"
        assert data.stylist_id is None

    def test_blank_notes_become_none(self):
        data = BookingCreate(service_ids=["a"], booking_date="2030-01-02", start_time="09:30", notes="   ")
        assert data.notes is None

    def test_empty_service_list_rejected(self):
        with pytest.raises(ValidationError):
            BookingCreate(service_ids=[], booking_date="2030-01-02", start_time="09:30")

    def test_blank_service_ids_rejected(self):
        with pytest.raises(ValidationError):
            BookingCreate(service_ids=[" "], booking_date="2030-01-02", start_time="09:30")

    def test_datetime_string_rejected_for_date(self):
        with pytest.raises(ValidationError):
            BookingCreate(service_ids=["a"], booking_date="2030-01-02T10:00", start_time="09:30")

    def test_bad_time_rejected(self):
        with pytest.raises(ValidationError):
            BookingCreate(service_ids=["a"], booking_date="2030-01-02", start_time="25:00")

    def test_end_time_cannot_be_supplied(self):
        with pytest.raises(ValidationError):
            BookingCreate(
                service_ids=["a"], booking_date="2030-01-02", start_time="09:30", end_time="10:00"
            )


def test_status_update_lowercases():
    assert BookingStatusUpdate(status=" Confirmed ").status == "confirmed"


def test_cancel_reason_optional():
    assert BookingCancel().reason is None
    assert BookingCancel(reason=" moved ").reason == "moved"


def test_profile_update_tracks_set_fields():
    update = CustomerProfileUpdate(phone=None, address="1 Main St")
    assert update.model_dump(exclude_unset=True) == {"phone": None, "address": "1 Main St"}


def test_profile_update_forbids_loyalty_fields():
    with pytest.raises(ValidationError):
        CustomerProfileUpdate(loyalty_points=1000)


class TestStylistSummary:
    def test_rating_is_a_score(self):
        summary = StylistSummary(id="s1", name="Dana", rating=Decimal("4.75"))
        assert summary.rating == Decimal("4.75")
        assert summary.model_dump()["rating"] == Decimal("4.75")

    def test_rating_above_five_rejected(self):
        with pytest.raises(ValidationError):
            StylistSummary(id="s1", name="Dana", rating=Decimal("7"))

# salon_booking/schemas/booking.py
"""
Booking schemas for the salon booking backend.

Request models are the typed boundary structs: they list only the
fields a caller may set. Response models are built from ORM rows plus
the line items fetched for them in a separate batched query.
"""

from datetime import date, datetime, time
from decimal import Decimal
import re
from typing import Iterable, List, Optional

from pydantic import Field, field_validator

from ..models.booking import Booking, BookingLineItem, BookingStatus
from ._strict_base import StrictRequestModel
from .base import Money, StandardizedModel

DATE_ONLY_REGEX = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _ensure_date_only(value: object, field_name: str) -> object:
    if isinstance(value, str):
        candidate = value.strip()
        if not DATE_ONLY_REGEX.fullmatch(candidate):
            raise ValueError(f"{field_name} must be a YYYY-MM-DD date-only string")
        return candidate
    return value


def parse_time_string(value: object) -> object:
    """Accept ``HH:MM`` (or ``HH:MM:SS``) strings as well as ``time`` objects."""
    if isinstance(value, str):
        try:
            parts = [int(part) for part in value.strip().split(":")]
            if len(parts) not in (2, 3):
                raise ValueError(value)
            return time(*parts)
        except (ValueError, TypeError):
            raise ValueError(f"Invalid time format: {value}. Expected HH:MM format.")
    return value


class BookingCreate(StrictRequestModel):
    """
    Create a booking for one or more services.

    ``end_time`` and ``total_price`` are not accepted here; they are
    derived from the selected services when the booking is persisted.
    """

    service_ids: List[str] = Field(..., min_length=1, description="Services to book")
    stylist_id: Optional[str] = Field(None, description="Preferred stylist, if any")
    booking_date: date = Field(..., description="Date of the appointment")
    start_time: time = Field(..., description="Start time (HH:MM)")
    notes: Optional[str] = Field(None, max_length=1000)

    @field_validator("booking_date", mode="before")
    @classmethod
    def _enforce_date_only(cls, v: object) -> object:
        return _ensure_date_only(v, "booking_date")

    @field_validator("start_time", mode="before")
    @classmethod
    def _parse_start_time(cls, v: object) -> object:
        return parse_time_string(v)

    @field_validator("service_ids")
    @classmethod
    def _clean_service_ids(cls, v: List[str]) -> List[str]:
        cleaned = [sid.strip() for sid in v if sid and sid.strip()]
        if not cleaned:
            raise ValueError("At least one service must be selected")
        return cleaned

    @field_validator("notes")
    @classmethod
    def clean_notes(cls, v: Optional[str]) -> Optional[str]:
        return v or None


class BookingStatusUpdate(StrictRequestModel):
    """
    Admin status change.

    ``status`` is kept as a plain string: whether it is an acceptable
    target is decided by the status flow, which reports an invalid
    transition rather than a schema error.
    """

    status: str = Field(..., min_length=1, max_length=20)
    stylist_id: Optional[str] = None

    @field_validator("status")
    @classmethod
    def _lower(cls, v: str) -> str:
        return v.lower()


class BookingCancel(StrictRequestModel):
    """Schema for cancelling a booking."""

    reason: Optional[str] = Field(None, max_length=500, description="Cancellation reason")

    @field_validator("reason")
    @classmethod
    def clean_reason(cls, v: Optional[str]) -> Optional[str]:
        return v or None


class BookingServiceLine(StandardizedModel):
    """A booked service with the price charged for it."""

    service_id: str
    name: str
    duration: int
    price: Money

    @classmethod
    def from_line_item(cls, item: BookingLineItem) -> "BookingServiceLine":
        return cls(
            service_id=item.service_id,
            name=item.service.name,
            duration=item.service.duration,
            price=item.price,
        )


class CustomerInfo(StandardizedModel):
    id: str
    name: str
    email: str
    phone: Optional[str] = None


class StylistInfo(StandardizedModel):
    id: str
    name: str
    specialization: Optional[str] = None


class BookingDetail(StandardizedModel):
    """A booking with its customer, stylist and services."""

    id: str
    customer_id: str
    stylist_id: Optional[str] = None
    booking_date: date
    start_time: time
    end_time: time
    status: BookingStatus
    total_price: Money
    notes: Optional[str] = None
    cancellation_reason: Optional[str] = None
    created_at: Optional[datetime] = None

    customer: Optional[CustomerInfo] = None
    stylist: Optional[StylistInfo] = None
    services: List[BookingServiceLine] = Field(default_factory=list)

    @classmethod
    def from_booking(
        cls, booking: Booking, line_items: Iterable[BookingLineItem] = ()
    ) -> "BookingDetail":
        customer = None
        if booking.customer is not None and booking.customer.user is not None:
            user = booking.customer.user
            customer = CustomerInfo(
                id=booking.customer.id, name=user.name, email=user.email, phone=user.phone
            )
        stylist = None
        if booking.stylist is not None and booking.stylist.user is not None:
            stylist = StylistInfo(
                id=booking.stylist.id,
                name=booking.stylist.user.name,
                specialization=booking.stylist.specialization,
            )
        return cls(
            id=booking.id,
            customer_id=booking.customer_id,
            stylist_id=booking.stylist_id,
            booking_date=booking.booking_date,
            start_time=booking.start_time,
            end_time=booking.end_time,
            status=booking.status,
            total_price=booking.total_price,
            notes=booking.notes,
            cancellation_reason=booking.cancellation_reason,
            created_at=booking.created_at,
            customer=customer,
            stylist=stylist,
            services=[BookingServiceLine.from_line_item(item) for item in line_items],
        )


class BookingListResponse(StandardizedModel):
    """One page of a customer's bookings."""

    bookings: List[BookingDetail]
    total: int
    page: int
    per_page: int

    @property
    def total_pages(self) -> int:
        """Calculate total number of pages."""
        return (self.total + self.per_page - 1) // self.per_page


class StylistSummary(StandardizedModel):
    """Bookable stylist as shown to customers."""

    id: str
    name: str
    specialization: Optional[str] = None
    experience_years: int = 0
    rating: Decimal = Field(default=Decimal("0"), ge=0, le=5)
    total_reviews: int = 0

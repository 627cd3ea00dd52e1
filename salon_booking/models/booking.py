# salon_booking/models/booking.py
"""
Booking model for the salon.

A booking holds its own date and time window. ``end_time`` is derived
from the selected services when the booking is created and is never
edited on its own. The services are snapshotted in ``booking_services``
line items so later catalog price changes leave the booking untouched.
"""

from enum import Enum

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Numeric,
    String,
    Text,
    Time,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..core.ulid_helper import generate_ulid
from ..database import Base


class BookingStatus(str, Enum):
    """Booking lifecycle statuses."""

    PENDING = "pending"  # Default - awaiting salon confirmation
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"  # Customer didn't attend


# Statuses that free the stylist's time window again.
INACTIVE_STATUSES = (BookingStatus.CANCELLED.value, BookingStatus.NO_SHOW.value)

# Statuses that count towards the membership tier.
TIER_COUNTED_STATUSES = (BookingStatus.CONFIRMED.value, BookingStatus.COMPLETED.value)


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)

    customer_id = Column(String(26), ForeignKey("customers.id"), nullable=False, index=True)
    stylist_id = Column(String(26), ForeignKey("stylists.id"), nullable=True)

    booking_date = Column(Date, nullable=False, index=True)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)

    status = Column(String(20), nullable=False, default=BookingStatus.PENDING.value, index=True)
    total_price = Column(Numeric(12, 2), nullable=False)
    notes = Column(Text, nullable=True)
    cancellation_reason = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    customer = relationship("Customer", back_populates="bookings")
    stylist = relationship("Stylist", back_populates="bookings")
    # Read paths load line items in one batched query; see BookingRepository.
    line_items = relationship(
        "BookingLineItem",
        back_populates="booking",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="raise",
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'completed', 'cancelled', 'no_show')",
            name="ck_bookings_status",
        ),
        CheckConstraint("total_price >= 0", name="ck_bookings_total_price"),
        CheckConstraint("end_time > start_time", name="ck_bookings_time_order"),
        Index("ix_bookings_stylist_date", "stylist_id", "booking_date"),
    )

    def __repr__(self) -> str:
        return (
            f"<Booking {self.id} {self.booking_date} "
            f"{self.start_time}-{self.end_time} {self.status}>"
        )


class BookingLineItem(Base):
    """One booked service with the price it had when the booking was made."""

    __tablename__ = "booking_services"

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)
    booking_id = Column(
        String(26), ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    service_id = Column(String(26), ForeignKey("services.id"), nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    booking = relationship("Booking", back_populates="line_items")
    service = relationship("Service")

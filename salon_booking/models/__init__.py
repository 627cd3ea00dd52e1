"""
Database models for the salon booking backend.

- User: owning identity for customers and stylists
- Customer: profile plus loyalty points and membership tier
- ServiceCategory / Service: the bookable catalog
- Stylist: staff that bookings can be assigned to
- Booking / BookingLineItem: appointments and their service snapshots
"""

from .booking import (
    INACTIVE_STATUSES,
    TIER_COUNTED_STATUSES,
    Booking,
    BookingLineItem,
    BookingStatus,
)
from .customer import Customer, MembershipTier
from .service import Service, ServiceCategory
from .stylist import Stylist
from .user import User, UserRole

__all__ = [
    "Booking",
    "BookingLineItem",
    "BookingStatus",
    "Customer",
    "INACTIVE_STATUSES",
    "MembershipTier",
    "Service",
    "ServiceCategory",
    "Stylist",
    "TIER_COUNTED_STATUSES",
    "User",
    "UserRole",
]

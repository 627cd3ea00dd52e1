"""
Pydantic schemas for the salon booking backend.

Request models forbid unknown fields; response models read from ORM rows.
"""

from .booking import (
    BookingCancel,
    BookingCreate,
    BookingDetail,
    BookingListResponse,
    BookingServiceLine,
    BookingStatusUpdate,
    CustomerInfo,
    StylistInfo,
    StylistSummary,
)
from .customer import CustomerProfile, CustomerProfileUpdate

__all__ = [
    "BookingCancel",
    "BookingCreate",
    "BookingDetail",
    "BookingListResponse",
    "BookingServiceLine",
    "BookingStatusUpdate",
    "CustomerInfo",
    "CustomerProfile",
    "CustomerProfileUpdate",
    "StylistInfo",
    "StylistSummary",
]

# salon_booking/schemas/customer.py
"""Customer profile schemas."""

from datetime import date
from typing import Optional

from pydantic import Field

from ..models.customer import MembershipTier
from ._strict_base import StrictRequestModel
from .base import StandardizedModel

# Fields of CustomerProfileUpdate stored on the owning user rather than the customer row.
USER_PROFILE_FIELDS = frozenset({"name", "phone"})


class CustomerProfileUpdate(StrictRequestModel):
    """
    Mutable profile fields.

    Only fields present in the request are written; an omitted field is
    left untouched while an explicit ``null`` clears it (except ``name``,
    which cannot be cleared).
    """

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = Field(None, max_length=500)
    date_of_birth: Optional[date] = None
    gender: Optional[str] = Field(None, max_length=20)
    preferences: Optional[str] = Field(None, max_length=1000)


class CustomerProfile(StandardizedModel):
    id: str
    user_id: str
    name: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    preferences: Optional[str] = None
    loyalty_points: int
    membership_tier: MembershipTier
    confirmed_bookings: int = Field(0, description="Confirmed plus completed bookings")

# salon_booking/models/customer.py
"""
Customer profile with loyalty state.

A customer row is created lazily the first time an authenticated user
books or opens their profile. ``loyalty_points`` and ``membership_tier``
are written only by the booking status flow and the profile read path.
"""

from enum import Enum

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..core.ulid_helper import generate_ulid
from ..database import Base


class MembershipTier(str, Enum):
    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"


class Customer(Base):
    __tablename__ = "customers"

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)
    user_id = Column(String(26), ForeignKey("users.id"), nullable=False, unique=True, index=True)

    address = Column(Text, nullable=True)
    date_of_birth = Column(Date, nullable=True)
    gender = Column(String(20), nullable=True)
    preferences = Column(Text, nullable=True)

    loyalty_points = Column(Integer, nullable=False, default=0)
    membership_tier = Column(String(10), nullable=False, default=MembershipTier.BRONZE.value)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User", back_populates="customer")
    bookings = relationship("Booking", back_populates="customer")

    __table_args__ = (
        CheckConstraint("loyalty_points >= 0", name="ck_customers_loyalty_points"),
        CheckConstraint(
            "membership_tier IN ('bronze', 'silver', 'gold')",
            name="ck_customers_membership_tier",
        ),
    )

    def __repr__(self) -> str:
        return f"<Customer {self.id} tier={self.membership_tier} points={self.loyalty_points}>"

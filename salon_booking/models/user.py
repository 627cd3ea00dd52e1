# salon_booking/models/user.py
"""
User model: the identity that owns a customer or stylist profile.

Authentication and token issuance live outside this package; bookings
only need to know who a user is and whether the account is active.
"""

from enum import Enum

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..core.ulid_helper import generate_ulid
from ..database import Base


class UserRole(str, Enum):
    CUSTOMER = "customer"
    STYLIST = "stylist"
    ADMIN = "admin"


class User(Base):
    __tablename__ = "users"

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)
    email = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(100), nullable=False)
    phone = Column(String(20), nullable=True)
    role = Column(String(20), nullable=False, default=UserRole.CUSTOMER.value)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    customer = relationship("Customer", back_populates="user", uselist=False)
    stylist = relationship("Stylist", back_populates="user", uselist=False)

    __table_args__ = (
        CheckConstraint("role IN ('customer', 'stylist', 'admin')", name="ck_users_role"),
    )

    def __repr__(self) -> str:
        return f"<User {self.email} ({self.role})>"

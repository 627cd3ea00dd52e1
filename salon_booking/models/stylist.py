# salon_booking/models/stylist.py
"""Stylist profile owned by a user."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..core.ulid_helper import generate_ulid
from ..database import Base


class Stylist(Base):
    __tablename__ = "stylists"

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)
    user_id = Column(String(26), ForeignKey("users.id"), nullable=False, unique=True)
    specialization = Column(String(150), nullable=True)
    experience_years = Column(Integer, nullable=False, default=0)
    is_available = Column(Boolean, nullable=False, default=True)
    rating = Column(Numeric(3, 2), nullable=False, default=0)
    total_reviews = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User", back_populates="stylist")
    bookings = relationship("Booking", back_populates="stylist")

    @property
    def can_take_bookings(self) -> bool:
        """Available flag set and the owning account still active."""
        return bool(self.is_available and self.user is not None and self.user.is_active)

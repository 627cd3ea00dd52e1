# salon_booking/models/service.py
"""
Service catalog: what a customer can book, with its price and duration.

Bookings copy the price into their line items at creation time, so later
edits to a service never change an existing booking.
"""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..core.ulid_helper import generate_ulid
from ..database import Base


class ServiceCategory(Base):
    __tablename__ = "service_categories"

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)
    name = Column(String(100), nullable=False, unique=True)

    services = relationship("Service", back_populates="category")


class Service(Base):
    __tablename__ = "services"

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)
    name = Column(String(150), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(12, 2), nullable=False)
    duration = Column(Integer, nullable=False)  # minutes
    category_id = Column(String(26), ForeignKey("service_categories.id"), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    category = relationship("ServiceCategory", back_populates="services")

    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_services_price_non_negative"),
        CheckConstraint("duration > 0", name="ck_services_duration_positive"),
    )

    def __repr__(self) -> str:
        return f"<Service {self.name} {self.price} / {self.duration}min>"

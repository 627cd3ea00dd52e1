# tests/conftest.py
"""
Shared fixtures.

Integration tests get a fresh SQLite database file per test under
``tmp_path``. Factory fixtures commit what they create, so services under
test start from a clean transaction.
"""

import os

os.environ.setdefault("CI", "true")

from decimal import Decimal
from typing import Callable, Optional

import pytest
from sqlalchemy.orm import Session

from salon_booking.core.config import Settings
from salon_booking.database import create_db_engine, create_session_factory, init_db
from salon_booking.models import Customer, Service, ServiceCategory, Stylist, User, UserRole


@pytest.fixture
def test_settings() -> Settings:
    return Settings(DB_POOL_TIMEOUT=15)


@pytest.fixture
def engine(tmp_path, test_settings):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'salon.db'}", config=test_settings)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def db(session_factory) -> Session:
    """A session for the test body. Closed (and rolled back) afterwards."""
    session = session_factory()
    yield session
    session.rollback()
    session.close()


_counter = {"n": 0}


def _next() -> int:
    _counter["n"] += 1
    return _counter["n"]


@pytest.fixture
def make_user(db: Session) -> Callable[..., User]:
    def _make(
        name: Optional[str] = None,
        role: str = UserRole.CUSTOMER.value,
        is_active: bool = True,
        phone: Optional[str] = None,
        email: Optional[str] = None,
    ) -> User:
        n = _next()
        user = User(
            email=email or f"user{n}@example.com",
            name=name or f"User {n}",
            phone=phone,
            role=role,
            is_active=is_active,
        )
        db.add(user)
        db.commit()
        return user

    return _make


@pytest.fixture
def make_customer(db: Session, make_user) -> Callable[..., Customer]:
    def _make(user: Optional[User] = None, **fields) -> Customer:
        user = user or make_user()
        customer = Customer(
            user_id=user.id,
            loyalty_points=fields.pop("loyalty_points", 0),
            membership_tier=fields.pop("membership_tier", "bronze"),
            **fields,
        )
        db.add(customer)
        db.commit()
        return customer

    return _make


@pytest.fixture
def make_stylist(db: Session, make_user) -> Callable[..., Stylist]:
    def _make(
        name: Optional[str] = None,
        is_available: bool = True,
        user_active: bool = True,
        rating: str = "4.50",
        total_reviews: int = 10,
        specialization: Optional[str] = "Color",
    ) -> Stylist:
        user = make_user(name=name, role=UserRole.STYLIST.value, is_active=user_active)
        stylist = Stylist(
            user_id=user.id,
            specialization=specialization,
            experience_years=5,
            is_available=is_available,
            rating=Decimal(rating),
            total_reviews=total_reviews,
        )
        db.add(stylist)
        db.commit()
        return stylist

    return _make


@pytest.fixture
def make_service(db: Session) -> Callable[..., Service]:
    category = {}

    def _make(
        price: str = "50000", duration: int = 60, is_active: bool = True, name: Optional[str] = None
    ) -> Service:
        if "hair" not in category:
            hair = ServiceCategory(name="Hair")
            db.add(hair)
            db.flush()
            category["hair"] = hair
        service = Service(
            name=name or f"Service {_next()}",
            price=Decimal(price),
            duration=duration,
            category_id=category["hair"].id,
            is_active=is_active,
        )
        db.add(service)
        db.commit()
        return service

    return _make

# salon_booking/repositories/customer_repository.py
"""Customer Repository: profile lookup, lazy creation and loyalty writes."""

import logging
from typing import Any, Dict, Optional, Sequence

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.booking import Booking
from ..models.customer import Customer, MembershipTier
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class CustomerRepository(BaseRepository[Customer]):
    def __init__(self, db: Session):
        super().__init__(db, Customer)
        self.logger = logging.getLogger(__name__)

    def get_by_user_id(self, user_id: str) -> Optional[Customer]:
        return self.find_one_by(user_id=user_id)

    def get_or_create_for_user(self, user_id: str) -> Customer:
        """
        Return the user's customer row, creating a bronze/0-point one if absent.

        A concurrent first request for the same user trips the unique
        ``user_id`` constraint; the IntegrityError propagates and the
        caller's transaction rolls back.
        """
        customer = self.get_by_user_id(user_id)
        if customer is not None:
            return customer

        customer = self.create(
            user_id=user_id,
            loyalty_points=0,
            membership_tier=MembershipTier.BRONZE.value,
        )
        self.logger.info("Created customer profile for user %s", user_id)
        return customer

    def credit_loyalty_points(self, customer_id: str, points: int) -> None:
        """Atomically add ``points`` (never negative) to the customer's balance."""
        if points < 0:
            raise ValueError("Loyalty points can only be credited, not debited")
        if points == 0:
            return
        try:
            self.db.query(Customer).filter(Customer.id == customer_id).update(
                {Customer.loyalty_points: Customer.loyalty_points + points},
                synchronize_session="fetch",
            )
            self.db.flush()
        except SQLAlchemyError as e:
            self.logger.error(f"Error crediting points to {customer_id}: {str(e)}")
            raise RepositoryException(f"Failed to credit loyalty points: {str(e)}") from e

    def set_membership_tier(self, customer: Customer, tier: MembershipTier) -> None:
        customer.membership_tier = tier.value
        self.flush()

    def count_bookings_with_status(self, customer_id: str, statuses: Sequence[str]) -> int:
        query = self.db.query(func.count(Booking.id)).filter(
            Booking.customer_id == customer_id,
            Booking.status.in_(list(statuses)),
        )
        return int(self._execute_scalar(query) or 0)

    def apply_profile_fields(self, customer: Customer, fields: Dict[str, Any]) -> Customer:
        """Write the given profile columns; callers pass only validated, mutable fields."""
        for key, value in fields.items():
            setattr(customer, key, value)
        self.flush()
        return customer

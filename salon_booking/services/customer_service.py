# salon_booking/services/customer_service.py
"""
Customer profile access.

Customer rows are created lazily for authenticated users. Reading a
profile recounts the customer's confirmed and completed bookings and
repairs a membership tier that drifted from that count.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..core.exceptions import NotFoundException, ValidationException
from ..models.booking import TIER_COUNTED_STATUSES
from ..models.customer import Customer
from ..models.user import User
from ..repositories import RepositoryFactory
from ..repositories.customer_repository import CustomerRepository
from ..schemas.customer import USER_PROFILE_FIELDS, CustomerProfile, CustomerProfileUpdate
from .base import BaseService
from .membership import tier_for

logger = logging.getLogger(__name__)


class CustomerService(BaseService):
    def __init__(self, db: Session, repository: Optional[CustomerRepository] = None):
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_customer_repository(db)
        self.user_repository = RepositoryFactory.create_base_repository(db, User)

    def ensure_customer(self, user_id: str) -> Customer:
        """
        Return the user's customer row, creating it if absent.

        Runs inside the caller's transaction and never commits.

        Raises:
            NotFoundException: If the user does not exist
        """
        customer = self.repository.get_by_user_id(user_id)
        if customer is not None:
            return customer
        if self.user_repository.get_by_id(user_id) is None:
            raise NotFoundException("User not found", details={"user_id": user_id})
        return self.repository.get_or_create_for_user(user_id)

    @BaseService.measure_operation("get_or_create_customer")
    def get_or_create_customer(self, user_id: str) -> Customer:
        with self.transaction():
            return self.ensure_customer(user_id)

    @BaseService.measure_operation("get_profile")
    def get_profile(self, user_id: str) -> CustomerProfile:
        """Profile with a freshly counted tier; a drifted tier is corrected and saved."""
        with self.transaction():
            customer = self.ensure_customer(user_id)
            return self._build_profile(customer)

    @BaseService.measure_operation("update_profile")
    def update_profile(self, user_id: str, update: CustomerProfileUpdate) -> CustomerProfile:
        """
        Write the fields set on ``update``.

        ``name`` and ``phone`` live on the owning user; the rest on the
        customer row.
        """
        fields = update.model_dump(exclude_unset=True)
        if "name" in fields and fields["name"] is None:
            raise ValidationException("name cannot be cleared")
        self.log_operation("update_profile", user_id=user_id, fields=sorted(fields))

        with self.transaction():
            customer = self.ensure_customer(user_id)
            user_fields = {k: v for k, v in fields.items() if k in USER_PROFILE_FIELDS}
            customer_fields = {k: v for k, v in fields.items() if k not in USER_PROFILE_FIELDS}
            if user_fields:
                user = customer.user
                for key, value in user_fields.items():
                    setattr(user, key, value)
            if customer_fields or user_fields:
                self.repository.apply_profile_fields(customer, customer_fields)
            return self._build_profile(customer)

    def _build_profile(self, customer: Customer) -> CustomerProfile:
        count = self.repository.count_bookings_with_status(customer.id, TIER_COUNTED_STATUSES)
        tier = tier_for(count)
        if customer.membership_tier != tier.value:
            self.logger.info(
                f"Correcting membership tier of customer {customer.id}: "
                f"{customer.membership_tier} -> {tier.value}"
            )
            self.repository.set_membership_tier(customer, tier)

        user = customer.user
        return CustomerProfile(
            id=customer.id,
            user_id=customer.user_id,
            name=user.name,
            email=user.email,
            phone=user.phone,
            address=customer.address,
            date_of_birth=customer.date_of_birth,
            gender=customer.gender,
            preferences=customer.preferences,
            loyalty_points=customer.loyalty_points or 0,
            membership_tier=tier,
            confirmed_bookings=count,
        )

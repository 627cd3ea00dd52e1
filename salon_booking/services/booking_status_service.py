# salon_booking/services/booking_status_service.py
"""
Booking status transitions and their loyalty side effects.

    pending   -> confirmed | cancelled
    confirmed -> completed | cancelled | no_show
    completed, cancelled, no_show are terminal

A transition into ``completed`` credits loyalty points. A transition into
``confirmed`` or ``completed`` recomputes the customer's membership tier.
Status, points and tier are written in one transaction.
"""

import logging
from typing import Dict, FrozenSet, Optional

from sqlalchemy.orm import Session

from ..core.config import Settings, settings as default_settings
from ..core.exceptions import (
    BookingConflictException,
    InvalidTransitionException,
    NotFoundException,
    ValidationException,
)
from ..models.booking import INACTIVE_STATUSES, TIER_COUNTED_STATUSES, Booking, BookingStatus
from ..models.customer import MembershipTier
from ..repositories import RepositoryFactory
from ..repositories.booking_repository import BookingRepository
from .availability_checker import AvailabilityChecker
from .base import BaseService
from .membership import loyalty_points_for, tier_for

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    BookingStatus.PENDING.value: frozenset(
        {BookingStatus.CONFIRMED.value, BookingStatus.CANCELLED.value}
    ),
    BookingStatus.CONFIRMED.value: frozenset(
        {
            BookingStatus.COMPLETED.value,
            BookingStatus.CANCELLED.value,
            BookingStatus.NO_SHOW.value,
        }
    ),
    BookingStatus.COMPLETED.value: frozenset(),
    BookingStatus.CANCELLED.value: frozenset(),
    BookingStatus.NO_SHOW.value: frozenset(),
}

# Targets accepted by update_status. no_show is a stored state but cannot be set here.
SETTABLE_STATUSES: FrozenSet[str] = frozenset(
    {
        BookingStatus.PENDING.value,
        BookingStatus.CONFIRMED.value,
        BookingStatus.COMPLETED.value,
        BookingStatus.CANCELLED.value,
    }
)


def _status_value(status) -> str:
    return status.value if isinstance(status, BookingStatus) else str(status)


def allowed_transitions(status) -> FrozenSet[str]:
    """Statuses reachable in one step from ``status`` (empty for terminal or unknown)."""
    return ALLOWED_TRANSITIONS.get(_status_value(status), frozenset())


def can_transition(current, target) -> bool:
    return _status_value(target) in allowed_transitions(current)


class BookingStatusService(BaseService):
    """Applies salon-side status changes to bookings."""

    def __init__(
        self,
        db: Session,
        repository: Optional[BookingRepository] = None,
        availability_checker: Optional[AvailabilityChecker] = None,
        config: Optional[Settings] = None,
    ):
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_booking_repository(db)
        self.availability_checker = availability_checker or AvailabilityChecker(db)
        self.customer_repository = RepositoryFactory.create_customer_repository(db)
        self.stylist_repository = RepositoryFactory.create_stylist_repository(db)
        self.config = config or default_settings

    @BaseService.measure_operation("update_status")
    def update_status(
        self, booking_id: str, new_status, stylist_id: Optional[str] = None
    ) -> Booking:
        """
        Move a booking to ``new_status``, optionally (re)assigning a stylist.

        Args:
            booking_id: Booking to update
            new_status: pending, confirmed, completed or cancelled
            stylist_id: Stylist to assign; ``None`` keeps the current one

        Returns:
            The updated booking

        Raises:
            InvalidTransitionException: If ``new_status`` is not accepted or
                not reachable from the current status
            NotFoundException: If the booking or the stylist does not exist
            BookingConflictException: If the assigned stylist is already
                booked in the booking's time window
        """
        target = _status_value(new_status).strip().lower()
        self.log_operation(
            "update_status", booking_id=booking_id, new_status=target, stylist_id=stylist_id
        )
        if target not in SETTABLE_STATUSES:
            raise InvalidTransitionException(None, target)

        with self.transaction():
            booking = self.repository.get_for_update(booking_id)
            if booking is None:
                raise NotFoundException("Booking not found", details={"booking_id": booking_id})

            previous = booking.status
            if not can_transition(previous, target):
                raise InvalidTransitionException(previous, target)

            if stylist_id is not None and stylist_id != booking.stylist_id:
                self._check_stylist_assignment(booking, stylist_id, target)

            self.repository.set_status(booking, target, stylist_id=stylist_id)

            if target == BookingStatus.COMPLETED.value:
                self._credit_loyalty_points(booking)

            if target in TIER_COUNTED_STATUSES:
                self._recompute_membership_tier(booking.customer_id)

        self.logger.info(f"Booking {booking_id} status changed: {previous} -> {target}")
        return booking

    def _check_stylist_assignment(self, booking: Booking, stylist_id: str, target: str) -> None:
        stylist = self.stylist_repository.lock_for_booking(stylist_id)
        if stylist is None:
            raise NotFoundException("Stylist not found", details={"stylist_id": stylist_id})
        if not stylist.can_take_bookings:
            raise ValidationException("Stylist is not available", details={"stylist_id": stylist_id})
        if target in INACTIVE_STATUSES:
            return
        conflicts = self.availability_checker.find_conflicts(
            stylist_id,
            booking.booking_date,
            booking.start_time,
            booking.end_time,
            exclude_booking_id=booking.id,
        )
        if conflicts:
            raise BookingConflictException(
                details={"stylist_id": stylist_id, "booking_id": booking.id, "conflicts": conflicts}
            )

    def _credit_loyalty_points(self, booking: Booking) -> None:
        points = loyalty_points_for(booking.total_price, self.config.loyalty_points_divisor)
        self.customer_repository.credit_loyalty_points(booking.customer_id, points)
        self.logger.info(
            f"Credited {points} loyalty points to customer {booking.customer_id} for booking {booking.id}"
        )

    def _recompute_membership_tier(self, customer_id: str) -> MembershipTier:
        customer = self.customer_repository.get_by_id(customer_id)
        if customer is None:
            raise NotFoundException("Customer not found", details={"customer_id": customer_id})
        count = self.customer_repository.count_bookings_with_status(
            customer_id, TIER_COUNTED_STATUSES
        )
        tier = tier_for(count)
        if customer.membership_tier != tier.value:
            self.logger.info(
                f"Customer {customer_id} membership tier {customer.membership_tier} -> {tier.value}"
            )
            self.customer_repository.set_membership_tier(customer, tier)
        return tier

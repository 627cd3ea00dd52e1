"""
Status transition table and BookingStatusService with mocked stores.
"""

from datetime import date, time
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from salon_booking.core.exceptions import (
    BookingConflictException,
    InvalidTransitionException,
    NotFoundException,
)
from salon_booking.models.booking import BookingStatus
from salon_booking.models.customer import MembershipTier
from salon_booking.services.booking_status_service import (
    BookingStatusService,
    allowed_transitions,
    can_transition,
)


class TestTransitionTable:
    def test_pending_targets(self):
        assert allowed_transitions("pending") == {"confirmed", "cancelled"}

    def test_confirmed_targets(self):
        assert allowed_transitions(BookingStatus.CONFIRMED) == {"completed", "cancelled", "no_show"}

    @pytest.mark.parametrize("terminal", ["completed", "cancelled", "no_show"])
    def test_terminal_states(self, terminal):
        assert allowed_transitions(terminal) == frozenset()

    def test_unknown_status_has_no_targets(self):
        assert allowed_transitions("archived") == frozenset()

    def test_can_transition(self):
        assert can_transition("pending", BookingStatus.CONFIRMED)
        assert not can_transition("pending", "completed")
        assert not can_transition("cancelled", "confirmed")


def make_booking(**overrides):
    booking = SimpleNamespace(
        id="booking-1",
        customer_id="customer-1",
        stylist_id=None,
        status="pending",
        booking_date=date(2030, 1, 1),
        start_time=time(10, 0),
        end_time=time(11, 0),
        total_price=Decimal("125000.00"),
    )
    for key, value in overrides.items():
        setattr(booking, key, value)
    return booking


@pytest.fixture
def mock_db() -> MagicMock:
    return MagicMock()


@pytest.fixture
def service(mock_db) -> BookingStatusService:
    repository = MagicMock()
    checker = MagicMock()
    checker.find_conflicts.return_value = []
    svc = BookingStatusService(mock_db, repository=repository, availability_checker=checker)
    svc.customer_repository = MagicMock()
    svc.customer_repository.get_by_id.return_value = SimpleNamespace(
        id="customer-1", membership_tier="bronze"
    )
    svc.customer_repository.count_bookings_with_status.return_value = 1
    svc.stylist_repository = MagicMock()
    return svc


class TestUpdateStatus:
    def test_no_show_is_not_settable(self, service, mock_db):
        with pytest.raises(InvalidTransitionException) as exc_info:
            service.update_status("booking-1", "no_show")

        assert exc_info.value.details["current_status"] is None
        service.repository.get_for_update.assert_not_called()
        mock_db.commit.assert_not_called()

    def test_unknown_status_rejected(self, service):
        with pytest.raises(InvalidTransitionException):
            service.update_status("booking-1", "archived")

    def test_missing_booking(self, service, mock_db):
        service.repository.get_for_update.return_value = None

        with pytest.raises(NotFoundException):
            service.update_status("booking-1", "confirmed")

        mock_db.rollback.assert_called_once()

    def test_cancelled_to_confirmed_rejected_without_writes(self, service, mock_db):
        service.repository.get_for_update.return_value = make_booking(status="cancelled")

        with pytest.raises(InvalidTransitionException):
            service.update_status("booking-1", "confirmed")

        service.repository.set_status.assert_not_called()
        service.customer_repository.credit_loyalty_points.assert_not_called()
        service.customer_repository.set_membership_tier.assert_not_called()
        mock_db.rollback.assert_called_once()
        mock_db.commit.assert_not_called()

    def test_confirm_recomputes_tier_without_points(self, service, mock_db):
        booking = make_booking(status="pending")
        service.repository.get_for_update.return_value = booking
        service.customer_repository.count_bookings_with_status.return_value = 10

        service.update_status("booking-1", "confirmed")

        service.repository.set_status.assert_called_once_with(booking, "confirmed", stylist_id=None)
        service.customer_repository.credit_loyalty_points.assert_not_called()
        service.customer_repository.set_membership_tier.assert_called_once()
        _, tier = service.customer_repository.set_membership_tier.call_args[0]
        assert tier is MembershipTier.SILVER
        mock_db.commit.assert_called_once()

    def test_complete_credits_points(self, service):
        service.repository.get_for_update.return_value = make_booking(status="confirmed")

        service.update_status("booking-1", BookingStatus.COMPLETED)

        service.customer_repository.credit_loyalty_points.assert_called_once_with("customer-1", 12)

    def test_tier_unchanged_is_not_rewritten(self, service):
        service.repository.get_for_update.return_value = make_booking(status="pending")
        service.customer_repository.count_bookings_with_status.return_value = 3

        service.update_status("booking-1", "confirmed")

        service.customer_repository.set_membership_tier.assert_not_called()

    def test_cancel_touches_neither_points_nor_tier(self, service):
        service.repository.get_for_update.return_value = make_booking(status="confirmed")

        service.update_status("booking-1", "cancelled")

        service.customer_repository.credit_loyalty_points.assert_not_called()
        service.customer_repository.count_bookings_with_status.assert_not_called()

    def test_stylist_assignment_checked_for_conflicts(self, service):
        booking = make_booking(status="pending")
        service.repository.get_for_update.return_value = booking
        service.stylist_repository.lock_for_booking.return_value = SimpleNamespace(
            can_take_bookings=True
        )
        service.availability_checker.find_conflicts.return_value = [{"booking_id": "other"}]

        with pytest.raises(BookingConflictException):
            service.update_status("booking-1", "confirmed", stylist_id="stylist-2")

        service.availability_checker.find_conflicts.assert_called_once_with(
            "stylist-2", booking.booking_date, booking.start_time, booking.end_time,
            exclude_booking_id="booking-1",
        )
        service.repository.set_status.assert_not_called()

    def test_unknown_stylist(self, service):
        service.repository.get_for_update.return_value = make_booking(status="pending")
        service.stylist_repository.lock_for_booking.return_value = None

        with pytest.raises(NotFoundException):
            service.update_status("booking-1", "confirmed", stylist_id="ghost")

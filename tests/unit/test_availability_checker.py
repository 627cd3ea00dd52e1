"""
Unit tests for AvailabilityChecker with a mocked repository.
"""

from datetime import date, time
from types import SimpleNamespace
from unittest.mock import MagicMock, Mock

import pytest
from sqlalchemy.orm import Session

from salon_booking.core.config import Settings
from salon_booking.services.availability_checker import AvailabilityChecker, build_slot_grid

DAY = date(2030, 3, 14)


def _booking(start: time, end: time, booking_id: str = "b1", status: str = "confirmed"):
    return SimpleNamespace(id=booking_id, start_time=start, end_time=end, status=status)


@pytest.fixture
def repository() -> MagicMock:
    repo = MagicMock()
    repo.get_bookings_for_date.return_value = []
    repo.get_bookings_for_conflict_check.return_value = []
    return repo


@pytest.fixture
def checker(repository) -> AvailabilityChecker:
    return AvailabilityChecker(Mock(spec=Session), repository=repository)


class TestSlotGrid:
    def test_default_grid(self, checker):
        grid = checker.slot_grid
        assert len(grid) == 22
        assert grid[0] == time(9, 0)
        assert grid[-1] == time(19, 30)
        assert time(20, 0) not in grid

    def test_grid_from_settings(self, repository):
        cfg = Settings(SLOT_GRID_START="10:00", SLOT_GRID_END="12:00", SLOT_STEP_MINUTES=60)
        checker = AvailabilityChecker(Mock(spec=Session), repository=repository, config=cfg)
        assert list(checker.slot_grid) == [time(10, 0), time(11, 0)]

    def test_non_positive_step_rejected(self):
        with pytest.raises(ValueError):
            build_slot_grid(time(9, 0), time(10, 0), 0)


class TestListAvailableSlots:
    def test_empty_day_returns_full_grid(self, checker):
        assert checker.list_available_slots(DAY) == list(checker.slot_grid)

    def test_booking_removes_slots_it_covers(self, checker, repository):
        repository.get_bookings_for_date.return_value = [_booking(time(10, 0), time(11, 30))]

        slots = checker.list_available_slots(DAY, "stylist-1")

        for taken in (time(10, 0), time(10, 30), time(11, 0)):
            assert taken not in slots
        # End is exclusive.
        assert time(11, 30) in slots
        assert time(9, 30) in slots
        assert len(slots) == 19
        repository.get_bookings_for_date.assert_called_once_with(DAY, "stylist-1")

    def test_off_grid_booking_blocks_slot_it_contains(self, checker, repository):
        repository.get_bookings_for_date.return_value = [_booking(time(9, 15), time(9, 45))]

        slots = checker.list_available_slots(DAY)

        assert time(9, 0) in slots
        assert time(9, 30) not in slots

    def test_without_stylist_every_booking_counts(self, checker, repository):
        repository.get_bookings_for_date.return_value = [
            _booking(time(9, 0), time(10, 0), "a"),
            _booking(time(14, 0), time(15, 0), "b"),
        ]

        slots = checker.list_available_slots(DAY)

        assert time(9, 0) not in slots
        assert time(14, 30) not in slots
        repository.get_bookings_for_date.assert_called_once_with(DAY, None)

    def test_repeated_calls_return_equal_fresh_lists(self, checker, repository):
        repository.get_bookings_for_date.return_value = [_booking(time(12, 0), time(13, 0))]

        first = checker.list_available_slots(DAY)
        second = checker.list_available_slots(DAY)

        assert first == second
        assert first is not second


class TestConflicts:
    @pytest.mark.parametrize(
        "start,end,expected",
        [
            (time(10, 0), time(11, 0), True),  # identical
            (time(10, 30), time(11, 30), True),  # partial overlap
            (time(9, 0), time(12, 0), True),  # contains
            (time(10, 15), time(10, 45), True),  # contained
            (time(9, 0), time(10, 0), False),  # touches start
            (time(11, 0), time(12, 0), False),  # touches end
            (time(15, 0), time(16, 0), False),  # disjoint
        ],
    )
    def test_half_open_overlap(self, checker, repository, start, end, expected):
        repository.get_bookings_for_conflict_check.return_value = [
            _booking(time(10, 0), time(11, 0))
        ]
        assert checker.has_conflict("stylist-1", DAY, start, end) is expected

    def test_find_conflicts_formats_details(self, checker, repository):
        repository.get_bookings_for_conflict_check.return_value = [
            _booking(time(10, 0), time(11, 0), "b1", "pending"),
            _booking(time(13, 0), time(14, 0), "b2"),
        ]

        conflicts = checker.find_conflicts("stylist-1", DAY, time(10, 30), time(12, 0))

        assert conflicts == [
            {"booking_id": "b1", "start_time": "10:00", "end_time": "11:00", "status": "pending"}
        ]

    def test_exclude_booking_id_forwarded(self, checker, repository):
        checker.has_conflict("stylist-1", DAY, time(10, 0), time(11, 0), exclude_booking_id="b9")

        repository.get_bookings_for_conflict_check.assert_called_once_with("stylist-1", DAY, "b9")

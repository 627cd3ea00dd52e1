# salon_booking/services/availability_checker.py
"""
Availability Checker Service for the salon booking backend.

Handles:
- The candidate slot grid for a day
- Free slots for a date, salon-wide or for one stylist
- Overlap detection against a stylist's existing bookings

Every check uses the booking's own date and time window. Cancelled and
no-show bookings never block a slot. Intervals are half-open, so a
booking ending at 10:00 and one starting at 10:00 do not overlap.
"""

from datetime import date, datetime, time, timedelta
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.config import Settings, settings as default_settings
from ..repositories import RepositoryFactory
from ..repositories.conflict_checker_repository import ConflictCheckerRepository
from .base import BaseService

logger = logging.getLogger(__name__)


def build_slot_grid(start: time, end: time, step_minutes: int) -> List[time]:
    """Times from ``start`` (inclusive) to ``end`` (exclusive) every ``step_minutes``."""
    if step_minutes <= 0:
        raise ValueError("step_minutes must be positive")
    anchor = date.min
    current = datetime.combine(anchor, start)
    stop = datetime.combine(anchor, end)
    step = timedelta(minutes=step_minutes)
    slots = []
    while current < stop:
        slots.append(current.time())
        current += step
    return slots


class AvailabilityChecker(BaseService):
    """Read-only availability and conflict queries."""

    def __init__(
        self,
        db: Session,
        repository: Optional[ConflictCheckerRepository] = None,
        config: Optional[Settings] = None,
    ):
        super().__init__(db)
        self.logger = logging.getLogger(__name__)
        self.repository = repository or RepositoryFactory.create_conflict_checker_repository(db)
        cfg = config or default_settings
        self.slot_grid = tuple(
            build_slot_grid(cfg.slot_grid_start, cfg.slot_grid_end, cfg.slot_step_minutes)
        )

    @BaseService.measure_operation("list_available_slots")
    def list_available_slots(self, target_date: date, stylist_id: Optional[str] = None) -> List[time]:
        """
        Free start times on ``target_date``.

        A slot ``t`` is taken when an active booking has
        ``start_time <= t < end_time``. With ``stylist_id`` only that
        stylist's bookings count; without it every booking on the date does.

        Returns:
            A new list in grid order on every call
        """
        with self.read_scope():
            bookings = self.repository.get_bookings_for_date(target_date, stylist_id)
        windows = [(b.start_time, b.end_time) for b in bookings]
        return [
            slot
            for slot in self.slot_grid
            if not any(start <= slot < end for start, end in windows)
        ]

    @BaseService.measure_operation("find_conflicts")
    def find_conflicts(
        self,
        stylist_id: str,
        check_date: date,
        start_time: time,
        end_time: time,
        exclude_booking_id: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        Active bookings of the stylist overlapping ``[start_time, end_time)``.

        Args:
            stylist_id: The stylist to check
            check_date: The date to check
            start_time: Start time of the range to check
            end_time: End time of the range to check
            exclude_booking_id: Optional booking ID to exclude from check

        Returns:
            List of conflicts with booking details
        """
        with self.read_scope():
            bookings = self.repository.get_bookings_for_conflict_check(
                stylist_id, check_date, exclude_booking_id
            )
        conflicts = [
            {
                "booking_id": booking.id,
                "start_time": booking.start_time.strftime("%H:%M"),
                "end_time": booking.end_time.strftime("%H:%M"),
                "status": booking.status,
            }
            for booking in bookings
            if start_time < booking.end_time and booking.start_time < end_time
        ]

        if conflicts:
            self.logger.warning(
                f"Found {len(conflicts)} booking conflicts for stylist {stylist_id} "
                f"on {check_date} between {start_time}-{end_time}"
            )
        return conflicts

    def has_conflict(
        self,
        stylist_id: str,
        check_date: date,
        start_time: time,
        end_time: time,
        exclude_booking_id: Optional[str] = None,
    ) -> bool:
        """True if any active booking of the stylist overlaps the window."""
        return bool(
            self.find_conflicts(stylist_id, check_date, start_time, end_time, exclude_booking_id)
        )

# salon_booking/repositories/conflict_checker_repository.py
"""
ConflictChecker Repository.

Reads the booked time windows that availability and conflict checks are
computed from. Cancelled and no-show bookings never block a slot.
"""

from datetime import date
import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.booking import INACTIVE_STATUSES, Booking
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class ConflictCheckerRepository(BaseRepository[Booking]):
    """Read-only booking window queries."""

    def __init__(self, db: Session):
        super().__init__(db, Booking)
        self.logger = logging.getLogger(__name__)

    def get_bookings_for_conflict_check(
        self,
        stylist_id: str,
        check_date: date,
        exclude_booking_id: Optional[str] = None,
    ) -> List[Booking]:
        """
        Active bookings of one stylist on one date.

        Args:
            stylist_id: The stylist to check
            check_date: The date to check for conflicts
            exclude_booking_id: Optional booking ID to exclude from results

        Returns:
            Bookings ordered by start time
        """
        try:
            query = self.db.query(Booking).filter(
                Booking.stylist_id == stylist_id,
                Booking.booking_date == check_date,
                Booking.status.notin_(INACTIVE_STATUSES),
            )
            if exclude_booking_id:
                query = query.filter(Booking.id != exclude_booking_id)
            return query.order_by(Booking.start_time).all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting bookings for conflict check: {str(e)}")
            raise RepositoryException(f"Failed to get conflict bookings: {str(e)}") from e

    def get_bookings_for_date(
        self, target_date: date, stylist_id: Optional[str] = None
    ) -> List[Booking]:
        """
        Active bookings on a date, for one stylist or for the whole salon.

        Without ``stylist_id`` every booking on the date counts, including
        bookings that have no stylist assigned yet.
        """
        try:
            query = self.db.query(Booking).filter(
                Booking.booking_date == target_date,
                Booking.status.notin_(INACTIVE_STATUSES),
            )
            if stylist_id:
                query = query.filter(Booking.stylist_id == stylist_id)
            return query.order_by(Booking.start_time).all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting bookings for date: {str(e)}")
            raise RepositoryException(f"Failed to get bookings: {str(e)}") from e

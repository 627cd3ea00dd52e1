# salon_booking/repositories/booking_repository.py
"""
Booking Repository for the salon booking backend.

Handles:
- Booking and line-item persistence
- Row-locked loads for status changes
- Customer and admin booking listings

Listings never aggregate line items into strings in SQL. Bookings are
fetched first, then their line items in one batched query keyed by the
booking ids, and the two are joined in memory by the service layer.
"""

from collections import defaultdict
from datetime import date
import logging
from typing import Dict, Iterable, List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session, joinedload

from ..core.exceptions import RepositoryException
from ..database.session_utils import supports_row_locks
from ..models.booking import Booking, BookingLineItem
from ..models.customer import Customer
from ..models.service import Service
from ..models.stylist import Stylist
from ..models.user import User
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class BookingRepository(BaseRepository[Booking]):
    def __init__(self, db: Session):
        super().__init__(db, Booking)
        self.logger = logging.getLogger(__name__)

    # Writes

    def add_line_items(self, booking_id: str, services: Iterable[Service]) -> List[BookingLineItem]:
        """Snapshot each service's current price onto the booking."""
        items = [
            BookingLineItem(booking_id=booking_id, service_id=service.id, price=service.price)
            for service in services
        ]
        self.db.add_all(items)
        self.flush()
        return items

    def set_status(
        self,
        booking: Booking,
        status: str,
        *,
        stylist_id: Optional[str] = None,
        cancellation_reason: Optional[str] = None,
    ) -> Booking:
        booking.status = status
        if stylist_id is not None:
            booking.stylist_id = stylist_id
        if cancellation_reason is not None:
            booking.cancellation_reason = cancellation_reason
        self.flush()
        return booking

    # Reads

    def get_for_update(self, booking_id: str) -> Optional[Booking]:
        """Load a booking and lock its row until the transaction ends."""
        try:
            query = self.db.query(Booking).filter(Booking.id == booking_id)
            if supports_row_locks(self.db):
                query = query.with_for_update()
            return query.first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error locking booking {booking_id}: {str(e)}")
            raise RepositoryException(f"Failed to load booking: {str(e)}") from e

    def get_line_items_for_bookings(
        self, booking_ids: Iterable[str]
    ) -> Dict[str, List[BookingLineItem]]:
        """Line items (with their service) grouped by booking id, in one query."""
        ids = list(dict.fromkeys(booking_ids))
        if not ids:
            return {}
        query = (
            self.db.query(BookingLineItem)
            .options(joinedload(BookingLineItem.service))
            .filter(BookingLineItem.booking_id.in_(ids))
            .order_by(BookingLineItem.booking_id, BookingLineItem.id)
        )
        grouped: Dict[str, List[BookingLineItem]] = defaultdict(list)
        for item in self._execute_query(query):
            grouped[item.booking_id].append(item)
        return dict(grouped)

    def get_customer_booking(self, booking_id: str, customer_id: str) -> Optional[Booking]:
        query = self._with_details(self.db.query(Booking)).filter(
            Booking.id == booking_id, Booking.customer_id == customer_id
        )
        try:
            return query.first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting booking {booking_id}: {str(e)}")
            raise RepositoryException(f"Failed to get booking: {str(e)}") from e

    def get_customer_bookings(
        self,
        customer_id: str,
        status: Optional[str] = None,
        offset: int = 0,
        limit: int = 10,
    ) -> List[Booking]:
        """A page of the customer's bookings, most recent appointment first."""
        query = self._with_details(self.db.query(Booking)).filter(
            Booking.customer_id == customer_id
        )
        if status:
            query = query.filter(Booking.status == status)
        query = query.order_by(Booking.booking_date.desc(), Booking.start_time.desc())
        return self._execute_query(query.offset(offset).limit(limit))

    def count_customer_bookings(self, customer_id: str, status: Optional[str] = None) -> int:
        query = self.db.query(Booking).filter(Booking.customer_id == customer_id)
        if status:
            query = query.filter(Booking.status == status)
        try:
            return query.count()
        except SQLAlchemyError as e:
            self.logger.error(f"Error counting bookings: {str(e)}")
            raise RepositoryException(f"Failed to count bookings: {str(e)}") from e

    def search_bookings(
        self,
        status: Optional[str] = None,
        booking_date: Optional[date] = None,
        search: Optional[str] = None,
    ) -> List[Booking]:
        """
        Admin listing across all customers.

        ``search`` is a case-insensitive substring match on the customer's
        name, email or phone.
        """
        query = (
            self._with_details(self.db.query(Booking))
            .join(Customer, Booking.customer_id == Customer.id)
            .join(User, Customer.user_id == User.id)
        )
        if status:
            query = query.filter(Booking.status == status)
        if booking_date:
            query = query.filter(Booking.booking_date == booking_date)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(
                or_(User.name.ilike(pattern), User.email.ilike(pattern), User.phone.ilike(pattern))
            )
        query = query.order_by(Booking.booking_date.desc(), Booking.start_time.desc())
        return self._execute_query(query)

    def _with_details(self, query: Query) -> Query:
        return query.options(
            joinedload(Booking.customer).joinedload(Customer.user),
            joinedload(Booking.stylist).joinedload(Stylist.user),
        )

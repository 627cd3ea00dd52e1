# salon_booking/services/booking_service.py
"""
Booking Service for the salon booking backend.

Handles booking creation, cancellation and the booking read paths.
Status changes made by the salon (confirm, complete) live in
``BookingStatusService``.

Creation runs as one unit of work: customer resolution, service pricing,
stylist checks, the overlap check and the inserts either all commit or
all roll back. Before checking for overlaps the stylist row is locked,
so two requests for the same stylist are serialized and the second one
sees the first one's booking.
"""

from datetime import date, datetime, time, timedelta
from decimal import Decimal
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from ..core.exceptions import (
    BookingConflictException,
    InvalidTransitionException,
    NotFoundException,
    ValidationException,
)
from ..models.booking import Booking, BookingStatus
from ..models.service import Service
from ..repositories import RepositoryFactory
from ..repositories.booking_repository import BookingRepository
from ..schemas.booking import BookingCreate, BookingDetail, BookingListResponse, StylistSummary
from .availability_checker import AvailabilityChecker
from .base import BaseService
from .booking_status_service import can_transition
from .customer_service import CustomerService

logger = logging.getLogger(__name__)

DEFAULT_CANCELLATION_REASON = "Cancelled by customer"
MAX_PAGE_SIZE = 100
ALL_STATUSES = "all"


def _is_deadlock_error(exc: OperationalError) -> bool:
    orig = getattr(exc, "orig", None)
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code == "40P01":
        return True
    if orig is not None and getattr(orig, "args", None):
        # MySQL: ER_LOCK_DEADLOCK
        if orig.args[0] == 1213:
            return True
    return "deadlock" in str(exc).lower()


def calculate_end_time(booking_date: date, start_time: time, duration_minutes: int) -> time:
    """
    ``start_time + duration_minutes`` on ``booking_date``.

    Raises:
        ValidationException: if the booking would not end on the same day
    """
    start = datetime.combine(booking_date, start_time)
    end = start + timedelta(minutes=duration_minutes)
    if end.date() != booking_date or end.time() <= start_time:
        raise ValidationException(
            "Bookings must start and end on the same calendar day",
            details={"start_time": start_time.strftime("%H:%M"), "duration": duration_minutes},
        )
    return end.time()


class BookingService(BaseService):
    """Booking creation, cancellation and listings."""

    def __init__(
        self,
        db: Session,
        repository: Optional[BookingRepository] = None,
        availability_checker: Optional[AvailabilityChecker] = None,
        customer_service: Optional[CustomerService] = None,
    ):
        """
        Initialize booking service.

        Args:
            db: Database session (owned by the caller)
            repository: Optional BookingRepository instance
            availability_checker: Optional AvailabilityChecker instance
            customer_service: Optional CustomerService instance
        """
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_booking_repository(db)
        self.availability_checker = availability_checker or AvailabilityChecker(db)
        self.customer_service = customer_service or CustomerService(db)
        self.service_catalog_repository = RepositoryFactory.create_service_catalog_repository(db)
        self.stylist_repository = RepositoryFactory.create_stylist_repository(db)
        self.customer_repository = RepositoryFactory.create_customer_repository(db)

    @BaseService.measure_operation("create_booking")
    def create_booking(self, customer_user_id: str, booking_data: BookingCreate) -> Booking:
        """
        Create a pending booking for one or more services.

        Args:
            customer_user_id: The user making the booking
            booking_data: Services, optional stylist, date and start time

        Returns:
            The committed booking

        Raises:
            NotFoundException: If the user does not exist
            ValidationException: If no valid services are selected, the
                stylist cannot take bookings, or the booking would run past
                midnight
            BookingConflictException: If the stylist is already booked
            PersistenceException: If the store fails
        """
        self.log_operation(
            "create_booking",
            customer_user_id=customer_user_id,
            stylist_id=booking_data.stylist_id,
            booking_date=booking_data.booking_date,
            start_time=booking_data.start_time,
            service_count=len(booking_data.service_ids),
        )

        with self.transaction():
            # 1. Resolve (or lazily create) the customer
            customer = self.customer_service.ensure_customer(customer_user_id)

            # 2. Price the selected services
            services = self._load_services(booking_data.service_ids)
            total_price, total_duration = self._calculate_totals(services)

            # 3. Derive the end time
            end_time = calculate_end_time(
                booking_data.booking_date, booking_data.start_time, total_duration
            )

            # 4. Stylist checks, under the stylist row lock
            if booking_data.stylist_id:
                self._validate_stylist(booking_data.stylist_id)
                self._ensure_no_conflict(
                    booking_data.stylist_id,
                    booking_data.booking_date,
                    booking_data.start_time,
                    end_time,
                )

            # 5. Persist booking and line-item snapshots
            try:
                booking = self.repository.create(
                    customer_id=customer.id,
                    stylist_id=booking_data.stylist_id,
                    booking_date=booking_data.booking_date,
                    start_time=booking_data.start_time,
                    end_time=end_time,
                    status=BookingStatus.PENDING.value,
                    total_price=total_price,
                    notes=booking_data.notes,
                )
                self.repository.add_line_items(booking.id, services)
            except OperationalError as exc:
                if _is_deadlock_error(exc):
                    raise BookingConflictException(
                        details=self._conflict_details(booking_data, end_time)
                    ) from exc
                raise

        self.logger.info(
            f"Created booking {booking.id} for customer {customer.id}: "
            f"{booking.booking_date} {booking.start_time}-{booking.end_time}, total {booking.total_price}"
        )
        return booking

    @BaseService.measure_operation("cancel_booking")
    def cancel_booking(
        self,
        booking_id: str,
        reason: Optional[str] = None,
        customer_user_id: Optional[str] = None,
    ) -> Booking:
        """
        Cancel a pending or confirmed booking.

        When ``customer_user_id`` is given the booking must belong to that
        user's customer profile; otherwise any booking may be cancelled
        (salon staff).

        Raises:
            NotFoundException: If the booking does not exist or is not the customer's
            InvalidTransitionException: If the booking is already completed,
                cancelled or a no-show
        """
        self.log_operation("cancel_booking", booking_id=booking_id, customer_user_id=customer_user_id)

        with self.transaction():
            booking = self.repository.get_for_update(booking_id)
            if booking is None:
                raise NotFoundException("Booking not found", details={"booking_id": booking_id})

            if customer_user_id is not None:
                customer = self.customer_repository.get_by_user_id(customer_user_id)
                if customer is None or booking.customer_id != customer.id:
                    raise NotFoundException("Booking not found", details={"booking_id": booking_id})

            if not can_transition(booking.status, BookingStatus.CANCELLED.value):
                raise InvalidTransitionException(booking.status, BookingStatus.CANCELLED.value)

            self.repository.set_status(
                booking,
                BookingStatus.CANCELLED.value,
                cancellation_reason=reason or DEFAULT_CANCELLATION_REASON,
            )

        self.logger.info(f"Booking {booking_id} cancelled")
        return booking

    @BaseService.measure_operation("get_customer_bookings")
    def get_customer_bookings(
        self,
        customer_user_id: str,
        status: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> BookingListResponse:
        """
        One page of the user's bookings, most recent appointment first.

        A user without a customer profile gets one created and an empty page.
        """
        if page < 1:
            raise ValidationException("page must be at least 1", details={"page": page})
        if not 1 <= limit <= MAX_PAGE_SIZE:
            raise ValidationException(
                f"limit must be between 1 and {MAX_PAGE_SIZE}", details={"limit": limit}
            )
        status_filter = self._normalize_status_filter(status)

        with self.transaction():
            customer = self.customer_service.ensure_customer(customer_user_id)
            total = self.repository.count_customer_bookings(customer.id, status_filter)
            bookings = self.repository.get_customer_bookings(
                customer.id, status_filter, offset=(page - 1) * limit, limit=limit
            )
            details = self._to_details(bookings)

        return BookingListResponse(bookings=details, total=total, page=page, per_page=limit)

    @BaseService.measure_operation("get_booking_for_customer")
    def get_booking_for_customer(self, booking_id: str, customer_user_id: str) -> BookingDetail:
        with self.read_scope():
            customer = self.customer_repository.get_by_user_id(customer_user_id)
            if customer is None:
                raise NotFoundException(
                    "Customer profile not found", details={"user_id": customer_user_id}
                )
            booking = self.repository.get_customer_booking(booking_id, customer.id)
            if booking is None:
                raise NotFoundException("Booking not found", details={"booking_id": booking_id})
            return self._to_details([booking])[0]

    @BaseService.measure_operation("list_all_bookings")
    def list_all_bookings(
        self,
        status: Optional[str] = None,
        booking_date: Optional[date] = None,
        search: Optional[str] = None,
    ) -> List[BookingDetail]:
        """Salon-wide listing with optional status, date and customer search filters."""
        status_filter = self._normalize_status_filter(status)
        with self.read_scope():
            bookings = self.repository.search_bookings(
                status=status_filter,
                booking_date=booking_date,
                search=search.strip() if search and search.strip() else None,
            )
            return self._to_details(bookings)

    @BaseService.measure_operation("list_available_stylists")
    def list_available_stylists(self) -> List[StylistSummary]:
        with self.read_scope():
            return [
                StylistSummary(
                    id=stylist.id,
                    name=stylist.user.name,
                    specialization=stylist.specialization,
                    experience_years=stylist.experience_years or 0,
                    rating=stylist.rating if stylist.rating is not None else Decimal("0"),
                    total_reviews=stylist.total_reviews or 0,
                )
                for stylist in self.stylist_repository.get_available_stylists()
            ]

    def list_available_slots(self, target_date: date, stylist_id: Optional[str] = None) -> List[time]:
        """Free start times on ``target_date``; see ``AvailabilityChecker``."""
        return self.availability_checker.list_available_slots(target_date, stylist_id)

    # Private helpers

    def _load_services(self, service_ids: Sequence[str]) -> List[Service]:
        if not service_ids:
            raise ValidationException("At least one service must be selected")
        services = self.service_catalog_repository.get_active_services_by_ids(service_ids)
        if not services:
            raise ValidationException(
                "No valid services selected", details={"service_ids": list(service_ids)}
            )
        return services

    @staticmethod
    def _calculate_totals(services: Sequence[Service]) -> Tuple[Decimal, int]:
        total_price = sum((Decimal(str(service.price)) for service in services), Decimal("0"))
        total_duration = sum(int(service.duration) for service in services)
        return total_price, total_duration

    def _validate_stylist(self, stylist_id: str) -> None:
        stylist = self.stylist_repository.lock_for_booking(stylist_id)
        if stylist is None:
            raise ValidationException("Stylist not found", details={"stylist_id": stylist_id})
        if not stylist.can_take_bookings:
            raise ValidationException(
                "Stylist is not available", details={"stylist_id": stylist_id}
            )

    def _ensure_no_conflict(
        self, stylist_id: str, booking_date: date, start_time: time, end_time: time
    ) -> None:
        conflicts = self.availability_checker.find_conflicts(
            stylist_id, booking_date, start_time, end_time
        )
        if conflicts:
            raise BookingConflictException(
                details={
                    "stylist_id": stylist_id,
                    "booking_date": booking_date.isoformat(),
                    "start_time": start_time.strftime("%H:%M"),
                    "end_time": end_time.strftime("%H:%M"),
                    "conflicts": conflicts,
                }
            )

    @staticmethod
    def _conflict_details(booking_data: BookingCreate, end_time: time) -> Dict[str, Any]:
        return {
            "stylist_id": booking_data.stylist_id,
            "booking_date": booking_data.booking_date.isoformat(),
            "start_time": booking_data.start_time.strftime("%H:%M"),
            "end_time": end_time.strftime("%H:%M"),
        }

    @staticmethod
    def _normalize_status_filter(status: Optional[str]) -> Optional[str]:
        if status is None or status.strip().lower() in ("", ALL_STATUSES):
            return None
        value = status.strip().lower()
        if value not in {s.value for s in BookingStatus}:
            raise ValidationException(f"Unknown booking status '{status}'", details={"status": status})
        return value

    def _to_details(self, bookings: Sequence[Booking]) -> List[BookingDetail]:
        line_items = self.repository.get_line_items_for_bookings(b.id for b in bookings)
        return [BookingDetail.from_booking(b, line_items.get(b.id, [])) for b in bookings]

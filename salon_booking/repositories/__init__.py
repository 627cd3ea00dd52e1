"""
Repository layer: every SQL query of the booking core lives here.

Usage:
    from salon_booking.repositories import RepositoryFactory

    repository = RepositoryFactory.create_booking_repository(db)
    items = repository.get_line_items_for_bookings(booking_ids)
"""

from .base_repository import BaseRepository
from .booking_repository import BookingRepository
from .conflict_checker_repository import ConflictCheckerRepository
from .customer_repository import CustomerRepository
from .factory import RepositoryFactory
from .service_catalog_repository import ServiceCatalogRepository
from .stylist_repository import StylistRepository

__all__ = [
    "BaseRepository",
    "BookingRepository",
    "ConflictCheckerRepository",
    "CustomerRepository",
    "RepositoryFactory",
    "ServiceCatalogRepository",
    "StylistRepository",
]

# salon_booking/repositories/factory.py
"""
Repository Factory.

Centralizes repository creation so services receive their stores from
one place and tests can swap any of them for a mock.
"""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from .base_repository import BaseRepository

# Avoid circular imports
if TYPE_CHECKING:
    from .booking_repository import BookingRepository
    from .conflict_checker_repository import ConflictCheckerRepository
    from .customer_repository import CustomerRepository
    from .service_catalog_repository import ServiceCatalogRepository
    from .stylist_repository import StylistRepository


class RepositoryFactory:
    """Factory class for creating repository instances."""

    @staticmethod
    def create_base_repository(db: Session, model) -> BaseRepository:
        """Create a generic base repository for any model."""
        return BaseRepository(db, model)

    @staticmethod
    def create_booking_repository(db: Session) -> "BookingRepository":
        from .booking_repository import BookingRepository

        return BookingRepository(db)

    @staticmethod
    def create_conflict_checker_repository(db: Session) -> "ConflictCheckerRepository":
        from .conflict_checker_repository import ConflictCheckerRepository

        return ConflictCheckerRepository(db)

    @staticmethod
    def create_customer_repository(db: Session) -> "CustomerRepository":
        from .customer_repository import CustomerRepository

        return CustomerRepository(db)

    @staticmethod
    def create_service_catalog_repository(db: Session) -> "ServiceCatalogRepository":
        from .service_catalog_repository import ServiceCatalogRepository

        return ServiceCatalogRepository(db)

    @staticmethod
    def create_stylist_repository(db: Session) -> "StylistRepository":
        from .stylist_repository import StylistRepository

        return StylistRepository(db)

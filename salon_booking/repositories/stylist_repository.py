# salon_booking/repositories/stylist_repository.py
"""Stylist Repository: booking-time lookups and the available-stylist listing."""

import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from ..core.exceptions import RepositoryException
from ..database.session_utils import get_dialect_name, supports_row_locks
from ..models.stylist import Stylist
from ..models.user import User
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class StylistRepository(BaseRepository[Stylist]):
    def __init__(self, db: Session):
        super().__init__(db, Stylist)
        self.logger = logging.getLogger(__name__)

    def lock_for_booking(self, stylist_id: str) -> Optional[Stylist]:
        """
        Load a stylist and hold its row lock until the transaction ends.

        Every booking write for the stylist takes this lock first, so two
        transactions cannot both pass the overlap check for the same
        stylist. On dialects without row locks (SQLite) this is a plain
        read and the database-wide write lock is what serializes writers.
        """
        try:
            query = self.db.query(Stylist).filter(Stylist.id == stylist_id)
            if supports_row_locks(self.db):
                query = query.with_for_update()
            else:
                self.logger.debug(
                    "Row locks unavailable on %s; relying on database write lock",
                    get_dialect_name(self.db),
                )
            stylist = query.first()
            if stylist is not None:
                # Owning user is loaded separately; FOR UPDATE stays on the stylist row.
                _ = stylist.user
            return stylist
        except SQLAlchemyError as e:
            self.logger.error(f"Error locking stylist {stylist_id}: {str(e)}")
            raise RepositoryException(f"Failed to load stylist: {str(e)}") from e

    def get_available_stylists(self) -> List[Stylist]:
        """Bookable stylists, best rated first."""
        query = (
            self.db.query(Stylist)
            .join(User, Stylist.user_id == User.id)
            .options(joinedload(Stylist.user))
            .filter(Stylist.is_available.is_(True), User.is_active.is_(True))
            .order_by(Stylist.rating.desc(), Stylist.total_reviews.desc())
        )
        return self._execute_query(query)

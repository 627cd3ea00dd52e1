# salon_booking/repositories/service_catalog_repository.py
"""Service catalog reads used when pricing a booking."""

import logging
from typing import Iterable, List

from sqlalchemy.orm import Session

from ..models.service import Service
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class ServiceCatalogRepository(BaseRepository[Service]):
    def __init__(self, db: Session):
        super().__init__(db, Service)
        self.logger = logging.getLogger(__name__)

    def get_active_services_by_ids(self, service_ids: Iterable[str]) -> List[Service]:
        """
        Active services whose id is in ``service_ids``.

        Unknown and inactive ids are silently dropped; duplicates collapse
        because the lookup is a set membership test.
        """
        ids = list(dict.fromkeys(service_ids))
        if not ids:
            return []
        query = (
            self.db.query(Service)
            .filter(Service.id.in_(ids), Service.is_active.is_(True))
            .order_by(Service.name)
        )
        return self._execute_query(query)

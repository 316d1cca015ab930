# slotbook/repositories/service_repository.py
"""Service Repository: lookups for bookable services."""

from typing import List

from sqlalchemy.orm import Session

from ..models.service import Service
from .base_repository import BaseRepository


class ServiceRepository(BaseRepository[Service]):
    def __init__(self, db: Session):
        super().__init__(db, Service)

    def list_by_name(self) -> List[Service]:
        query = self._build_query().order_by(Service.name.asc(), Service.id.asc())
        return self._execute_query(query)

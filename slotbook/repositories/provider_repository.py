# slotbook/repositories/provider_repository.py
"""Provider Repository: lookups and schedule updates for providers."""

from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..models.provider import Provider
from .base_repository import BaseRepository


class ProviderRepository(BaseRepository[Provider]):
    def __init__(self, db: Session):
        super().__init__(db, Provider)

    def list_by_name(self) -> List[Provider]:
        query = self._build_query().order_by(Provider.name.asc(), Provider.id.asc())
        return self._execute_query(query)

    def replace_working_hours(
        self, provider_id: str, working_hours: Dict[str, Any]
    ) -> Optional[Provider]:
        """Swap the whole weekly schedule; existing bookings are untouched."""
        return self.update(provider_id, working_hours=dict(working_hours))

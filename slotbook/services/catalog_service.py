# slotbook/services/catalog_service.py
"""
Catalog Service for the slotbook engine.

Manages the entities bookings point at: providers (with their weekly
working hours) and services (with their durations). Input is validated
through the pydantic request schemas; schema failures surface as
ValidationException carrying per-field errors.
"""

import logging
from typing import Any, Dict, List, Mapping, Type, TypeVar, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from ..core.exceptions import NotFoundException, ValidationException
from ..core.ulid_helper import is_valid_ulid
from ..models.provider import Provider
from ..models.service import Service
from ..repositories.factory import RepositoryFactory
from ..repositories.provider_repository import ProviderRepository
from ..repositories.service_repository import ServiceRepository
from ..schemas.provider import ProviderCreate, WorkingHoursUpdate
from ..schemas.service import ServiceCreate
from .base import BaseService

logger = logging.getLogger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def _coerce(schema: Type[SchemaT], data: Union[SchemaT, Mapping[str, Any]]) -> SchemaT:
    if isinstance(data, schema):
        return data
    try:
        return schema.model_validate(data)
    except PydanticValidationError as exc:
        field_errors: List[Dict[str, str]] = [
            {
                "field": ".".join(str(part) for part in error["loc"]),
                "message": error["msg"],
            }
            for error in exc.errors()
        ]
        raise ValidationException(
            f"Invalid {schema.__name__} payload",
            code="INVALID_PAYLOAD",
            details={"errors": field_errors},
        ) from exc


class CatalogService(BaseService):
    """Creates and looks up providers and services."""

    def __init__(
        self,
        db: Session,
        provider_repository: ProviderRepository | None = None,
        service_repository: ServiceRepository | None = None,
    ):
        super().__init__(db)
        self.provider_repository = (
            provider_repository or RepositoryFactory.create_provider_repository(db)
        )
        self.service_repository = (
            service_repository or RepositoryFactory.create_service_repository(db)
        )

    # Providers

    @BaseService.measure_operation("create_provider")
    def create_provider(self, data: Union[ProviderCreate, Mapping[str, Any]]) -> Provider:
        payload = _coerce(ProviderCreate, data)
        with self.transaction():
            provider = self.provider_repository.create(
                name=payload.name, working_hours=payload.working_hours
            )
        self.log_operation("create_provider", provider_id=provider.id)
        return provider

    @BaseService.measure_operation("update_working_hours")
    def update_working_hours(
        self, provider_id: str, working_hours: Union[WorkingHoursUpdate, Mapping[str, Any]]
    ) -> Provider:
        """Replace a provider's schedule. Existing bookings are left as they are."""
        if isinstance(working_hours, WorkingHoursUpdate):
            payload = working_hours
        else:
            payload = _coerce(WorkingHoursUpdate, {"working_hours": working_hours})

        with self.transaction():
            self.get_provider(provider_id)
            provider = self.provider_repository.replace_working_hours(
                provider_id, payload.working_hours
            )
        self.log_operation("update_working_hours", provider_id=provider_id)
        return provider

    # Ids that are not ULIDs cannot exist, so they skip the query.

    def get_provider(self, provider_id: str) -> Provider:
        provider = None
        if is_valid_ulid(provider_id):
            provider = self.provider_repository.get_by_id(provider_id)
        if provider is None:
            raise NotFoundException(f"Provider {provider_id} not found", code="PROVIDER_NOT_FOUND")
        return provider

    def list_providers(self) -> List[Provider]:
        return self.provider_repository.list_by_name()

    # Services

    @BaseService.measure_operation("create_service")
    def create_service(self, data: Union[ServiceCreate, Mapping[str, Any]]) -> Service:
        payload = _coerce(ServiceCreate, data)
        with self.transaction():
            service = self.service_repository.create(
                name=payload.name, duration_minutes=payload.duration_minutes
            )
        self.log_operation("create_service", service_id=service.id)
        return service

    def get_service(self, service_id: str) -> Service:
        service = None
        if is_valid_ulid(service_id):
            service = self.service_repository.get_by_id(service_id)
        if service is None:
            raise NotFoundException(f"Service {service_id} not found", code="SERVICE_NOT_FOUND")
        return service

    def list_services(self) -> List[Service]:
        return self.service_repository.list_by_name()

"""
Repository layer for the slotbook engine.

Repositories own all SQL; services own transaction boundaries.
"""

from .base_repository import BaseRepository
from .booking_repository import BookingRepository
from .factory import RepositoryFactory
from .provider_repository import ProviderRepository
from .service_repository import ServiceRepository

__all__ = [
    "BaseRepository",
    "BookingRepository",
    "ProviderRepository",
    "RepositoryFactory",
    "ServiceRepository",
]

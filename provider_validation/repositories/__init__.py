"""Repository layer modules."""

from provider_validation.repositories.provider_repository import ProviderRepository
from provider_validation.repositories.session_repository import SessionRepository
from provider_validation.repositories.sub_record_repository import (
    AddressRepository,
    PhoneRepository,
)

__all__ = [
    "AddressRepository",
    "PhoneRepository",
    "ProviderRepository",
    "SessionRepository",
]

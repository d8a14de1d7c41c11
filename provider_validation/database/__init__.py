"""Database models."""

from provider_validation.database.models import (
    Provider,
    ProviderAddress,
    ProviderPhone,
    SessionStatus,
    ValidationSession,
    ValidationState,
)

__all__ = [
    "Provider",
    "ProviderAddress",
    "ProviderPhone",
    "SessionStatus",
    "ValidationSession",
    "ValidationState",
]

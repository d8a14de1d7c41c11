"""Repository for provider (work unit) selection."""

from typing import Optional

from sqlalchemy import exists, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from provider_validation.database.models import (
    Provider,
    ProviderAddress,
    ProviderPhone,
    SessionStatus,
    ValidationSession,
    ValidationState,
)
from provider_validation.repositories.base_repository import BaseRepository


class ProviderRepository(BaseRepository[Provider]):
    """Repository for Provider records."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, Provider)

    @staticmethod
    def eligibility_criteria() -> list:
        """Conditions a provider must meet to be handed to an operator.

        Active, at least one unvalidated address or phone, and no open
        session referencing it.
        """
        pending_address = exists().where(
            ProviderAddress.provider_id == Provider.id,
            ProviderAddress.validation_state == ValidationState.UNVALIDATED,
        )
        pending_phone = exists().where(
            ProviderPhone.provider_id == Provider.id,
            ProviderPhone.validation_state == ValidationState.UNVALIDATED,
        )
        open_session = exists().where(
            ValidationSession.provider_id == Provider.id,
            ValidationSession.status == SessionStatus.IN_PROGRESS,
        )
        return [
            Provider.is_active.is_(True),
            or_(pending_address, pending_phone),
            ~open_session,
        ]

    async def claim_next_available(self) -> Optional[Provider]:
        """Lock one eligible provider, skipping rows locked by concurrent claims.

        ``FOR UPDATE SKIP LOCKED`` makes providers currently being claimed by
        another in-flight transaction invisible to this query, so two
        concurrent callers never receive the same provider. The lock is held
        until the enclosing transaction ends.

        Returns:
            The locked Provider, or None when no provider is eligible
        """
        query = (
            select(Provider)
            .where(*self.eligibility_criteria())
            .order_by(func.random())
            .limit(1)
            .with_for_update(skip_locked=True)
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def count_pending(self) -> int:
        """Count providers currently eligible for assignment."""
        query = select(func.count()).select_from(Provider).where(*self.eligibility_criteria())
        result = await self.session.execute(query)
        return result.scalar_one()

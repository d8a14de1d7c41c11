"""Repository for validation sessions."""

import uuid
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import exists, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from provider_validation.database.models import SessionStatus, ValidationSession
from provider_validation.repositories.base_repository import BaseRepository


class SessionRepository(BaseRepository[ValidationSession]):
    """Repository for ValidationSession records."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, ValidationSession)

    async def get_open_for_operator(self, operator_id: int) -> Optional[ValidationSession]:
        """Get the operator's most recent in-progress session.

        Args:
            operator_id: Operator principal id

        Returns:
            ValidationSession if one is open, None otherwise
        """
        query = (
            select(ValidationSession)
            .where(
                ValidationSession.operator_id == operator_id,
                ValidationSession.status == SessionStatus.IN_PROGRESS,
            )
            .order_by(ValidationSession.locked_at.desc())
            .limit(1)
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def lock_by_id(self, session_id: uuid.UUID) -> Optional[ValidationSession]:
        """Fetch a session with a row lock held until the transaction ends.

        Concurrent writers on the same session queue behind this lock;
        writers on other sessions are unaffected.
        """
        query = (
            select(ValidationSession)
            .where(ValidationSession.id == session_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def create_session(
        self,
        session_id: uuid.UUID,
        provider_id: uuid.UUID,
        operator_id: int,
        locked_at: datetime,
    ) -> ValidationSession:
        """Create a new in-progress session.

        Args:
            session_id: Externally visible id from the id generator
            provider_id: Claimed provider
            operator_id: Claiming operator
            locked_at: Claim time

        Returns:
            Created ValidationSession instance
        """
        return await self.create(
            id=session_id,
            provider_id=provider_id,
            operator_id=operator_id,
            status=SessionStatus.IN_PROGRESS,
            locked_at=locked_at,
            validation_results={},
            created_at=locked_at,
            updated_at=locked_at,
        )

    async def merge_results(
        self, validation_session: ValidationSession, summary: dict[str, Any], updated_at: datetime
    ) -> ValidationSession:
        """Merge a summary into the session's ``validation_results`` document."""
        validation_session.validation_results = {
            **(validation_session.validation_results or {}),
            **summary,
        }
        validation_session.updated_at = updated_at
        await self.session.flush()
        return validation_session

    async def count_completed_since(self, operator_id: int, since: datetime) -> int:
        """Count sessions the operator completed at or after ``since``."""
        query = select(func.count()).select_from(ValidationSession).where(
            ValidationSession.operator_id == operator_id,
            ValidationSession.status == SessionStatus.COMPLETED,
            ValidationSession.completed_at >= since,
        )
        result = await self.session.execute(query)
        return result.scalar_one()

    async def count_open_for_operator(self, operator_id: int) -> int:
        """Count the operator's in-progress sessions."""
        query = select(func.count()).select_from(ValidationSession).where(
            ValidationSession.operator_id == operator_id,
            ValidationSession.status == SessionStatus.IN_PROGRESS,
        )
        result = await self.session.execute(query)
        return result.scalar_one()

    async def lock_operator(self, operator_id: int) -> None:
        """Serialize assignment for one operator until the transaction ends.

        Takes a transaction-scoped advisory lock keyed by the operator id, so
        a second concurrent assignment for the same operator waits and then
        sees the session the first one committed.
        """
        await self.session.execute(select(func.pg_advisory_xact_lock(operator_id)))

    async def provider_has_open_session(self, provider_id: uuid.UUID) -> bool:
        """Check, in a fresh statement, whether a provider already has an open session."""
        query = select(
            exists().where(
                ValidationSession.provider_id == provider_id,
                ValidationSession.status == SessionStatus.IN_PROGRESS,
            )
        )
        result = await self.session.execute(query)
        return bool(result.scalar_one())

"""Completion gate for validation sessions."""

import uuid
from typing import Optional

from provider_validation.core.clock import Clock
from provider_validation.core.config import WorkflowSettings, settings
from provider_validation.core.database import DatabaseClient
from provider_validation.core.exceptions import IncompleteValidation
from provider_validation.database.models import SessionStatus, ValidationSession
from provider_validation.repositories import (
    AddressRepository,
    PhoneRepository,
    SessionRepository,
)
from provider_validation.services.base_service import BaseService
from provider_validation.services.quality import calculate_quality_score


class CompletionService(BaseService):
    """Closes a session once every address and phone has a decision."""

    def __init__(
        self,
        db_client: DatabaseClient,
        clock: Optional[Clock] = None,
        workflow: Optional[WorkflowSettings] = None,
    ):
        super().__init__(db_client, clock)
        self.workflow = workflow or settings.workflow

    async def complete(self, session_id: uuid.UUID, operator_id: int) -> ValidationSession:
        """Complete the session and score it.

        Raises:
            IncompleteValidation: Some addresses or phones are still unvalidated
        """
        return await self.execute(session_id, operator_id)

    async def run(self, session_id: uuid.UUID, operator_id: int) -> ValidationSession:
        now = self.clock.now()

        async with self.db_client.transaction() as session:
            sessions = SessionRepository(session)
            addresses = AddressRepository(session)
            phones = PhoneRepository(session)

            validation_session = await self.lock_owned_session(sessions, session_id, operator_id)
            provider_id = validation_session.provider_id

            unvalidated_addresses = await addresses.count_unvalidated(provider_id)
            unvalidated_phones = await phones.count_unvalidated(provider_id)
            if unvalidated_addresses or unvalidated_phones:
                raise IncompleteValidation(unvalidated_addresses, unvalidated_phones)

            total_addresses = await addresses.count_for_provider(provider_id)
            total_phones = await phones.count_for_provider(provider_id)
            elapsed = now - validation_session.locked_at

            quality_score = calculate_quality_score(
                total_addresses + total_phones,
                elapsed,
                target_minutes_per_item=self.workflow.target_minutes_per_item,
                fast_bonus=self.workflow.fast_bonus,
                ceiling=self.workflow.score_ceiling,
            )

            validation_session.status = SessionStatus.COMPLETED
            validation_session.completed_at = now
            validation_session.quality_score = quality_score
            await sessions.merge_results(
                validation_session,
                {
                    "completion_time_minutes": elapsed.total_seconds() / 60.0,
                    "total_items_validated": total_addresses + total_phones,
                    "addresses_validated": total_addresses,
                    "phones_validated": total_phones,
                    "completed_by": operator_id,
                    "completion_timestamp": now.isoformat(),
                },
                updated_at=now,
            )

        self.logger.info(
            "Validation session completed",
            extra={
                "session_id": str(session_id),
                "operator_id": operator_id,
                "quality_score": quality_score,
            },
        )
        return validation_session

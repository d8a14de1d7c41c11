"""Call attempt tracking."""

import uuid
from typing import Optional

from provider_validation.core.clock import Clock
from provider_validation.core.config import WorkflowSettings, settings
from provider_validation.core.database import DatabaseClient
from provider_validation.core.exceptions import AttemptTooSoon, InvalidAttemptNumber
from provider_validation.repositories import SessionRepository
from provider_validation.services.base_service import BaseService
from provider_validation.services.business_days import has_business_day_elapsed

VALID_ATTEMPTS = (1, 2)


class CallAttemptService(BaseService):
    """Stamps call attempt 1 or 2 on a session.

    Attempt 2 is only accepted once a business day has passed since
    attempt 1. Re-recording an attempt overwrites its timestamp.
    """

    def __init__(
        self,
        db_client: DatabaseClient,
        clock: Optional[Clock] = None,
        workflow: Optional[WorkflowSettings] = None,
    ):
        super().__init__(db_client, clock)
        self.workflow = workflow or settings.workflow

    async def record_call_attempt(
        self, session_id: uuid.UUID, operator_id: int, attempt_number: int
    ) -> None:
        await self.execute(session_id, operator_id, attempt_number)

    def validate(self, session_id: uuid.UUID, operator_id: int, attempt_number: int):
        if isinstance(attempt_number, bool) or attempt_number not in VALID_ATTEMPTS:
            raise InvalidAttemptNumber(attempt_number)

    async def run(self, session_id: uuid.UUID, operator_id: int, attempt_number: int) -> None:
        now = self.clock.now()

        async with self.db_client.transaction() as session:
            sessions = SessionRepository(session)
            validation_session = await self.lock_owned_session(sessions, session_id, operator_id)

            if attempt_number == 1:
                validation_session.call_attempt_1_at = now
            else:
                first_attempt_at = validation_session.call_attempt_1_at
                if first_attempt_at is not None and not has_business_day_elapsed(
                    first_attempt_at, now, self.workflow.business_timezone
                ):
                    self.logger.info(
                        "Second call attempt rejected",
                        extra={
                            "session_id": str(session_id),
                            "first_attempt_at": first_attempt_at.isoformat(),
                        },
                    )
                    raise AttemptTooSoon(first_attempt_at, now)
                validation_session.call_attempt_2_at = now

            validation_session.updated_at = now
            await session.flush()

        self.logger.info(
            "Call attempt recorded",
            extra={"session_id": str(session_id), "attempt_number": attempt_number},
        )

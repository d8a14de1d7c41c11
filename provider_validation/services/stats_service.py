"""Queue and per-operator counters."""

from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

from provider_validation.core.clock import Clock
from provider_validation.core.config import WorkflowSettings, settings
from provider_validation.core.database import DatabaseClient
from provider_validation.repositories import ProviderRepository, SessionRepository
from provider_validation.schemas.validation import QueueStats
from provider_validation.services.base_service import BaseService


def start_of_day(instant: datetime, tz: str) -> datetime:
    """Midnight of ``instant``'s calendar day in ``tz``."""
    local = instant.astimezone(ZoneInfo(tz))
    return local.replace(hour=0, minute=0, second=0, microsecond=0)


class StatsService(BaseService):
    def __init__(
        self,
        db_client: DatabaseClient,
        clock: Optional[Clock] = None,
        workflow: Optional[WorkflowSettings] = None,
    ):
        super().__init__(db_client, clock)
        self.workflow = workflow or settings.workflow

    async def stats(self, operator_id: int) -> QueueStats:
        return await self.execute(operator_id)

    async def run(self, operator_id: int) -> QueueStats:
        since = start_of_day(self.clock.now(), self.workflow.business_timezone)

        async with self.db_client.transaction() as session:
            sessions = SessionRepository(session)
            return QueueStats(
                total_pending=await ProviderRepository(session).count_pending(),
                completed_today=await sessions.count_completed_since(operator_id, since),
                in_progress=await sessions.count_open_for_operator(operator_id),
            )

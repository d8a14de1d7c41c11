"""Unit tests for CompletionService."""

from datetime import timedelta
from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest

from provider_validation.core.config import WorkflowSettings
from provider_validation.core.exceptions import IncompleteValidation, SessionClosed
from provider_validation.database.models import SessionStatus
from provider_validation.services.completion_service import CompletionService

MODULE = "provider_validation.services.completion_service"


@pytest.fixture
def validation_session(make_session):
    return make_session(uuid4())


@pytest.fixture
def repos(validation_session):
    with patch(f"{MODULE}.SessionRepository") as sessions_cls, \
            patch(f"{MODULE}.AddressRepository") as addresses_cls, \
            patch(f"{MODULE}.PhoneRepository") as phones_cls:
        sessions = sessions_cls.return_value
        addresses = addresses_cls.return_value
        phones = phones_cls.return_value

        sessions.lock_by_id = AsyncMock(return_value=validation_session)
        sessions.merge_results = AsyncMock()
        addresses.count_unvalidated = AsyncMock(return_value=0)
        phones.count_unvalidated = AsyncMock(return_value=0)
        addresses.count_for_provider = AsyncMock(return_value=3)
        phones.count_for_provider = AsyncMock(return_value=2)

        yield {"sessions": sessions, "addresses": addresses, "phones": phones}


@pytest.fixture
def service(db_client, clock):
    return CompletionService(db_client, clock, WorkflowSettings())


@pytest.mark.asyncio
async def test_completes_and_scores(service, repos, clock, operator_id, validation_session):
    # 5 items, 10 minute target, 20 minutes taken
    clock.advance(timedelta(minutes=20))

    completed = await service.complete(validation_session.id, operator_id)

    assert completed.status == SessionStatus.COMPLETED
    assert completed.completed_at == clock.now()
    assert completed.quality_score == pytest.approx(0.5)

    summary = repos["sessions"].merge_results.call_args.args[1]
    assert summary["total_items_validated"] == 5
    assert summary["completed_by"] == operator_id
    assert summary["completion_time_minutes"] == pytest.approx(20.0)


@pytest.mark.asyncio
async def test_fast_completion_scores_ceiling(service, repos, clock, operator_id, validation_session):
    clock.advance(timedelta(minutes=2))

    completed = await service.complete(validation_session.id, operator_id)

    assert completed.quality_score == pytest.approx(1.0)


@pytest.mark.asyncio
async def test_unvalidated_records_block_completion(service, repos, operator_id, validation_session):
    repos["addresses"].count_unvalidated.return_value = 1
    repos["phones"].count_unvalidated.return_value = 2

    with pytest.raises(IncompleteValidation) as exc_info:
        await service.complete(validation_session.id, operator_id)

    assert exc_info.value.unvalidated_addresses == 1
    assert exc_info.value.unvalidated_phones == 2
    assert validation_session.status == SessionStatus.IN_PROGRESS
    assert validation_session.quality_score is None


@pytest.mark.asyncio
async def test_completing_twice_is_closed(service, repos, operator_id, validation_session):
    await service.complete(validation_session.id, operator_id)

    with pytest.raises(SessionClosed):
        await service.complete(validation_session.id, operator_id)


@pytest.mark.asyncio
async def test_configured_ceiling_applies(db_client, clock, repos, operator_id, validation_session):
    service = CompletionService(db_client, clock, WorkflowSettings(QUALITY_SCORE_CEILING=0.8))

    completed = await service.complete(validation_session.id, operator_id)

    assert completed.quality_score == pytest.approx(0.8)

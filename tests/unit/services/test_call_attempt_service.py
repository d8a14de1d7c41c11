"""Unit tests for CallAttemptService."""

from datetime import timedelta
from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest

from provider_validation.core.config import WorkflowSettings
from provider_validation.core.exceptions import (
    AttemptTooSoon,
    InvalidAttemptNumber,
    SessionNotOwned,
)
from provider_validation.services.call_attempt_service import CallAttemptService

MODULE = "provider_validation.services.call_attempt_service"


@pytest.fixture
def validation_session(make_session):
    return make_session(uuid4())


@pytest.fixture
def sessions(validation_session):
    with patch(f"{MODULE}.SessionRepository") as sessions_cls:
        repo = sessions_cls.return_value
        repo.lock_by_id = AsyncMock(return_value=validation_session)
        yield repo


@pytest.fixture
def service(db_client, clock):
    return CallAttemptService(db_client, clock, WorkflowSettings(BUSINESS_TIMEZONE="UTC"))


@pytest.mark.asyncio
@pytest.mark.parametrize("attempt_number", [0, 3, -1, True])
async def test_invalid_attempt_number_before_io(service, db_client, operator_id, attempt_number):
    with pytest.raises(InvalidAttemptNumber):
        await service.record_call_attempt(uuid4(), operator_id, attempt_number)

    assert db_client.transactions == 0


@pytest.mark.asyncio
async def test_first_attempt_is_stamped(service, sessions, clock, operator_id, validation_session):
    await service.record_call_attempt(validation_session.id, operator_id, 1)

    assert validation_session.call_attempt_1_at == clock.now()
    assert validation_session.call_attempt_2_at is None


@pytest.mark.asyncio
async def test_rerecording_overwrites(service, sessions, clock, operator_id, validation_session):
    validation_session.call_attempt_1_at = clock.now() - timedelta(hours=2)

    await service.record_call_attempt(validation_session.id, operator_id, 1)

    assert validation_session.call_attempt_1_at == clock.now()


@pytest.mark.asyncio
async def test_second_attempt_same_day_is_too_soon(
    service, sessions, clock, operator_id, validation_session
):
    validation_session.call_attempt_1_at = clock.now() - timedelta(hours=3)

    with pytest.raises(AttemptTooSoon):
        await service.record_call_attempt(validation_session.id, operator_id, 2)

    assert validation_session.call_attempt_2_at is None


@pytest.mark.asyncio
async def test_second_attempt_after_business_day(
    service, sessions, clock, operator_id, validation_session
):
    first = clock.now()
    validation_session.call_attempt_1_at = first
    clock.advance(timedelta(days=1))

    await service.record_call_attempt(validation_session.id, operator_id, 2)

    assert validation_session.call_attempt_2_at == first + timedelta(days=1)


@pytest.mark.asyncio
async def test_second_attempt_without_first_is_allowed(
    service, sessions, clock, operator_id, validation_session
):
    await service.record_call_attempt(validation_session.id, operator_id, 2)

    assert validation_session.call_attempt_2_at == clock.now()


@pytest.mark.asyncio
async def test_other_operator_is_rejected(service, sessions, validation_session):
    with pytest.raises(SessionNotOwned):
        await service.record_call_attempt(validation_session.id, 999, 1)

    assert validation_session.call_attempt_1_at is None

"""Unit tests for PreviewService and StatsService."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest

from provider_validation.core.clock import FixedClock
from provider_validation.core.config import WorkflowSettings
from provider_validation.core.exceptions import SessionNotFound
from provider_validation.services.preview_service import PreviewService
from provider_validation.services.stats_service import StatsService, start_of_day

PREVIEW_MODULE = "provider_validation.services.preview_service"
STATS_MODULE = "provider_validation.services.stats_service"


@pytest.fixture
def validation_session(make_session):
    return make_session(uuid4())


@pytest.fixture
def preview_repos(validation_session):
    with patch(f"{PREVIEW_MODULE}.SessionRepository") as sessions_cls, \
            patch(f"{PREVIEW_MODULE}.AddressRepository") as addresses_cls, \
            patch(f"{PREVIEW_MODULE}.PhoneRepository") as phones_cls:
        sessions = sessions_cls.return_value
        addresses = addresses_cls.return_value
        phones = phones_cls.return_value

        sessions.lock_by_id = AsyncMock(return_value=validation_session)
        addresses.list_unvalidated = AsyncMock(return_value=[])
        phones.list_unvalidated = AsyncMock(return_value=[])
        addresses.count_for_provider = AsyncMock(return_value=2)
        phones.count_for_provider = AsyncMock(return_value=1)

        yield {"sessions": sessions, "addresses": addresses, "phones": phones}


@pytest.mark.asyncio
async def test_preview_ready(db_client, clock, preview_repos, operator_id, validation_session):
    preview = await PreviewService(db_client, clock).preview(validation_session.id, operator_id)

    assert preview.can_complete is True
    assert preview.total_required == 3
    assert preview.total_validated == 3
    assert preview.message.startswith("All validations complete")


@pytest.mark.asyncio
async def test_preview_lists_pending(
    db_client, clock, preview_repos, operator_id, validation_session, make_address, make_phone
):
    address = make_address(validation_session.provider_id)
    phone = make_phone(validation_session.provider_id)
    preview_repos["addresses"].list_unvalidated.return_value = [address]
    preview_repos["phones"].list_unvalidated.return_value = [phone]

    preview = await PreviewService(db_client, clock).preview(validation_session.id, operator_id)

    assert preview.can_complete is False
    assert [a.id for a in preview.unvalidated_addresses] == [address.id]
    assert [p.id for p in preview.unvalidated_phones] == [phone.id]
    assert preview.unvalidated_addresses[0].validated_correct is None
    assert preview.total_validated == 1
    assert "2 remaining items (1 addresses, 1 phones)" in preview.message


@pytest.mark.asyncio
async def test_preview_missing_session(db_client, clock, preview_repos, operator_id):
    preview_repos["sessions"].lock_by_id.return_value = None

    with pytest.raises(SessionNotFound):
        await PreviewService(db_client, clock).preview(uuid4(), operator_id)


@pytest.mark.asyncio
async def test_stats_counts(db_client, operator_id):
    clock = FixedClock(datetime(2024, 3, 6, 3, 30, tzinfo=timezone.utc))
    workflow = WorkflowSettings(BUSINESS_TIMEZONE="America/Chicago")

    with patch(f"{STATS_MODULE}.ProviderRepository") as providers_cls, \
            patch(f"{STATS_MODULE}.SessionRepository") as sessions_cls:
        providers_cls.return_value.count_pending = AsyncMock(return_value=42)
        sessions = sessions_cls.return_value
        sessions.count_completed_since = AsyncMock(return_value=5)
        sessions.count_open_for_operator = AsyncMock(return_value=1)

        stats = await StatsService(db_client, clock, workflow).stats(operator_id)

    assert stats.total_pending == 42
    assert stats.completed_today == 5
    assert stats.in_progress == 1

    _, since = sessions.count_completed_since.call_args.args
    # 03:30 UTC on the 6th is still the 5th in Chicago
    assert since == datetime(2024, 3, 5, 6, 0, tzinfo=timezone.utc)


def test_start_of_day_utc():
    instant = datetime(2024, 3, 6, 14, 45, 12, tzinfo=timezone.utc)
    assert start_of_day(instant, "UTC") == datetime(2024, 3, 6, tzinfo=timezone.utc)

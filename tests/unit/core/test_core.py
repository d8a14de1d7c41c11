"""Unit tests for configuration, clocks, auth and the store handle."""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import jwt
import pytest
from sqlalchemy.exc import OperationalError
from pydantic import ValidationError

from provider_validation.core.auth import decode_operator_id
from provider_validation.core.clock import FixedClock, SystemClock
from provider_validation.core.config import AuthSettings, DatabaseSettings, WorkflowSettings
from provider_validation.core.database import is_timeout_error

SECRET = "unit-test-secret-that-is-long-enough-for-hs256"


def test_connection_url_uses_asyncpg():
    db = DatabaseSettings(DATABASE_URL="postgresql://u:p@db:5432/app?sslmode=require")

    assert db.connection_url == "postgresql+asyncpg://u:p@db:5432/app?ssl=require"


def test_connection_url_keeps_asyncpg_prefix():
    url = "postgresql+asyncpg://u:p@db:5432/app"
    assert DatabaseSettings(DATABASE_URL=url).connection_url == url


def test_workflow_settings_bounds():
    with pytest.raises(ValidationError):
        WorkflowSettings(QUALITY_SCORE_CEILING=1.5)
    with pytest.raises(ValidationError):
        WorkflowSettings(QUALITY_TARGET_MINUTES_PER_ITEM=0)


def test_fixed_clock():
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    clock = FixedClock(start)
    clock.advance(timedelta(minutes=5))

    assert clock.now() == start + timedelta(minutes=5)
    with pytest.raises(ValueError):
        FixedClock(datetime(2024, 1, 1))


def test_system_clock_is_utc():
    assert SystemClock().now().tzinfo == timezone.utc


def test_decode_operator_id():
    auth = AuthSettings(AUTH_JWT_SECRET=SECRET)
    token = jwt.encode({"sub": "42"}, SECRET, algorithm="HS256")

    assert decode_operator_id(token, auth) == 42


def test_decode_operator_id_rejects_bad_signature():
    auth = AuthSettings(AUTH_JWT_SECRET=SECRET)
    token = jwt.encode({"sub": "42"}, SECRET + "-other", algorithm="HS256")

    with pytest.raises(jwt.InvalidTokenError):
        decode_operator_id(token, auth)


def test_decode_operator_id_checks_audience():
    auth = AuthSettings(AUTH_JWT_SECRET=SECRET, AUTH_JWT_AUDIENCE="validation")
    token = jwt.encode({"sub": "42", "aud": "other"}, SECRET, algorithm="HS256")

    with pytest.raises(jwt.InvalidTokenError):
        decode_operator_id(token, auth)


def test_decode_operator_id_requires_integer_subject():
    auth = AuthSettings(AUTH_JWT_SECRET=SECRET)
    token = jwt.encode({"sub": "alice"}, SECRET, algorithm="HS256")

    with pytest.raises(ValueError):
        decode_operator_id(token, auth)


@pytest.mark.parametrize("sqlstate, expected", [("57014", True), ("55P03", True), ("23505", False)])
def test_is_timeout_error(sqlstate, expected):
    orig = MagicMock(sqlstate=sqlstate)
    error = OperationalError("SELECT 1", {}, orig)

    assert is_timeout_error(error) is expected

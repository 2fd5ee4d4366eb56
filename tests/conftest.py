from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import jwt
import pytest

from routrauth.config.environments import TestingSettings
from routrauth.security import TokenService

TEST_SECRET = "test-secret-key-for-routrauth-unit-tests"


@pytest.fixture(autouse=True)
def clear_env(monkeypatch):
    # Automatically clear certain environment variables before each test if needed
    monkeypatch.delenv("APP_ENV", raising=False)
    monkeypatch.delenv("APP_NAME", raising=False)
    monkeypatch.delenv("DEBUG", raising=False)
    monkeypatch.delenv("JWT_SECRET_KEY", raising=False)
    monkeypatch.delenv("DATABASE_URL", raising=False)
    yield
    # No teardown needed, monkeypatch handles it


@pytest.fixture
def dummy_session():
    """Reusable async session mock for DB operations."""
    return AsyncMock()


@pytest.fixture
def settings():
    """Testing settings with a fixed signing key."""
    return TestingSettings(JWT_SECRET_KEY=TEST_SECRET)


@pytest.fixture
def token_service(settings):
    return TokenService(settings)


def _make_jwt(expires_in: float = 3600, secret: str = "client-secret", **claims) -> str:
    """Encode an HS256 token expiring ``expires_in`` seconds from now."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": "1",
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(seconds=expires_in)).timestamp()),
    }
    payload.update(claims)
    return jwt.encode(payload, secret, algorithm="HS256")


@pytest.fixture
def make_jwt():
    """Factory for client-side test tokens with a chosen lifetime."""
    return _make_jwt

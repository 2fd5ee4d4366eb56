"""
Unit tests for the config module.

These tests cover:
- Default and environment-based settings loading
- JWT secret key logic (auto-generation, required in production)
- Validators for JWT_ALGORITHM, DATABASE_URL and REDIS_URL
- Environment selection logic (development, testing, production)
- Client token manager defaults

All tests use monkeypatching to ensure isolation.
"""

import pytest

from routrauth.config import (
    BaseAppSettings,
    DevelopmentSettings,
    ProductionSettings,
    TestingSettings,
    get_settings,
)


def test_base_app_settings_defaults():
    settings = BaseAppSettings(DEBUG=True, JWT_SECRET_KEY="testkey")
    assert settings.APP_NAME == "routrapp-api"
    assert settings.DEBUG is True
    assert settings.JWT_SECRET_KEY == "testkey"
    assert settings.JWT_ALGORITHM == "HS256"
    assert settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES == 30
    assert settings.JWT_REFRESH_TOKEN_EXPIRE_DAYS == 7
    assert settings.JWT_ISSUER == "routrapp-api"
    assert settings.JWT_AUDIENCE == "routrapp-frontend"
    assert settings.REDIS_URL.startswith("redis://")


def test_ttl_helpers():
    settings = BaseAppSettings(DEBUG=True, JWT_SECRET_KEY="testkey")
    assert settings.access_token_ttl_seconds == 1800
    assert settings.refresh_token_ttl_seconds == 604800


def test_client_defaults():
    settings = BaseAppSettings(DEBUG=True, JWT_SECRET_KEY="testkey")
    assert settings.AUTH_REFRESH_PATH == "/api/v1/auth/refresh"
    assert settings.CLIENT_REFRESH_THRESHOLD_SECONDS == 300
    assert settings.CLIENT_MAX_RETRIES == 3
    assert settings.CLIENT_RETRY_DELAY_SECONDS == 1.0


def test_env_override(monkeypatch):
    monkeypatch.setenv("APP_NAME", "MyApp")
    monkeypatch.setenv("DEBUG", "True")
    monkeypatch.setenv("JWT_SECRET_KEY", "envkey")
    monkeypatch.setenv("JWT_ACCESS_TOKEN_EXPIRE_MINUTES", "15")
    settings = BaseAppSettings()
    assert settings.APP_NAME == "MyApp"
    assert settings.DEBUG is True
    assert settings.JWT_SECRET_KEY == "envkey"
    assert settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES == 15


def test_jwt_secret_key_auto_generate():
    settings = BaseAppSettings(DEBUG=True)
    assert isinstance(settings.JWT_SECRET_KEY, str)
    assert len(settings.JWT_SECRET_KEY) == 64


def test_jwt_secret_key_required_in_production():
    with pytest.raises(ValueError):
        BaseAppSettings(DEBUG=False)


@pytest.mark.parametrize("algorithm", ["HS256", "HS384", "HS512"])
def test_hmac_algorithms_accepted(algorithm):
    settings = BaseAppSettings(DEBUG=True, JWT_SECRET_KEY="x", JWT_ALGORITHM=algorithm)
    assert settings.JWT_ALGORITHM == algorithm


@pytest.mark.parametrize("algorithm", ["RS256", "none", "ES256"])
def test_non_hmac_algorithms_rejected(algorithm):
    with pytest.raises(ValueError):
        BaseAppSettings(DEBUG=True, JWT_SECRET_KEY="x", JWT_ALGORITHM=algorithm)


@pytest.mark.parametrize("field", ["JWT_ACCESS_TOKEN_EXPIRE_MINUTES", "JWT_REFRESH_TOKEN_EXPIRE_DAYS"])
def test_token_lifetimes_must_be_positive(field):
    with pytest.raises(ValueError):
        BaseAppSettings(DEBUG=True, JWT_SECRET_KEY="x", **{field: 0})


def test_database_url_requires_async_driver():
    with pytest.raises(ValueError):
        BaseAppSettings(
            DEBUG=True, JWT_SECRET_KEY="x", DATABASE_URL="postgresql://u:p@localhost/db"
        )
    settings = BaseAppSettings(
        DEBUG=True, JWT_SECRET_KEY="x", DATABASE_URL="postgresql+asyncpg://u:p@localhost/db"
    )
    assert settings.DATABASE_URL.startswith("postgresql+asyncpg://")


def test_redis_url_scheme():
    with pytest.raises(ValueError):
        BaseAppSettings(DEBUG=True, JWT_SECRET_KEY="x", REDIS_URL="http://localhost:6379")
    settings = BaseAppSettings(DEBUG=True, JWT_SECRET_KEY="x", REDIS_URL="rediss://cache:6380/1")
    assert settings.REDIS_URL == "rediss://cache:6380/1"


def test_get_settings_development_by_default():
    settings = get_settings()
    assert isinstance(settings, DevelopmentSettings)
    assert settings.DEBUG is True


def test_get_settings_testing(monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    settings = get_settings()
    assert isinstance(settings, TestingSettings)
    assert settings.PASSWORD_BCRYPT_ROUNDS == 4
    assert settings.DATABASE_URL.startswith("sqlite+aiosqlite://")


def test_get_settings_production_requires_secret(monkeypatch):
    monkeypatch.setenv("APP_ENV", "production")
    with pytest.raises(ValueError):
        get_settings()


def test_get_settings_production(monkeypatch):
    monkeypatch.setenv("APP_ENV", "production")
    monkeypatch.setenv("JWT_SECRET_KEY", "prod-secret")
    settings = get_settings()
    assert isinstance(settings, ProductionSettings)
    assert settings.DEBUG is False
    assert settings.JWT_SECRET_KEY == "prod-secret"

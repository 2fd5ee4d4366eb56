"""
Base configuration module for the routrauth service.

This module provides the base settings class that the environment-specific
settings classes inherit from. It covers application identity, database,
JWT signing, password hashing and the client-side token manager defaults.
"""

import secrets
from typing import Optional

from pydantic import ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings

HMAC_ALGORITHMS = ("HS256", "HS384", "HS512")


class BaseAppSettings(BaseSettings):
    """
    Base settings class for application configuration.

    Attributes:
        APP_NAME: The name of the application
        APP_ENV: Name of the active environment
        DEBUG: Flag to enable/disable debug mode
        VERSION: Application version string
        LOG_LEVEL: Default level for loggers created by routrauth.logging
        LOG_JSON_FORMAT: Emit log records as JSON
        DATABASE_URL: Database connection URL
        DB_ECHO: Enable SQL query logging (echo)
        DB_POOL_SIZE: Connection pool size for the database
        JWT_SECRET_KEY: Secret key for JWT token signing
        JWT_ALGORITHM: HMAC algorithm used for JWT token signing
        JWT_ACCESS_TOKEN_EXPIRE_MINUTES: Lifetime of access tokens in minutes
        JWT_REFRESH_TOKEN_EXPIRE_DAYS: Lifetime of refresh tokens in days
        JWT_ISSUER: Issuer claim for JWT tokens
        JWT_AUDIENCE: Audience claim for JWT tokens
        PASSWORD_BCRYPT_ROUNDS: bcrypt cost factor
        AUTH_REFRESH_PATH: Path of the refresh endpoint used by the client
        CLIENT_REFRESH_THRESHOLD_SECONDS: How early the client refreshes
        CLIENT_MAX_RETRIES: Refresh attempts before giving up
        CLIENT_RETRY_DELAY_SECONDS: Base delay between refresh attempts
        CLIENT_TOKEN_FILE: Location of the durable client token store
        REDIS_URL: Redis URL for the session-scoped client token store
    """

    APP_NAME: str = Field(default="routrapp-api")
    APP_ENV: str = Field(default="development")
    DEBUG: bool = Field(default=False)
    VERSION: str = Field(default="0.1.0")

    # Logging configuration
    LOG_LEVEL: str = Field(default="INFO", description="Default log level")
    LOG_JSON_FORMAT: bool = Field(
        default=False, description="Emit log records as JSON"
    )

    # Database configuration
    DATABASE_URL: Optional[str] = Field(
        default=None, description="Database connection URL"
    )
    DB_ECHO: bool = Field(default=False, description="Enable SQL query logging (echo)")
    DB_POOL_SIZE: int = Field(
        default=5, description="Connection pool size for the database"
    )

    # Security configuration
    JWT_SECRET_KEY: str = Field(
        default="",  # Empty default to encourage explicit setting
        validate_default=True,
        description="Secret key for signing JWT tokens",
    )
    JWT_ALGORITHM: str = Field(
        default="HS256", description="HMAC algorithm used for JWT token signing"
    )
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(
        default=30, gt=0, description="Expiration time for access tokens in minutes"
    )
    JWT_REFRESH_TOKEN_EXPIRE_DAYS: int = Field(
        default=7, gt=0, description="Expiration time for refresh tokens in days"
    )
    JWT_ISSUER: str = Field(
        default="routrapp-api", description="Issuer claim for JWT tokens"
    )
    JWT_AUDIENCE: str = Field(
        default="routrapp-frontend", description="Audience claim for JWT tokens"
    )
    PASSWORD_BCRYPT_ROUNDS: int = Field(
        default=12, ge=4, le=31, description="bcrypt cost factor"
    )

    # Client token manager configuration
    AUTH_REFRESH_PATH: str = Field(
        default="/api/v1/auth/refresh", description="Refresh endpoint path"
    )
    CLIENT_REFRESH_THRESHOLD_SECONDS: float = Field(
        default=300, ge=0, description="Refresh this many seconds before expiry"
    )
    CLIENT_MAX_RETRIES: int = Field(
        default=3, ge=1, description="Refresh attempts before giving up"
    )
    CLIENT_RETRY_DELAY_SECONDS: float = Field(
        default=1.0, ge=0, description="Base delay between refresh attempts"
    )
    CLIENT_TOKEN_FILE: str = Field(
        default="~/.routrauth/tokens.json",
        description="Path of the durable client token store",
    )
    REDIS_URL: str = Field(
        default="redis://localhost:6379/0",
        description="Redis URL for the session-scoped client token store",
    )

    @field_validator("JWT_ALGORITHM", mode="before")
    def validate_jwt_algorithm(cls, value):
        """Only symmetric HMAC signing is supported."""
        if value not in HMAC_ALGORITHMS:
            raise ValueError(
                f"JWT_ALGORITHM must be one of {', '.join(HMAC_ALGORITHMS)}. "
                f"You provided: {value}"
            )
        return value

    @field_validator("JWT_SECRET_KEY", mode="before")
    def generate_jwt_secret_if_empty(cls, value, info):
        """
        Generate a secure random JWT secret key if not provided.

        In development, this will generate a random key for convenience.
        Every other environment must set the key explicitly.
        """
        if not value:
            is_debug = info.data.get("DEBUG", False)
            if is_debug:
                return secrets.token_hex(32)
            raise ValueError(
                "JWT_SECRET_KEY must be explicitly set in production. "
                "Generate a secure key with: python -c 'import secrets; print(secrets.token_hex(32))'"
            )
        return value

    @field_validator("DATABASE_URL", mode="before")
    def validate_database_url(cls, value):
        """
        Ensure DATABASE_URL uses an async driver for PostgreSQL connections.
        """
        if (
            value
            and value.startswith("postgresql://")
            and not value.startswith("postgresql+asyncpg://")
        ):
            raise ValueError(
                "DATABASE_URL must start with 'postgresql+asyncpg://' for asyncpg driver. "
                "You provided a URL starting with 'postgresql://'. "
                "Please update your DATABASE_URL to use the correct format."
            )
        return value

    @field_validator("REDIS_URL", mode="before")
    def validate_redis_url(cls, value):
        """
        Ensure REDIS_URL uses redis:// or rediss:// scheme.
        """
        if value and not (
            value.startswith("redis://") or value.startswith("rediss://")
        ):
            raise ValueError(
                "REDIS_URL must start with 'redis://' or 'rediss://'. "
                f"You provided: {value}"
            )
        return value

    @property
    def access_token_ttl_seconds(self) -> int:
        return self.JWT_ACCESS_TOKEN_EXPIRE_MINUTES * 60

    @property
    def refresh_token_ttl_seconds(self) -> int:
        return self.JWT_REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60

    model_config = ConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

"""
Configuration module for routrauth.

This module provides:
- BaseAppSettings: The base class for application settings, supporting environment variable loading.
- Environment-specific settings (development, testing, production).
- get_settings: Factory for loading the correct settings class based on APP_ENV.

Example environment variables:

# Application
APP_NAME="routrapp-api"
APP_ENV="development"  # Options: development, testing, production
DEBUG=true

# Database configuration
DATABASE_URL="postgresql+asyncpg://<username>:<password>@<host>:<port>/<database_name>"

# Security configuration
JWT_SECRET_KEY="your-secret-key-at-least-32-characters-long"
JWT_ALGORITHM="HS256"
JWT_ACCESS_TOKEN_EXPIRE_MINUTES=30
JWT_REFRESH_TOKEN_EXPIRE_DAYS=7
JWT_ISSUER="routrapp-api"
JWT_AUDIENCE="routrapp-frontend"
PASSWORD_BCRYPT_ROUNDS=12

# Client token manager
AUTH_REFRESH_PATH="/api/v1/auth/refresh"
CLIENT_REFRESH_THRESHOLD_SECONDS=300
CLIENT_MAX_RETRIES=3
CLIENT_RETRY_DELAY_SECONDS=1.0
CLIENT_TOKEN_FILE="~/.routrauth/tokens.json"
REDIS_URL="redis://localhost:6379/0"
"""

from .base import BaseAppSettings
from .environments import DevelopmentSettings, ProductionSettings, TestingSettings
from .settings import get_settings

__all__ = [
    "BaseAppSettings",
    "get_settings",
    "DevelopmentSettings",
    "ProductionSettings",
    "TestingSettings",
]

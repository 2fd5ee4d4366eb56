"""
Environment specific settings.

Development and testing run in debug mode so a throwaway JWT secret is
generated when none is configured. Production never does.
"""

from .base import BaseAppSettings


class DevelopmentSettings(BaseAppSettings):
    """
    Settings class for development environment.

    Attributes:
        DEBUG: Always True in development
        DATABASE_URL: Local SQLite database
    """

    APP_ENV: str = "development"
    DEBUG: bool = True
    DATABASE_URL: str = "sqlite+aiosqlite:///./dev.db"


class TestingSettings(BaseAppSettings):
    """
    Settings class for testing environment.

    Uses an in-memory SQLite database and the cheapest bcrypt cost
    so password tests stay fast.
    """

    APP_ENV: str = "testing"
    DEBUG: bool = True
    DATABASE_URL: str = "sqlite+aiosqlite:///:memory:"
    PASSWORD_BCRYPT_ROUNDS: int = 4


class ProductionSettings(BaseAppSettings):
    """
    Settings class for production environment.

    DEBUG is forced off, so JWT_SECRET_KEY must come from the environment.
    """

    APP_ENV: str = "production"
    DEBUG: bool = False

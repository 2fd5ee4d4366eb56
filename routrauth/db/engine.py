"""
Database engine and session factory lifecycle.
"""

from typing import Optional

from sqlalchemy.engine.url import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from routrauth.config.base import BaseAppSettings
from routrauth.db.base import metadata
from routrauth.logging import Logger, ensure_logger

engine: Optional[AsyncEngine] = None
SessionLocal: Optional[async_sessionmaker[AsyncSession]] = None


async def init_db(
    settings: BaseAppSettings,
    logger: Optional[Logger] = None,
    create_tables: bool = False,
) -> None:
    """
    Initialize the database engine and session factory.

    Args:
        settings: Application settings
        logger: Optional logger for database operations
        create_tables: Create missing tables from the model metadata
    """
    global engine, SessionLocal

    log = ensure_logger(logger, __name__, settings)

    url = make_url(settings.DATABASE_URL)
    log.debug(f"Creating database engine for {url.render_as_string(hide_password=True)}")
    engine_kwargs = {
        "echo": settings.DB_ECHO,
    }
    # SQLite+aiosqlite does not take a pool size
    if not (
        url.get_backend_name() == "sqlite" and url.drivername.endswith("aiosqlite")
    ):
        engine_kwargs["pool_size"] = settings.DB_POOL_SIZE
    engine = create_async_engine(settings.DATABASE_URL, **engine_kwargs)
    SessionLocal = async_sessionmaker(bind=engine, expire_on_commit=False)

    if create_tables:
        async with engine.begin() as conn:
            await conn.run_sync(metadata.create_all)
        log.debug("Database tables created")

    log.debug("Database engine and session factory initialized")


async def shutdown_db(logger: Optional[Logger] = None) -> None:
    """
    Dispose of the database engine.

    Args:
        logger: Optional logger for database operations
    """
    global engine, SessionLocal

    log = ensure_logger(logger, __name__)

    if engine:
        log.debug("Disposing database engine")
        await engine.dispose()
        engine = None
        SessionLocal = None
        log.debug("Database engine disposed")

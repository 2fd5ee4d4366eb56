from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

import routrauth.db.engine as db_engine
from routrauth.config.base import BaseAppSettings
from routrauth.db.engine import init_db, shutdown_db
from routrauth.errors.exceptions import DBError
from routrauth.logging import Logger, ensure_logger


def setup_db(
    app: FastAPI,
    settings: BaseAppSettings,
    logger: Optional[Logger] = None,
) -> None:
    """
    Configure database lifecycle for FastAPI application.

    - On startup: initialize AsyncEngine and sessionmaker
    - On shutdown: dispose engine

    Nothing is registered when DATABASE_URL is not configured.
    """
    log = ensure_logger(logger, __name__, settings)

    if not settings.DATABASE_URL:
        log.warning("DATABASE_URL not set, database lifecycle not configured")
        return

    async def on_startup():
        await init_db(settings, log, create_tables=settings.DEBUG)
        log.info("Database engine initialized")

    async def on_shutdown():
        await shutdown_db(log)
        log.info("Database engine disposed")

    app.add_event_handler("startup", on_startup)
    app.add_event_handler("shutdown", on_shutdown)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    The session is committed when the request handler returns and rolled
    back when it raises. Application errors pass through unchanged.
    """
    log = ensure_logger(None, __name__)

    if db_engine.SessionLocal is None:
        raise DBError(message="Database not initialized")

    async with db_engine.SessionLocal() as session:
        try:
            yield session
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            log.error(f"Database session error: {e}")
            raise DBError(message=str(e), details={"error": str(e)})
        except Exception:
            await session.rollback()
            raise

"""
Error management entry point.

Registers the exception handlers that turn exceptions into
consistent API responses.
"""

from typing import Optional

from fastapi import FastAPI

from routrauth.config.base import BaseAppSettings
from routrauth.errors.handlers import register_exception_handlers
from routrauth.logging import Logger, ensure_logger


def setup_errors(
    app: FastAPI,
    settings: Optional[BaseAppSettings] = None,
    logger: Optional[Logger] = None,
) -> None:
    """
    Configure error handling for a FastAPI application.

    Args:
        app: FastAPI application instance
        settings: Optional application settings
        logger: Optional logger for logging exceptions
    """
    log = ensure_logger(logger, __name__, settings)
    register_exception_handlers(app, logger=log)

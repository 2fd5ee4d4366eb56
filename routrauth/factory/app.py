"""
FastAPI application factory module.

This module provides functions to configure FastAPI applications with the
authentication stack: error handling, database, token service and the auth
endpoints.
"""

from typing import Optional

from fastapi import FastAPI

from routrauth.api import auth_router
from routrauth.config import BaseAppSettings, get_settings
from routrauth.db import setup_db
from routrauth.errors import setup_errors
from routrauth.logging.manager import ensure_logger
from routrauth.security import setup_security


def configure_app(app: FastAPI, settings: Optional[BaseAppSettings] = None) -> None:
    """
    Configure a FastAPI application with the authentication stack.

    The application instance should be created by the main application and passed
    to this function for configuration.

    Args:
        app: The FastAPI application to configure
        settings: Optional application settings, if not provided will be loaded
                 from environment
    """
    app_settings = settings or get_settings()

    logger = ensure_logger(None, __name__, app_settings)

    # FastAPI fills in its own defaults, only replace those
    if app.title == "FastAPI":
        app.title = app_settings.APP_NAME
    if app.version == "0.1.0":
        app.version = app_settings.VERSION

    app.debug = app_settings.DEBUG
    app.state.settings = app_settings

    # Configure error handling (required)
    setup_errors(app, app_settings, logger)
    # Configure database
    setup_db(app, app_settings, logger)
    # Configure token service
    setup_security(app, app_settings, logger)
    # Mount authentication endpoints
    app.include_router(auth_router)

    logger.info(f"{app_settings.APP_NAME} configured for {app_settings.APP_ENV}")


def create_app(settings: Optional[BaseAppSettings] = None, **kwargs) -> FastAPI:
    """
    Create and configure a new FastAPI application.

    Args:
        settings: Optional application settings
        **kwargs: Passed through to the FastAPI constructor
    """
    app = FastAPI(**kwargs)
    configure_app(app, settings)
    return app

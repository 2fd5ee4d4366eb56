"""
Security module manager.

Builds the TokenService from settings and attaches it to the application
so request dependencies can reach it through ``request.app.state``.

Limitations:
- Only password-based JWT authentication with HMAC signing
- No server-side revocation list: logout clears the stored refresh token only
- No OAuth2/social login/multi-factor authentication
"""

from typing import Optional

from fastapi import FastAPI

from routrauth.config.base import BaseAppSettings
from routrauth.logging import Logger, ensure_logger
from routrauth.security.tokens.service import TokenService


def setup_security(
    app: FastAPI,
    settings: BaseAppSettings,
    logger: Optional[Logger] = None,
) -> TokenService:
    """
    Configure token issuance and validation for a FastAPI application.

    Args:
        app: The FastAPI application to configure
        settings: Application settings
        logger: Optional logger instance

    Returns:
        The TokenService stored on ``app.state.token_service``
    """
    log = ensure_logger(logger, __name__, settings)

    token_service = TokenService(settings, logger=log)
    app.state.token_service = token_service

    log.info(f"JWT algorithm: {settings.JWT_ALGORITHM}")
    log.info(
        f"JWT token lifetime: {settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES} minutes"
    )
    log.info(
        f"JWT refresh token lifetime: {settings.JWT_REFRESH_TOKEN_EXPIRE_DAYS} days"
    )
    log.info("Security module initialized")
    return token_service

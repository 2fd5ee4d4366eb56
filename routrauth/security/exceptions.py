"""
Security-specific exception classes.

This module provides exceptions for security-related errors,
extending the base exception hierarchy from routrauth.errors.

Token failures come in two kinds so callers can decide what to do:
ExpiredTokenError means a refresh may help, InvalidTokenError
(malformed, forged, wrong kind) means the caller must log in again.
"""

from typing import Any, Dict, Optional

from routrauth.errors.exceptions import UnauthorizedError


class InvalidTokenError(UnauthorizedError):
    """Exception raised when a token is malformed, forged or of the wrong kind."""

    def __init__(
        self,
        message: str = "Invalid token",
        code: str = "INVALID_TOKEN",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, code=code, details=details)


class ExpiredTokenError(UnauthorizedError):
    """Exception raised when a token has expired."""

    def __init__(
        self,
        message: str = "Token has expired",
        code: str = "EXPIRED_TOKEN",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, code=code, details=details)


class InvalidCredentialsError(UnauthorizedError):
    """Exception raised when login credentials are invalid."""

    def __init__(
        self,
        message: str = "Invalid credentials",
        code: str = "INVALID_CREDENTIALS",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, code=code, details=details)


class AccountDisabledError(UnauthorizedError):
    """Exception raised when an inactive account tries to authenticate."""

    def __init__(
        self,
        message: str = "Account is disabled",
        code: str = "ACCOUNT_DISABLED",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, code=code, details=details)

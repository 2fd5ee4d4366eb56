"""
Client-side token exceptions.

Raised by the token manager and the authenticated HTTP client. Each carries
a stable code and, where one exists, the exception that caused it.
"""

from typing import Optional


class TokenError(Exception):
    """
    Base exception for client-side token failures.

    Attributes:
        message: Human-readable error message
        code: Error code identifier
        original_error: The underlying exception, if any
    """

    def __init__(
        self,
        message: str,
        code: str = "TOKEN_ERROR",
        original_error: Optional[BaseException] = None,
    ):
        self.message = message
        self.code = code
        self.original_error = original_error
        super().__init__(message)


class TokenRefreshError(TokenError):
    """Refresh failed: no refresh token, rejected by the server, or retries exhausted."""

    def __init__(self, message: str, original_error: Optional[BaseException] = None):
        super().__init__(message, "REFRESH_FAILED", original_error)


class AuthenticationRequiredError(TokenError):
    """No usable token: the user has to log in again."""

    def __init__(
        self,
        message: str = "Authentication required",
        original_error: Optional[BaseException] = None,
    ):
        super().__init__(message, "AUTHENTICATION_REQUIRED", original_error)


class TokenExpiredError(AuthenticationRequiredError):
    """The session expired and could not be renewed."""

    def __init__(
        self,
        message: str = "Token has expired",
        original_error: Optional[BaseException] = None,
    ):
        super().__init__(message, original_error)
        self.code = "TOKEN_EXPIRED"


class TokenStorageError(TokenError):
    def __init__(
        self,
        message: str = "Failed to store tokens",
        original_error: Optional[BaseException] = None,
    ):
        super().__init__(message, "STORAGE_ERROR", original_error)


class TokenManagerDestroyedError(TokenError):
    def __init__(self, message: str = "Token manager has been destroyed"):
        super().__init__(message, "MANAGER_DESTROYED")

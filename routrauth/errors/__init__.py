"""
Error handling module.

This module provides standardized error handling including custom exceptions,
error responses, and exception handlers.

Limitations:
- Error response structure is fixed; customization requires code changes.
- Only HTTP-style errors are supported (exceptions must inherit from AppError or be handled by FastAPI).
"""

from routrauth.errors.exceptions import (
    AppError,
    ConflictError,
    DBError,
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from routrauth.errors.handlers import register_exception_handlers
from routrauth.errors.manager import setup_errors

__all__ = [
    "setup_errors",
    "register_exception_handlers",
    "AppError",
    "ValidationError",
    "NotFoundError",
    "UnauthorizedError",
    "ForbiddenError",
    "ConflictError",
    "DBError",
]

"""
Request body schemas.
"""

from routrauth.schemas.request.auth import (
    ChangePasswordRequest,
    LoginRequest,
    RefreshTokenRequest,
    RegisterUserRequest,
)

__all__ = [
    "LoginRequest",
    "RegisterUserRequest",
    "RefreshTokenRequest",
    "ChangePasswordRequest",
]

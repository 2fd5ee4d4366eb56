"""
Common schemas for routrauth.

This module provides reusable Pydantic schemas for API requests, responses
and metadata.

Limitations:
- Envelope structure is fixed; customization requires subclassing or code changes
- Only basic metadata (timestamp, version) is included by default
"""

from routrauth.schemas.metadata import BaseMetadata, ResponseMetadata
from routrauth.schemas.request import (
    ChangePasswordRequest,
    LoginRequest,
    RefreshTokenRequest,
)
from routrauth.schemas.response import (
    AccessTokenResponse,
    BaseResponse,
    DataResponse,
    ErrorInfo,
    ErrorResponse,
    LoginResponse,
    TokenResponse,
    UserResponse,
)

__all__ = [
    "BaseMetadata",
    "ResponseMetadata",
    "BaseResponse",
    "DataResponse",
    "ErrorResponse",
    "ErrorInfo",
    "AccessTokenResponse",
    "TokenResponse",
    "LoginResponse",
    "UserResponse",
    "LoginRequest",
    "RefreshTokenRequest",
    "ChangePasswordRequest",
]

"""
Response schemas for standardized API responses.
"""

from routrauth.schemas.response.base import BaseResponse
from routrauth.schemas.response.data import DataResponse
from routrauth.schemas.response.error import ErrorInfo, ErrorResponse
from routrauth.schemas.response.token import AccessTokenResponse, TokenResponse
from routrauth.schemas.response.user import LoginResponse, UserResponse

__all__ = [
    "BaseResponse",
    "DataResponse",
    "ErrorInfo",
    "ErrorResponse",
    "AccessTokenResponse",
    "TokenResponse",
    "LoginResponse",
    "UserResponse",
]

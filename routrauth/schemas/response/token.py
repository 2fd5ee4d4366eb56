"""
Token-related response schemas for authentication endpoints.
"""

from pydantic import BaseModel, Field


class AccessTokenResponse(BaseModel):
    """
    Response body of the refresh endpoint.

    Attributes:
        access_token: The new JWT access token
        token_type: Always "Bearer"
        expires_in: Access token lifetime in seconds
    """

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="Bearer", description="Authorization scheme")
    expires_in: int = Field(..., description="Access token lifetime in seconds")


class TokenResponse(AccessTokenResponse):
    """
    Access and refresh token pair, as issued at login.

    Attributes:
        refresh_token: Long-lived JWT used solely to obtain new access tokens
    """

    refresh_token: str = Field(..., description="JWT refresh token")

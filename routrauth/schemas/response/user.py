"""
User-related response schemas.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from routrauth.schemas.response.token import TokenResponse


class UserResponse(BaseModel):
    """Public view of a user record. Never carries credentials or tokens."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    organization_id: int
    email: str
    role: str
    first_name: str = ""
    last_name: str = ""
    active: bool = True
    last_login_at: Optional[datetime] = None


class LoginResponse(TokenResponse):
    """
    Response body of the login endpoint.

    Attributes:
        user: The authenticated user
    """

    user: UserResponse = Field(..., description="The authenticated user")

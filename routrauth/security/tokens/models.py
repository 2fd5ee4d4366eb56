"""
Token models.

ClaimSet mirrors the JWT payload on the wire: the application claims
(user_id, organization_id, email, role, token_type) next to the
registered ones (sub, iat, exp, iss, aud).
"""

import enum
from datetime import datetime, timezone
from typing import List, Union

from pydantic import BaseModel, ConfigDict, Field


class TokenType(str, enum.Enum):
    """Enum for token types."""

    ACCESS = "access"
    REFRESH = "refresh"


class UserContext(BaseModel):
    """Identity projected from a validated claim set for authorization checks."""

    user_id: int
    organization_id: int
    email: str
    role: str


class ClaimSet(BaseModel):
    """
    Decoded payload of a signed token.

    Only ever built from a payload whose signature has been verified.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    user_id: int
    organization_id: int
    email: str
    role: str
    token_type: TokenType
    sub: str
    iat: int
    exp: int
    iss: str
    aud: Union[str, List[str]]

    def is_access_token(self) -> bool:
        return self.token_type == TokenType.ACCESS

    def is_refresh_token(self) -> bool:
        return self.token_type == TokenType.REFRESH

    @property
    def expires_at(self) -> datetime:
        return datetime.fromtimestamp(self.exp, tz=timezone.utc)

    @property
    def issued_at(self) -> datetime:
        return datetime.fromtimestamp(self.iat, tz=timezone.utc)

    def to_user_context(self) -> UserContext:
        return UserContext(
            user_id=self.user_id,
            organization_id=self.organization_id,
            email=self.email,
            role=self.role,
        )


class TokenPair(BaseModel):
    """Access and refresh token issued together at login."""

    access_token: str
    refresh_token: str
    token_type: str = Field(default="Bearer")
    expires_in: int = Field(..., description="Access token lifetime in seconds")

"""
User persistence for the authentication flows.

Only the columns the registration, login, refresh and logout flows touch are
modelled.
The refresh_token column holds the most recently issued refresh token, so a
refresh is accepted only for the token the user was last given.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text
from sqlalchemy.ext.asyncio import AsyncSession

from routrauth.db.base import BaseModel
from routrauth.db.repository import BaseRepository
from routrauth.security.tokens.models import UserContext


class User(BaseModel):
    """Application user belonging to one organization."""

    __tablename__ = "users"

    organization_id = Column(Integer, nullable=False, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(50), nullable=False, default="technician")
    first_name = Column(String(100), nullable=False, default="")
    last_name = Column(String(100), nullable=False, default="")
    active = Column(Boolean, nullable=False, default=True)
    refresh_token = Column(Text, nullable=True)
    last_login_at = Column(DateTime(timezone=True), nullable=True)

    def to_context(self) -> UserContext:
        return UserContext(
            user_id=self.id,
            organization_id=self.organization_id,
            email=self.email,
            role=self.role,
        )

    def to_public_dict(self) -> Dict[str, Any]:
        """Serializable view without credentials or tokens."""
        return {
            "id": self.id,
            "organization_id": self.organization_id,
            "email": self.email,
            "role": self.role,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "active": self.active,
            "last_login_at": self.last_login_at,
        }


class UserRepository(BaseRepository[User]):
    """Lookups and token bookkeeping for User records."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(User, session)

    async def get_by_email(self, email: str) -> Optional[User]:
        return await self.get_one_by(email=email.strip().lower())

    async def get_active_by_id(self, user_id: int) -> Optional[User]:
        return await self.get_one_by(id=user_id, active=True)

    async def store_refresh_token(
        self,
        user: User,
        refresh_token: str,
        last_login_at: Optional[datetime] = None,
    ) -> User:
        """Remember the latest refresh token and the login time."""
        data: Dict[str, Any] = {"refresh_token": refresh_token}
        data["last_login_at"] = last_login_at or datetime.now(timezone.utc)
        return await self.update(user.id, data)

    async def clear_refresh_token(self, user_id: int) -> None:
        await self.update(user_id, {"refresh_token": None})
        self.logger.debug(f"Cleared refresh token for user {user_id}")

    async def update_password(self, user_id: int, password_hash: str) -> User:
        """Replace the password hash and drop the refresh token to force re-login."""
        return await self.update(
            user_id, {"password_hash": password_hash, "refresh_token": None}
        )

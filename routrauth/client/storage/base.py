import enum
import re
from abc import ABC, abstractmethod
from typing import Optional

# Keys clear() is allowed to remove; anything else in a backend is left alone
TOKEN_KEY_PATTERNS = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"^access_?token$",
        r"^refresh_?token$",
        r"^id_?token$",
        r"^auth_?token$",
        r"^bearer_?token$",
        r"^jwt_?token$",
        r"^session_?token$",
        r"^api_?token$",
        r"^oauth_?token$",
        r"^token$",
        r"^auth$",
        r"^token_?expiry$",
    )
)

PROBE_KEY = "__routrauth_probe__"


def is_token_key(key: str) -> bool:
    return any(pattern.match(key) for pattern in TOKEN_KEY_PATTERNS)


class StorageStrategy(str, enum.Enum):
    """Available token storage backends."""

    FILE = "file"
    REDIS = "redis"
    COOKIE = "cookie"
    MEMORY = "memory"


class TokenStorage(ABC):
    """
    Abstract base class for token storage backends.

    Backends raise on write failures; reads of a missing key return None.
    """

    @abstractmethod
    async def set_token(self, key: str, value: str) -> None:
        """Store a token value under key."""
        pass

    @abstractmethod
    async def get_token(self, key: str) -> Optional[str]:
        """Retrieve a token value by key."""
        pass

    @abstractmethod
    async def remove_token(self, key: str) -> None:
        """Remove a token value by key."""
        pass

    @abstractmethod
    async def clear(self) -> None:
        """Remove every key that looks like a token, leaving other keys untouched."""
        pass

    async def is_available(self) -> bool:
        """Probe the backend with a write/remove round trip."""
        try:
            await self.set_token(PROBE_KEY, "probe")
            await self.remove_token(PROBE_KEY)
        except Exception:
            return False
        return True

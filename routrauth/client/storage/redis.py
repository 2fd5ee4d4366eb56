from typing import Optional

from redis import asyncio as aredis  # type: ignore

from routrauth.client.storage.base import TokenStorage, is_token_key
from routrauth.logging import Logger, ensure_logger

DEFAULT_SESSION_TTL = 24 * 60 * 60


class RedisTokenStorage(TokenStorage):
    """
    Session-scoped token storage in Redis.

    Keys live under a prefix and expire after ``session_ttl`` seconds, so a
    session that is never cleared still goes away on its own.
    """

    def __init__(
        self,
        url: str,
        prefix: str = "routrauth:session:",
        session_ttl: int = DEFAULT_SESSION_TTL,
        logger: Optional[Logger] = None,
    ):
        self._url = url
        self._prefix = prefix
        self._session_ttl = session_ttl
        self._logger = ensure_logger(logger, __name__)
        self._redis: Optional[aredis.Redis] = None

    async def init(self) -> None:
        """Initialize Redis connection and verify with ping."""
        self._redis = aredis.from_url(
            self._url, encoding="utf-8", decode_responses=True
        )
        await self._redis.ping()

    async def _ensure_connection(self) -> None:
        if self._redis is None:
            await self.init()

    async def set_token(self, key: str, value: str) -> None:
        await self._ensure_connection()
        full_key = f"{self._prefix}{key}"
        try:
            await self._redis.set(full_key, value, ex=self._session_ttl)
            self._logger.debug(f"Token stored under {full_key} (ttl={self._session_ttl})")
        except Exception as e:
            self._logger.error(f"Redis set error for key {full_key}: {e}")
            raise

    async def get_token(self, key: str) -> Optional[str]:
        await self._ensure_connection()
        full_key = f"{self._prefix}{key}"
        try:
            return await self._redis.get(full_key)
        except Exception as e:
            self._logger.error(f"Redis get error for key {full_key}: {e}")
            raise

    async def remove_token(self, key: str) -> None:
        await self._ensure_connection()
        full_key = f"{self._prefix}{key}"
        try:
            await self._redis.delete(full_key)
        except Exception as e:
            self._logger.error(f"Redis delete error for key {full_key}: {e}")
            raise

    async def clear(self) -> None:
        await self._ensure_connection()
        pat = f"{self._prefix}*"
        try:
            # Use SCAN to avoid blocking Redis for large keyspaces
            async for full_key in self._redis.scan_iter(match=pat):
                if is_token_key(full_key[len(self._prefix) :]):
                    await self._redis.delete(full_key)
            self._logger.debug(f"Token keys cleared using SCAN for pattern: {pat}")
        except Exception as e:
            self._logger.error(f"Redis clear error for pattern {pat}: {e}")
            raise

    async def close(self) -> None:
        if self._redis is not None:
            await self._redis.connection_pool.disconnect()
            self._redis = None
            self._logger.debug("Redis connection closed")

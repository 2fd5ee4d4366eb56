from typing import Awaitable, Callable, Optional, TypeVar

from routrauth.client.storage.base import TokenStorage
from routrauth.logging import Logger, ensure_logger

T = TypeVar("T")


class MultiStrategyStorage(TokenStorage):
    """
    Composite storage that prefers one backend and falls back to another.

    Reads and writes go to the primary while it is available and working,
    otherwise to the fallback. Removal and clear hit both backends so no
    stale token survives in either. Failures are logged, never raised.
    """

    def __init__(
        self,
        primary: TokenStorage,
        fallback: TokenStorage,
        logger: Optional[Logger] = None,
    ):
        self.primary = primary
        self.fallback = fallback
        self._logger = ensure_logger(logger, __name__)

    async def _try_primary(
        self, operation: Callable[[TokenStorage], Awaitable[T]], fallback_value: T
    ) -> T:
        if await self.primary.is_available():
            try:
                return await operation(self.primary)
            except Exception as e:
                self._logger.warning(f"Primary storage failed, falling back: {e}")

        try:
            return await operation(self.fallback)
        except Exception as e:
            self._logger.warning(f"Fallback storage also failed: {e}")
            return fallback_value

    async def _on_both(self, operation: Callable[[TokenStorage], Awaitable[None]]) -> None:
        for storage in (self.primary, self.fallback):
            if not await storage.is_available():
                continue
            try:
                await operation(storage)
            except Exception as e:
                self._logger.warning(f"{type(storage).__name__} cleanup failed: {e}")

    async def set_token(self, key: str, value: str) -> None:
        await self._try_primary(lambda s: s.set_token(key, value), None)

    async def get_token(self, key: str) -> Optional[str]:
        return await self._try_primary(lambda s: s.get_token(key), None)

    async def remove_token(self, key: str) -> None:
        await self._on_both(lambda s: s.remove_token(key))

    async def clear(self) -> None:
        await self._on_both(lambda s: s.clear())

    async def is_available(self) -> bool:
        return await self.primary.is_available() or await self.fallback.is_available()

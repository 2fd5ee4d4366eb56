from typing import Dict, Optional

from routrauth.client.storage.base import TokenStorage, is_token_key


class MemoryTokenStorage(TokenStorage):
    """
    In-process token storage.

    Always available; tokens are lost when the process exits.
    """

    def __init__(self):
        self._data: Dict[str, str] = {}

    async def set_token(self, key: str, value: str) -> None:
        self._data[key] = value

    async def get_token(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def remove_token(self, key: str) -> None:
        self._data.pop(key, None)

    async def clear(self) -> None:
        for key in [k for k in self._data if is_token_key(k)]:
            del self._data[key]

    async def is_available(self) -> bool:
        return True

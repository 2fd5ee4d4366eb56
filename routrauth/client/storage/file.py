import asyncio
import json
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional, Union

from routrauth.client.storage.base import TokenStorage, is_token_key
from routrauth.logging import Logger, ensure_logger

DEFAULT_TOKEN_FILE = "~/.routrauth/tokens.json"


class FileTokenStorage(TokenStorage):
    """
    Durable token storage in a JSON file.

    Every write replaces the whole file atomically (temp file + rename) and
    the file is created with mode 0600. Blocking file I/O runs in a worker
    thread; an asyncio.Lock serializes read-modify-write cycles.
    """

    def __init__(
        self,
        path: Union[str, Path] = DEFAULT_TOKEN_FILE,
        logger: Optional[Logger] = None,
    ):
        self._path = Path(path).expanduser()
        self._lock = asyncio.Lock()
        self._logger = ensure_logger(logger, __name__)

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> Dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8") or "{}")
        except json.JSONDecodeError as e:
            self._logger.warning(f"Ignoring corrupt token file {self._path}: {e}")
            return {}
        if not isinstance(data, dict):
            self._logger.warning(f"Ignoring token file with unexpected shape: {self._path}")
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _write(self, data: Dict[str, str]) -> None:
        self._path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            dir=str(self._path.parent), prefix=".tokens_", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                os.fchmod(f.fileno(), 0o600)
                json.dump(data, f)
            os.replace(tmp_path, self._path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    async def _update(self, mutate) -> None:
        def read_modify_write() -> None:
            data = self._read()
            if mutate(data):
                self._write(data)

        async with self._lock:
            update = asyncio.ensure_future(asyncio.to_thread(read_modify_write))
            try:
                await asyncio.shield(update)
            except asyncio.CancelledError:
                # The thread cannot be stopped; keep the lock until it is done
                await update
                raise

    async def set_token(self, key: str, value: str) -> None:
        def mutate(data: Dict[str, str]) -> bool:
            data[key] = value
            return True

        await self._update(mutate)

    async def get_token(self, key: str) -> Optional[str]:
        async with self._lock:
            data = await asyncio.to_thread(self._read)
        return data.get(key)

    async def remove_token(self, key: str) -> None:
        def mutate(data: Dict[str, str]) -> bool:
            return data.pop(key, None) is not None

        await self._update(mutate)

    async def clear(self) -> None:
        def mutate(data: Dict[str, str]) -> bool:
            keys = [k for k in data if is_token_key(k)]
            for k in keys:
                del data[k]
            return bool(keys)

        await self._update(mutate)

"""
Unit tests for routrauth.client.storage.
Covers: memory, file, Redis and cookie backends, fallback composition, factory and presets.
"""
import asyncio
import json
import os
import stat
import time
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from routrauth.client.storage import (
    CookieTokenStorage,
    FileTokenStorage,
    MemoryTokenStorage,
    MultiStrategyStorage,
    RedisTokenStorage,
    StorageConfig,
    StorageStrategy,
    TokenStorage,
    create_token_storage,
    default_storage_config,
    is_token_key,
    secure_storage_config,
)


class BrokenStorage(TokenStorage):
    """Backend whose every operation fails."""

    async def set_token(self, key, value):
        raise OSError("disk full")

    async def get_token(self, key):
        raise OSError("disk full")

    async def remove_token(self, key):
        raise OSError("disk full")

    async def clear(self):
        raise OSError("disk full")


class FlakyStorage(MemoryTokenStorage):
    """Passes the availability probe, then fails real reads and writes."""

    async def is_available(self):
        return True

    async def set_token(self, key, value):
        raise OSError("write failed")

    async def get_token(self, key):
        raise OSError("read failed")


async def _async_iter(items):
    for item in items:
        yield item


# --- Key patterns ---
@pytest.mark.parametrize(
    "key",
    ["auth_token", "authToken", "refresh_token", "access_token", "token", "auth", "token_expiry"],
)
def test_token_key_patterns_match(key):
    assert is_token_key(key)


@pytest.mark.parametrize("key", ["theme", "user_prefs", "tokens_seen", "my_auth_token"])
def test_token_key_patterns_ignore_other_keys(key):
    assert not is_token_key(key)


# --- Memory ---
@pytest.mark.asyncio
async def test_memory_storage_basic_ops():
    storage = MemoryTokenStorage()
    await storage.set_token("auth_token", "abc")
    assert await storage.get_token("auth_token") == "abc"
    await storage.remove_token("auth_token")
    assert await storage.get_token("auth_token") is None
    # Removing a missing key is fine
    await storage.remove_token("auth_token")


@pytest.mark.asyncio
async def test_memory_storage_clear_keeps_other_keys():
    storage = MemoryTokenStorage()
    await storage.set_token("auth_token", "a")
    await storage.set_token("refresh_token", "r")
    await storage.set_token("theme", "dark")
    await storage.clear()
    assert await storage.get_token("auth_token") is None
    assert await storage.get_token("refresh_token") is None
    assert await storage.get_token("theme") == "dark"


# --- File ---
@pytest.mark.asyncio
async def test_file_storage_round_trip(tmp_path):
    path = tmp_path / "nested" / "tokens.json"
    storage = FileTokenStorage(path)
    await storage.set_token("auth_token", "abc")
    await storage.set_token("refresh_token", "def")

    assert json.loads(path.read_text()) == {"auth_token": "abc", "refresh_token": "def"}
    assert await FileTokenStorage(path).get_token("refresh_token") == "def"


@pytest.mark.asyncio
async def test_file_storage_permissions(tmp_path):
    path = tmp_path / "tokens.json"
    await FileTokenStorage(path).set_token("auth_token", "abc")
    assert stat.S_IMODE(os.stat(path).st_mode) == 0o600


@pytest.mark.asyncio
async def test_file_storage_leaves_no_temp_files(tmp_path):
    storage = FileTokenStorage(tmp_path / "tokens.json")
    for i in range(5):
        await storage.set_token("auth_token", str(i))
    assert [p.name for p in tmp_path.iterdir()] == ["tokens.json"]


@pytest.mark.asyncio
async def test_file_storage_missing_file(tmp_path):
    storage = FileTokenStorage(tmp_path / "absent.json")
    assert await storage.get_token("auth_token") is None
    await storage.remove_token("auth_token")
    assert not (tmp_path / "absent.json").exists()


@pytest.mark.asyncio
async def test_file_storage_corrupt_file(tmp_path):
    path = tmp_path / "tokens.json"
    path.write_text("{not json")
    storage = FileTokenStorage(path)
    assert await storage.get_token("auth_token") is None
    await storage.set_token("auth_token", "abc")
    assert await storage.get_token("auth_token") == "abc"


@pytest.mark.asyncio
async def test_file_storage_clear_keeps_other_keys(tmp_path):
    path = tmp_path / "tokens.json"
    storage = FileTokenStorage(path)
    await storage.set_token("auth_token", "a")
    await storage.set_token("token_expiry", "2030-01-01T00:00:00+00:00")
    await storage.set_token("theme", "dark")
    await storage.clear()
    assert json.loads(path.read_text()) == {"theme": "dark"}


@pytest.mark.asyncio
async def test_file_storage_cancelled_write_finishes_before_next_update(tmp_path):
    storage = FileTokenStorage(tmp_path / "tokens.json")
    write = storage._write

    def slow_write(data):
        time.sleep(0.05)
        write(data)

    storage._write = slow_write
    task = asyncio.create_task(storage.set_token("auth_token", "stale"))
    await asyncio.sleep(0.01)
    task.cancel()

    await storage.remove_token("auth_token")

    with pytest.raises(asyncio.CancelledError):
        await task
    assert await storage.get_token("auth_token") is None


def test_file_storage_expands_user(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))
    storage = FileTokenStorage("~/tokens.json")
    assert storage.path == tmp_path / "tokens.json"


@pytest.mark.asyncio
async def test_file_storage_unavailable(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("")
    # Parent "directory" is a regular file
    storage = FileTokenStorage(blocker / "tokens.json")
    assert not await storage.is_available()


# --- Redis ---
@pytest.mark.asyncio
async def test_redis_storage_set_get_remove():
    storage = RedisTokenStorage("redis://localhost:6379/0", prefix="s:", session_ttl=60)
    storage._redis = AsyncMock()
    storage._redis.get.return_value = "abc"

    await storage.set_token("auth_token", "abc")
    storage._redis.set.assert_awaited_once_with("s:auth_token", "abc", ex=60)

    assert await storage.get_token("auth_token") == "abc"
    storage._redis.get.assert_awaited_once_with("s:auth_token")

    await storage.remove_token("auth_token")
    storage._redis.delete.assert_awaited_once_with("s:auth_token")


@pytest.mark.asyncio
async def test_redis_storage_clear_only_token_keys():
    storage = RedisTokenStorage("redis://localhost:6379/0", prefix="s:")
    storage._redis = AsyncMock()
    storage._redis.scan_iter = lambda match: _async_iter(
        ["s:auth_token", "s:theme", "s:refresh_token"]
    )

    await storage.clear()
    deleted = [call.args[0] for call in storage._redis.delete.await_args_list]
    assert deleted == ["s:auth_token", "s:refresh_token"]


@pytest.mark.asyncio
async def test_redis_storage_connects_lazily():
    with patch("redis.asyncio.from_url") as mock_from_url:
        client = AsyncMock()
        mock_from_url.return_value = client
        storage = RedisTokenStorage("redis://localhost:6379/0")
        await storage.set_token("auth_token", "abc")

        mock_from_url.assert_called_once_with(
            "redis://localhost:6379/0", encoding="utf-8", decode_responses=True
        )
        client.ping.assert_awaited_once()
        client.set.assert_awaited_once()


@pytest.mark.asyncio
async def test_redis_storage_propagates_errors():
    storage = RedisTokenStorage("redis://localhost:6379/0")
    storage._redis = AsyncMock()
    storage._redis.set.side_effect = ConnectionError("down")
    with pytest.raises(ConnectionError):
        await storage.set_token("auth_token", "abc")
    assert not await storage.is_available()


@pytest.mark.asyncio
async def test_redis_storage_close():
    storage = RedisTokenStorage("redis://localhost:6379/0")
    client = AsyncMock()
    storage._redis = client
    await storage.close()
    client.connection_pool.disconnect.assert_awaited_once()
    assert storage._redis is None


# --- Cookie ---
@pytest.mark.asyncio
async def test_cookie_storage_attributes():
    storage = CookieTokenStorage(domain="api.example.com")
    await storage.set_token("auth_token", "abc")

    cookie = next(iter(storage.cookies.jar))
    assert cookie.name == "auth_token"
    assert cookie.value == "abc"
    assert cookie.secure is True
    assert cookie.path == "/"
    assert cookie.get_nonstandard_attr("SameSite") == "Strict"
    assert await storage.get_token("auth_token") == "abc"


@pytest.mark.asyncio
async def test_cookie_storage_remove_and_clear():
    storage = CookieTokenStorage()
    await storage.set_token("auth_token", "a")
    await storage.set_token("refresh_token", "r")
    await storage.set_token("theme", "dark")

    await storage.remove_token("auth_token")
    assert await storage.get_token("auth_token") is None
    # Missing cookie
    await storage.remove_token("auth_token")

    await storage.clear()
    assert await storage.get_token("refresh_token") is None
    assert await storage.get_token("theme") == "dark"


@pytest.mark.asyncio
async def test_cookie_storage_shares_jar():
    cookies = httpx.Cookies()
    storage = CookieTokenStorage(cookies=cookies)
    await storage.set_token("auth_token", "abc")
    assert [c.name for c in cookies.jar] == ["auth_token"]


def test_cookie_storage_rejects_bad_samesite():
    with pytest.raises(ValueError):
        CookieTokenStorage(samesite="sometimes")


# --- Fallback composition ---
@pytest.mark.asyncio
async def test_multi_storage_uses_primary():
    primary, fallback = MemoryTokenStorage(), MemoryTokenStorage()
    storage = MultiStrategyStorage(primary, fallback)
    await storage.set_token("auth_token", "abc")
    assert await primary.get_token("auth_token") == "abc"
    assert await fallback.get_token("auth_token") is None
    assert await storage.get_token("auth_token") == "abc"


@pytest.mark.asyncio
async def test_multi_storage_falls_back_when_primary_unavailable():
    fallback = MemoryTokenStorage()
    storage = MultiStrategyStorage(BrokenStorage(), fallback)
    await storage.set_token("auth_token", "abc")
    assert await fallback.get_token("auth_token") == "abc"
    assert await storage.get_token("auth_token") == "abc"
    assert await storage.is_available()


@pytest.mark.asyncio
async def test_multi_storage_falls_back_when_primary_fails():
    fallback = MemoryTokenStorage()
    storage = MultiStrategyStorage(FlakyStorage(), fallback)
    await storage.set_token("auth_token", "abc")
    assert await fallback.get_token("auth_token") == "abc"
    assert await storage.get_token("auth_token") == "abc"


@pytest.mark.asyncio
async def test_multi_storage_both_failing_never_raises():
    storage = MultiStrategyStorage(BrokenStorage(), BrokenStorage())
    await storage.set_token("auth_token", "abc")
    assert await storage.get_token("auth_token") is None
    await storage.remove_token("auth_token")
    await storage.clear()
    assert not await storage.is_available()


@pytest.mark.asyncio
async def test_multi_storage_remove_and_clear_hit_both():
    primary, fallback = MemoryTokenStorage(), MemoryTokenStorage()
    for backend in (primary, fallback):
        await backend.set_token("auth_token", "a")
        await backend.set_token("refresh_token", "r")
    storage = MultiStrategyStorage(primary, fallback)

    await storage.remove_token("auth_token")
    assert await primary.get_token("auth_token") is None
    assert await fallback.get_token("auth_token") is None

    await storage.clear()
    assert await primary.get_token("refresh_token") is None
    assert await fallback.get_token("refresh_token") is None


# --- Factory ---
def test_create_single_storage(tmp_path):
    storage = create_token_storage(
        StorageConfig(strategy=StorageStrategy.FILE, file_path=str(tmp_path / "t.json"))
    )
    assert isinstance(storage, FileTokenStorage)
    assert isinstance(
        create_token_storage(StorageConfig(strategy=StorageStrategy.MEMORY)),
        MemoryTokenStorage,
    )


def test_create_storage_with_fallback():
    storage = create_token_storage(
        StorageConfig(strategy=StorageStrategy.COOKIE, fallback=StorageStrategy.MEMORY)
    )
    assert isinstance(storage, MultiStrategyStorage)
    assert isinstance(storage.primary, CookieTokenStorage)
    assert isinstance(storage.fallback, MemoryTokenStorage)


def test_create_redis_storage():
    storage = create_token_storage(
        StorageConfig(
            strategy=StorageStrategy.REDIS,
            redis_url="redis://localhost:6379/1",
            session_ttl=120,
        )
    )
    assert isinstance(storage, RedisTokenStorage)


def test_create_redis_storage_requires_url():
    with pytest.raises(ValueError):
        create_token_storage(StorageConfig(strategy=StorageStrategy.REDIS))


def test_create_cookie_storage_with_options():
    cookies = httpx.Cookies()
    storage = create_token_storage(
        StorageConfig(
            strategy="cookie",
            cookie_options={"secure": False, "samesite": "lax", "domain": "example.com"},
            cookies=cookies,
        )
    )
    assert storage.cookies is cookies
    assert storage.secure is False
    assert storage.samesite == "lax"
    assert storage.domain == "example.com"


def test_default_storage_config(settings):
    config = default_storage_config(settings)
    assert config.strategy == StorageStrategy.FILE
    assert config.fallback == StorageStrategy.MEMORY
    assert config.file_path == settings.CLIENT_TOKEN_FILE


def test_secure_storage_config():
    config = secure_storage_config()
    assert config.strategy == StorageStrategy.COOKIE
    assert config.fallback == StorageStrategy.FILE
    assert config.cookie_options.secure is True
    assert config.cookie_options.samesite == "strict"

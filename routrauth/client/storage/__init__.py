"""
Token storage backends: public API

Features:
- One async interface over file, Redis, cookie-jar and in-memory backends
- Composite fallback storage that never raises on backend failures
- clear() only removes token-like keys

Limitations:
- The file backend is single-process; concurrent processes may overwrite each other
- The Redis backend stores tokens in plain text under its prefix
"""

from routrauth.client.storage.base import (
    TOKEN_KEY_PATTERNS,
    StorageStrategy,
    TokenStorage,
    is_token_key,
)
from routrauth.client.storage.cookie import CookieTokenStorage
from routrauth.client.storage.factory import (
    CookieOptions,
    StorageConfig,
    create_token_storage,
    default_storage_config,
    secure_storage_config,
)
from routrauth.client.storage.file import FileTokenStorage
from routrauth.client.storage.memory import MemoryTokenStorage
from routrauth.client.storage.multi import MultiStrategyStorage
from routrauth.client.storage.redis import RedisTokenStorage

__all__ = [
    "TokenStorage",
    "StorageStrategy",
    "TOKEN_KEY_PATTERNS",
    "is_token_key",
    "FileTokenStorage",
    "RedisTokenStorage",
    "CookieTokenStorage",
    "MemoryTokenStorage",
    "MultiStrategyStorage",
    "StorageConfig",
    "CookieOptions",
    "create_token_storage",
    "default_storage_config",
    "secure_storage_config",
]

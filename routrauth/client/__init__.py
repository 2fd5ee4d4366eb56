"""
Client-side authentication: public API

Features:
- TokenManager: stores the token pair, refreshes ahead of expiry with a
  single in-flight refresh shared by all callers, retries with backoff
- Pluggable token storage with fallback (file, Redis, cookie jar, memory)
- AuthClient: httpx client that attaches bearer tokens and retries once on 401

Limitations:
- Token payloads are decoded without signature checks, for refresh timing only
- One event loop per manager instance
"""

from routrauth.client.exceptions import (
    AuthenticationRequiredError,
    TokenError,
    TokenExpiredError,
    TokenManagerDestroyedError,
    TokenRefreshError,
    TokenStorageError,
)
from routrauth.client.http import AuthClient
from routrauth.client.manager import (
    ACCESS_TOKEN_KEY,
    REFRESH_TOKEN_KEY,
    TOKEN_EXPIRY_KEY,
    TokenInfo,
    TokenManager,
    TokenManagerConfig,
    TokenState,
)
from routrauth.client.storage import (
    StorageConfig,
    StorageStrategy,
    TokenStorage,
    create_token_storage,
    default_storage_config,
    secure_storage_config,
)

__all__ = [
    "AuthClient",
    "TokenManager",
    "TokenManagerConfig",
    "TokenInfo",
    "TokenState",
    "ACCESS_TOKEN_KEY",
    "REFRESH_TOKEN_KEY",
    "TOKEN_EXPIRY_KEY",
    "TokenStorage",
    "StorageStrategy",
    "StorageConfig",
    "create_token_storage",
    "default_storage_config",
    "secure_storage_config",
    "TokenError",
    "TokenExpiredError",
    "TokenRefreshError",
    "AuthenticationRequiredError",
    "TokenStorageError",
    "TokenManagerDestroyedError",
]

"""
Storage factory and presets.
"""

from typing import Literal, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field

from routrauth.client.storage.base import StorageStrategy, TokenStorage
from routrauth.client.storage.cookie import CookieTokenStorage
from routrauth.client.storage.file import DEFAULT_TOKEN_FILE, FileTokenStorage
from routrauth.client.storage.memory import MemoryTokenStorage
from routrauth.client.storage.multi import MultiStrategyStorage
from routrauth.client.storage.redis import DEFAULT_SESSION_TTL, RedisTokenStorage
from routrauth.config.base import BaseAppSettings
from routrauth.logging import Logger, ensure_logger


class CookieOptions(BaseModel):
    secure: bool = True
    samesite: Literal["strict", "lax", "none"] = "strict"
    domain: str = ""


class StorageConfig(BaseModel):
    """
    Storage selection.

    Attributes:
        strategy: Primary backend
        fallback: Optional backend used when the primary is unavailable or fails
        file_path: Token file for the FILE strategy
        redis_url: Redis URL for the REDIS strategy
        redis_prefix: Key prefix for the REDIS strategy
        session_ttl: Lifetime in seconds of keys stored by the REDIS strategy
        cookie_options: Attributes of cookies written by the COOKIE strategy
        cookies: Existing jar for the COOKIE strategy, e.g. one shared with a client
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    strategy: StorageStrategy
    fallback: Optional[StorageStrategy] = None
    file_path: str = DEFAULT_TOKEN_FILE
    redis_url: Optional[str] = None
    redis_prefix: str = "routrauth:session:"
    session_ttl: int = Field(default=DEFAULT_SESSION_TTL, gt=0)
    cookie_options: CookieOptions = Field(default_factory=CookieOptions)
    cookies: Optional[httpx.Cookies] = None


def _create(
    strategy: StorageStrategy, config: StorageConfig, logger: Optional[Logger]
) -> TokenStorage:
    if strategy == StorageStrategy.FILE:
        return FileTokenStorage(config.file_path, logger=logger)
    if strategy == StorageStrategy.REDIS:
        if not config.redis_url:
            raise ValueError("redis_url is required for the redis storage strategy")
        return RedisTokenStorage(
            config.redis_url,
            prefix=config.redis_prefix,
            session_ttl=config.session_ttl,
            logger=logger,
        )
    if strategy == StorageStrategy.COOKIE:
        return CookieTokenStorage(
            cookies=config.cookies,
            domain=config.cookie_options.domain,
            secure=config.cookie_options.secure,
            samesite=config.cookie_options.samesite,
        )
    if strategy == StorageStrategy.MEMORY:
        return MemoryTokenStorage()
    raise ValueError(f"Unsupported storage strategy: {strategy}")


def create_token_storage(
    config: StorageConfig, logger: Optional[Logger] = None
) -> TokenStorage:
    """
    Build the storage described by config.

    Returns a MultiStrategyStorage when a fallback is configured, otherwise
    the primary backend itself.

    Raises:
        ValueError: Unknown strategy or missing backend settings
    """
    log = ensure_logger(logger, __name__)
    primary = _create(config.strategy, config, log)
    if config.fallback is None:
        return primary
    fallback = _create(config.fallback, config, log)
    log.debug(
        f"Token storage: {config.strategy.value} with {config.fallback.value} fallback"
    )
    return MultiStrategyStorage(primary, fallback, logger=log)


def default_storage_config(settings: Optional[BaseAppSettings] = None) -> StorageConfig:
    """Durable file storage with an in-memory fallback."""
    return StorageConfig(
        strategy=StorageStrategy.FILE,
        fallback=StorageStrategy.MEMORY,
        file_path=settings.CLIENT_TOKEN_FILE if settings else DEFAULT_TOKEN_FILE,
    )


def secure_storage_config(
    settings: Optional[BaseAppSettings] = None,
    cookies: Optional[httpx.Cookies] = None,
) -> StorageConfig:
    """Secure, strict same-site cookies with a durable file fallback."""
    return StorageConfig(
        strategy=StorageStrategy.COOKIE,
        fallback=StorageStrategy.FILE,
        file_path=settings.CLIENT_TOKEN_FILE if settings else DEFAULT_TOKEN_FILE,
        cookie_options=CookieOptions(secure=True, samesite="strict"),
        cookies=cookies,
    )

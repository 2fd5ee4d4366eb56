"""
Client-side token manager.

Keeps the access/refresh token pair in a TokenStorage, hands out access
tokens and refreshes them before they expire.

Refresh coordination: at most one refresh is in flight per manager. The
first caller that needs a refresh creates a shared future under an
asyncio.Lock and starts the refresh as its own task; every other caller
awaits the same future, so all of them observe the same token or the same
error and only one request reaches the refresh endpoint.
"""

import asyncio
import enum
import inspect
from datetime import datetime
from typing import Any, Callable, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field

from routrauth.client import jwt_utils
from routrauth.client.exceptions import (
    TokenError,
    TokenManagerDestroyedError,
    TokenRefreshError,
    TokenStorageError,
)
from routrauth.client.storage import (
    TokenStorage,
    create_token_storage,
    default_storage_config,
)
from routrauth.config.base import BaseAppSettings
from routrauth.logging import Logger, ensure_logger

ACCESS_TOKEN_KEY = "auth_token"
REFRESH_TOKEN_KEY = "refresh_token"
TOKEN_EXPIRY_KEY = "token_expiry"

DEFAULT_REFRESH_URL = "/api/v1/auth/refresh"


class TokenState(str, enum.Enum):
    NO_TOKENS = "no_tokens"
    VALID = "valid"
    REFRESH_DUE = "refresh_due"
    REFRESHING = "refreshing"
    EXPIRED = "expired"


class TokenInfo(BaseModel):
    """Diagnostic snapshot of the stored access token."""

    access_token: Optional[str] = None
    is_expired: bool = True
    expires_at: Optional[datetime] = None
    time_until_expiry: Optional[float] = Field(
        default=None, description="Seconds until expiry, negative once expired"
    )
    state: TokenState = TokenState.NO_TOKENS


class TokenManagerConfig(BaseModel):
    """
    Token manager configuration.

    Attributes:
        storage: Where tokens live; file storage with memory fallback by default
        refresh_url: Refresh endpoint, absolute or relative to the client's base_url
        http_client: Client used for refresh calls; one is created when omitted
        refresh_threshold: Seconds before expiry at which a token is refreshed
        max_retries: Refresh attempts before giving up
        retry_delay: Base delay in seconds; attempt n+1 waits retry_delay * 2 ** (n - 1)
        on_token_refreshed: Called with (access_token, expires_at) after a refresh
        on_refresh_failed: Called with the TokenRefreshError once retries are exhausted
        on_token_expired: Called when the session can no longer be renewed
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    storage: Optional[TokenStorage] = None
    refresh_url: str = DEFAULT_REFRESH_URL
    http_client: Optional[httpx.AsyncClient] = None
    refresh_threshold: float = Field(default=300, ge=0)
    max_retries: int = Field(default=3, ge=1)
    retry_delay: float = Field(default=1.0, ge=0)
    on_token_refreshed: Optional[Callable[[str, datetime], Any]] = None
    on_refresh_failed: Optional[Callable[[TokenRefreshError], Any]] = None
    on_token_expired: Optional[Callable[[], Any]] = None

    @classmethod
    def from_settings(cls, settings: BaseAppSettings, **overrides: Any) -> "TokenManagerConfig":
        values = {
            "refresh_url": settings.AUTH_REFRESH_PATH,
            "refresh_threshold": settings.CLIENT_REFRESH_THRESHOLD_SECONDS,
            "max_retries": settings.CLIENT_MAX_RETRIES,
            "retry_delay": settings.CLIENT_RETRY_DELAY_SECONDS,
        }
        values.update(overrides)
        return cls(**values)


class _RefreshRejected(TokenRefreshError):
    """The server refused the refresh token; retrying cannot help."""


def _consume_exception(future: asyncio.Future) -> None:
    # Avoids "exception was never retrieved" when no waiter is left
    if not future.cancelled():
        future.exception()


class TokenManager:
    """
    Owns the stored token pair and its refresh lifecycle.

    Call initialize() once the event loop is running and destroy() when done,
    or use the manager as an async context manager.
    """

    def __init__(
        self,
        config: Optional[TokenManagerConfig] = None,
        logger: Optional[Logger] = None,
        **options: Any,
    ):
        if config is None:
            config = TokenManagerConfig(**options)
        elif options:
            config = config.model_copy(update=options)

        self.config = config
        self.logger = ensure_logger(logger, __name__)
        self.storage = config.storage or create_token_storage(
            default_storage_config(), logger=self.logger
        )
        self._http = config.http_client
        self._owns_http = config.http_client is None

        self._lock = asyncio.Lock()
        self._refresh_future: Optional[asyncio.Future] = None
        self._refresh_task: Optional[asyncio.Task] = None
        self._cancel_reason: Optional[TokenError] = None
        self._timer: Optional[asyncio.Task] = None

        self._access_token: Optional[str] = None
        self._expired = False
        self._destroyed = False

    async def __aenter__(self) -> "TokenManager":
        await self.initialize()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.destroy()

    @property
    def is_destroyed(self) -> bool:
        return self._destroyed

    @property
    def state(self) -> TokenState:
        return self._compute_state(self._access_token)

    def _compute_state(self, access_token: Optional[str]) -> TokenState:
        if self._refresh_future is not None and not self._refresh_future.done():
            return TokenState.REFRESHING
        if self._expired:
            return TokenState.EXPIRED
        if not access_token:
            return TokenState.NO_TOKENS
        if jwt_utils.is_expired(access_token):
            return TokenState.EXPIRED
        if jwt_utils.is_expired(access_token, self.config.refresh_threshold):
            return TokenState.REFRESH_DUE
        return TokenState.VALID

    # Storage helpers

    async def _read(self, key: str) -> Optional[str]:
        try:
            return await self.storage.get_token(key)
        except Exception as e:
            self.logger.warning(f"Failed to read {key} from token storage: {e}")
            return None

    async def _remove_all(self) -> None:
        for key in (ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY, TOKEN_EXPIRY_KEY):
            try:
                await self.storage.remove_token(key)
            except Exception as e:
                self.logger.warning(f"Failed to remove {key} from token storage: {e}")
        self._access_token = None

    async def _store_access_token(self, access_token: str) -> Optional[datetime]:
        expires_at = jwt_utils.get_expiry_date(access_token)
        await self.storage.set_token(ACCESS_TOKEN_KEY, access_token)
        if expires_at is not None:
            await self.storage.set_token(TOKEN_EXPIRY_KEY, expires_at.isoformat())
        self._access_token = access_token
        return expires_at

    async def _notify(self, callback: Optional[Callable[..., Any]], *args: Any) -> None:
        if callback is None:
            return
        try:
            result = callback(*args)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            name = getattr(callback, "__name__", repr(callback))
            self.logger.error(f"Token callback {name} failed: {e}")

    # Lifecycle

    async def initialize(self) -> None:
        """Load the stored access token and schedule the background refresh."""
        if self._destroyed:
            return
        self._access_token = await self._read(ACCESS_TOKEN_KEY)
        await self._schedule_next_refresh()
        self.logger.debug(f"Token manager initialized in state {self.state.value}")

    async def destroy(self) -> None:
        """
        Stop the manager.

        Cancels the background timer and any in-flight refresh; waiters are
        rejected with TokenManagerDestroyedError. Every later call is a no-op.
        """
        if self._destroyed:
            return
        self._destroyed = True
        self._cancel_timer()
        self._abort_refresh(TokenManagerDestroyedError())
        if self._owns_http and self._http is not None:
            await self._http.aclose()
            self._http = None
        self.logger.debug("Token manager destroyed")

    # Public token API

    async def set_tokens(self, access_token: str, refresh_token: str) -> None:
        """
        Persist a freshly issued token pair and schedule its refresh.

        A refresh still running for the previous pair is aborted; its waiters
        get TokenRefreshError and its result is never stored.

        Raises:
            TokenStorageError: The pair could not be written
        """
        if self._destroyed:
            return
        self._abort_refresh(TokenRefreshError("Tokens were replaced during refresh"))
        try:
            await self._store_access_token(access_token)
            await self.storage.set_token(REFRESH_TOKEN_KEY, refresh_token)
        except Exception as e:
            raise TokenStorageError("Failed to store tokens", original_error=e)

        self._expired = False
        await self._schedule_next_refresh()

    async def get_access_token(self) -> Optional[str]:
        """
        Return a usable access token, refreshing it first when it is close to expiry.

        When the refresh fails the current token is still returned as long as
        it has not actually expired. None means the user has to log in again.
        """
        if self._destroyed:
            return None

        access_token = await self._read(ACCESS_TOKEN_KEY)
        if not access_token:
            return None
        self._access_token = access_token

        if not jwt_utils.is_expired(access_token, self.config.refresh_threshold):
            return access_token

        try:
            refreshed = await self.refresh_token_if_needed()
            return refreshed or access_token
        except TokenManagerDestroyedError:
            return None
        except TokenError as e:
            if not jwt_utils.is_expired(access_token):
                self.logger.warning(f"Refresh failed, using current token until it expires: {e}")
                return access_token
            # A failed refresh already reported the expiry
            if not self._expired:
                await self._notify(self.config.on_token_expired)
            return None

    async def get_refresh_token(self) -> Optional[str]:
        if self._destroyed:
            return None
        return await self._read(REFRESH_TOKEN_KEY)

    async def is_authenticated(self) -> bool:
        """True with a non-expired access token, or with a refresh token to get one."""
        if self._destroyed:
            return False
        access_token = await self._read(ACCESS_TOKEN_KEY)
        if access_token and not jwt_utils.is_expired(access_token):
            return True
        return bool(await self._read(REFRESH_TOKEN_KEY))

    async def clear_tokens(self) -> None:
        """Forget the stored pair. Storage failures are logged, not raised."""
        if self._destroyed:
            return
        self._cancel_timer()
        self._abort_refresh(TokenRefreshError("Tokens were cleared during refresh"))
        await self._remove_all()
        self._expired = False
        self.logger.debug("Tokens cleared")

    async def get_token_info(self) -> Optional[TokenInfo]:
        if self._destroyed:
            return None
        access_token = await self._read(ACCESS_TOKEN_KEY)
        if not access_token:
            return TokenInfo(state=self._compute_state(None))
        return TokenInfo(
            access_token=access_token,
            is_expired=jwt_utils.is_expired(access_token),
            expires_at=jwt_utils.get_expiry_date(access_token),
            time_until_expiry=jwt_utils.get_time_until_expiry(access_token),
            state=self._compute_state(access_token),
        )

    # Refresh

    async def refresh_token_if_needed(self) -> Optional[str]:
        """
        Refresh the access token, or join the refresh already in flight.

        Returns:
            The new access token, None if the manager has been destroyed

        Raises:
            TokenRefreshError: No refresh token, rejected by the server, or
                retries exhausted
            TokenManagerDestroyedError: The manager was destroyed mid-refresh
        """
        if self._destroyed:
            return None

        async with self._lock:
            future = self._refresh_future
            if future is None:
                future = asyncio.get_running_loop().create_future()
                future.add_done_callback(_consume_exception)
                self._refresh_future = future
                self._cancel_reason = None
                self._refresh_task = asyncio.create_task(self._run_refresh(future))
            else:
                self.logger.debug("Joining in-flight token refresh")

        # Shielded: a cancelled caller must not cancel the shared refresh
        return await asyncio.shield(future)

    async def _run_refresh(self, future: asyncio.Future) -> None:
        try:
            token = await self._perform_refresh()
        except asyncio.CancelledError:
            self._finish(future, error=self._cancel_reason or TokenManagerDestroyedError())
            raise
        except TokenError as e:
            self._finish(future, error=e)
        except Exception as e:
            self._finish(future, error=TokenRefreshError("Token refresh failed", e))
        else:
            self._finish(future, result=token)

    def _finish(
        self,
        future: asyncio.Future,
        result: Optional[str] = None,
        error: Optional[BaseException] = None,
    ) -> None:
        # Drop the in-flight slot before waking waiters
        if self._refresh_future is future:
            self._refresh_future = None
            self._refresh_task = None
        if future.done():
            return
        if error is not None:
            future.set_exception(error)
        else:
            future.set_result(result)

    def _abort_refresh(self, reason: TokenError) -> None:
        future, task = self._refresh_future, self._refresh_task
        if future is None:
            return
        self._cancel_reason = reason
        if task is not None and not task.done():
            task.cancel()
        self._finish(future, error=reason)

    async def _perform_refresh(self) -> str:
        refresh_token = await self._read(REFRESH_TOKEN_KEY)
        if not refresh_token:
            raise TokenRefreshError("No refresh token available")

        access_token: Optional[str] = None
        last_error: Optional[BaseException] = None
        attempts = 0
        for attempt in range(1, self.config.max_retries + 1):
            attempts = attempt
            try:
                access_token = await self._request_access_token(refresh_token)
                break
            except _RefreshRejected as e:
                last_error = e
                self.logger.warning(f"Refresh token rejected: {e.message}")
                break
            except (httpx.HTTPError, TokenRefreshError, ValueError) as e:
                last_error = e
                self.logger.warning(f"Token refresh attempt {attempt} failed: {e}")
                if attempt < self.config.max_retries:
                    await asyncio.sleep(self.config.retry_delay * 2 ** (attempt - 1))

        if access_token is None:
            if isinstance(last_error, _RefreshRejected):
                error = TokenRefreshError(last_error.message, last_error)
            else:
                error = TokenRefreshError(
                    f"Token refresh failed after {attempts} attempts", last_error
                )
            await self._handle_refresh_failure(error)
            raise error

        try:
            expires_at = await self._store_access_token(access_token)
        except Exception as e:
            # Still usable for this session
            self._access_token = access_token
            expires_at = jwt_utils.get_expiry_date(access_token)
            self.logger.warning(f"Failed to persist refreshed access token: {e}")

        self._expired = False
        if expires_at is not None:
            await self._notify(self.config.on_token_refreshed, access_token, expires_at)
        await self._schedule_next_refresh(after_refresh=True)
        self.logger.info("Access token refreshed")
        return access_token

    async def _request_access_token(self, refresh_token: str) -> str:
        if self._http is None:
            self._http = httpx.AsyncClient()

        response = await self._http.post(
            self.config.refresh_url, json={"refresh_token": refresh_token}
        )
        if response.is_error:
            message = _error_message(response)
            if response.status_code == 401:
                raise _RefreshRejected(message)
            raise TokenRefreshError(message)

        body = response.json()
        if not isinstance(body, dict):
            raise TokenRefreshError("Invalid refresh response: expected a JSON object")
        payload = body.get("data") if isinstance(body.get("data"), dict) else body
        access_token = payload.get("access_token")
        if not access_token or not isinstance(access_token, str):
            raise TokenRefreshError("Invalid refresh response: missing access token")
        return access_token

    async def _handle_refresh_failure(self, error: TokenRefreshError) -> None:
        self.logger.error(f"Token refresh failed: {error.message}")
        self._cancel_timer()
        await self._remove_all()
        self._expired = True
        await self._notify(self.config.on_refresh_failed, error)
        await self._notify(self.config.on_token_expired)

    # Background refresh

    def _cancel_timer(self) -> None:
        timer = self._timer
        self._timer = None
        if timer is not None and not timer.done() and timer is not asyncio.current_task():
            timer.cancel()

    async def _schedule_next_refresh(self, after_refresh: bool = False) -> None:
        if self._destroyed:
            return
        self._cancel_timer()

        access_token = self._access_token or await self._read(ACCESS_TOKEN_KEY)
        if not access_token:
            return
        remaining = jwt_utils.get_time_until_expiry(access_token)
        if remaining is None or remaining <= 0:
            return

        delay = max(0.0, remaining - self.config.refresh_threshold)
        if delay == 0 and after_refresh:
            # A new token that is already due would refresh in a loop
            self.logger.warning("Refreshed token expires within the refresh threshold")
            return

        self._timer = asyncio.create_task(self._refresh_after(delay))
        self.logger.debug(f"Next token refresh in {delay:.0f}s")

    async def _refresh_after(self, delay: float) -> None:
        await asyncio.sleep(delay)
        try:
            await self.refresh_token_if_needed()
        except TokenError as e:
            self.logger.warning(f"Automatic token refresh failed: {e}")


def _error_message(response: httpx.Response) -> str:
    fallback = f"HTTP {response.status_code}: {response.reason_phrase}"
    try:
        body = response.json()
    except ValueError:
        return fallback
    if not isinstance(body, dict):
        return fallback
    error = body.get("error")
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return str(body.get("message") or fallback)

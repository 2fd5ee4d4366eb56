"""
Authenticated HTTP client.

Wraps httpx.AsyncClient and a TokenManager: attaches the bearer token to
every request, refreshes once and retries when the server answers 401, and
drives the login/logout endpoints.
"""

from typing import Any, Dict, Optional

import httpx

from routrauth.client.exceptions import (
    AuthenticationRequiredError,
    TokenError,
    TokenExpiredError,
)
from routrauth.client.manager import TokenManager, TokenManagerConfig, TokenState
from routrauth.client.storage import CookieTokenStorage, TokenStorage
from routrauth.config.base import BaseAppSettings
from routrauth.logging import Logger, ensure_logger

AUTH_PREFIX = "/api/v1/auth"
LOGIN_PATH = f"{AUTH_PREFIX}/login"
LOGOUT_PATH = f"{AUTH_PREFIX}/logout"
REFRESH_PATH = f"{AUTH_PREFIX}/refresh"
ME_PATH = f"{AUTH_PREFIX}/me"


class AuthClient:
    """
    HTTP client for the routrapp API with transparent token handling.

    Example:
        ```python
        async with AuthClient("https://api.example.com") as client:
            await client.login("owner@example.com", "S3cure!pass")
            routes = await client.request("GET", "/api/v1/routes")
        ```
    """

    def __init__(
        self,
        base_url: str = "",
        storage: Optional[TokenStorage] = None,
        settings: Optional[BaseAppSettings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        logger: Optional[Logger] = None,
        **manager_options: Any,
    ):
        self.logger = ensure_logger(logger, __name__, settings)

        self._owns_http = http_client is None
        if http_client is None:
            # A cookie store shares its jar so tokens also travel as cookies
            cookies = storage.cookies.jar if isinstance(storage, CookieTokenStorage) else None
            http_client = httpx.AsyncClient(base_url=base_url, cookies=cookies)
        self.http = http_client

        if settings is not None:
            config = TokenManagerConfig.from_settings(
                settings, storage=storage, http_client=self.http, **manager_options
            )
        else:
            manager_options.setdefault("refresh_url", REFRESH_PATH)
            config = TokenManagerConfig(
                storage=storage, http_client=self.http, **manager_options
            )
        self.tokens = TokenManager(config, logger=self.logger)

    async def __aenter__(self) -> "AuthClient":
        await self.tokens.initialize()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.tokens.destroy()
        if self._owns_http:
            await self.http.aclose()

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        """
        Log in and store the issued token pair.

        Returns:
            The login payload (user, tokens, expires_in)

        Raises:
            AuthenticationRequiredError: The server refused the credentials
        """
        response = await self.http.post(
            LOGIN_PATH, json={"email": email, "password": password}
        )
        if response.is_error:
            message = _server_message(response, "Login failed")
            self.logger.warning(f"Login failed for {email}: {message}")
            raise AuthenticationRequiredError(message)

        data = response.json()["data"]
        await self.tokens.set_tokens(data["access_token"], data["refresh_token"])
        self.logger.info(f"Logged in as {email}")
        return data

    async def logout(self) -> None:
        """Tell the server to log out, then clear local tokens whatever it says."""
        try:
            token = await self.tokens.get_access_token()
            if token:
                response = await self.http.post(LOGOUT_PATH, headers=_bearer(token))
                if response.is_error:
                    self.logger.warning(f"Server logout failed: HTTP {response.status_code}")
        except httpx.HTTPError as e:
            self.logger.warning(f"Server logout failed: {e}")
        finally:
            await self.tokens.clear_tokens()

    async def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """
        Send an authenticated request.

        A 401 answer triggers one refresh and one retry; a second 401 ends
        the session.

        Raises:
            TokenExpiredError: The session expired and could not be renewed
            AuthenticationRequiredError: No usable token, or the server keeps
                rejecting it
        """
        token = await self.tokens.get_access_token()
        if not token:
            if self.tokens.state == TokenState.EXPIRED:
                raise TokenExpiredError("Session expired")
            raise AuthenticationRequiredError()

        response = await self._send(method, url, token, **kwargs)
        if response.status_code != 401:
            return response

        self.logger.info(f"{method} {url} answered 401, refreshing token")
        try:
            token = await self.tokens.refresh_token_if_needed()
        except TokenError as e:
            await self.tokens.clear_tokens()
            raise TokenExpiredError("Session expired", original_error=e)
        if not token:
            raise AuthenticationRequiredError()

        response = await self._send(method, url, token, **kwargs)
        if response.status_code == 401:
            await self.tokens.clear_tokens()
            raise AuthenticationRequiredError(_server_message(response, "Authentication rejected"))
        return response

    async def me(self) -> Dict[str, Any]:
        """Return the authenticated user's record."""
        response = await self.request("GET", ME_PATH)
        response.raise_for_status()
        return response.json()["data"]

    async def _send(self, method: str, url: str, token: str, **kwargs: Any) -> httpx.Response:
        headers = dict(kwargs.pop("headers", None) or {})
        headers.update(_bearer(token))
        return await self.http.request(method, url, headers=headers, **kwargs)


def _bearer(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def _server_message(response: httpx.Response, default: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return default
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return default

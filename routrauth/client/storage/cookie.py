from http.cookiejar import Cookie
from typing import Optional

import httpx

from routrauth.client.storage.base import TokenStorage, is_token_key

SAMESITE_VALUES = ("strict", "lax", "none")


class CookieTokenStorage(TokenStorage):
    """
    Token storage in an httpx cookie jar.

    Share the jar with an httpx.AsyncClient (``AsyncClient(cookies=storage.cookies.jar)``)
    and the tokens travel as cookies on every matching request. ``secure``
    cookies are only sent over https.
    """

    def __init__(
        self,
        cookies: Optional[httpx.Cookies] = None,
        domain: str = "",
        path: str = "/",
        secure: bool = True,
        samesite: str = "strict",
    ):
        if samesite not in SAMESITE_VALUES:
            raise ValueError(f"samesite must be one of {SAMESITE_VALUES}")
        self.cookies = cookies if cookies is not None else httpx.Cookies()
        self.domain = domain
        self.path = path
        self.secure = secure
        self.samesite = samesite

    def _build(self, name: str, value: str) -> Cookie:
        return Cookie(
            version=0,
            name=name,
            value=value,
            port=None,
            port_specified=False,
            domain=self.domain,
            domain_specified=bool(self.domain),
            domain_initial_dot=self.domain.startswith("."),
            path=self.path,
            path_specified=True,
            secure=self.secure,
            expires=None,
            discard=True,
            comment=None,
            comment_url=None,
            rest={"SameSite": self.samesite.capitalize()},
        )

    async def set_token(self, key: str, value: str) -> None:
        self.cookies.jar.set_cookie(self._build(key, value))

    async def get_token(self, key: str) -> Optional[str]:
        for cookie in self.cookies.jar:
            if cookie.name == key and cookie.domain == self.domain:
                return cookie.value
        return None

    async def remove_token(self, key: str) -> None:
        try:
            self.cookies.jar.clear(self.domain, self.path, key)
        except KeyError:
            pass

    async def clear(self) -> None:
        names = [
            cookie.name
            for cookie in self.cookies.jar
            if cookie.domain == self.domain and is_token_key(cookie.name)
        ]
        for name in names:
            await self.remove_token(name)

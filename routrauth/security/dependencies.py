"""
Security dependencies for FastAPI.

This module provides dependency functions that authenticate requests from
the ``Authorization: Bearer <token>`` header and enforce role checks.
Failures raise the security exceptions, which the registered error handlers
render as 401/403 error envelopes.
"""

from typing import Callable, Optional

from fastapi import Depends, Header, Request

from routrauth.errors.exceptions import ForbiddenError, UnauthorizedError
from routrauth.logging import ensure_logger
from routrauth.security.tokens.models import ClaimSet
from routrauth.security.tokens.service import TokenService
from routrauth.security.tokens.utils import extract_token_from_header

logger = ensure_logger(None, __name__)

OWNER_ROLE = "owner"


def get_token_service(request: Request) -> TokenService:
    """
    Return the TokenService configured on the application.

    Raises:
        RuntimeError: If security was not set up for this application
    """
    service = getattr(request.app.state, "token_service", None)
    if service is None:
        raise RuntimeError("Security module not initialized")
    return service


async def get_current_claims(
    authorization: Optional[str] = Header(default=None),
    token_service: TokenService = Depends(get_token_service),
) -> ClaimSet:
    """
    Authenticate the request and return the access token's claims.

    Refresh tokens are rejected here: they are only accepted by the
    refresh endpoint.

    Raises:
        InvalidTokenError: Missing/malformed header, bad token or wrong kind
        ExpiredTokenError: The access token has expired
    """
    token = extract_token_from_header(authorization)
    return token_service.validate_access_token(token)


async def get_optional_claims(
    authorization: Optional[str] = Header(default=None),
    token_service: TokenService = Depends(get_token_service),
) -> Optional[ClaimSet]:
    """Like get_current_claims, but returns None instead of failing."""
    if not authorization:
        return None
    try:
        token = extract_token_from_header(authorization)
        return token_service.validate_access_token(token)
    except UnauthorizedError as e:
        logger.debug(f"Ignoring unusable optional credentials: {e.code}")
        return None


def require_role(*roles: str) -> Callable:
    """
    Create a dependency that admits only the given roles.

    Example:
        ```python
        @router.delete("/users/{id}", dependencies=[Depends(require_role("owner"))])
        async def delete_user(id: int): ...
        ```
    """
    if not roles:
        raise ValueError("At least one role is required")
    allowed = frozenset(roles)

    async def role_dependency(
        claims: ClaimSet = Depends(get_current_claims),
    ) -> ClaimSet:
        if claims.role not in allowed:
            required = ", ".join(sorted(allowed))
            raise ForbiddenError(
                message=f"Insufficient permissions. Required role: {required}",
                code="INSUFFICIENT_PERMISSIONS",
                details={"required_roles": sorted(allowed), "user_role": claims.role},
            )
        return claims

    return role_dependency


require_owner = require_role(OWNER_ROLE)

"""
Client-side JWT helpers for refresh timing.

WARNING: these functions read the payload WITHOUT verifying the signature.
Their output may only drive timing decisions (when to refresh). Never use
it to decide what a user is allowed to do; that is the server's job.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

import jwt  # PyJWT

from routrauth.logging import ensure_logger

logger = ensure_logger(None, __name__)


def decode_payload(token: str) -> Optional[Dict[str, Any]]:
    """Return the unverified payload, or None when the token cannot be parsed."""
    try:
        payload = jwt.decode(
            token,
            options={"verify_signature": False, "verify_exp": False},
            algorithms=["HS256", "HS384", "HS512"],
        )
    except jwt.PyJWTError as e:
        logger.warning(f"Failed to decode JWT payload: {e}")
        return None
    return payload if isinstance(payload, dict) else None


def get_expiry_date(token: str) -> Optional[datetime]:
    payload = decode_payload(token)
    exp = payload.get("exp") if payload else None
    if not isinstance(exp, (int, float)) or isinstance(exp, bool):
        return None
    return datetime.fromtimestamp(exp, tz=timezone.utc)


def get_time_until_expiry(token: str) -> Optional[float]:
    """Seconds until expiry, negative once expired, None when unknown."""
    expires_at = get_expiry_date(token)
    if expires_at is None:
        return None
    return (expires_at - datetime.now(timezone.utc)).total_seconds()


def is_expired(token: str, buffer_seconds: float = 0) -> bool:
    """
    Check whether the token expires within ``buffer_seconds``.

    Tokens without a readable ``exp`` count as expired.
    """
    remaining = get_time_until_expiry(token)
    if remaining is None:
        return True
    return remaining <= buffer_seconds

"""
JWT codec helpers.

Signing and verification go through PyJWT with a symmetric HMAC key.
Claims are only returned after the signature has been verified.
"""

import time
from typing import Any, Dict, Optional

import jwt  # PyJWT

from routrauth.logging.manager import ensure_logger
from routrauth.security.exceptions import ExpiredTokenError, InvalidTokenError

logger = ensure_logger(None, __name__)

BEARER_PREFIX = "Bearer "
REQUIRED_CLAIMS = ["exp", "iat", "sub"]


def encode_jwt(payload: Dict[str, Any], secret_key: str, algorithm: str = "HS256") -> str:
    return jwt.encode(payload, secret_key, algorithm=algorithm)


def decode_jwt(
    token: str,
    secret_key: str,
    algorithm: str = "HS256",
    audience: Optional[str] = None,
    issuer: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Verify a signed token and return its payload.

    Raises:
        ExpiredTokenError: The signature is valid but ``exp`` has passed
        InvalidTokenError: Malformed structure, bad signature, unexpected
            algorithm, or wrong audience/issuer
    """
    try:
        header = jwt.get_unverified_header(token)
    except jwt.PyJWTError as e:
        logger.warning(f"Malformed token: {e}")
        raise InvalidTokenError(
            message="Invalid token signature or format", details={"error": str(e)}
        )

    if header.get("alg") != algorithm:
        logger.warning(f"Unexpected signing method: {header.get('alg')}")
        raise InvalidTokenError(
            message=f"unexpected signing method: {header.get('alg')}",
            details={"expected_algorithm": algorithm},
        )

    try:
        payload = jwt.decode(
            token,
            secret_key,
            algorithms=[algorithm],
            audience=audience,
            issuer=issuer,
            options={
                "require": REQUIRED_CLAIMS,
                "verify_aud": audience is not None,
                "verify_iss": issuer is not None,
            },
        )
    except jwt.ExpiredSignatureError:
        logger.info("Expired token used")
        raise ExpiredTokenError()
    except jwt.PyJWTError as e:
        logger.warning(f"Token validation error: {e}")
        raise InvalidTokenError(
            message="Invalid token signature or format", details={"error": str(e)}
        )

    # PyJWT already checked exp; checked again against our own clock
    if payload["exp"] <= time.time():
        raise ExpiredTokenError()

    return payload


def extract_token_from_header(header: Optional[str]) -> str:
    """
    Pull the token out of an ``Authorization: Bearer <token>`` header value.

    Raises:
        InvalidTokenError: Missing header, missing prefix, or empty token
    """
    if not header:
        raise InvalidTokenError(
            message="authorization header is empty", code="MISSING_AUTH_HEADER"
        )
    if not header.startswith(BEARER_PREFIX):
        raise InvalidTokenError(
            message="authorization header must start with 'Bearer '",
            code="INVALID_AUTH_HEADER",
        )

    token = header[len(BEARER_PREFIX) :]
    if not token:
        raise InvalidTokenError(message="token is empty", code="INVALID_AUTH_HEADER")
    return token

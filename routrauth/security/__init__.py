"""
Security module: public API

Features:
- Password policy validation, strength scoring and bcrypt hashing
- Access/refresh JWT issuance and validation (HMAC, PyJWT)
- FastAPI dependencies for bearer authentication and role checks
- User persistence for the login/refresh/logout flows

Limitations:
- Only password-based JWT authentication
- No server-side token revocation list
- No advanced RBAC or permission system beyond role checks
"""

from routrauth.security.dependencies import (
    get_current_claims,
    get_optional_claims,
    get_token_service,
    require_owner,
    require_role,
)
from routrauth.security.exceptions import (
    AccountDisabledError,
    ExpiredTokenError,
    InvalidCredentialsError,
    InvalidTokenError,
)
from routrauth.security.manager import setup_security
from routrauth.security.password import (
    PasswordRequirements,
    PasswordStrength,
    check_password_policy,
    get_password_hash,
    is_common_password,
    password_strength,
    validate_password,
    verify_password,
)
from routrauth.security.tokens import ClaimSet, TokenPair, TokenService, TokenType, UserContext
from routrauth.security.users import User, UserRepository

__all__ = [
    # Setup
    "setup_security",
    # Dependencies
    "get_token_service",
    "get_current_claims",
    "get_optional_claims",
    "require_role",
    "require_owner",
    # Tokens
    "TokenService",
    "TokenType",
    "TokenPair",
    "ClaimSet",
    "UserContext",
    # Password
    "PasswordRequirements",
    "PasswordStrength",
    "validate_password",
    "password_strength",
    "is_common_password",
    "check_password_policy",
    "get_password_hash",
    "verify_password",
    # Users
    "User",
    "UserRepository",
    # Exceptions
    "InvalidTokenError",
    "ExpiredTokenError",
    "InvalidCredentialsError",
    "AccountDisabledError",
]

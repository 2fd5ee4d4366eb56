"""
Password handling utilities.

This module provides the password policy engine (rule validation,
qualitative strength, common-password check) and hashing/verification
using bcrypt through the passlib library.

Limitations:
- The deny-list and special-character set are small and hard-coded
- No lookup against external breach lists
"""

import enum
import re
from dataclasses import dataclass
from typing import Optional

from passlib.context import CryptContext  # type: ignore

from routrauth.config import get_settings
from routrauth.errors.exceptions import ValidationError

MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_LENGTH = 255
DEFAULT_BCRYPT_ROUNDS = 12

SPECIAL_CHARACTERS = "!@#$%^&*()_+-=[]{};':\"\\|,.<>/?~`"

_UPPER_RE = re.compile(r"[A-Z]")
_LOWER_RE = re.compile(r"[a-z]")
_DIGIT_RE = re.compile(r"[0-9]")
_SPECIAL_RE = re.compile("[" + re.escape(SPECIAL_CHARACTERS) + "]")

# Substrings that cost two strength points
WEAK_PATTERNS = ("password", "123456", "qwerty", "admin", "letmein")

COMMON_PASSWORDS = frozenset(
    {
        "password",
        "123456",
        "123456789",
        "qwerty",
        "abc123",
        "password123",
        "admin",
        "letmein",
        "welcome",
        "monkey",
        "1234567890",
        "123123",
        "password1",
        "qwerty123",
        "testpass123!",
    }
)


@dataclass(frozen=True)
class PasswordRequirements:
    """
    Rules a password has to satisfy.

    Attributes:
        min_length: Minimum number of characters
        max_length: Maximum number of characters
        require_upper: At least one uppercase letter
        require_lower: At least one lowercase letter
        require_digit: At least one digit
        require_special: At least one character from SPECIAL_CHARACTERS
    """

    min_length: int = MIN_PASSWORD_LENGTH
    max_length: int = MAX_PASSWORD_LENGTH
    require_upper: bool = True
    require_lower: bool = True
    require_digit: bool = True
    require_special: bool = True

    def __post_init__(self):
        if self.min_length < 0:
            raise ValueError("min_length must not be negative")
        if self.min_length > self.max_length:
            raise ValueError(
                f"min_length ({self.min_length}) must not exceed "
                f"max_length ({self.max_length})"
            )

    @classmethod
    def default(cls) -> "PasswordRequirements":
        """8 to 255 characters, all four character classes required."""
        return cls()


class PasswordStrength(str, enum.Enum):
    """Qualitative password strength bands."""

    VERY_WEAK = "Very Weak"
    WEAK = "Weak"
    MEDIUM = "Medium"
    STRONG = "Strong"
    VERY_STRONG = "Very Strong"


def _fail(message: str, code: str = "VALIDATION_ERROR") -> ValidationError:
    return ValidationError(
        message=message,
        code=code,
        fields=[{"field": "password", "code": code, "message": message}],
    )


def validate_password(
    password: str, requirements: Optional[PasswordRequirements] = None
) -> None:
    """
    Validate a password against a set of requirements.

    Rules are checked in a fixed order and the first failing rule wins.

    Args:
        password: The plaintext password
        requirements: Rules to apply, PasswordRequirements.default() if omitted

    Raises:
        ValidationError: With the failing rule's message
    """
    req = requirements or PasswordRequirements.default()

    if not password:
        raise _fail("password cannot be empty")
    if len(password) < req.min_length:
        raise _fail(f"password must be at least {req.min_length} characters long")
    if len(password) > req.max_length:
        raise _fail(f"password must not exceed {req.max_length} characters")
    if req.require_upper and not _UPPER_RE.search(password):
        raise _fail("password must contain at least one uppercase letter")
    if req.require_lower and not _LOWER_RE.search(password):
        raise _fail("password must contain at least one lowercase letter")
    if req.require_digit and not _DIGIT_RE.search(password):
        raise _fail("password must contain at least one number")
    if req.require_special and not _SPECIAL_RE.search(password):
        raise _fail("password must contain at least one special character")


def password_strength(password: str) -> PasswordStrength:
    """
    Give a qualitative assessment of password strength.

    Anything shorter than 6 characters is VERY_WEAK. Otherwise one point is
    scored for reaching 8 and 12 characters and for each character class
    present, and two points are taken off when a well-known weak pattern
    appears anywhere in the password.
    """
    if len(password) < 6:
        return PasswordStrength.VERY_WEAK

    score = 0
    if len(password) >= 8:
        score += 1
    if len(password) >= 12:
        score += 1

    for pattern in (_LOWER_RE, _UPPER_RE, _DIGIT_RE, _SPECIAL_RE):
        if pattern.search(password):
            score += 1

    lowered = password.lower()
    if any(weak in lowered for weak in WEAK_PATTERNS):
        score -= 2

    if score <= 2:
        return PasswordStrength.WEAK
    if score <= 4:
        return PasswordStrength.MEDIUM
    if score <= 5:
        return PasswordStrength.STRONG
    return PasswordStrength.VERY_STRONG


def is_common_password(password: str) -> bool:
    """Case-insensitive exact match against the deny-list."""
    return password.lower() in COMMON_PASSWORDS


def check_password_policy(
    password: str, requirements: Optional[PasswordRequirements] = None
) -> None:
    """
    Full policy check used by registration and password changes.

    Raises:
        ValidationError: code WEAK_PASSWORD when a rule fails,
            COMMON_PASSWORD when the password is on the deny-list
    """
    try:
        validate_password(password, requirements)
    except ValidationError as e:
        raise _fail(e.message, code="WEAK_PASSWORD") from e

    if is_common_password(password):
        raise _fail(
            "Password is too common, please choose a more secure password",
            code="COMMON_PASSWORD",
        )


def build_password_context(rounds: int = DEFAULT_BCRYPT_ROUNDS) -> CryptContext:
    """Create a bcrypt CryptContext with the given cost factor."""
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)


_pwd_context: Optional[CryptContext] = None


def get_password_context() -> CryptContext:
    """Return the process-wide bcrypt context, built from settings on first use."""
    global _pwd_context
    if _pwd_context is None:
        _pwd_context = build_password_context(get_settings().PASSWORD_BCRYPT_ROUNDS)
    return _pwd_context


def get_password_hash(password: str, context: Optional[CryptContext] = None) -> str:
    """
    Generate a bcrypt hash for a plaintext password.

    Args:
        password: The plaintext password to hash
        context: Optional CryptContext, the settings-driven one by default

    Returns:
        The hashed password

    Raises:
        ValidationError: If the password is empty
    """
    if not password:
        raise ValidationError(message="password cannot be empty")
    return (context or get_password_context()).hash(password)


def verify_password(
    plain_password: str,
    hashed_password: str,
    context: Optional[CryptContext] = None,
) -> bool:
    """
    Verify that a plaintext password matches a hashed password.

    Args:
        plain_password: The plaintext password to verify
        hashed_password: The hashed password to check against
        context: Optional CryptContext, the settings-driven one by default

    Returns:
        True if the password matches, False on mismatch or malformed hash

    Raises:
        ValidationError: If either argument is empty
    """
    if not plain_password:
        raise ValidationError(message="password cannot be empty")
    if not hashed_password:
        raise ValidationError(message="hashed password cannot be empty")

    try:
        return (context or get_password_context()).verify(
            plain_password, hashed_password
        )
    except (ValueError, TypeError):
        return False

from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from pydantic import ValidationError as PydanticValidationError

from routrauth.config.base import BaseAppSettings
from routrauth.logging import Logger, ensure_logger
from routrauth.security.exceptions import InvalidTokenError
from routrauth.security.tokens.models import ClaimSet, TokenPair, TokenType
from routrauth.security.tokens.utils import decode_jwt, encode_jwt

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    """
    Issues and validates access/refresh tokens.

    Stateless: the only shared input is the signing secret, read once from
    settings at construction time. Safe to share between requests.
    """

    def __init__(
        self,
        settings: BaseAppSettings,
        logger: Optional[Logger] = None,
        clock: Clock = _utcnow,
    ):
        self._secret_key = settings.JWT_SECRET_KEY
        self._algorithm = settings.JWT_ALGORITHM
        self._issuer = settings.JWT_ISSUER
        self._audience = settings.JWT_AUDIENCE
        self._ttl = {
            TokenType.ACCESS: timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES),
            TokenType.REFRESH: timedelta(days=settings.JWT_REFRESH_TOKEN_EXPIRE_DAYS),
        }
        self._clock = clock
        self.logger = ensure_logger(logger, __name__, settings)

    @property
    def access_token_ttl(self) -> timedelta:
        return self._ttl[TokenType.ACCESS]

    @property
    def refresh_token_ttl(self) -> timedelta:
        return self._ttl[TokenType.REFRESH]

    def _issue(
        self,
        token_type: TokenType,
        user_id: int,
        organization_id: int,
        email: str,
        role: str,
    ) -> str:
        now = self._clock()
        payload = {
            "user_id": user_id,
            "organization_id": organization_id,
            "email": email,
            "role": role,
            "token_type": token_type.value,
            "sub": str(user_id),
            "iat": int(now.timestamp()),
            "exp": int((now + self._ttl[token_type]).timestamp()),
            "iss": self._issuer,
            "aud": self._audience,
        }
        token = encode_jwt(payload, self._secret_key, self._algorithm)
        self.logger.debug(f"Issued {token_type.value} token for user {user_id}")
        return token

    def issue_access_token(
        self, user_id: int, organization_id: int, email: str, role: str
    ) -> str:
        return self._issue(TokenType.ACCESS, user_id, organization_id, email, role)

    def issue_refresh_token(
        self, user_id: int, organization_id: int, email: str, role: str
    ) -> str:
        return self._issue(TokenType.REFRESH, user_id, organization_id, email, role)

    def issue_token_pair(
        self, user_id: int, organization_id: int, email: str, role: str
    ) -> TokenPair:
        return TokenPair(
            access_token=self.issue_access_token(user_id, organization_id, email, role),
            refresh_token=self.issue_refresh_token(
                user_id, organization_id, email, role
            ),
            expires_in=int(self.access_token_ttl.total_seconds()),
        )

    def validate_token(
        self, token: str, expected_type: Optional[TokenType] = None
    ) -> ClaimSet:
        """
        Verify a token and return its claim set.

        Args:
            token: The encoded JWT
            expected_type: Reject tokens of the other kind when given

        Raises:
            ExpiredTokenError: The token is past its expiry
            InvalidTokenError: Malformed, forged, missing claims or wrong kind
        """
        payload = decode_jwt(
            token,
            self._secret_key,
            algorithm=self._algorithm,
            audience=self._audience,
            issuer=self._issuer,
        )
        try:
            claims = ClaimSet.model_validate(payload)
        except PydanticValidationError as e:
            self.logger.warning(f"Token with malformed claims: {e.error_count()} errors")
            raise InvalidTokenError(
                message="Invalid token claims", details={"error": str(e)}
            )

        if claims.sub != str(claims.user_id):
            raise InvalidTokenError(message="Invalid token claims")

        if expected_type is not None and claims.token_type != expected_type:
            raise InvalidTokenError(
                message=f"Invalid token type. Expected: {expected_type.value}",
                code="INVALID_TOKEN_TYPE",
                details={
                    "expected_type": expected_type.value,
                    "actual_type": claims.token_type.value,
                },
            )
        return claims

    def validate_access_token(self, token: str) -> ClaimSet:
        return self.validate_token(token, TokenType.ACCESS)

    def validate_refresh_token(self, token: str) -> ClaimSet:
        return self.validate_token(token, TokenType.REFRESH)

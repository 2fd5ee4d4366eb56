from routrauth.security.tokens.models import ClaimSet, TokenPair, TokenType, UserContext
from routrauth.security.tokens.service import TokenService
from routrauth.security.tokens.utils import (
    decode_jwt,
    encode_jwt,
    extract_token_from_header,
)

__all__ = [
    "ClaimSet",
    "TokenPair",
    "TokenType",
    "UserContext",
    "TokenService",
    "decode_jwt",
    "encode_jwt",
    "extract_token_from_header",
]

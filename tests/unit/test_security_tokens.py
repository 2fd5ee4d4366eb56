"""
Unit tests for the routrauth.security.tokens package.
Covers: token issuance, validation, kind checks, algorithm pinning, expiry and header parsing.
"""
import base64
import json
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from routrauth.security.exceptions import ExpiredTokenError, InvalidTokenError
from routrauth.security.tokens import (
    TokenService,
    TokenType,
    decode_jwt,
    encode_jwt,
    extract_token_from_header,
)


# --- Helpers ---
def _claims(**overrides):
    now = datetime.now(timezone.utc)
    payload = {
        "user_id": 7,
        "organization_id": 3,
        "email": "owner@example.com",
        "role": "owner",
        "token_type": "access",
        "sub": "7",
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=5)).timestamp()),
        "iss": "routrapp-api",
        "aud": "routrapp-frontend",
    }
    payload.update(overrides)
    return payload


def _b64(data: dict) -> str:
    raw = json.dumps(data).encode()
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


# --- Issuance ---
def test_issue_token_pair_round_trip(token_service):
    pair = token_service.issue_token_pair(7, 3, "owner@example.com", "owner")

    assert pair.token_type == "Bearer"
    assert pair.expires_in == 30 * 60
    assert pair.access_token != pair.refresh_token

    claims = token_service.validate_access_token(pair.access_token)
    assert claims.user_id == 7
    assert claims.organization_id == 3
    assert claims.email == "owner@example.com"
    assert claims.role == "owner"
    assert claims.sub == "7"
    assert claims.is_access_token()

    refresh = token_service.validate_refresh_token(pair.refresh_token)
    assert refresh.is_refresh_token()
    assert refresh.user_id == 7


def test_token_lifetimes_follow_settings(token_service):
    pair = token_service.issue_token_pair(1, 1, "a@example.com", "technician")
    access = token_service.validate_token(pair.access_token)
    refresh = token_service.validate_token(pair.refresh_token)

    assert access.exp - access.iat == 30 * 60
    assert refresh.exp - refresh.iat == 7 * 24 * 60 * 60
    assert token_service.access_token_ttl == timedelta(minutes=30)
    assert token_service.refresh_token_ttl == timedelta(days=7)


def test_issued_token_carries_issuer_and_audience(token_service):
    token = token_service.issue_access_token(1, 1, "a@example.com", "technician")
    payload = jwt.decode(token, options={"verify_signature": False})
    assert payload["iss"] == "routrapp-api"
    assert payload["aud"] == "routrapp-frontend"
    assert jwt.get_unverified_header(token)["alg"] == "HS256"


def test_claims_project_to_user_context(token_service):
    token = token_service.issue_access_token(9, 4, "tech@example.com", "technician")
    claims = token_service.validate_access_token(token)
    context = claims.to_user_context()
    assert context.user_id == 9
    assert context.organization_id == 4
    assert context.role == "technician"
    assert claims.expires_at > claims.issued_at


# --- Validation failures ---
def test_refresh_token_rejected_as_access(token_service):
    token = token_service.issue_refresh_token(7, 3, "owner@example.com", "owner")
    with pytest.raises(InvalidTokenError) as exc:
        token_service.validate_access_token(token)
    assert exc.value.code == "INVALID_TOKEN_TYPE"
    assert exc.value.message == "Invalid token type. Expected: access"
    assert exc.value.details == {"expected_type": "access", "actual_type": "refresh"}


def test_access_token_rejected_as_refresh(token_service):
    token = token_service.issue_access_token(7, 3, "owner@example.com", "owner")
    with pytest.raises(InvalidTokenError) as exc:
        token_service.validate_token(token, TokenType.REFRESH)
    assert exc.value.code == "INVALID_TOKEN_TYPE"


def test_expired_token(settings):
    past = datetime.now(timezone.utc) - timedelta(days=1)
    issuer = TokenService(settings, clock=lambda: past)
    token = issuer.issue_access_token(7, 3, "owner@example.com", "owner")

    with pytest.raises(ExpiredTokenError) as exc:
        TokenService(settings).validate_access_token(token)
    assert exc.value.status_code == 401
    assert exc.value.code == "EXPIRED_TOKEN"


def test_token_signed_with_other_secret(settings, token_service):
    other = TokenService(settings.model_copy(update={"JWT_SECRET_KEY": "another-secret"}))
    token = other.issue_access_token(7, 3, "owner@example.com", "owner")
    with pytest.raises(InvalidTokenError) as exc:
        token_service.validate_access_token(token)
    assert exc.value.message == "Invalid token signature or format"


def test_token_with_different_hmac_algorithm(settings, token_service):
    token = jwt.encode(_claims(), settings.JWT_SECRET_KEY, algorithm="HS512")
    with pytest.raises(InvalidTokenError) as exc:
        token_service.validate_access_token(token)
    assert exc.value.message == "unexpected signing method: HS512"


def test_unsigned_token_rejected(token_service):
    token = f"{_b64({'alg': 'none', 'typ': 'JWT'})}.{_b64(_claims())}."
    with pytest.raises(InvalidTokenError) as exc:
        token_service.validate_access_token(token)
    assert "unexpected signing method" in exc.value.message


def test_tampered_payload_rejected(token_service):
    token = token_service.issue_access_token(7, 3, "tech@example.com", "technician")
    header, _, signature = token.split(".")
    forged = f"{header}.{_b64(_claims(role='owner'))}.{signature}"
    with pytest.raises(InvalidTokenError):
        token_service.validate_access_token(forged)


@pytest.mark.parametrize("token", ["", "not-a-jwt", "a.b.c"])
def test_malformed_token(token_service, token):
    with pytest.raises(InvalidTokenError):
        token_service.validate_access_token(token)


def test_wrong_audience(settings, token_service):
    token = encode_jwt(_claims(aud="someone-else"), settings.JWT_SECRET_KEY)
    with pytest.raises(InvalidTokenError):
        token_service.validate_access_token(token)


def test_wrong_issuer(settings, token_service):
    token = encode_jwt(_claims(iss="someone-else"), settings.JWT_SECRET_KEY)
    with pytest.raises(InvalidTokenError):
        token_service.validate_access_token(token)


def test_missing_application_claim(settings, token_service):
    payload = _claims()
    del payload["organization_id"]
    token = encode_jwt(payload, settings.JWT_SECRET_KEY)
    with pytest.raises(InvalidTokenError) as exc:
        token_service.validate_access_token(token)
    assert exc.value.message == "Invalid token claims"


def test_missing_registered_claim(settings, token_service):
    payload = _claims()
    del payload["sub"]
    token = encode_jwt(payload, settings.JWT_SECRET_KEY)
    with pytest.raises(InvalidTokenError):
        token_service.validate_access_token(token)


def test_subject_must_match_user_id(settings, token_service):
    token = encode_jwt(_claims(sub="8"), settings.JWT_SECRET_KEY)
    with pytest.raises(InvalidTokenError) as exc:
        token_service.validate_access_token(token)
    assert exc.value.message == "Invalid token claims"


def test_unknown_token_type(settings, token_service):
    token = encode_jwt(_claims(token_type="id"), settings.JWT_SECRET_KEY)
    with pytest.raises(InvalidTokenError):
        token_service.validate_token(token)


# --- Codec helpers ---
def test_decode_jwt_returns_payload(settings):
    token = encode_jwt(_claims(), settings.JWT_SECRET_KEY)
    payload = decode_jwt(token, settings.JWT_SECRET_KEY)
    assert payload["user_id"] == 7


def test_decode_jwt_expired(settings):
    expired_at = int(datetime.now(timezone.utc).timestamp()) - 10
    token = encode_jwt(_claims(exp=expired_at), settings.JWT_SECRET_KEY)
    with pytest.raises(ExpiredTokenError):
        decode_jwt(token, settings.JWT_SECRET_KEY)


# --- Header parsing ---
def test_extract_token_from_header():
    assert extract_token_from_header("Bearer abc.def.ghi") == "abc.def.ghi"


@pytest.mark.parametrize(
    "header, message",
    [
        (None, "authorization header is empty"),
        ("", "authorization header is empty"),
        ("Basic dXNlcjpwYXNz", "authorization header must start with 'Bearer '"),
        ("bearer abc", "authorization header must start with 'Bearer '"),
        ("Bearer ", "token is empty"),
    ],
)
def test_extract_token_from_header_failures(header, message):
    with pytest.raises(InvalidTokenError) as exc:
        extract_token_from_header(header)
    assert exc.value.message == message
    assert exc.value.status_code == 401

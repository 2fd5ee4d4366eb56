"""
Unit tests for security.dependencies module.
Covers: bearer authentication, optional claims, role checks and error envelopes.
"""
import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from routrauth.errors.handlers import register_exception_handlers
from routrauth.security import (
    get_current_claims,
    get_optional_claims,
    require_owner,
    require_role,
    setup_security,
)


@pytest.fixture
def app(settings):
    app = FastAPI()
    register_exception_handlers(app)
    setup_security(app, settings)

    @app.get("/claims")
    async def claims_route(claims=Depends(get_current_claims)):
        return {"user_id": claims.user_id, "role": claims.role}

    @app.get("/optional")
    async def optional_route(claims=Depends(get_optional_claims)):
        return {"user_id": claims.user_id if claims else None}

    @app.get("/owner-only")
    async def owner_route(claims=Depends(require_owner)):
        return {"ok": True}

    @app.get("/staff")
    async def staff_route(claims=Depends(require_role("owner", "dispatcher"))):
        return {"role": claims.role}

    return app


@pytest.fixture
def client(app):
    return TestClient(app)


def _auth(token):
    return {"Authorization": f"Bearer {token}"}


def test_setup_security_stores_service(app):
    assert app.state.token_service is not None


def test_current_claims_with_valid_token(client, token_service):
    token = token_service.issue_access_token(5, 2, "tech@example.com", "technician")
    response = client.get("/claims", headers=_auth(token))
    assert response.status_code == 200
    assert response.json() == {"user_id": 5, "role": "technician"}


def test_current_claims_without_header(client):
    response = client.get("/claims")
    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"
    body = response.json()
    assert body["success"] is False
    assert body["message"] == "authorization header is empty"
    assert body["errors"][0]["code"] == "MISSING_AUTH_HEADER"


def test_current_claims_with_non_bearer_header(client):
    response = client.get("/claims", headers={"Authorization": "Basic abc"})
    assert response.status_code == 401
    assert response.json()["errors"][0]["code"] == "INVALID_AUTH_HEADER"


def test_current_claims_rejects_refresh_token(client, token_service):
    token = token_service.issue_refresh_token(5, 2, "tech@example.com", "technician")
    response = client.get("/claims", headers=_auth(token))
    assert response.status_code == 401
    assert response.json()["errors"][0]["code"] == "INVALID_TOKEN_TYPE"


def test_current_claims_with_garbage_token(client):
    response = client.get("/claims", headers=_auth("garbage"))
    assert response.status_code == 401
    assert response.json()["errors"][0]["code"] == "INVALID_TOKEN"


def test_optional_claims(client, token_service):
    assert client.get("/optional").json() == {"user_id": None}
    assert client.get("/optional", headers=_auth("garbage")).json() == {"user_id": None}

    token = token_service.issue_access_token(5, 2, "tech@example.com", "technician")
    assert client.get("/optional", headers=_auth(token)).json() == {"user_id": 5}


def test_require_owner_allows_owner(client, token_service):
    token = token_service.issue_access_token(1, 2, "owner@example.com", "owner")
    response = client.get("/owner-only", headers=_auth(token))
    assert response.status_code == 200


def test_require_owner_forbids_other_roles(client, token_service):
    token = token_service.issue_access_token(5, 2, "tech@example.com", "technician")
    response = client.get("/owner-only", headers=_auth(token))
    assert response.status_code == 403
    error = response.json()["errors"][0]
    assert error["code"] == "INSUFFICIENT_PERMISSIONS"
    assert error["message"] == "Insufficient permissions. Required role: owner"
    assert error["details"] == {"required_roles": ["owner"], "user_role": "technician"}


def test_require_owner_needs_authentication(client):
    assert client.get("/owner-only").status_code == 401


def test_require_role_any_of(client, token_service):
    token = token_service.issue_access_token(6, 2, "disp@example.com", "dispatcher")
    response = client.get("/staff", headers=_auth(token))
    assert response.status_code == 200
    assert response.json() == {"role": "dispatcher"}


def test_require_role_needs_roles():
    with pytest.raises(ValueError):
        require_role()


def test_token_service_missing_from_app(settings):
    app = FastAPI()

    @app.get("/claims")
    async def claims_route(claims=Depends(get_current_claims)):
        return {}

    with TestClient(app, raise_server_exceptions=True) as c:
        with pytest.raises(RuntimeError, match="Security module not initialized"):
            c.get("/claims", headers=_auth("x"))

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt
import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from inspection_api.api.deps import request_identity as request_identity_module
from inspection_api.core.config import settings
from inspection_api.core.security.jwt_verifier import AuthTokenValidationError, JWTVerifier
from inspection_api.schemas.request_identity import RequestIdentity

SECRET = "unit-test-secret-with-enough-bytes-for-hs256"


def _token(*, secret: str = SECRET, minutes: int = 10, **claims) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": "tech-1",
        "email": "Tech@Shop.example",
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=minutes)).timestamp()),
        **claims,
    }
    return jwt.encode(payload, secret, algorithm="HS256")


def _verifier() -> JWTVerifier:
    return JWTVerifier(secret=SECRET, algorithms=["HS256"], leeway_sec=0)


def _build_app() -> FastAPI:
    app = FastAPI()

    @app.get("/whoami")
    def whoami(identity: RequestIdentity = Depends(request_identity_module.get_request_identity)):
        return {
            "email": identity.email,
            "source": identity.auth_source,
            "sub": identity.subject,
        }

    return app


def test_verifier_accepts_valid_token():
    claims = _verifier().verify(_token())
    assert claims["sub"] == "tech-1"


def test_verifier_rejects_expired_token():
    with pytest.raises(AuthTokenValidationError, match="expired"):
        _verifier().verify(_token(minutes=-5))


def test_verifier_rejects_wrong_secret():
    with pytest.raises(AuthTokenValidationError, match="Invalid token"):
        _verifier().verify(_token(secret="another-secret-that-is-also-long-enough"))


def test_verifier_requires_a_secret():
    with pytest.raises(AuthTokenValidationError):
        JWTVerifier(secret="", algorithms=["HS256"]).verify(_token())


def test_legacy_header_mode_uses_x_user_email(monkeypatch):
    monkeypatch.setattr(settings, "AUTH_MODE", "legacy_header")
    app = _build_app()
    with TestClient(app) as client:
        r = client.get("/whoami", headers={"X-User-Email": "Front.Desk@Shop.example"})
        assert r.status_code == 200
        payload = r.json()
        assert payload["email"] == "front.desk@shop.example"
        assert payload["source"] == "legacy_header"

        r = client.get("/whoami")
        assert r.json()["email"] == "system@local"


def test_legacy_header_mode_ignores_bearer_token(monkeypatch):
    monkeypatch.setattr(settings, "AUTH_MODE", "legacy_header")
    monkeypatch.setattr(request_identity_module, "_get_verifier", _verifier)
    app = _build_app()
    with TestClient(app) as client:
        r = client.get(
            "/whoami",
            headers={
                "Authorization": f"Bearer {_token()}",
                "X-User-Email": "legacy@shop.example",
            },
        )
        assert r.status_code == 200
        assert r.json()["source"] == "legacy_header"


def test_jwt_only_mode_requires_bearer(monkeypatch):
    monkeypatch.setattr(settings, "AUTH_MODE", "jwt_only")
    app = _build_app()
    with TestClient(app) as client:
        r = client.get("/whoami", headers={"X-User-Email": "legacy@shop.example"})
        assert r.status_code == 401
        assert r.json()["detail"] == "Authentication token required"


def test_jwt_only_mode_rejects_bad_token_with_403(monkeypatch):
    monkeypatch.setattr(settings, "AUTH_MODE", "jwt_only")
    monkeypatch.setattr(request_identity_module, "_get_verifier", _verifier)
    app = _build_app()
    with TestClient(app) as client:
        r = client.get("/whoami", headers={"Authorization": "Bearer not-a-jwt"})
        assert r.status_code == 403
        assert r.json()["detail"] == "Invalid or expired token"

        r = client.get("/whoami", headers={"Authorization": f"Bearer {_token(minutes=-5)}"})
        assert r.status_code == 403


def test_jwt_only_mode_accepts_valid_token(monkeypatch):
    monkeypatch.setattr(settings, "AUTH_MODE", "jwt_only")
    monkeypatch.setattr(request_identity_module, "_get_verifier", _verifier)
    app = _build_app()
    with TestClient(app) as client:
        r = client.get("/whoami", headers={"Authorization": f"Bearer {_token()}"})
        assert r.status_code == 200
        payload = r.json()
        assert payload["email"] == "tech@shop.example"
        assert payload["sub"] == "tech-1"
        assert payload["source"] == "jwt"


def test_dual_mode_prefers_bearer(monkeypatch):
    monkeypatch.setattr(settings, "AUTH_MODE", "dual")
    monkeypatch.setattr(request_identity_module, "_get_verifier", _verifier)
    app = _build_app()
    with TestClient(app) as client:
        r = client.get(
            "/whoami",
            headers={
                "Authorization": f"Bearer {_token()}",
                "X-User-Email": "legacy@shop.example",
            },
        )
        assert r.json()["source"] == "jwt"

        r = client.get("/whoami", headers={"X-User-Email": "legacy@shop.example"})
        assert r.json()["source"] == "legacy_header"


def test_dynamic_api_requires_token_in_jwt_only_mode(engine, client_factory, monkeypatch):
    monkeypatch.setattr(request_identity_module, "_get_verifier", _verifier)
    with client_factory(engine) as client:
        monkeypatch.setattr(settings, "AUTH_MODE", "jwt_only")
        assert client.get("/api/tables").status_code == 401
        assert client.get("/api/labels").status_code == 401
        assert client.get("/health").status_code == 200

        r = client.get("/api/tables", headers={"Authorization": f"Bearer {_token()}"})
        assert r.status_code == 200

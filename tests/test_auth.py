"""
Tests for the authentication endpoints and HTTP hardening.

Covers:
- /auth/register, /auth/login, /auth/me, /auth/logout
- Bearer header and cookie credentials
- CSRF middleware (double-submit cookie)
- Security headers middleware
"""

from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from channelhub.core.config import get_settings
from channelhub.core.middleware import CSRFMiddleware, SecurityHeadersMiddleware, SECURITY_HEADERS

from .conftest import signup


# ---------------------------------------------------------------------------
# Auth endpoints
# ---------------------------------------------------------------------------

class TestRegisterEndpoint:
    @pytest.mark.asyncio
    async def test_register(self, client):
        resp = await client.post("/auth/register", json={"identifier": "alice", "secret": "long-enough"})
        assert resp.status_code == 201
        body = resp.json()
        assert body["identifier"] == "alice"
        assert "secret" not in body and "secret_digest" not in body

    @pytest.mark.asyncio
    async def test_register_duplicate(self, client):
        payload = {"identifier": "alice", "secret": "long-enough"}
        assert (await client.post("/auth/register", json=payload)).status_code == 201
        resp = await client.post("/auth/register", json=payload)
        assert resp.status_code == 409
        assert resp.json()["error"]["code"] == "CONFLICT"

    @pytest.mark.asyncio
    async def test_register_short_secret(self, client):
        resp = await client.post("/auth/register", json={"identifier": "alice", "secret": "short"})
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_register_overlong_secret_is_rejected(self, client):
        resp = await client.post("/auth/register", json={"identifier": "alice", "secret": "a" * 100})
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_register_secret_limit_counts_bytes(self, client):
        # 40 characters but 80 bytes
        resp = await client.post("/auth/register", json={"identifier": "alice", "secret": "é" * 40})
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_register_secret_at_limit(self, client):
        secret = "a" * 72
        resp = await client.post("/auth/register", json={"identifier": "alice", "secret": secret})
        assert resp.status_code == 201
        resp = await client.post("/auth/login", json={"identifier": "alice", "secret": secret})
        client.cookies.clear()
        assert resp.status_code == 200
        resp = await client.post("/auth/login", json={"identifier": "alice", "secret": secret + "X" * 20})
        assert resp.status_code == 401


class TestLoginEndpoint:
    @pytest.mark.asyncio
    async def test_login_sets_session_cookies(self, client):
        await client.post("/auth/register", json={"identifier": "alice", "secret": "long-enough"})
        resp = await client.post("/auth/login", json={"identifier": "alice", "secret": "long-enough"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["user"]["identifier"] == "alice"
        settings = get_settings()
        assert resp.cookies.get(settings.session_cookie_name) == body["token"]
        assert resp.cookies.get(settings.csrf_cookie_name)

    @pytest.mark.asyncio
    async def test_login_bad_secret(self, client):
        await client.post("/auth/register", json={"identifier": "alice", "secret": "long-enough"})
        resp = await client.post("/auth/login", json={"identifier": "alice", "secret": "wrong-secret"})
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "INVALID_CREDENTIALS"

    @pytest.mark.asyncio
    async def test_login_unknown_user_same_error(self, client):
        resp = await client.post("/auth/login", json={"identifier": "ghost", "secret": "long-enough"})
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "INVALID_CREDENTIALS"


class TestMeEndpoint:
    @pytest.mark.asyncio
    async def test_me_with_bearer(self, client):
        alice = await signup(client, "alice")
        resp = await client.get("/auth/me", headers=alice.headers)
        assert resp.status_code == 200
        assert resp.json()["id"] == str(alice.id)

    @pytest.mark.asyncio
    async def test_me_with_cookie(self, client):
        await client.post("/auth/register", json={"identifier": "alice", "secret": "long-enough"})
        await client.post("/auth/login", json={"identifier": "alice", "secret": "long-enough"})
        resp = await client.get("/auth/me")
        assert resp.status_code == 200
        assert resp.json()["identifier"] == "alice"

    @pytest.mark.asyncio
    async def test_me_without_credentials(self, client):
        resp = await client.get("/auth/me")
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "UNAUTHORIZED"

    @pytest.mark.asyncio
    async def test_me_with_garbage_token(self, client):
        resp = await client.get("/auth/me", headers={"Authorization": "Bearer nope"})
        assert resp.status_code == 401

    @pytest.mark.asyncio
    async def test_me_with_empty_bearer(self, client):
        resp = await client.get("/auth/me", headers={"Authorization": "Bearer "})
        assert resp.status_code == 401


class TestLogoutEndpoint:
    @pytest.mark.asyncio
    async def test_logout_revokes_token(self, client):
        alice = await signup(client, "alice")
        resp = await client.post("/auth/logout", headers=alice.headers)
        assert resp.status_code == 200
        assert resp.json()["message"] == "Logged out"
        resp = await client.get("/auth/me", headers=alice.headers)
        assert resp.status_code == 401

    @pytest.mark.asyncio
    async def test_logout_without_session(self, client):
        resp = await client.post("/auth/logout")
        assert resp.status_code == 200

    @pytest.mark.asyncio
    async def test_other_sessions_survive_logout(self, client):
        alice = await signup(client, "alice")
        resp = await client.post(
            "/auth/login", json={"identifier": "alice", "secret": "correct-horse-battery"}
        )
        second_token = resp.json()["token"]
        client.cookies.clear()
        await client.post("/auth/logout", headers=alice.headers)
        resp = await client.get("/auth/me", headers={"Authorization": f"Bearer {second_token}"})
        assert resp.status_code == 200


# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------

class TestSecurityHeadersMiddleware:
    def test_headers_present(self):
        app = FastAPI()
        app.add_middleware(SecurityHeadersMiddleware)

        @app.get("/test")
        async def test_endpoint():
            return {"ok": True}

        client = TestClient(app)
        resp = client.get("/test")
        assert resp.status_code == 200
        for header, value in SECURITY_HEADERS.items():
            assert resp.headers.get(header) == value


class TestCSRFMiddleware:
    def _make_app(self) -> FastAPI:
        app = FastAPI()
        app.add_middleware(CSRFMiddleware)

        @app.get("/test")
        async def get_test():
            return {"ok": True}

        @app.post("/test")
        async def post_test():
            return {"ok": True}

        return app

    def _cookies(self, **extra) -> dict:
        settings = get_settings()
        cookies = {settings.session_cookie_name: "some-token"}
        if "csrf" in extra:
            cookies[settings.csrf_cookie_name] = extra["csrf"]
        return cookies

    def test_get_passes_without_csrf(self):
        client = TestClient(self._make_app())
        resp = client.get("/test")
        assert resp.status_code == 200

    def test_post_with_bearer_skips_csrf(self):
        client = TestClient(self._make_app(), cookies=self._cookies())
        resp = client.post("/test", headers={"Authorization": "Bearer abc"})
        assert resp.status_code == 200

    def test_post_without_session_cookie_passes(self):
        client = TestClient(self._make_app())
        resp = client.post("/test")
        assert resp.status_code == 200

    def test_post_with_session_but_no_csrf_fails(self):
        client = TestClient(self._make_app(), cookies=self._cookies())
        resp = client.post("/test")
        assert resp.status_code == 403
        assert resp.json()["error"]["code"] == "CSRF_VALIDATION_FAILED"

    def test_post_with_matching_csrf_passes(self):
        client = TestClient(self._make_app(), cookies=self._cookies(csrf="tok"))
        resp = client.post("/test", headers={"X-CSRF-Token": "tok"})
        assert resp.status_code == 200

    def test_post_with_mismatched_csrf_fails(self):
        client = TestClient(self._make_app(), cookies=self._cookies(csrf="token-a"))
        resp = client.post("/test", headers={"X-CSRF-Token": "token-b"})
        assert resp.status_code == 403

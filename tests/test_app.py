"""Tests for application-level behaviour: health, headers, errors, rate limits, metrics."""

from __future__ import annotations

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from expensemanager.api.app import app, lifespan
from expensemanager.api.rate_limit import limiter
from expensemanager.config import settings


@pytest_asyncio.fixture
async def rl_client(storage):
    """HTTP test client with rate limiting ENABLED."""
    limiter.enabled = True
    limiter._limiter.storage.reset()

    # Lower the /api/login limit from 10/min to 2/min for fast testing
    login_limits = limiter._route_limits.get("expensemanager.api.routes.auth.login", [])
    original_amounts = {}
    for lim in login_limits:
        original_amounts[id(lim)] = lim.limit.amount
        lim.limit.amount = 2

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    for lim in login_limits:
        lim.limit.amount = original_amounts[id(lim)]
    limiter.enabled = False


class TestHealth:
    async def test_health(self, client):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"
        assert resp.json()["version"] == "0.1.0"

    async def test_metrics_exposed(self, client):
        await client.get("/health")
        resp = await client.get("/metrics")
        assert resp.status_code == 200
        assert "http_request" in resp.text


class TestMiddleware:
    async def test_security_headers(self, client):
        resp = await client.get("/health")
        assert resp.headers["X-Content-Type-Options"] == "nosniff"
        assert resp.headers["X-Frame-Options"] == "DENY"
        assert resp.headers["Referrer-Policy"] == "strict-origin-when-cross-origin"

    async def test_request_id_matches_error_body(self, client):
        resp = await client.get("/api/user")
        assert resp.status_code == 401
        assert resp.json()["request_id"] == resp.headers["X-Request-ID"]


class TestRateLimiting:
    async def test_login_rate_limited(self, rl_client):
        for _ in range(2):
            resp = await rl_client.post("/api/login", json={"username": "x", "password": "y"})
            assert resp.status_code == 401

        resp = await rl_client.post("/api/login", json={"username": "x", "password": "y"})
        assert resp.status_code == 429
        assert resp.headers["Retry-After"] == "60"
        assert resp.json()["error"] == "rate_limit_exceeded"


class TestLifespan:
    async def test_seeds_demo_users_when_enabled(self, storage, monkeypatch):
        monkeypatch.setattr(settings, "seed_demo_users", True)
        async with lifespan(app):
            user = await storage.get_user_by_username("accountant")
        assert user is not None
        assert user.status == "active"

    async def test_no_seed_by_default(self, storage, monkeypatch):
        monkeypatch.setattr(settings, "seed_demo_users", False)
        async with lifespan(app):
            pass
        assert await storage.get_user_by_username("admin") is None

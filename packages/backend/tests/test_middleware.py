"""Tests for security middleware — headers, request IDs."""

import pytest
from fastapi import FastAPI, Response
from httpx import ASGITransport, AsyncClient

from proctor.middleware.security import SecurityHeadersMiddleware


@pytest.mark.asyncio
async def test_security_headers_on_health(client):
    """Health endpoint returns security headers."""
    r = await client.get("/health")
    assert r.status_code == 200
    assert r.headers["X-Content-Type-Options"] == "nosniff"
    assert r.headers["X-Frame-Options"] == "DENY"
    assert r.headers["Referrer-Policy"] == "strict-origin-when-cross-origin"
    assert r.headers["Cache-Control"] == "no-store"


@pytest.mark.asyncio
async def test_security_headers_on_errors(client):
    """Error responses carry the same headers as successes."""
    r = await client.get("/users/ghost")
    assert r.status_code == 404
    assert r.headers["X-Content-Type-Options"] == "nosniff"


@pytest.mark.asyncio
async def test_request_id_generated(client):
    """Each request gets a unique X-Request-ID header."""
    r1 = await client.get("/health")
    r2 = await client.get("/health")
    assert "X-Request-ID" in r1.headers
    assert "X-Request-ID" in r2.headers
    # Each request gets a unique ID
    assert r1.headers["X-Request-ID"] != r2.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_request_id_propagated(client):
    """Incoming X-Request-ID is propagated through the response."""
    custom_id = "test-trace-12345"
    r = await client.get("/health", headers={"X-Request-ID": custom_id})
    assert r.headers["X-Request-ID"] == custom_id


@pytest.mark.asyncio
async def test_no_hsts_on_http(client):
    """HSTS header is NOT set on HTTP connections (only HTTPS)."""
    r = await client.get("/health")
    assert "Strict-Transport-Security" not in r.headers


@pytest.mark.asyncio
async def test_hsts_on_https(client):
    r = await client.get("https://test/health")
    assert r.headers["Strict-Transport-Security"] == (
        "max-age=31536000; includeSubDomains"
    )


@pytest.mark.asyncio
async def test_hsts_disabled_with_zero_max_age():
    app = FastAPI()
    app.add_middleware(SecurityHeadersMiddleware, hsts_max_age=0)

    @app.get("/ping")
    async def ping():
        return {"ok": True}

    async with AsyncClient(transport=ASGITransport(app=app), base_url="https://test") as ac:
        r = await ac.get("/ping")
    assert r.status_code == 200
    assert r.headers["X-Frame-Options"] == "DENY"
    assert "Strict-Transport-Security" not in r.headers


@pytest.mark.asyncio
async def test_route_cache_control_is_kept():
    app = FastAPI()
    app.add_middleware(SecurityHeadersMiddleware)

    @app.get("/cached")
    async def cached(response: Response):
        response.headers["Cache-Control"] = "max-age=60"
        return {}

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        r = await ac.get("/cached")
    assert r.headers["Cache-Control"] == "max-age=60"

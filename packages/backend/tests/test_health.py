"""Health endpoint tests."""

import pytest

from proctor import __version__


@pytest.mark.asyncio
async def test_health_returns_ok(client):
    """Health endpoint should return server status and version."""
    resp = await client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["server"] == "ok"
    assert data["version"] == __version__
    assert "database" in data


@pytest.mark.asyncio
async def test_health_needs_no_credentials(unauthenticated_client):
    resp = await unauthenticated_client.get("/health")
    assert resp.status_code == 200

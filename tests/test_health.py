"""Health endpoint tests."""

import pytest


@pytest.mark.asyncio
async def test_health_returns_ok(client):
    """Health endpoint should return server status, version and database check."""
    resp = await client.get("/api/v1/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["server"] == "ok"
    assert data["database"] == "ok"
    assert data["status"] == "healthy"
    assert "version" in data


@pytest.mark.asyncio
async def test_health_open_when_reads_require_auth(client, monkeypatch):
    """Health never sits behind the read gate."""
    from codecollab.config import settings

    monkeypatch.setattr(settings, "require_auth_for_reads", True)
    resp = await client.get("/api/v1/health")
    assert resp.status_code == 200

"""Health check endpoint tests."""

import pytest

from payrail import __version__
from payrail.config import settings


@pytest.mark.asyncio
async def test_health_check(client):
    response = await client.get("/api/v1/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["service"] == "payrail"
    assert data["version"] == __version__


@pytest.mark.asyncio
async def test_liveness(client):
    response = await client.get("/api/v1/health/live")
    assert response.status_code == 200
    assert response.json() == {"status": "alive"}


@pytest.mark.asyncio
async def test_readiness_checks_database_and_custody(client):
    response = await client.get("/api/v1/health/ready")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert data["checks"] == {"database": "ok", "custody": "configured"}


@pytest.mark.asyncio
async def test_trace_id_is_echoed(client):
    response = await client.get("/api/v1/health", headers={"X-Trace-Id": "trc_from_caller"})
    assert response.headers["X-Trace-Id"] == "trc_from_caller"

    generated = await client.get("/api/v1/health")
    assert generated.headers["X-Trace-Id"].startswith("trc_")


@pytest.mark.asyncio
async def test_readiness_fails_without_custody_credentials(client, monkeypatch):
    monkeypatch.setattr(settings, "custody_api_key", "")
    response = await client.get("/api/v1/health/ready")
    assert response.status_code == 503
    assert response.json()["checks"]["custody"] == "not_configured"

"""Health check endpoint tests."""

import pytest


@pytest.mark.asyncio
async def test_health_check(client):
    response = await client.get("/api/v1/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["service"] == "waltz-api"
    assert data["version"] == "1.0.0"


@pytest.mark.asyncio
async def test_readiness_checks_database(client):
    response = await client.get("/api/v1/health/ready")
    assert response.status_code == 200
    assert response.json() == {"status": "ready", "checks": {"database": "ok"}}


@pytest.mark.asyncio
async def test_trace_id_is_echoed(client):
    response = await client.get("/api/v1/health/live", headers={"X-Trace-Id": "trc_fixed_value"})
    assert response.headers["X-Trace-Id"] == "trc_fixed_value"


@pytest.mark.asyncio
async def test_trace_id_generated_when_missing(client):
    response = await client.get("/api/v1/health/live")
    assert response.headers["X-Trace-Id"].startswith("trc_")

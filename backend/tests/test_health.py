from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient


def _mock_session(execute: AsyncMock) -> AsyncMock:
    session = AsyncMock()
    session.__aenter__ = AsyncMock(return_value=session)
    session.__aexit__ = AsyncMock(return_value=False)
    session.execute = execute
    return session


@pytest.mark.asyncio
async def test_health_ok(client: AsyncClient):
    with (
        patch("app.main.async_session", return_value=_mock_session(AsyncMock())),
        patch("app.main._redis_available", AsyncMock(return_value=True)),
    ):
        response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "database": "connected", "redis": "connected"}


@pytest.mark.asyncio
async def test_health_without_redis_in_development(client: AsyncClient):
    with (
        patch("app.main.async_session", return_value=_mock_session(AsyncMock())),
        patch("app.main._redis_available", AsyncMock(return_value=False)),
    ):
        response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["redis"] == "unavailable"
    assert response.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_health_degraded_without_redis_in_production(client: AsyncClient, monkeypatch):
    from app.config import settings

    monkeypatch.setattr(settings, "APP_ENV", "production")
    with (
        patch("app.main.async_session", return_value=_mock_session(AsyncMock())),
        patch("app.main._redis_available", AsyncMock(return_value=False)),
    ):
        response = await client.get("/health")

    assert response.json()["status"] == "degraded"


@pytest.mark.asyncio
async def test_health_database_down(client: AsyncClient):
    failing = AsyncMock(side_effect=ConnectionRefusedError("db down"))
    with patch("app.main.async_session", return_value=_mock_session(failing)):
        response = await client.get("/health")

    assert response.status_code == 503
    assert response.json()["database"] == "disconnected"


@pytest.mark.asyncio
async def test_metrics_endpoint(client: AsyncClient):
    response = await client.get("/metrics")
    assert response.status_code == 200
    assert "vse_bookings_created_total" in response.text


@pytest.mark.asyncio
async def test_metrics_requires_key_when_configured(client: AsyncClient, monkeypatch):
    from app.config import settings

    monkeypatch.setattr(settings, "METRICS_API_KEY", "metrics-key")
    assert (await client.get("/metrics")).status_code == 403
    assert (await client.get("/metrics", headers={"x-metrics-key": "wrong"})).status_code == 403
    assert (await client.get("/metrics", headers={"x-metrics-key": "metrics-key"})).status_code == 200

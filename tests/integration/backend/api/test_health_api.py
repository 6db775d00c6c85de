"""Integration tests for the health endpoints."""

from unittest.mock import AsyncMock

import pytest
from httpx import AsyncClient

from modules.backend.api import health


@pytest.fixture
def database_up(monkeypatch) -> AsyncMock:
    check = AsyncMock(return_value={"status": "healthy", "latency_ms": 1})
    monkeypatch.setattr(health, "check_database", check)
    return check


@pytest.fixture
def database_down(monkeypatch) -> AsyncMock:
    check = AsyncMock(return_value={"status": "unhealthy", "error": "connection refused"})
    monkeypatch.setattr(health, "check_database", check)
    return check


async def test_liveness_always_healthy(client: AsyncClient) -> None:
    """GET /health should always return 200."""
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


async def test_readiness_healthy(client: AsyncClient, database_up) -> None:
    response = await client.get("/health/ready")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["checks"]["database"]["status"] == "healthy"
    assert data["checks"]["redis"] == {"status": "not_configured"}


async def test_readiness_fails_when_database_down(client: AsyncClient, database_down) -> None:
    response = await client.get("/health/ready")

    assert response.status_code == 503


async def test_detailed_reports_application_and_integrations(client: AsyncClient, database_up) -> None:
    response = await client.get("/health/detailed")

    data = response.json()
    assert data["status"] == "healthy"
    assert data["application"]["name"] == "Survey CRM"
    assert set(data["integrations"]) == {"microsoft_graph", "bunny", "notifications", "background_tasks"}
    assert isinstance(data["pools"], dict)

"""
Tests for health check endpoints.
"""

from typing import Any

import pytest
from fastapi.testclient import TestClient

from lumaprod.api.v1 import health


@pytest.fixture
def redis_up(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        health,
        "check_redis",
        lambda settings: {"status": "healthy", "message": "Redis connection successful"},
    )


@pytest.fixture
def redis_down(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        health,
        "check_redis",
        lambda settings: {"status": "unhealthy", "message": "Redis connection failed: refused"},
    )


class TestHealthEndpoints:
    """Tests for health check endpoints."""

    def test_health_check_response_structure(self, client: TestClient, redis_up: None) -> None:
        """Health response should have expected structure."""
        response = client.get("/api/v1/health")
        assert response.status_code == 200
        data = response.json()

        assert data["status"] == "healthy"
        assert data["environment"] == "development"
        assert "version" in data
        assert "timestamp" in data
        assert set(data["checks"]) == {"database", "redis"}

    def test_redis_failure_degrades(self, client: TestClient, redis_down: None) -> None:
        """A broker outage should degrade, not fail, the service."""
        data = client.get("/api/v1/health").json()
        assert data["status"] == "degraded"
        assert data["checks"]["database"]["status"] == "healthy"

    def test_database_failure_is_unhealthy(
        self,
        client: TestClient,
        redis_up: None,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        def broken(db: Any) -> dict[str, Any]:
            return {"status": "unhealthy", "message": "Database connection failed: gone"}

        monkeypatch.setattr(health, "check_database", broken)

        assert client.get("/api/v1/health").json()["status"] == "unhealthy"
        ready = client.get("/api/v1/health/ready")
        assert ready.status_code == 503
        assert ready.json()["reason"] == "database_unavailable"

    def test_liveness(self, client: TestClient) -> None:
        assert client.get("/api/v1/health/live").json() == {"status": "ok"}

    def test_readiness(self, client: TestClient) -> None:
        response = client.get("/api/v1/health/ready")
        assert response.status_code == 200
        assert response.json() == {"status": "ready"}

    def test_root_endpoint(self, client: TestClient) -> None:
        """Root endpoint should return API info."""
        response = client.get("/")
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "LumaProd API"
        assert data["docs"] == "/docs"


class TestRequestMiddleware:
    """Tests for request tracing headers."""

    def test_request_id_is_generated(self, client: TestClient) -> None:
        response = client.get("/api/v1/health/live")
        assert response.headers["x-request-id"]
        assert "x-process-time" in response.headers

    def test_incoming_request_id_is_kept(self, client: TestClient) -> None:
        response = client.get("/api/v1/health/live", headers={"X-Request-ID": "req-42"})
        assert response.headers["x-request-id"] == "req-42"

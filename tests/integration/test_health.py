"""Integration tests for health check endpoints."""

from collections.abc import Callable

from fastapi.testclient import TestClient

from tests.fakes import FakeSupabase


class TestHealthEndpoint:
    """Tests for /health endpoint."""

    def test_health_returns_healthy_status(self, client: TestClient) -> None:
        """Test that /health reports healthy without touching dependencies."""
        response = client.get("/health")
        data = response.json()

        assert response.status_code == 200
        assert data["status"] == "healthy"
        assert data["service"] == "freelance-marketplace"
        assert data["version"] == "0.1.0"
        assert data["timestamp"] is not None


class TestReadinessEndpoint:
    """Tests for /health/ready endpoint."""

    def test_readiness_returns_200_when_database_reachable(self, client: TestClient) -> None:
        response = client.get("/health/ready")
        data = response.json()

        assert response.status_code == 200
        assert data["status"] == "healthy"
        db_check = next(c for c in data["checks"] if c["name"] == "database")
        assert db_check["healthy"] is True
        assert db_check["latency_ms"] is not None

    def test_readiness_returns_503_when_database_unhealthy(
        self, client: TestClient, seeded_db: FakeSupabase
    ) -> None:
        """Test that /health/ready returns 503 when the users query fails."""
        seeded_db.fail("users", "select", ConnectionError("Connection refused"))

        response = client.get("/health/ready")
        data = response.json()

        assert response.status_code == 503
        assert data["status"] == "unhealthy"
        db_check = next(c for c in data["checks"] if c["name"] == "database")
        assert db_check["healthy"] is False
        assert "Connection refused" in db_check["error"]


class TestHealthAuthEndpoint:
    """Tests for /health/auth protected endpoint."""

    def test_returns_401_without_auth_header(self, client: TestClient) -> None:
        response = client.get("/health/auth")

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"
        assert response.json()["message"] == "Authorization header required"

    def test_returns_401_with_invalid_token_format(self, client: TestClient) -> None:
        response = client.get("/health/auth", headers={"Authorization": "InvalidFormat"})

        assert response.status_code == 401

    def test_returns_token_identity(
        self, client: TestClient, auth_headers: Callable[[int], dict[str, str]]
    ) -> None:
        response = client.get("/health/auth", headers=auth_headers(2))
        data = response.json()

        assert response.status_code == 200
        assert data["authenticated"] is True
        assert data["user_id"] == 2
        assert data["auth_id"] is None
        assert data["role"] == "freelancer"


class TestLatencyEndpoint:
    """Tests for /health/latency endpoint."""

    def test_reports_recorded_requests(self, client: TestClient) -> None:
        client.get("/api/jobs/998")
        client.get("/api/jobs/999")

        response = client.get("/health/latency")
        data = response.json()

        assert response.status_code == 200
        assert data["overall"]["count"] >= 2
        assert data["by_path"]["/api/jobs/{id}"]["count"] >= 2
        assert "/health" not in data["by_path"]

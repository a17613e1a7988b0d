"""
Tests for health check endpoints.

These tests verify:
- Basic health endpoint returns 200
- Readiness check reports the state of every open connection
- Health degrades gracefully when a database stops answering
"""

from pymongo.errors import AutoReconnect


class TestHealthEndpoint:
    """Tests for GET /health endpoint."""

    def test_health_endpoint_returns_200_when_api_running(self, client):
        """Basic health check should return 200 if API is up."""
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"

    def test_root_describes_api(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["name"] == "Mongo CRUD Proxy"


class TestReadinessEndpoint:
    """Tests for GET /health/ready endpoint."""

    def test_readiness_lists_startup_database(self, client):
        """The default database is opened at startup and reported healthy."""
        response = client.get("/health/ready")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["checks"]["api"] == "healthy"
        assert data["checks"]["databases"] == {"BigBoxStore": "healthy"}

    def test_readiness_includes_databases_opened_by_requests(self, client):
        client.get("/find/Test/Items")

        data = client.get("/health/ready").json()

        assert set(data["checks"]["databases"]) == {"BigBoxStore", "Test"}

    def test_readiness_reports_unhealthy_database(self, client, client_factory):
        """Readiness should report degraded when a database stops answering."""
        client.get("/find/Test/Items")
        broken = client_factory.clients[-1]

        async def failing_ping(command):
            raise AutoReconnect("connection reset")

        broken.admin.command = failing_ping

        response = client.get("/health/ready")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "degraded"
        assert data["checks"]["databases"]["BigBoxStore"] == "healthy"
        assert "unhealthy" in data["checks"]["databases"]["Test"]

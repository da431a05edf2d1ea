"""Unit tests for health endpoint

Verifies the service health check and root endpoints against a live app.
"""

import pytest


@pytest.mark.unit
class TestHealthCheck:
    """Test health check endpoint"""

    def test_health_returns_ok(self, api_client):
        """Happy path: health check reports a reachable database"""
        response = api_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database_connected"] is True
        assert body["service"] == "collection-service"

    def test_root(self, api_client):
        """Root endpoint identifies the service"""
        response = api_client.get("/")

        assert response.status_code == 200
        assert response.json()["status"] == "running"

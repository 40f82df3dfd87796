"""Tests for the health check API endpoint."""

from unittest.mock import patch

from basebridge.api import create_app
from fastapi.testclient import TestClient


class TestHealthEndpoint:
    """Test the /api/health endpoint."""

    def test_health_check_returns_ok_status(self, test_client):
        """Test that health check returns status 'ok'."""
        response = test_client.get("/api/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["service"] == "basebridge"

    def test_health_check_includes_translation_config(self, test_client):
        """Test that health check includes translation settings."""
        response = test_client.get("/api/health")

        config = response.json()["config"]
        assert "formula_strategy" in config
        assert "max_nesting_depth" in config
        assert "max_formula_length" in config

    def test_health_check_reflects_settings(self, test_client):
        """Test that health check reports the active settings."""
        with patch("basebridge.config.settings.formula_strategy", "omit"):
            response = test_client.get("/api/health")

        assert response.json()["config"]["formula_strategy"] == "omit"

    def test_limits_endpoint(self, test_client):
        """Test the limits endpoint."""
        response = test_client.get("/api/config/limits")

        assert response.status_code == 200
        data = response.json()
        assert data["max_nesting_depth"] > 0
        assert data["max_formula_length"] > 0


class TestAppFactory:
    """Test the application factory."""

    def test_create_app_mounts_router(self):
        """Test that the full app serves the API."""
        client = TestClient(create_app())

        response = client.get("/api/health")

        assert response.status_code == 200
        assert response.json()["service"] == "basebridge"

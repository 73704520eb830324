"""
Unit tests for health checks.
"""

from unittest.mock import MagicMock, patch

import pytest

from familyhub import health


def healthy(name):
    return {"status": "healthy", "message": f"{name} ok", "timestamp": 0}


def unhealthy(name):
    return {"status": "unhealthy", "message": f"{name} down", "timestamp": 0}


@pytest.mark.unit
class TestHealthStatus:
    def test_all_healthy(self):
        with (
            patch.object(health, "check_database_health", return_value=healthy("database")),
            patch.object(health, "check_storage_health", return_value=healthy("storage")),
            patch.object(health, "check_environment_health", return_value=healthy("environment")),
        ):
            status = health.get_health_status()

        assert status["status"] == "healthy"
        assert "unhealthy_services" not in status

    def test_storage_down_is_degraded(self):
        with (
            patch.object(health, "check_database_health", return_value=healthy("database")),
            patch.object(health, "check_storage_health", return_value=unhealthy("storage")),
            patch.object(health, "check_environment_health", return_value=healthy("environment")),
        ):
            status = health.get_health_status()

        assert status["status"] == "degraded"
        assert status["unhealthy_services"] == ["storage"]

    def test_database_down_is_unhealthy(self):
        with (
            patch.object(health, "check_database_health", return_value=unhealthy("database")),
            patch.object(health, "check_storage_health", return_value=healthy("storage")),
            patch.object(health, "check_environment_health", return_value=healthy("environment")),
        ):
            status = health.get_health_status()

        assert status["status"] == "unhealthy"


@pytest.mark.unit
class TestChecks:
    def test_environment_complete(self):
        assert health.check_environment_health()["status"] == "healthy"

    def test_environment_missing_bucket(self, monkeypatch):
        monkeypatch.delenv("GCS_PHOTOS_BUCKET")

        result = health.check_environment_health()

        assert result["status"] == "unhealthy"
        assert result["missing_vars"] == ["GCS_PHOTOS_BUCKET"]

    def test_database_check_failure(self):
        with patch.object(health, "get_family_data_service", side_effect=RuntimeError("disk full")):
            result = health.check_database_health()

        assert result["status"] == "unhealthy"
        assert "disk full" in result["message"]

    def test_storage_check_bucket_missing(self):
        storage_service = MagicMock()
        storage_service.check_bucket_exists.return_value = False
        with patch.object(health, "get_storage_service", return_value=storage_service):
            assert health.check_storage_health()["status"] == "unhealthy"

    def test_application_info(self):
        info = health.get_application_info()

        assert info["name"] == "familyhub"
        assert info["environment"] == "test"

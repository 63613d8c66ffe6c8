"""
Tests for settings loading and the configuration-required screen.
"""

import pytest
from fastapi.testclient import TestClient

from mlshelf import main
from mlshelf.core.config import Settings
from mlshelf.core.log_config import configure_logging
from mlshelf.main import create_app


@pytest.fixture
def unconfigured_client():
    settings = Settings(SUPABASE_URL="", SUPABASE_ANON_KEY="", LOG_DIR="")
    return TestClient(create_app(settings), follow_redirects=False)


class TestSettings:
    """Tests for Settings."""

    def test_vite_names_accepted(self, monkeypatch):
        """Test that VITE_-prefixed variables configure the backend."""
        monkeypatch.delenv("SUPABASE_URL", raising=False)
        monkeypatch.delenv("SUPABASE_ANON_KEY", raising=False)
        monkeypatch.setenv("VITE_SUPABASE_URL", "https://vite.supabase.co")
        monkeypatch.setenv("VITE_SUPABASE_ANON_KEY", "vite-key")

        settings = Settings(_env_file=None)

        assert settings.SUPABASE_URL == "https://vite.supabase.co"
        assert settings.SUPABASE_ANON_KEY == "vite-key"
        assert settings.is_configured

    def test_defaults(self, monkeypatch):
        """Test limits and names used when nothing is set."""
        for name in ("SUPABASE_URL", "VITE_SUPABASE_URL", "SUPABASE_ANON_KEY", "VITE_SUPABASE_ANON_KEY"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings(_env_file=None)

        assert not settings.is_configured
        assert settings.MAX_UPLOAD_BYTES == 10 * 1024 * 1024
        assert settings.SIGNED_URL_TTL_SECONDS == 60
        assert settings.MODELS_BUCKET == "models"


class TestConfigurationRequired:
    """Tests for the app without backend settings."""

    def test_pages_show_configuration_screen(self, unconfigured_client):
        """Test that pages render the configuration notice."""
        response = unconfigured_client.get("/")
        assert response.status_code == 503
        assert "Supabase Connection Required" in response.text

    def test_api_answers_503(self, unconfigured_client):
        """Test that API routes answer in JSON."""
        response = unconfigured_client.get("/v1/models")
        assert response.status_code == 503
        assert response.json() == {"detail": "Backend connection is not configured"}

    def test_health_stays_available(self, unconfigured_client):
        """Test that the probe still answers."""
        response = unconfigured_client.get("/health")
        assert response.status_code == 200
        assert response.json()["configured"] is False


class TestLogging:
    """Tests for configure_logging."""

    def test_empty_log_dir_writes_no_files(self, tmp_path, monkeypatch):
        """Test that LOG_DIR="" keeps logging on stderr only."""
        monkeypatch.chdir(tmp_path)
        configure_logging(Settings(SUPABASE_URL="", SUPABASE_ANON_KEY="", LOG_DIR=""))
        assert list(tmp_path.iterdir()) == []

    def test_log_dir_created(self, tmp_path):
        """Test the rotating file sink location."""
        log_dir = tmp_path / "logs"
        configure_logging(Settings(LOG_DIR=str(log_dir)))
        try:
            assert log_dir.is_dir()
        finally:
            configure_logging(Settings(LOG_DIR=""))

    def test_module_app_uses_test_environment(self):
        """Test that importing the module-level app created no log directory."""
        assert main.app.state.settings.LOG_DIR == ""
        assert main.app.state.settings.is_configured

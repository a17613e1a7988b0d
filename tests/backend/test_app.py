"""
Tests for application startup, shutdown and configuration.

These tests cover:
- Startup connectivity check against the default collection
- Startup failure when the default database is unreachable
- Settings loading and the CLI entry point
"""

import pytest
from fastapi.testclient import TestClient
from unittest.mock import patch

from dbproxy.core.errors import ConfigError, DatabaseConnectionError


class TestLifespan:
    """Tests for the startup check and shutdown."""

    def test_startup_opens_default_collection(self, app, data_access, client_factory):
        with TestClient(app):
            assert data_access.connections.names() == ["BigBoxStore"]
            assert data_access.accessors.keys() == [("BigBoxStore", "GroceryInventory")]

        assert client_factory.clients[0].closed
        assert data_access.connections.names() == []

    def test_startup_fails_when_default_database_unreachable(self, app, data_access, client_factory):
        client_factory.failures = 1

        with pytest.raises(DatabaseConnectionError, match="BigBoxStore"):
            with TestClient(app):
                pass

        assert data_access.connections.names() == []

    def test_startup_fails_on_missing_template(self, settings):
        from dbproxy.main import create_app

        app = create_app(settings=settings.model_copy(update={"mongo_uri": ""}))

        with pytest.raises(ConfigError, match="MONGO_URI"):
            with TestClient(app):
                pass


class TestSettings:
    """Tests for settings loading."""

    def test_settings_read_environment(self, monkeypatch):
        from dbproxy.config import load_settings

        monkeypatch.setenv("MONGO_URI", "mongodb://localhost:27017/?x=1")
        monkeypatch.setenv("PORT", "8080")
        monkeypatch.setenv("COLLECTION_SCHEMAS", '{"Notes": "none"}')

        settings = load_settings(_env_file=None)

        assert settings.mongo_uri == "mongodb://localhost:27017/?x=1"
        assert settings.port == 8080
        assert settings.collection_schemas == {"Notes": "none"}
        assert settings.default_database == "BigBoxStore"

    def test_invalid_settings_raise_config_error(self, monkeypatch):
        from dbproxy.config import load_settings

        monkeypatch.setenv("PORT", "not-a-port")

        with pytest.raises(ConfigError, match="Invalid configuration"):
            load_settings(_env_file=None)

    def test_describe_hides_secrets(self, settings):
        summary = settings.describe()

        assert summary["MONGO_URI"] == "Present"
        assert summary["MONGO_PASS"] == "Present"
        assert "s3cret" not in str(summary)


class TestMain:
    """Tests for the python -m dbproxy entry point."""

    def test_main_exits_nonzero_on_config_error(self, settings):
        from dbproxy import __main__ as cli

        broken = settings.model_copy(update={"mongo_pass": ""})

        with patch.object(cli, "get_settings", return_value=broken), \
             patch.object(cli.uvicorn, "run") as mock_run:
            assert cli.main() == 1

        mock_run.assert_not_called()

    def test_main_runs_uvicorn(self, settings):
        from dbproxy import __main__ as cli

        with patch.object(cli, "get_settings", return_value=settings), \
             patch.object(cli.uvicorn, "run") as mock_run:
            assert cli.main() == 0

        mock_run.assert_called_once_with(
            "dbproxy.main:app",
            host=settings.host,
            port=settings.port,
            log_level="info",
        )

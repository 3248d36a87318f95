"""Tests for Cosmos DB connection and authentication."""

import pytest
from unittest.mock import patch, MagicMock

from notecards.db.cosmos import (
    CosmosDBSettings,
    get_settings,
    get_client,
    get_review_stats_container,
    get_review_sessions_container,
    verify_connection,
    close_client,
    EMULATOR_KEY,
    EMULATOR_ENDPOINT,
)


class TestCosmosDBSettings:
    """Tests for CosmosDBSettings configuration."""

    def test_default_settings(self, monkeypatch):
        """Test default settings values."""
        monkeypatch.delenv("COSMOS_ENDPOINT", raising=False)
        monkeypatch.delenv("COSMOS_DB_NAME", raising=False)
        monkeypatch.delenv("COSMOS_REVIEW_STATS_CONTAINER", raising=False)
        monkeypatch.delenv("COSMOS_REVIEW_SESSIONS_CONTAINER", raising=False)
        monkeypatch.delenv("COSMOS_EMULATOR", raising=False)

        settings = CosmosDBSettings()

        assert settings.endpoint == ""
        assert settings.database_name == "notecards"
        assert settings.review_stats_container == "reviewStats"
        assert settings.review_sessions_container == "reviewSessions"
        assert settings.use_emulator is False

    def test_settings_from_environment(self, monkeypatch):
        """Test settings loaded from environment variables."""
        monkeypatch.setenv("COSMOS_ENDPOINT", "https://test.documents.azure.com:443/")
        monkeypatch.setenv("COSMOS_DB_NAME", "testdb")
        monkeypatch.setenv("COSMOS_REVIEW_STATS_CONTAINER", "test-stats")
        monkeypatch.setenv("COSMOS_EMULATOR", "false")

        settings = CosmosDBSettings()

        assert settings.endpoint == "https://test.documents.azure.com:443/"
        assert settings.database_name == "testdb"
        assert settings.review_stats_container == "test-stats"
        assert settings.use_emulator is False

    def test_emulator_mode_case_insensitive(self, monkeypatch):
        """Test emulator mode is case insensitive."""
        monkeypatch.setenv("COSMOS_EMULATOR", "TRUE")
        assert CosmosDBSettings().use_emulator is True

        monkeypatch.setenv("COSMOS_EMULATOR", "True")
        assert CosmosDBSettings().use_emulator is True

    def test_is_configured(self, monkeypatch):
        """Endpoint or emulator mode makes the store configured."""
        monkeypatch.delenv("COSMOS_ENDPOINT", raising=False)
        monkeypatch.setenv("COSMOS_EMULATOR", "false")
        assert CosmosDBSettings().is_configured() is False

        monkeypatch.setenv("COSMOS_EMULATOR", "true")
        assert CosmosDBSettings().is_configured() is True

        monkeypatch.setenv("COSMOS_EMULATOR", "false")
        monkeypatch.setenv("COSMOS_ENDPOINT", "https://test.documents.azure.com:443/")
        assert CosmosDBSettings().is_configured() is True


class TestCosmosDBClient:
    """Tests for Cosmos DB client initialization."""

    @pytest.fixture(autouse=True)
    def cleanup(self):
        """Cleanup client state after each test."""
        yield
        close_client()
        get_settings.cache_clear()

    @patch("notecards.db.cosmos.CosmosClient")
    def test_get_client_emulator_mode(self, mock_cosmos_client, monkeypatch):
        """Test client uses emulator settings when COSMOS_EMULATOR=true."""
        monkeypatch.setenv("COSMOS_EMULATOR", "true")
        monkeypatch.delenv("COSMOS_ENDPOINT", raising=False)
        get_settings.cache_clear()

        get_client()

        mock_cosmos_client.assert_called_once()
        call_args = mock_cosmos_client.call_args
        assert call_args[0][0] == EMULATOR_ENDPOINT
        assert call_args[1]["credential"] == EMULATOR_KEY
        assert call_args[1]["connection_verify"] is False

    @patch("notecards.db.cosmos.DefaultAzureCredential")
    @patch("notecards.db.cosmos.CosmosClient")
    def test_get_client_azure_mode(self, mock_cosmos_client, mock_credential, monkeypatch):
        """Test client uses DefaultAzureCredential when not in emulator mode."""
        monkeypatch.setenv("COSMOS_EMULATOR", "false")
        monkeypatch.setenv("COSMOS_ENDPOINT", "https://test.documents.azure.com:443/")
        get_settings.cache_clear()

        get_client()

        mock_credential.assert_called_once()
        mock_cosmos_client.assert_called_once()
        assert mock_cosmos_client.call_args[0][0] == "https://test.documents.azure.com:443/"

    @patch("notecards.db.cosmos.CosmosClient")
    def test_client_is_reused(self, mock_cosmos_client, monkeypatch):
        monkeypatch.setenv("COSMOS_EMULATOR", "true")
        get_settings.cache_clear()

        assert get_client() is get_client()
        mock_cosmos_client.assert_called_once()

    @patch("notecards.db.cosmos.CosmosClient")
    def test_review_stats_container(self, mock_cosmos_client, monkeypatch):
        monkeypatch.setenv("COSMOS_EMULATOR", "true")
        monkeypatch.setenv("COSMOS_REVIEW_STATS_CONTAINER", "stats")
        get_settings.cache_clear()

        get_review_stats_container()

        database = mock_cosmos_client.return_value.get_database_client.return_value
        database.get_container_client.assert_called_once_with("stats")

    @patch("notecards.db.cosmos.CosmosClient")
    def test_review_sessions_container(self, mock_cosmos_client, monkeypatch):
        monkeypatch.setenv("COSMOS_EMULATOR", "true")
        get_settings.cache_clear()

        get_review_sessions_container()

        database = mock_cosmos_client.return_value.get_database_client.return_value
        database.get_container_client.assert_called_once_with("reviewSessions")

    def test_get_client_not_configured(self, monkeypatch):
        """Test RuntimeError when Cosmos DB is not configured."""
        monkeypatch.setenv("COSMOS_EMULATOR", "false")
        monkeypatch.delenv("COSMOS_ENDPOINT", raising=False)
        get_settings.cache_clear()

        with pytest.raises(RuntimeError) as exc_info:
            get_client()

        assert "not configured" in str(exc_info.value)


class TestCosmosDBConnection:
    """Tests for Cosmos DB connection verification."""

    @pytest.fixture(autouse=True)
    def cleanup(self):
        """Cleanup client state after each test."""
        yield
        close_client()
        get_settings.cache_clear()

    @patch("notecards.db.cosmos.get_database")
    @patch("notecards.db.cosmos.get_settings")
    def test_verify_connection_success(self, mock_settings, mock_database):
        """Test verify_connection returns True on success."""
        mock_settings.return_value = MagicMock(is_configured=lambda: True)
        mock_db = MagicMock()
        mock_database.return_value = mock_db

        assert verify_connection() is True
        mock_db.read.assert_called_once()

    @patch("notecards.db.cosmos.get_settings")
    def test_verify_connection_not_configured(self, mock_settings):
        """Test verify_connection returns False when not configured."""
        mock_settings.return_value = MagicMock(is_configured=lambda: False)

        assert verify_connection() is False

    @patch("notecards.db.cosmos.get_database")
    @patch("notecards.db.cosmos.get_settings")
    def test_verify_connection_failure(self, mock_settings, mock_database):
        """Test verify_connection returns False on connection error."""
        mock_settings.return_value = MagicMock(is_configured=lambda: True)
        mock_database.side_effect = RuntimeError("Connection failed")

        assert verify_connection() is False

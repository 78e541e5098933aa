"""Tests for configuration management."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from schemaforge.config import Environment, Settings, load_settings


def test_environment_values() -> None:
    """Test environment enum values."""
    assert Environment.DEVELOPMENT == "development"
    assert Environment.PRODUCTION == "production"
    assert Environment.TESTING == "testing"


def test_default_settings() -> None:
    """Test default settings values."""
    with patch.dict(os.environ, {}, clear=True):
        settings = Settings()

        assert settings.environment == Environment.DEVELOPMENT
        assert settings.log_level == "INFO"
        assert settings.echo_sql is False
        assert settings.database_url is None
        assert settings.sqlite_path is None
        assert settings.sqlite_timeout == 60.0


def test_development_mode_properties() -> None:
    """Test development mode properties."""
    with patch.dict(os.environ, {"SCHEMAFORGE_ENV": "development"}, clear=True):
        settings = load_settings()

        assert settings.is_development is True
        assert settings.is_production is False
        assert settings.is_testing is False


def test_testing_mode_echoes_sql() -> None:
    """Testing environment always echoes SQL."""
    with patch.dict(
        os.environ,
        {"SCHEMAFORGE_ENV": "testing", "SCHEMAFORGE_ECHO_SQL": "false"},
        clear=True,
    ):
        settings = load_settings()

        assert settings.is_testing is True
        assert settings.echo_sql is True


def test_custom_settings() -> None:
    """Test custom settings via environment variables."""
    env_vars = {
        "SCHEMAFORGE_ENV": "production",
        "SCHEMAFORGE_LOG_LEVEL": "debug",
        "SCHEMAFORGE_DATABASE_URL": "postgresql://user:pw@localhost/app",
        "SCHEMAFORGE_SQLITE_PATH": "data/app.db",
        "SCHEMAFORGE_SQLITE_TIMEOUT": "5",
    }

    with patch.dict(os.environ, env_vars, clear=True):
        settings = load_settings()

        assert settings.environment == Environment.PRODUCTION
        assert settings.is_production is True
        assert settings.log_level == "DEBUG"
        assert settings.database_url == "postgresql://user:pw@localhost/app"
        assert settings.sqlite_path == Path("data/app.db")
        assert settings.sqlite_timeout == 5.0


def test_blank_database_url_is_none() -> None:
    with patch.dict(os.environ, {"SCHEMAFORGE_DATABASE_URL": ""}, clear=True):
        assert load_settings().database_url is None


@pytest.mark.parametrize(
    "true_value",
    ["true", "True", "TRUE", "1", "yes", "on"],
)
def test_echo_sql_boolean_parsing_true(true_value: str) -> None:
    """Test echo_sql boolean parsing for true values."""
    with patch.dict(os.environ, {"SCHEMAFORGE_ECHO_SQL": true_value}, clear=True):
        settings = load_settings()
        assert settings.echo_sql is True


@pytest.mark.parametrize(
    "false_value",
    ["false", "False", "FALSE", "0", "no", "off", ""],
)
def test_echo_sql_boolean_parsing_false(false_value: str) -> None:
    """Test echo_sql boolean parsing for false values."""
    with patch.dict(os.environ, {"SCHEMAFORGE_ECHO_SQL": false_value}, clear=True):
        settings = load_settings()
        assert settings.echo_sql is False

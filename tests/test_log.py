"""Unit tests for logging functionality."""

import logging
import logging.handlers
from pathlib import Path

import pytest

from schemaforge import (
    get_logger,
    setup_logging,
    setup_production_logging,
    setup_test_logging,
)
from schemaforge.config import Settings
from schemaforge.log import SQL_LOGGER_NAME, get_sql_logger, setup_logging_from_settings


def test_setup_logging_defaults() -> None:
    """Test setup_logging with default parameters."""
    setup_logging()
    root_logger = logging.getLogger()
    assert root_logger.level == logging.INFO


def test_setup_logging_custom_level() -> None:
    """Test setup_logging with custom level."""
    setup_logging(level=logging.DEBUG)
    root_logger = logging.getLogger()
    assert root_logger.level == logging.DEBUG


def test_setup_logging_quiets_sqlalchemy() -> None:
    setup_logging(level=logging.DEBUG)
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING


def test_setup_logging_from_settings() -> None:
    setup_logging_from_settings(Settings(log_level="warning"))
    assert logging.getLogger().level == logging.WARNING


def test_setup_logging_from_settings_unknown_level() -> None:
    setup_logging_from_settings(Settings(log_level="LOUD"))
    assert logging.getLogger().level == logging.INFO


def test_get_logger() -> None:
    """Test get_logger returns a logger instance."""
    logger = get_logger("test_logger")
    assert isinstance(logger, logging.Logger)
    assert logger.name == "test_logger"


def test_sql_logger_name() -> None:
    assert get_sql_logger().name == SQL_LOGGER_NAME == "schemaforge.sql"


def test_test_logging_writes_file() -> None:
    """Test environment logging writes to logs/test/test.log."""
    setup_test_logging()
    get_logger("test_env").info("Test message")

    log_file = Path("logs") / "test" / "test.log"
    assert log_file.exists()
    assert "Test message" in log_file.read_text()


def test_production_logging_rotates(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Production logging writes a rotating file under ./logs."""
    monkeypatch.chdir(tmp_path)
    try:
        setup_production_logging()
        handlers = logging.getLogger().handlers
        assert any(
            isinstance(h, logging.handlers.RotatingFileHandler) for h in handlers
        )
        assert (tmp_path / "logs").is_dir()
    finally:
        monkeypatch.undo()
        setup_test_logging()

"""Global pytest configuration and fixtures."""

from collections.abc import AsyncGenerator
from logging import Logger
from pathlib import Path

import pytest
import pytest_asyncio

from schemaforge import setup_test_logging
from schemaforge.database import SQLiteConnection
from schemaforge.methods import DatabaseMethods
from schemaforge.providers import create_provider
from schemaforge.types import ProviderType


@pytest.fixture(scope="session", autouse=True)
def setup_logging() -> None:
    """Setup test logging for all tests."""
    setup_test_logging()


@pytest.fixture(scope="function")
def logger() -> Logger:
    """Provide a logger instance for tests."""
    from schemaforge import get_logger

    return get_logger("test")


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Create a temporary database path using pytest's tmp_path."""
    return tmp_path / "test.db"


@pytest_asyncio.fixture
async def sqlite_db(temp_db_path: Path) -> AsyncGenerator[SQLiteConnection, None]:
    """Connected SQLite database in a fresh file."""
    db = SQLiteConnection(temp_db_path)
    async with db:
        yield db


@pytest.fixture
def sqlite_methods() -> DatabaseMethods:
    """SQLite schema operations with their own type map and SQL cache."""
    return create_provider(ProviderType.SQLITE).methods

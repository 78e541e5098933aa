"""Tests for the SQLAlchemy connection, run against a SQLite file."""

from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError

from schemaforge.config import Settings
from schemaforge.database import SQLAlchemyConnection, setup_database_url
from schemaforge.types import Environment, ProviderType


@pytest.fixture
def connection(temp_db_path: Path) -> SQLAlchemyConnection:
    return SQLAlchemyConnection(create_engine(f"sqlite:///{temp_db_path}"))


def test_provider_type_from_dialect(connection: SQLAlchemyConnection) -> None:
    assert connection.provider_type == ProviderType.SQLITE


@pytest.mark.asyncio
async def test_requires_connect(connection: SQLAlchemyConnection) -> None:
    with pytest.raises(RuntimeError, match="Database not connected"):
        await connection.fetch_all("SELECT 1")


@pytest.mark.asyncio
async def test_execute_and_fetch(connection: SQLAlchemyConnection) -> None:
    async with connection:
        await connection.execute("CREATE TABLE t (id integer, name text)")
        await connection.execute(
            "INSERT INTO t (id, name) VALUES (:id, :name)", {"id": 1, "name": "a"}
        )

        assert await connection.fetch_all("SELECT id, name FROM t") == [
            {"id": 1, "name": "a"}
        ]
        assert await connection.fetch_one("SELECT name FROM t WHERE id = 2") is None
        assert await connection.fetch_scalar("SELECT count(*) FROM t") == 1

    assert not connection.is_connected


@pytest.mark.asyncio
async def test_transaction_rollback(connection: SQLAlchemyConnection) -> None:
    async with connection:
        await connection.execute("CREATE TABLE t (id integer)")

        with pytest.raises(ValueError):
            async with await connection.begin_transaction() as tx:
                await connection.execute("INSERT INTO t VALUES (1)", tx=tx)
                raise ValueError("boom")

        async with await connection.begin_transaction() as tx:
            await connection.execute("INSERT INTO t VALUES (2)", tx=tx)

        assert await connection.fetch_all("SELECT id FROM t") == [{"id": 2}]


@pytest.mark.asyncio
async def test_errors_propagate(connection: SQLAlchemyConnection) -> None:
    async with connection:
        with pytest.raises(OperationalError):
            await connection.execute("SELECT * FROM missing_table")


class TestDatabaseUrl:
    def test_explicit_url_wins(self, tmp_path: Path) -> None:
        url = setup_database_url(
            Environment.PRODUCTION, "postgresql://h/db", tmp_path / "x.db"
        )
        assert url == "postgresql://h/db"

    def test_sqlite_path(self, tmp_path: Path) -> None:
        path = tmp_path / "sub" / "x.db"
        assert setup_database_url(Environment.DEVELOPMENT, None, path) == (
            f"sqlite:///{path}"
        )
        assert path.parent.exists()

    def test_testing_is_in_memory(self) -> None:
        assert setup_database_url(Environment.TESTING) == "sqlite:///:memory:"

    def test_from_settings(self, temp_db_path: Path) -> None:
        connection = SQLAlchemyConnection.from_settings(
            Settings(sqlite_path=temp_db_path)
        )
        assert connection.provider_type == ProviderType.SQLITE

"""Tests for the statement runner."""

import logging
import sqlite3

import pytest

from schemaforge.database import SQLiteConnection, SqlRunner


@pytest.mark.asyncio
async def test_remembers_last_statement(sqlite_db: SQLiteConnection) -> None:
    runner = SqlRunner()
    assert runner.get_last_sql(sqlite_db) is None

    await runner.execute(sqlite_db, "CREATE TABLE t (id integer)")
    await runner.fetch_all(sqlite_db, "SELECT id FROM t WHERE id = :id", {"id": 1})

    assert runner.get_last_sql(sqlite_db) == "SELECT id FROM t WHERE id = :id"
    assert runner.get_last_sql_with_params(sqlite_db) == (
        "SELECT id FROM t WHERE id = :id",
        {"id": 1},
    )


@pytest.mark.asyncio
async def test_execute_all_stops_at_failure(sqlite_db: SQLiteConnection) -> None:
    runner = SqlRunner()

    with pytest.raises(sqlite3.OperationalError):
        await runner.execute_all(
            sqlite_db,
            [
                "CREATE TABLE a (id integer)",
                "CREATE TABLE a (id integer)",
                "CREATE TABLE b (id integer)",
            ],
        )

    assert runner.get_last_sql(sqlite_db) == "CREATE TABLE a (id integer)"
    assert await runner.fetch_scalar(
        sqlite_db, "SELECT count(*) FROM sqlite_master WHERE name = 'b'"
    ) == 0


@pytest.mark.asyncio
async def test_failure_is_logged(
    sqlite_db: SQLiteConnection, caplog: pytest.LogCaptureFixture
) -> None:
    runner = SqlRunner()

    with caplog.at_level(logging.ERROR, logger="schemaforge.sql"):
        with pytest.raises(sqlite3.OperationalError):
            await runner.execute(sqlite_db, "DROP TABLE missing")

    assert "Failed to execute SQL: DROP TABLE missing" in caplog.text

"""Shared table definitions for DDL rendering tests."""

import pytest

from schemaforge.ddl import (
    MySqlDdlBuilder,
    PostgreSqlDdlBuilder,
    SqlServerDdlBuilder,
    SqliteDdlBuilder,
)
from schemaforge.models import Column, ForeignKeyAction, Table
from schemaforge.typemap import (
    MySqlTypeMap,
    PostgreSqlTypeMap,
    SqliteTypeMap,
    SqlServerTypeMap,
)


@pytest.fixture
def customers() -> Table:
    """Table exercising every column-level constraint flag."""
    return Table(
        None,
        "customers",
        [
            Column(
                None,
                "customers",
                "id",
                int,
                is_primary_key=True,
                is_auto_increment=True,
            ),
            Column(None, "customers", "email", str, length=200, is_unique=True),
            Column(
                None,
                "customers",
                "status",
                str,
                length=20,
                default_expression="'active'",
                check_expression="status <> ''",
            ),
            Column(None, "customers", "notes", str | None, length=-1),
        ],
    )


@pytest.fixture
def orders() -> Table:
    """Table with an indexed foreign key column."""
    return Table(
        None,
        "orders",
        [
            Column(None, "orders", "id", int, is_primary_key=True),
            Column(
                None,
                "orders",
                "customer_id",
                int,
                is_foreign_key=True,
                referenced_table_name="customers",
                referenced_column_name="id",
                on_delete=ForeignKeyAction.CASCADE,
                is_indexed=True,
            ),
        ],
    )


@pytest.fixture
def sqlserver_builder() -> SqlServerDdlBuilder:
    return SqlServerDdlBuilder(SqlServerTypeMap())


@pytest.fixture
def postgresql_builder() -> PostgreSqlDdlBuilder:
    return PostgreSqlDdlBuilder(PostgreSqlTypeMap())


@pytest.fixture
def mysql_builder() -> MySqlDdlBuilder:
    return MySqlDdlBuilder(MySqlTypeMap())


@pytest.fixture
def sqlite_builder() -> SqliteDdlBuilder:
    return SqliteDdlBuilder(SqliteTypeMap())

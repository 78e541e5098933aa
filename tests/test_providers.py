"""Tests for the shared per-provider instances."""

from collections.abc import Iterator
from pathlib import Path

import pytest

from schemaforge.database import SQLiteConnection
from schemaforge.ddl import PostgreSqlDdlBuilder, SqliteDdlBuilder
from schemaforge.introspection import MySqlIntrospector
from schemaforge.providers import (
    create_provider,
    get_database_methods,
    get_database_methods_for,
    get_provider,
    get_type_map,
    reset_providers,
)
from schemaforge.typemap import SqlServerTypeMap
from schemaforge.types import ProviderType


@pytest.fixture(autouse=True)
def fresh_providers() -> Iterator[None]:
    reset_providers()
    yield
    reset_providers()


def test_provider_is_cached() -> None:
    first = get_provider(ProviderType.POSTGRESQL)

    assert get_provider("postgresql") is first
    assert get_database_methods(ProviderType.POSTGRESQL) is first.methods
    assert isinstance(first.builder, PostgreSqlDdlBuilder)


def test_providers_are_independent() -> None:
    assert get_provider(ProviderType.MYSQL) is not get_provider(ProviderType.SQLITE)
    assert isinstance(get_provider(ProviderType.MYSQL).introspector, MySqlIntrospector)
    assert isinstance(get_type_map(ProviderType.SQLSERVER), SqlServerTypeMap)


def test_reset_creates_new_instances() -> None:
    before = get_provider(ProviderType.SQLITE)
    reset_providers()

    assert get_provider(ProviderType.SQLITE) is not before


def test_create_provider_is_not_cached() -> None:
    provider = create_provider(ProviderType.SQLITE)

    assert provider is not get_provider(ProviderType.SQLITE)
    assert provider.methods.provider_type == ProviderType.SQLITE
    assert provider.methods.builder is provider.builder
    assert provider.builder.registry is provider.registry


def test_unknown_provider() -> None:
    with pytest.raises(ValueError):
        get_provider("oracle")


def test_methods_for_connection(temp_db_path: Path) -> None:
    db = SQLiteConnection(temp_db_path)

    methods = get_database_methods_for(db)

    assert methods is get_database_methods(ProviderType.SQLITE)
    assert isinstance(methods.builder, SqliteDdlBuilder)


@pytest.mark.parametrize(
    "dialect,expected",
    [
        ("mssql", ProviderType.SQLSERVER),
        ("postgresql", ProviderType.POSTGRESQL),
        ("mariadb", ProviderType.MYSQL),
        ("MySQL", ProviderType.MYSQL),
        ("sqlite", ProviderType.SQLITE),
    ],
)
def test_provider_from_dialect(dialect: str, expected: ProviderType) -> None:
    assert ProviderType.from_dialect_name(dialect) == expected


def test_unsupported_dialect() -> None:
    with pytest.raises(ValueError, match="Unsupported database dialect"):
        ProviderType.from_dialect_name("oracle")

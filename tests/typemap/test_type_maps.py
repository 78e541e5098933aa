"""Tests for the provider type maps."""

import datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

import pytest

from schemaforge.exceptions import NotSupportedError
from schemaforge.typemap import (
    MySqlTypeMap,
    PostgreSqlTypeMap,
    SqliteTypeMap,
    SqlServerTypeMap,
)
from schemaforge.typemap.descriptors import (
    MAX_LENGTH,
    SqlTypeDescriptor,
    TypeDescriptor,
    create_simple_type,
)
from schemaforge.typemap.registry import TypeMapRegistry


class Color(Enum):
    RED = "red"
    GREEN = "green"


class Address:
    street: str


def sql_type_of(registry: TypeMapRegistry, host_type: Any, **kwargs: Any) -> str:
    return registry.resolve_sql_type(TypeDescriptor(host_type, **kwargs)).sql_type


@pytest.mark.parametrize(
    "host_type,sqlserver,postgresql,mysql,sqlite",
    [
        (bool, "bit", "boolean", "tinyint(1)", "boolean"),
        (int, "int", "integer", "int", "integer"),
        (float, "float", "double precision", "double", "real"),
        (Decimal, "decimal(16,4)", "numeric(16,4)", "decimal(16,4)", "numeric(16,4)"),
        (str, "varchar(255)", "varchar(255)", "varchar(255)", "varchar(255)"),
        (UUID, "uniqueidentifier", "uuid", "char(36)", "varchar(36)"),
        (dict, "nvarchar(max)", "jsonb", "json", "text"),
        (Color, "varchar(128)", "varchar(128)", "varchar(128)", "varchar(128)"),
        (tuple[int, ...], "nvarchar(max)", "integer[]", "json", "text"),
        (object, "sql_variant", "jsonb", "json", "clob"),
        (datetime.timedelta, "time", "interval", "time", "time"),
        (datetime.datetime, "datetime", "timestamp", "datetime", "datetime"),
    ],
)
def test_host_to_sql_per_provider(
    host_type: Any, sqlserver: str, postgresql: str, mysql: str, sqlite: str
) -> None:
    """Each provider maps the common host types to its native types."""
    assert sql_type_of(SqlServerTypeMap(), host_type) == sqlserver
    assert sql_type_of(PostgreSqlTypeMap(), host_type) == postgresql
    assert sql_type_of(MySqlTypeMap(), host_type) == mysql
    assert sql_type_of(SqliteTypeMap(), host_type) == sqlite


class TestStrings:
    """Test string length, unicode and max handling."""

    def test_sqlserver_unicode(self) -> None:
        assert sql_type_of(SqlServerTypeMap(), str, unicode=True) == "nvarchar(255)"

    def test_sqlserver_limits(self) -> None:
        registry = SqlServerTypeMap()
        assert sql_type_of(registry, str, length=5000) == "varchar(5000)"
        assert sql_type_of(registry, str, length=9000) == "varchar(max)"
        assert sql_type_of(registry, str, length=5000, unicode=True) == "nvarchar(max)"

    @pytest.mark.parametrize(
        "registry", [PostgreSqlTypeMap(), MySqlTypeMap(), SqliteTypeMap()]
    )
    def test_max_length_is_text(self, registry: TypeMapRegistry) -> None:
        assert sql_type_of(registry, str, length=MAX_LENGTH) == "text"

    def test_fixed_length(self) -> None:
        assert sql_type_of(MySqlTypeMap(), str, length=2, fixed_length=True) == "char(2)"

    def test_decimal_precision(self) -> None:
        assert (
            sql_type_of(PostgreSqlTypeMap(), Decimal, precision=10, scale=2)
            == "numeric(10,2)"
        )


class TestHostLookup:
    def test_poco_class(self) -> None:
        assert sql_type_of(SqlServerTypeMap(), Address) == "nvarchar(max)"
        assert sql_type_of(PostgreSqlTypeMap(), Address) == "jsonb"

    def test_generic_dict(self) -> None:
        assert sql_type_of(PostgreSqlTypeMap(), dict[str, int]) == "jsonb"

    def test_any_maps_like_object(self) -> None:
        assert sql_type_of(SqlServerTypeMap(), Any) == "sql_variant"

    def test_text_array(self) -> None:
        assert sql_type_of(PostgreSqlTypeMap(), tuple[str, ...]) == "varchar(255)[]"

    def test_union_is_not_supported(self) -> None:
        with pytest.raises(NotSupportedError):
            sql_type_of(PostgreSqlTypeMap(), int | str)


class TestSqlToHost:
    """Test reverse lookups from native SQL types."""

    @pytest.mark.parametrize(
        "registry,sql_type,expected",
        [
            (SqlServerTypeMap(), "bit", bool),
            (SqlServerTypeMap(), "nvarchar(50)", str),
            (SqlServerTypeMap(), "uniqueidentifier", UUID),
            (SqlServerTypeMap(), "datetime2", datetime.datetime),
            (PostgreSqlTypeMap(), "character varying(20)", str),
            (PostgreSqlTypeMap(), "interval", datetime.timedelta),
            (PostgreSqlTypeMap(), "jsonb", dict),
            (MySqlTypeMap(), "tinyint(1)", bool),
            (MySqlTypeMap(), "tinyint(4)", int),
            (MySqlTypeMap(), "int unsigned", int),
            (MySqlTypeMap(), "char(36)", UUID),
            (MySqlTypeMap(), "char(10)", str),
            (SqliteTypeMap(), "varchar(36)", UUID),
            (SqliteTypeMap(), "integer", int),
            (SqliteTypeMap(), "clob", object),
        ],
    )
    def test_resolve_host_type(
        self, registry: TypeMapRegistry, sql_type: str, expected: Any
    ) -> None:
        assert registry.resolve_host_type(sql_type).base_type is expected

    def test_postgresql_array(self) -> None:
        result = PostgreSqlTypeMap().resolve_host_type("integer[]")
        assert result.base_type == tuple[int, ...]

    def test_decimal_keeps_precision(self) -> None:
        result = SqlServerTypeMap().resolve_host_type("decimal(10,2)")
        assert result.base_type is Decimal
        assert (result.precision, result.scale) == (10, 2)

    def test_string_keeps_length(self) -> None:
        result = SqlServerTypeMap().resolve_host_type(SqlTypeDescriptor.parse("nchar(5)"))
        assert result.length == 5
        assert result.unicode is True
        assert result.fixed_length is True

    def test_serial_is_auto_increment(self) -> None:
        assert PostgreSqlTypeMap().resolve_host_type("bigserial").auto_increment is True

    def test_unknown_type_raises(self) -> None:
        with pytest.raises(NotSupportedError, match="no_such_type"):
            SqliteTypeMap().resolve_host_type("no_such_type")


class TestRoundTrip:
    @pytest.mark.parametrize(
        "host_type", [bool, int, float, Decimal, str, UUID, datetime.date]
    )
    def test_sqlserver_round_trip(self, host_type: Any) -> None:
        registry = SqlServerTypeMap()
        sql = registry.resolve_sql_type(TypeDescriptor(host_type))
        assert registry.resolve_host_type(sql).base_type is host_type

    def test_lossy_mappings(self) -> None:
        """Documents and durations come back as their storage type."""
        registry = SqliteTypeMap()
        assert registry.resolve_host_type(sql_type_of(registry, dict)).base_type is str
        assert (
            registry.resolve_host_type(
                sql_type_of(registry, datetime.timedelta)
            ).base_type
            is datetime.time
        )


class TestCustomConverters:
    def test_host_converter_takes_precedence(self) -> None:
        registry = PostgreSqlTypeMap()
        registry.register_host_converter([str], lambda d: create_simple_type("citext"))
        assert sql_type_of(registry, str) == "citext"
        assert sql_type_of(PostgreSqlTypeMap(), str) == "varchar(255)"

    def test_converter_returning_none_falls_through(self) -> None:
        registry = SqlServerTypeMap()
        registry.register_host_converter([int], lambda d: None)
        assert sql_type_of(registry, int) == "int"

    def test_sql_converter_for_new_name(self) -> None:
        registry = MySqlTypeMap()
        registry.register_sql_converter(["VECTOR"], lambda s: TypeDescriptor(bytes))
        assert registry.resolve_host_type("vector(3)").base_type is bytes
        assert "vector" in registry.sql_base_type_names()

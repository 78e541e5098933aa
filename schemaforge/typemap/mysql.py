"""MySQL / MariaDB type map."""

import datetime
from decimal import Decimal
from uuid import UUID

from schemaforge.types import ProviderType

from .descriptors import (
    ArrayPlaceholder,
    EnumPlaceholder,
    PocoPlaceholder,
    SqlTypeDescriptor,
    TypeDescriptor,
    create_binary_type,
    create_decimal_type,
    create_enum_string_type,
    create_guid_string_type,
    create_simple_type,
    create_string_type,
    host_binary_type,
    host_decimal_type,
    host_guid_type,
    host_integer_type,
    host_string_type,
)
from .registry import BINARY_HOST_TYPES, JSON_HOST_TYPES, ConverterTable, TypeMapRegistry

# Modifiers that do not change which host type a column maps to
IGNORED_MODIFIERS = (" unsigned", " signed", " zerofill")

GEOMETRY_TYPES = [
    "geometry",
    "point",
    "linestring",
    "polygon",
    "multipoint",
    "multilinestring",
    "multipolygon",
    "geometrycollection",
]


def _tinyint_as_bool(sql: SqlTypeDescriptor) -> TypeDescriptor | None:
    if sql.precision == 1:
        return TypeDescriptor(bool)
    return None


def _bit_as_bool(sql: SqlTypeDescriptor) -> TypeDescriptor | None:
    if sql.precision in (None, 1):
        return TypeDescriptor(bool)
    return None


class MySqlTypeMap(TypeMapRegistry):
    """MySQL mappings. Booleans are ``tinyint(1)`` and UUIDs ``char(36)``."""

    provider_type = ProviderType.MYSQL

    def normalize_base_type_name(self, base_type_name: str) -> str:
        name = base_type_name.strip().lower()
        for modifier in IGNORED_MODIFIERS:
            name = name.replace(modifier, "")
        return name

    def register_host_converters(self, table: ConverterTable) -> None:
        table.add([bool], lambda d: create_simple_type("tinyint(1)"))
        table.add([int], lambda d: create_simple_type("int"))
        table.add([float], lambda d: create_simple_type("double"))
        table.add([Decimal], lambda d: create_decimal_type(d, "decimal"))
        table.add([str], lambda d: create_string_type(d, max_type="text"))
        table.add(BINARY_HOST_TYPES, lambda d: create_binary_type(d, max_type="blob"))
        table.add([datetime.datetime], lambda d: create_simple_type("datetime"))
        table.add([datetime.date], lambda d: create_simple_type("date"))
        table.add([datetime.time], lambda d: create_simple_type("time"))
        table.add([datetime.timedelta], lambda d: create_simple_type("time"))
        table.add([UUID], lambda d: create_guid_string_type("char"))
        table.add(JSON_HOST_TYPES, lambda d: create_simple_type("json"))
        table.add([EnumPlaceholder], lambda d: create_enum_string_type())
        table.add([ArrayPlaceholder], lambda d: create_simple_type("json"))
        table.add([PocoPlaceholder], lambda d: create_simple_type("json"))
        table.add([object], lambda d: create_simple_type("json"))

    def register_sql_converters(self, table: ConverterTable) -> None:
        table.add(["tinyint"], _tinyint_as_bool)
        table.add(["bool", "boolean"], lambda s: TypeDescriptor(bool))
        table.add(["bit"], _bit_as_bool)
        table.add(
            ["tinyint", "smallint", "mediumint", "int", "integer", "bigint", "year", "bit"],
            host_integer_type,
        )
        table.add(["decimal", "numeric", "dec", "fixed"], host_decimal_type)
        table.add(
            ["float", "double", "double precision", "real"],
            lambda s: TypeDescriptor(float),
        )
        table.add(["char", "varchar"], host_guid_type)
        table.add(
            [
                "char",
                "varchar",
                "tinytext",
                "text",
                "mediumtext",
                "longtext",
                "enum",
                "set",
            ],
            host_string_type,
        )
        table.add(
            ["binary", "varbinary", "tinyblob", "blob", "mediumblob", "longblob"],
            host_binary_type,
        )
        table.add(["date"], lambda s: TypeDescriptor(datetime.date))
        table.add(["datetime", "timestamp"], lambda s: TypeDescriptor(datetime.datetime))
        table.add(["time"], lambda s: TypeDescriptor(datetime.time))
        table.add(["json"], lambda s: TypeDescriptor(dict))
        table.add(GEOMETRY_TYPES, lambda s: TypeDescriptor(object))

"""SQLite type map.

SQLite only knows storage affinities, so any declared type name is accepted
by the engine. The names below are the ones this map emits or recognises.
"""

import datetime
from decimal import Decimal
from uuid import UUID

from schemaforge.types import ProviderType

from .descriptors import (
    ArrayPlaceholder,
    EnumPlaceholder,
    PocoPlaceholder,
    TypeDescriptor,
    create_decimal_type,
    create_enum_string_type,
    create_guid_string_type,
    create_simple_type,
    create_string_type,
    host_decimal_type,
    host_guid_type,
    host_integer_type,
    host_string_type,
)
from .registry import BINARY_HOST_TYPES, JSON_HOST_TYPES, ConverterTable, TypeMapRegistry

INTEGER_TYPES = [
    "integer",
    "int",
    "tinyint",
    "smallint",
    "mediumint",
    "bigint",
    "unsigned big int",
    "int2",
    "int8",
]
TEXT_TYPES = [
    "text",
    "character",
    "char",
    "varchar",
    "varying character",
    "nchar",
    "native character",
    "nvarchar",
]


class SqliteTypeMap(TypeMapRegistry):
    """SQLite mappings."""

    provider_type = ProviderType.SQLITE

    def register_host_converters(self, table: ConverterTable) -> None:
        table.add([bool], lambda d: create_simple_type("boolean"))
        # AUTOINCREMENT is only accepted on INTEGER PRIMARY KEY
        table.add([int], lambda d: create_simple_type("integer"))
        table.add([float], lambda d: create_simple_type("real"))
        table.add([Decimal], lambda d: create_decimal_type(d, "numeric"))
        table.add(
            [str], lambda d: create_string_type(d, unicode_prefix="n", max_type="text")
        )
        table.add(BINARY_HOST_TYPES, lambda d: create_simple_type("blob"))
        table.add([datetime.datetime], lambda d: create_simple_type("datetime"))
        table.add([datetime.date], lambda d: create_simple_type("date"))
        table.add([datetime.time], lambda d: create_simple_type("time"))
        table.add([datetime.timedelta], lambda d: create_simple_type("time"))
        table.add([UUID], lambda d: create_guid_string_type("varchar"))
        table.add(JSON_HOST_TYPES, lambda d: create_simple_type("text"))
        table.add([EnumPlaceholder], lambda d: create_enum_string_type())
        table.add([ArrayPlaceholder], lambda d: create_simple_type("text"))
        table.add([PocoPlaceholder], lambda d: create_simple_type("text"))
        table.add([object], lambda d: create_simple_type("clob"))

    def register_sql_converters(self, table: ConverterTable) -> None:
        table.add(INTEGER_TYPES, host_integer_type)
        table.add(["boolean", "bool", "bit"], lambda s: TypeDescriptor(bool))
        table.add(
            ["real", "double", "double precision", "float"],
            lambda s: TypeDescriptor(float),
        )
        table.add(["numeric", "decimal"], host_decimal_type)
        table.add(["char", "varchar", "nchar", "nvarchar"], host_guid_type)
        table.add(TEXT_TYPES, host_string_type)
        table.add(["blob"], lambda s: TypeDescriptor(bytes))
        table.add(["date"], lambda s: TypeDescriptor(datetime.date))
        table.add(["datetime", "timestamp"], lambda s: TypeDescriptor(datetime.datetime))
        table.add(["time"], lambda s: TypeDescriptor(datetime.time))
        table.add(["json"], lambda s: TypeDescriptor(dict))
        table.add(["clob"], lambda s: TypeDescriptor(object))

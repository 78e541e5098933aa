"""SQL Server type map."""

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
    create_simple_type,
    create_string_type,
    host_binary_type,
    host_decimal_type,
    host_integer_type,
    host_string_type,
)
from .registry import BINARY_HOST_TYPES, JSON_HOST_TYPES, ConverterTable, TypeMapRegistry

# Longest bounded lengths before SQL Server requires (max)
MAX_UNICODE_LENGTH = 4000
MAX_ANSI_LENGTH = 8000


def _string_type(descriptor: TypeDescriptor) -> SqlTypeDescriptor:
    limit = MAX_UNICODE_LENGTH if descriptor.unicode else MAX_ANSI_LENGTH
    return create_string_type(descriptor, unicode_prefix="n", max_length=limit)


def _document_type(descriptor: TypeDescriptor) -> SqlTypeDescriptor:
    return create_simple_type("nvarchar(max)")


class SqlServerTypeMap(TypeMapRegistry):
    """SQL Server mappings."""

    provider_type = ProviderType.SQLSERVER

    def register_host_converters(self, table: ConverterTable) -> None:
        table.add([bool], lambda d: create_simple_type("bit"))
        table.add([int], lambda d: create_simple_type("int"))
        table.add([float], lambda d: create_simple_type("float"))
        table.add([Decimal], lambda d: create_decimal_type(d, "decimal"))
        table.add([str], _string_type)
        table.add(
            BINARY_HOST_TYPES,
            lambda d: create_binary_type(d, max_length=MAX_ANSI_LENGTH),
        )
        table.add([datetime.datetime], lambda d: create_simple_type("datetime"))
        table.add([datetime.date], lambda d: create_simple_type("date"))
        table.add([datetime.time], lambda d: create_simple_type("time"))
        # No interval type; durations are stored as time of day
        table.add([datetime.timedelta], lambda d: create_simple_type("time"))
        table.add([UUID], lambda d: create_simple_type("uniqueidentifier"))
        table.add(JSON_HOST_TYPES, _document_type)
        table.add([EnumPlaceholder], lambda d: create_enum_string_type())
        table.add([ArrayPlaceholder], _document_type)
        table.add([PocoPlaceholder], _document_type)
        table.add([object], lambda d: create_simple_type("sql_variant"))

    def register_sql_converters(self, table: ConverterTable) -> None:
        table.add(["bit"], lambda s: TypeDescriptor(bool))
        table.add(["tinyint", "smallint", "int", "bigint"], host_integer_type)
        table.add(["decimal", "numeric", "money", "smallmoney"], host_decimal_type)
        table.add(["float", "real"], lambda s: TypeDescriptor(float))
        table.add(
            ["char", "varchar", "nchar", "nvarchar", "text", "ntext", "xml"],
            host_string_type,
        )
        table.add(
            ["binary", "varbinary", "image", "rowversion", "timestamp"],
            host_binary_type,
        )
        table.add(["date"], lambda s: TypeDescriptor(datetime.date))
        table.add(["time"], lambda s: TypeDescriptor(datetime.time))
        table.add(
            ["datetime", "datetime2", "smalldatetime", "datetimeoffset"],
            lambda s: TypeDescriptor(datetime.datetime),
        )
        table.add(["uniqueidentifier"], lambda s: TypeDescriptor(UUID))
        table.add(
            ["sql_variant", "geometry", "geography", "hierarchyid"],
            lambda s: TypeDescriptor(object),
        )

"""PostgreSQL type map."""

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
    create_decimal_type,
    create_enum_string_type,
    create_simple_type,
    create_string_type,
    host_decimal_type,
    host_integer_type,
    host_string_type,
)
from .registry import (
    BINARY_HOST_TYPES,
    JSON_HOST_TYPES,
    ConverterTable,
    SqlConverter,
    TypeMapRegistry,
    array_element_type,
)

INTEGER_TYPES = [
    "smallint",
    "int2",
    "integer",
    "int",
    "int4",
    "bigint",
    "int8",
    "smallserial",
    "serial2",
    "serial",
    "serial4",
    "bigserial",
    "serial8",
]
FLOAT_TYPES = ["real", "float4", "double precision", "float8", "float"]
DECIMAL_TYPES = ["numeric", "decimal", "money"]
STRING_TYPES = [
    "character varying",
    "varchar",
    "character",
    "char",
    "bpchar",
    "text",
    "citext",
    "name",
]
DATETIME_TYPES = [
    "timestamp",
    "timestamp without time zone",
    "timestamp with time zone",
    "timestamptz",
]
TIME_TYPES = ["time", "time without time zone", "time with time zone", "timetz"]
OBJECT_TYPES = [
    "inet",
    "cidr",
    "macaddr",
    "point",
    "line",
    "lseg",
    "box",
    "path",
    "polygon",
    "circle",
    "geometry",
    "geography",
    "tsvector",
    "tsquery",
]
# Types without an array counterpart in the map
NON_ARRAY_TYPES = {"bytea", "json", "jsonb", "xml"}


class PostgreSqlTypeMap(TypeMapRegistry):
    """PostgreSQL mappings, including ``T[]`` arrays."""

    provider_type = ProviderType.POSTGRESQL

    def register_host_converters(self, table: ConverterTable) -> None:
        table.add([bool], lambda d: create_simple_type("boolean"))
        table.add([int], lambda d: create_simple_type("integer"))
        table.add([float], lambda d: create_simple_type("double precision"))
        table.add([Decimal], lambda d: create_decimal_type(d, "numeric"))
        table.add([str], lambda d: create_string_type(d, max_type="text"))
        table.add(BINARY_HOST_TYPES, lambda d: create_simple_type("bytea"))
        table.add([datetime.datetime], lambda d: create_simple_type("timestamp"))
        table.add([datetime.date], lambda d: create_simple_type("date"))
        table.add([datetime.time], lambda d: create_simple_type("time"))
        table.add([datetime.timedelta], lambda d: create_simple_type("interval"))
        table.add([UUID], lambda d: create_simple_type("uuid"))
        table.add(JSON_HOST_TYPES, lambda d: create_simple_type("jsonb"))
        table.add([EnumPlaceholder], lambda d: create_enum_string_type())
        table.add([ArrayPlaceholder], self._array_sql_type)
        table.add([PocoPlaceholder], lambda d: create_simple_type("jsonb"))
        table.add([object], lambda d: create_simple_type("jsonb"))

    def _array_sql_type(self, descriptor: TypeDescriptor) -> SqlTypeDescriptor | None:
        element = array_element_type(descriptor.base_type)
        if element is None or element is object:
            return create_simple_type("jsonb")
        element_sql = self.resolve_sql_type(TypeDescriptor(element))
        if element_sql.base_type_name in NON_ARRAY_TYPES:
            return create_simple_type("jsonb")
        return create_simple_type(f"{element_sql.sql_type}[]")

    def register_sql_converters(self, table: ConverterTable) -> None:
        scalar_converters = [
            (["boolean", "bool"], lambda s: TypeDescriptor(bool)),
            (INTEGER_TYPES, host_integer_type),
            (FLOAT_TYPES, lambda s: TypeDescriptor(float)),
            (DECIMAL_TYPES, host_decimal_type),
            (STRING_TYPES + ["xml"], host_string_type),
            (["bytea"], lambda s: TypeDescriptor(bytes)),
            (DATETIME_TYPES, lambda s: TypeDescriptor(datetime.datetime)),
            (["date"], lambda s: TypeDescriptor(datetime.date)),
            (TIME_TYPES, lambda s: TypeDescriptor(datetime.time)),
            (["interval"], lambda s: TypeDescriptor(datetime.timedelta)),
            (["uuid"], lambda s: TypeDescriptor(UUID)),
            (["json", "jsonb"], lambda s: TypeDescriptor(dict)),
            (OBJECT_TYPES, lambda s: TypeDescriptor(object)),
        ]
        for names, converter in scalar_converters:
            table.add(names, converter)

        for names, converter in scalar_converters:
            array_names = [f"{n}[]" for n in names if n not in NON_ARRAY_TYPES]
            table.add(array_names, _array_host_converter(converter))


def _array_host_converter(element_converter: SqlConverter) -> SqlConverter:
    def convert(sql: SqlTypeDescriptor) -> TypeDescriptor | None:
        element_sql = SqlTypeDescriptor.parse(sql.sql_type.removesuffix("[]"))
        element = element_converter(element_sql)
        if element is None:
            return None
        return TypeDescriptor(tuple[element.base_type, ...])

    return convert

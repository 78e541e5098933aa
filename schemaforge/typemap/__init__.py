"""Type descriptors and per-provider converter registries."""

from .descriptors import (
    MAX_LENGTH,
    ArrayPlaceholder,
    EnumPlaceholder,
    PocoPlaceholder,
    SqlTypeDescriptor,
    TypeDescriptor,
)
from .mysql import MySqlTypeMap
from .postgresql import PostgreSqlTypeMap
from .registry import ConverterTable, TypeMapRegistry
from .sqlite import SqliteTypeMap
from .sqlserver import SqlServerTypeMap

__all__ = [
    "MAX_LENGTH",
    "ArrayPlaceholder",
    "ConverterTable",
    "EnumPlaceholder",
    "MySqlTypeMap",
    "PocoPlaceholder",
    "PostgreSqlTypeMap",
    "SqlServerTypeMap",
    "SqlTypeDescriptor",
    "SqliteTypeMap",
    "TypeDescriptor",
    "TypeMapRegistry",
]

"""Catalog introspection per provider."""

from .base import Introspector, apply_constraint_flags, normalize_view_definition
from .mysql import MySqlIntrospector
from .postgresql import PostgreSqlIntrospector
from .sqlite import SqliteIntrospector
from .sqlite_parser import ParsedTable, parse_create_table
from .sqlserver import SqlServerIntrospector

__all__ = [
    "Introspector",
    "MySqlIntrospector",
    "ParsedTable",
    "PostgreSqlIntrospector",
    "SqlServerIntrospector",
    "SqliteIntrospector",
    "apply_constraint_flags",
    "normalize_view_definition",
    "parse_create_table",
]

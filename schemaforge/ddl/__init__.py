"""DDL rendering: naming helpers, the shared builder and provider builders."""

from .builder import ColumnDefinition, CreateTablePlan, DdlBuilder, TableConstraints
from .mysql import MySqlDdlBuilder
from .postgresql import PostgreSqlDdlBuilder
from .sqlite import RebuildPlan, SqliteDdlBuilder
from .sqlserver import SqlServerDdlBuilder

__all__ = [
    "ColumnDefinition",
    "CreateTablePlan",
    "DdlBuilder",
    "MySqlDdlBuilder",
    "PostgreSqlDdlBuilder",
    "RebuildPlan",
    "SqlServerDdlBuilder",
    "SqliteDdlBuilder",
    "TableConstraints",
]

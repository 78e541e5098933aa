"""Cross-database schema management for the schemaforge system."""

from .config import Settings, load_settings, settings
from .database import (
    DatabaseConnection,
    DatabaseTransaction,
    SQLAlchemyConnection,
    SQLiteConnection,
)
from .declarative import (
    Check,
    ColumnInfo,
    Default,
    Ignore,
    Indexed,
    PrimaryKey,
    References,
    Unique,
    table,
    table_from_class,
    view,
    view_from_class,
)
from .exceptions import (
    InvalidArgumentError,
    NotSupportedError,
    SchemaForgeError,
    SqlParseError,
    TableRebuildError,
)
from .log import (
    get_logger,
    setup_logging,
    setup_production_logging,
    setup_test_logging,
)
from .methods import DatabaseMethods
from .models import (
    CheckConstraint,
    Column,
    ColumnOrder,
    DefaultConstraint,
    ForeignKeyAction,
    ForeignKeyConstraint,
    Index,
    OrderedColumn,
    PrimaryKeyConstraint,
    Table,
    UniqueConstraint,
    View,
)
from .providers import (
    Provider,
    get_database_methods,
    get_database_methods_for,
    get_provider,
    get_type_map,
)
from .types import Environment, ProviderType

__all__ = [
    "Check",
    "CheckConstraint",
    "Column",
    "ColumnInfo",
    "ColumnOrder",
    "DatabaseConnection",
    "DatabaseMethods",
    "DatabaseTransaction",
    "Default",
    "DefaultConstraint",
    "Environment",
    "ForeignKeyAction",
    "ForeignKeyConstraint",
    "Ignore",
    "Index",
    "Indexed",
    "InvalidArgumentError",
    "NotSupportedError",
    "OrderedColumn",
    "PrimaryKey",
    "PrimaryKeyConstraint",
    "Provider",
    "ProviderType",
    "References",
    "SQLAlchemyConnection",
    "SQLiteConnection",
    "SchemaForgeError",
    "Settings",
    "SqlParseError",
    "Table",
    "TableRebuildError",
    "Unique",
    "UniqueConstraint",
    "View",
    "get_database_methods",
    "get_database_methods_for",
    "get_logger",
    "get_provider",
    "get_type_map",
    "load_settings",
    "settings",
    "setup_logging",
    "setup_production_logging",
    "setup_test_logging",
    "table",
    "table_from_class",
    "view",
    "view_from_class",
]

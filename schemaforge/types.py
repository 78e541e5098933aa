"""Common type definitions for the schemaforge system."""

from enum import Enum
from typing import Any, TypeAlias

DatabaseParamType: TypeAlias = dict[str, Any] | None
DatabaseRowType: TypeAlias = dict[str, Any]


class Environment(str, Enum):
    """Application environment types."""

    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"


class ProviderType(str, Enum):
    """Supported database providers."""

    SQLSERVER = "sqlserver"
    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    SQLITE = "sqlite"

    @classmethod
    def from_dialect_name(cls, dialect_name: str) -> "ProviderType":
        """Map a SQLAlchemy dialect name to a provider type."""
        name = dialect_name.lower()
        if name in ("mssql", "sqlserver"):
            return cls.SQLSERVER
        if name in ("postgresql", "postgres"):
            return cls.POSTGRESQL
        if name in ("mysql", "mariadb"):
            return cls.MYSQL
        if name == "sqlite":
            return cls.SQLITE
        raise ValueError(f"Unsupported database dialect: {dialect_name}")

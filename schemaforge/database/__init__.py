"""Connections schema operations run against."""

from .implementations import (
    SQLAlchemyConnection,
    SQLAlchemyTransaction,
    SQLiteConnection,
    SQLiteTransaction,
)
from .implementations.sqlalchemy import create_database_engine, setup_database_url
from .interfaces import DatabaseConnection, DatabaseTransaction
from .runner import SqlRunner

__all__ = [
    "DatabaseConnection",
    "DatabaseTransaction",
    "SQLAlchemyConnection",
    "SQLAlchemyTransaction",
    "SQLiteConnection",
    "SQLiteTransaction",
    "SqlRunner",
    "create_database_engine",
    "setup_database_url",
]

"""SQLite database implementation."""

from .sqlite_connection import SQLiteConnection, SQLiteTransaction

__all__ = [
    "SQLiteConnection",
    "SQLiteTransaction",
]

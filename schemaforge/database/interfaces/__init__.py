"""Database interfaces module."""

from .connection import DatabaseConnection, DatabaseTransaction

__all__ = [
    "DatabaseConnection",
    "DatabaseTransaction",
]

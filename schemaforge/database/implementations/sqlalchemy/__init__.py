"""SQLAlchemy-backed database implementation."""

from .engine import create_database_engine, setup_database_url
from .sqlalchemy_connection import SQLAlchemyConnection, SQLAlchemyTransaction

__all__ = [
    "SQLAlchemyConnection",
    "SQLAlchemyTransaction",
    "create_database_engine",
    "setup_database_url",
]

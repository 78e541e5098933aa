"""SQLAlchemy Core connection implementation."""

from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from schemaforge.config import Settings
from schemaforge.database.interfaces import DatabaseConnection, DatabaseTransaction
from schemaforge.log import get_logger
from schemaforge.types import DatabaseParamType, DatabaseRowType, ProviderType

from .engine import create_database_engine

logger = get_logger(__name__)


class SQLAlchemyConnection(DatabaseConnection):
    """Connection over any SQLAlchemy engine (SQL Server, PostgreSQL, MySQL, SQLite).

    Statements outside a transaction run on a short-lived connection and are
    committed right away. Transactions hold their own connection until closed.
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self._provider_type = ProviderType.from_dialect_name(engine.dialect.name)
        self._connected = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "SQLAlchemyConnection":
        return cls(create_database_engine(settings))

    @property
    def provider_type(self) -> ProviderType:
        return self._provider_type

    async def connect(self) -> None:
        """Verify the engine can reach the database."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            self._connected = True
            logger.info(f"Connected to {self._provider_type.value} database")
        except SQLAlchemyError as e:
            logger.error(f"Failed to connect to database: {e}")
            raise

    async def disconnect(self) -> None:
        """Dispose of the engine's connection pool."""
        if self._connected:
            self.engine.dispose()
            self._connected = False
            logger.info(f"Disconnected from {self._provider_type.value} database")

    def _require_connected(self) -> None:
        if not self._connected:
            raise RuntimeError("Database not connected")

    def _transaction_connection(self, tx: DatabaseTransaction) -> Connection:
        if not isinstance(tx, SQLAlchemyTransaction):
            raise TypeError(
                f"Expected SQLAlchemyTransaction, got {type(tx).__name__}"
            )
        return tx.connection

    async def execute(
        self,
        query: str,
        params: DatabaseParamType = None,
        tx: DatabaseTransaction | None = None,
    ) -> int:
        self._require_connected()
        try:
            if tx is not None:
                result = self._transaction_connection(tx).execute(
                    text(query), params or {}
                )
                return result.rowcount
            with self.engine.begin() as conn:
                result = conn.execute(text(query), params or {})
                return result.rowcount
        except SQLAlchemyError as e:
            logger.error(f"Query execution failed: {e}")
            raise

    async def fetch_one(
        self,
        query: str,
        params: DatabaseParamType = None,
        tx: DatabaseTransaction | None = None,
    ) -> DatabaseRowType | None:
        rows = await self._fetch(query, params, tx, limit_one=True)
        return rows[0] if rows else None

    async def fetch_all(
        self,
        query: str,
        params: DatabaseParamType = None,
        tx: DatabaseTransaction | None = None,
    ) -> list[DatabaseRowType]:
        return await self._fetch(query, params, tx, limit_one=False)

    async def _fetch(
        self,
        query: str,
        params: DatabaseParamType,
        tx: DatabaseTransaction | None,
        limit_one: bool,
    ) -> list[DatabaseRowType]:
        self._require_connected()
        try:
            if tx is not None:
                result = self._transaction_connection(tx).execute(
                    text(query), params or {}
                )
                return _collect(result, limit_one)
            with self.engine.connect() as conn:
                return _collect(conn.execute(text(query), params or {}), limit_one)
        except SQLAlchemyError as e:
            logger.error(f"Fetch failed: {e}")
            raise

    async def begin_transaction(self) -> DatabaseTransaction:
        self._require_connected()
        conn = self.engine.connect()
        try:
            conn.begin()
        except SQLAlchemyError:
            conn.close()
            raise
        return SQLAlchemyTransaction(conn)

    @property
    def is_connected(self) -> bool:
        return self._connected


def _collect(result, limit_one: bool) -> list[DatabaseRowType]:
    mappings = result.mappings()
    if limit_one:
        row = mappings.first()
        return [dict(row)] if row is not None else []
    return [dict(row) for row in mappings.all()]


class SQLAlchemyTransaction(DatabaseTransaction):
    """Transaction bound to one pooled SQLAlchemy connection."""

    def __init__(self, connection: Connection) -> None:
        self.connection = connection

    async def commit(self) -> None:
        if self.connection.in_transaction():
            self.connection.commit()

    async def rollback(self) -> None:
        if self.connection.in_transaction():
            self.connection.rollback()

    async def close(self) -> None:
        """Return the connection to the pool, rolling back anything left open."""
        if not self.connection.closed:
            self.connection.close()

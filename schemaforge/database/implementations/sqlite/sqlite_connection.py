"""SQLite database connection implementation."""

import sqlite3
from pathlib import Path

from schemaforge.config import Settings
from schemaforge.database.interfaces import DatabaseConnection, DatabaseTransaction
from schemaforge.log import get_logger
from schemaforge.types import DatabaseParamType, DatabaseRowType, ProviderType

logger = get_logger(__name__)


class SQLiteConnection(DatabaseConnection):
    """SQLite database connection implementation.

    The underlying connection runs in autocommit mode; transactions are
    explicit ``BEGIN``/``COMMIT`` pairs so PRAGMAs outside a transaction take
    effect immediately.
    """

    def __init__(self, db_path: Path, timeout: float = 60.0) -> None:
        """Initialize SQLite connection.

        Args:
            db_path: Path to SQLite database file
            timeout: Seconds to wait on a locked database
        """
        self.db_path = db_path
        self.timeout = timeout
        self._connection: sqlite3.Connection | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "SQLiteConnection":
        if settings.sqlite_path is None:
            raise ValueError("SCHEMAFORGE_SQLITE_PATH is not configured")
        return cls(settings.sqlite_path, timeout=settings.sqlite_timeout)

    @property
    def provider_type(self) -> ProviderType:
        return ProviderType.SQLITE

    async def connect(self) -> None:
        """Establish SQLite database connection."""
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._connection = sqlite3.connect(
                self.db_path,
                check_same_thread=False,
                timeout=self.timeout,
                isolation_level=None,
            )
            self._connection.row_factory = sqlite3.Row
            self._configure_connection()
            logger.info(f"Connected to SQLite: {self.db_path}")
        except sqlite3.Error as e:
            logger.error(f"Failed to connect to SQLite database: {e}")
            raise

    async def disconnect(self) -> None:
        """Close SQLite database connection."""
        if self._connection:
            self._connection.close()
            self._connection = None
            logger.info("Disconnected from SQLite")

    def _require_connection(self) -> sqlite3.Connection:
        if not self._connection:
            raise RuntimeError("Database not connected")
        return self._connection

    def _run(self, query: str, params: DatabaseParamType) -> sqlite3.Cursor:
        cursor = self._require_connection().cursor()
        if params:
            cursor.execute(query, params)
        else:
            cursor.execute(query)
        return cursor

    async def execute(
        self,
        query: str,
        params: DatabaseParamType = None,
        tx: DatabaseTransaction | None = None,
    ) -> int:
        """Execute a statement, autocommitting when no transaction is given."""
        try:
            return self._run(query, params).rowcount
        except sqlite3.Error as e:
            logger.error(f"Query execution failed: {e}")
            raise

    async def fetch_one(
        self,
        query: str,
        params: DatabaseParamType = None,
        tx: DatabaseTransaction | None = None,
    ) -> DatabaseRowType | None:
        try:
            row = self._run(query, params).fetchone()
            if row:
                return dict(row)
            return None
        except sqlite3.Error as e:
            logger.error(f"Fetch one failed: {e}")
            raise

    async def fetch_all(
        self,
        query: str,
        params: DatabaseParamType = None,
        tx: DatabaseTransaction | None = None,
    ) -> list[DatabaseRowType]:
        try:
            rows = self._run(query, params).fetchall()
            return [dict(row) for row in rows]
        except sqlite3.Error as e:
            logger.error(f"Fetch all failed: {e}")
            raise

    async def begin_transaction(self) -> DatabaseTransaction:
        """Begin a database transaction.

        Returns:
            Database transaction instance
        """
        connection = self._require_connection()
        connection.execute("BEGIN")
        return SQLiteTransaction(connection)

    @property
    def is_connected(self) -> bool:
        """Check if database is connected."""
        return self._connection is not None

    def _configure_connection(self) -> None:
        """Configure SQLite connection settings."""
        if not self._connection:
            return

        self._connection.execute("PRAGMA journal_mode = DELETE")
        self._connection.execute("PRAGMA synchronous = NORMAL")
        self._connection.execute("PRAGMA foreign_keys = ON")
        self._connection.execute(f"PRAGMA busy_timeout = {int(self.timeout * 1000)}")


class SQLiteTransaction(DatabaseTransaction):
    """SQLite database transaction implementation."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection

    async def commit(self) -> None:
        """Commit the transaction."""
        if self._connection.in_transaction:
            self._connection.execute("COMMIT")

    async def rollback(self) -> None:
        """Rollback the transaction."""
        if self._connection.in_transaction:
            self._connection.execute("ROLLBACK")

    def __repr__(self) -> str:
        return f"SQLiteTransaction(active={self._connection.in_transaction})"

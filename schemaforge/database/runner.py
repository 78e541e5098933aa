"""Statement runner shared by introspection and schema operations."""

import logging
from typing import Any
from weakref import WeakKeyDictionary

from schemaforge.config import settings
from schemaforge.log import get_sql_logger
from schemaforge.types import DatabaseParamType, DatabaseRowType

from .interfaces import DatabaseConnection, DatabaseTransaction

sql_logger = get_sql_logger()


class SqlRunner:
    """Runs statements on a connection and remembers the last one per connection.

    Every statement is echoed to the ``schemaforge.sql`` logger. A failing
    statement is logged with its parameters and the driver error re-raised.
    """

    def __init__(self) -> None:
        self._last_sql: WeakKeyDictionary[
            DatabaseConnection, tuple[str, DatabaseParamType]
        ] = WeakKeyDictionary()

    def get_last_sql(self, db: DatabaseConnection) -> str | None:
        entry = self._last_sql.get(db)
        return entry[0] if entry else None

    def get_last_sql_with_params(
        self, db: DatabaseConnection
    ) -> tuple[str, DatabaseParamType] | None:
        return self._last_sql.get(db)

    def _remember(
        self, db: DatabaseConnection, sql: str, params: DatabaseParamType
    ) -> None:
        self._last_sql[db] = (sql, params)
        level = logging.INFO if settings.echo_sql else logging.DEBUG
        if params:
            sql_logger.log(level, f"{sql} -- {params}")
        else:
            sql_logger.log(level, sql)

    def _failed(self, sql: str, params: DatabaseParamType, exc: Exception) -> None:
        sql_logger.error(f"Failed to execute SQL: {sql} -- params={params}: {exc}")

    async def execute(
        self,
        db: DatabaseConnection,
        sql: str,
        params: DatabaseParamType = None,
        tx: DatabaseTransaction | None = None,
    ) -> int:
        self._remember(db, sql, params)
        try:
            return await db.execute(sql, params, tx)
        except Exception as e:
            self._failed(sql, params, e)
            raise

    async def execute_all(
        self,
        db: DatabaseConnection,
        statements: list[str],
        tx: DatabaseTransaction | None = None,
    ) -> None:
        """Execute statements in order, stopping at the first failure."""
        for sql in statements:
            await self.execute(db, sql, tx=tx)

    async def fetch_all(
        self,
        db: DatabaseConnection,
        sql: str,
        params: DatabaseParamType = None,
        tx: DatabaseTransaction | None = None,
    ) -> list[DatabaseRowType]:
        self._remember(db, sql, params)
        try:
            return await db.fetch_all(sql, params, tx)
        except Exception as e:
            self._failed(sql, params, e)
            raise

    async def fetch_scalar(
        self,
        db: DatabaseConnection,
        sql: str,
        params: DatabaseParamType = None,
        tx: DatabaseTransaction | None = None,
    ) -> Any:
        self._remember(db, sql, params)
        try:
            return await db.fetch_scalar(sql, params, tx)
        except Exception as e:
            self._failed(sql, params, e)
            raise

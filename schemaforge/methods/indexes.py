"""Index operations.

Only indexes created with CREATE INDEX are reported; the ones backing a
primary key or unique constraint belong to those constraints.
"""

from schemaforge.database import DatabaseConnection, DatabaseTransaction
from schemaforge.log import get_logger
from schemaforge.models import Index

from .base import MethodsBase, has_column, require_columns, require_name

logger = get_logger(__name__)


class IndexMethods(MethodsBase):
    async def does_index_exist(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str,
        index_name: str,
        tx: DatabaseTransaction | None = None,
    ) -> bool:
        return (
            await self.get_index(db, schema_name, table_name, index_name, tx)
        ) is not None

    async def does_index_exist_on_column(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str,
        column_name: str,
        tx: DatabaseTransaction | None = None,
    ) -> bool:
        indexes = await self.get_indexes_on_column(
            db, schema_name, table_name, column_name, tx
        )
        return len(indexes) > 0

    async def create_index_if_not_exists(
        self,
        db: DatabaseConnection,
        index: Index,
        tx: DatabaseTransaction | None = None,
    ) -> bool:
        """Create an index.

        Args:
            db: Connection to run on
            index: Index to create; column directions are kept where supported
            tx: Transaction to run in

        Returns:
            False when an index with this name already exists on the table

        Raises:
            InvalidArgumentError: a name or the column list is blank
        """
        require_name(index.table_name, "Table name")
        require_name(index.index_name, "Index name")
        require_columns(index.columns, "Index")
        if await self.does_index_exist(
            db, index.schema_name, index.table_name, index.index_name, tx
        ):
            return False

        await self._execute(db, self.builder.sql_create_index(index), tx=tx)
        logger.debug(f"Created index {index.index_name}")
        return True

    async def get_index(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str,
        index_name: str,
        tx: DatabaseTransaction | None = None,
    ) -> Index | None:
        require_name(index_name, "Index name")
        indexes = await self.get_indexes(db, schema_name, table_name, None, tx)
        return self._find_named(indexes, lambda ix: ix.index_name, index_name)

    async def get_indexes(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str,
        index_name_filter: str | None = None,
        tx: DatabaseTransaction | None = None,
    ) -> list[Index]:
        """Indexes on a table, optionally filtered by a wildcard name."""
        require_name(table_name, "Table name")
        return await self.introspector.get_indexes(
            db, schema_name, table_name, index_name_filter, tx
        )

    async def get_index_names(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str,
        index_name_filter: str | None = None,
        tx: DatabaseTransaction | None = None,
    ) -> list[str]:
        indexes = await self.get_indexes(
            db, schema_name, table_name, index_name_filter, tx
        )
        return [ix.index_name for ix in indexes]

    async def get_indexes_on_column(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str,
        column_name: str,
        tx: DatabaseTransaction | None = None,
    ) -> list[Index]:
        require_name(column_name, "Column name")
        column_name = self.builder.normalize_name(column_name)
        indexes = await self.get_indexes(db, schema_name, table_name, None, tx)
        return [ix for ix in indexes if has_column(ix.columns, column_name)]

    async def get_index_names_on_column(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str,
        column_name: str,
        tx: DatabaseTransaction | None = None,
    ) -> list[str]:
        indexes = await self.get_indexes_on_column(
            db, schema_name, table_name, column_name, tx
        )
        return [ix.index_name for ix in indexes]

    async def drop_index_if_exists(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str,
        index_name: str,
        tx: DatabaseTransaction | None = None,
    ) -> bool:
        """Drop an index by name.

        Returns:
            False when no index with this name exists on the table
        """
        index = await self.get_index(db, schema_name, table_name, index_name, tx)
        if index is None:
            return False

        await self._execute(
            db,
            self.builder.sql_drop_index(schema_name, index.table_name, index.index_name),
            tx=tx,
        )
        logger.debug(f"Dropped index {index.index_name}")
        return True

    async def drop_indexes_on_column_if_exists(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str,
        column_name: str,
        tx: DatabaseTransaction | None = None,
    ) -> bool:
        """Drop every index that includes the column."""
        indexes = await self.get_indexes_on_column(
            db, schema_name, table_name, column_name, tx
        )
        if not indexes:
            return False

        await self._execute_all(
            db,
            [
                self.builder.sql_drop_index(schema_name, ix.table_name, ix.index_name)
                for ix in indexes
            ],
            tx,
        )
        return True

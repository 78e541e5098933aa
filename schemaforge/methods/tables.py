"""Table operations."""

from schemaforge.database import DatabaseConnection, DatabaseTransaction
from schemaforge.log import get_logger
from schemaforge.models import Table

from .base import MethodsBase, require_columns, require_name, same_name

logger = get_logger(__name__)


def _validate_table(table: Table) -> None:
    require_name(table.table_name, "Table name")
    require_columns(table.columns, f"Table {table.table_name}")


class TableMethods(MethodsBase):
    async def does_table_exist(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str,
        tx: DatabaseTransaction | None = None,
    ) -> bool:
        require_name(table_name, "Table name")
        table_name = self.builder.normalize_name(table_name)
        names = await self.introspector.get_table_names(db, schema_name, table_name, tx)
        return any(same_name(n, table_name) for n in names)

    async def create_table_if_not_exists(
        self,
        db: DatabaseConnection,
        table: Table,
        tx: DatabaseTransaction | None = None,
    ) -> bool:
        """Create a table with its constraints, then its indexes.

        Returns:
            False when the table already exists
        """
        _validate_table(table)
        if await self.does_table_exist(db, table.schema_name, table.table_name, tx):
            return False

        plan = self.builder.build_create_table(table)
        await self._execute_all(db, plan.statements, tx)
        logger.debug(f"Created table {table.table_name}")
        return True

    async def create_tables_if_not_exist(
        self,
        db: DatabaseConnection,
        tables: list[Table],
        tx: DatabaseTransaction | None = None,
    ) -> list[str]:
        """Create several tables whose foreign keys may point at each other.

        Foreign keys are added once every table exists. Providers that rebuild
        instead of altering keep them inline; they do not check the referenced
        table at creation time.

        Returns:
            Names of the tables that were created
        """
        for table in tables:
            _validate_table(table)

        inline_foreign_keys = not self.builder.supports_alter_table_constraints
        created = []
        foreign_key_statements: list[str] = []
        for table in tables:
            if await self.does_table_exist(db, table.schema_name, table.table_name, tx):
                continue
            plan = self.builder.build_create_table(table, inline_foreign_keys)
            await self._execute_all(db, plan.statements, tx)
            foreign_key_statements.extend(plan.foreign_key_statements)
            created.append(table.table_name)

        await self._execute_all(db, foreign_key_statements, tx)
        logger.debug(
            f"Created {len(created)} of {len(tables)} tables, "
            f"{len(foreign_key_statements)} foreign keys afterwards"
        )
        return created

    async def get_table(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str,
        tx: DatabaseTransaction | None = None,
    ) -> Table | None:
        """Introspect one table with its columns, constraints and indexes."""
        require_name(table_name, "Table name")
        return await self._get_table(db, schema_name, table_name, tx)

    async def get_tables(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name_filter: str | None = None,
        tx: DatabaseTransaction | None = None,
    ) -> list[Table]:
        return await self.introspector.get_tables(db, schema_name, table_name_filter, tx)

    async def get_table_names(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name_filter: str | None = None,
        tx: DatabaseTransaction | None = None,
    ) -> list[str]:
        """Table names in a schema, optionally filtered by a wildcard pattern.

        Args:
            db: Connection to run on
            schema_name: Schema to list; the provider default when None
            table_name_filter: ``*`` and ``?`` wildcards, matched case-insensitively
            tx: Transaction to run in

        Returns:
            Matching table names, views excluded
        """
        return await self.introspector.get_table_names(
            db, schema_name, table_name_filter, tx
        )

    async def drop_table_if_exists(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str,
        tx: DatabaseTransaction | None = None,
    ) -> bool:
        """Drop a table after the constraints and indexes that would block it.

        Returns:
            False when the table is missing
        """
        require_name(table_name, "Table name")
        table = await self._get_table(db, schema_name, table_name, tx)
        if table is None:
            return False

        await self._drop_table(db, table, tx)
        logger.debug(f"Dropped table {table.table_name}")
        return True

    async def rename_table_if_exists(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str,
        new_table_name: str,
        tx: DatabaseTransaction | None = None,
    ) -> bool:
        """Rename a table.

        Returns:
            False when the table is missing
        """
        require_name(table_name, "Table name")
        require_name(new_table_name, "New table name")
        if not await self.does_table_exist(db, schema_name, table_name, tx):
            return False

        await self._execute(
            db,
            self.builder.sql_rename_table(schema_name, table_name, new_table_name),
            tx=tx,
        )
        return True

    async def truncate_table_if_exists(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str,
        tx: DatabaseTransaction | None = None,
    ) -> bool:
        """Delete every row of a table, keeping its definition.

        Returns:
            False when the table is missing
        """
        require_name(table_name, "Table name")
        if not await self.does_table_exist(db, schema_name, table_name, tx):
            return False

        await self._execute(
            db, self.builder.sql_truncate_table(schema_name, table_name), tx=tx
        )
        return True

"""Column operations."""

import copy

from schemaforge.database import DatabaseConnection, DatabaseTransaction
from schemaforge.ddl import TableConstraints
from schemaforge.log import get_logger
from schemaforge.models import Column, Table

from .base import MethodsBase, has_column, require_name, same_name

logger = get_logger(__name__)


class ColumnMethods(MethodsBase):
    async def does_column_exist(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str,
        column_name: str,
        tx: DatabaseTransaction | None = None,
    ) -> bool:
        return (
            await self.get_column(db, schema_name, table_name, column_name, tx)
        ) is not None

    async def create_column_if_not_exists(
        self,
        db: DatabaseConnection,
        column: Column,
        tx: DatabaseTransaction | None = None,
    ) -> bool:
        """Add a column to an existing table.

        The column's flags (primary key, unique, foreign key, indexed, check,
        default) create the matching objects unless the table already has
        them. An existing primary key is never replaced.

        Returns:
            False when the table is missing or already has the column
        """
        require_name(column.table_name, "Table name")
        require_name(column.column_name, "Column name")
        table = await self._get_table(db, column.schema_name, column.table_name, tx)
        if table is None or table.get_column(column.column_name) is not None:
            return False

        schema_name, table_name = table.schema_name, table.table_name
        existing = TableConstraints.from_table(table)
        definition = self.builder.render_column_definition(
            schema_name, table_name, column, existing
        )

        if not self.builder.supports_alter_table_constraints:

            def add(updated: Table) -> None:
                updated.columns.append(copy.deepcopy(column))
                if definition.primary_key is not None:
                    updated.primary_key_constraint = definition.primary_key
                updated.check_constraints += definition.inline_check_constraints
                updated.default_constraints += definition.inline_default_constraints
                updated.unique_constraints += (
                    definition.inline_unique_constraints
                    + definition.deferred_unique_constraints
                )
                updated.foreign_key_constraints += (
                    definition.inline_foreign_keys + definition.deferred_foreign_keys
                )
                updated.indexes += definition.deferred_indexes

            await self._rebuild_table(db, table, add, tx)
            return True

        statements = [
            self.builder.sql_add_column(schema_name, table_name, definition.sql)
        ]
        statements += [
            self.builder.sql_add_unique_constraint(uc)
            for uc in definition.deferred_unique_constraints
        ]
        statements += [
            self.builder.sql_add_foreign_key(fk) for fk in definition.deferred_foreign_keys
        ]
        statements += [self.builder.sql_create_index(ix) for ix in definition.deferred_indexes]
        await self._execute_all(db, statements, tx)
        logger.debug(f"Added column {table_name}.{column.column_name}")
        return True

    async def get_column(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str,
        column_name: str,
        tx: DatabaseTransaction | None = None,
    ) -> Column | None:
        require_name(table_name, "Table name")
        require_name(column_name, "Column name")
        table = await self._get_table(db, schema_name, table_name, tx)
        if table is None:
            return None
        return table.get_column(self.builder.normalize_name(column_name))

    async def get_columns(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str,
        column_name_filter: str | None = None,
        tx: DatabaseTransaction | None = None,
    ) -> list[Column]:
        """Columns of a table in ordinal order; empty when the table is missing."""
        require_name(table_name, "Table name")
        table = await self._get_table(db, schema_name, table_name, tx)
        if table is None:
            return []
        return self._filter_named(
            table.columns, lambda c: c.column_name, column_name_filter
        )

    async def get_column_names(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str,
        column_name_filter: str | None = None,
        tx: DatabaseTransaction | None = None,
    ) -> list[str]:
        columns = await self.get_columns(
            db, schema_name, table_name, column_name_filter, tx
        )
        return [c.column_name for c in columns]

    async def drop_column_if_exists(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str,
        column_name: str,
        tx: DatabaseTransaction | None = None,
    ) -> bool:
        """Drop a column after everything that references it.

        Order: primary key, foreign keys, unique constraints, indexes, check,
        default, then the column.
        """
        require_name(table_name, "Table name")
        require_name(column_name, "Column name")
        table = await self._get_table(db, schema_name, table_name, tx)
        if table is None:
            return False
        column = table.get_column(self.builder.normalize_name(column_name))
        if column is None:
            return False
        column_name = column.column_name

        primary_key = table.primary_key_constraint
        if primary_key is not None and not has_column(primary_key.columns, column_name):
            primary_key = None
        foreign_keys = [
            fk
            for fk in table.foreign_key_constraints
            if has_column(fk.source_columns, column_name)
        ]
        uniques = [
            uc for uc in table.unique_constraints if has_column(uc.columns, column_name)
        ]
        indexes = [ix for ix in table.indexes if has_column(ix.columns, column_name)]
        checks = [
            ck for ck in table.check_constraints if same_name(ck.column_name, column_name)
        ]
        defaults = [
            df
            for df in table.default_constraints
            if same_name(df.column_name, column_name)
        ]

        if not self.builder.supports_alter_table_constraints:

            def remove(updated: Table) -> None:
                updated.columns = [
                    c for c in updated.columns if not same_name(c.column_name, column_name)
                ]
                if primary_key is not None:
                    updated.primary_key_constraint = None
                updated.foreign_key_constraints = [
                    fk
                    for fk in updated.foreign_key_constraints
                    if not has_column(fk.source_columns, column_name)
                ]
                updated.unique_constraints = [
                    uc
                    for uc in updated.unique_constraints
                    if not has_column(uc.columns, column_name)
                ]
                updated.indexes = [
                    ix for ix in updated.indexes if not has_column(ix.columns, column_name)
                ]
                updated.check_constraints = [
                    ck
                    for ck in updated.check_constraints
                    if not same_name(ck.column_name, column_name)
                ]
                updated.default_constraints = [
                    df
                    for df in updated.default_constraints
                    if not same_name(df.column_name, column_name)
                ]

            await self._rebuild_table(db, table, remove, tx)
            return True

        statements = []
        if primary_key is not None:
            statements.append(self.builder.sql_drop_primary_key(primary_key))
        statements += [self.builder.sql_drop_foreign_key(fk) for fk in foreign_keys]
        statements += [self.builder.sql_drop_unique_constraint(uc) for uc in uniques]
        statements += [
            self.builder.sql_drop_index(table.schema_name, table.table_name, ix.index_name)
            for ix in indexes
        ]
        if checks and await self.supports_check_constraints(db, tx):
            statements += [self.builder.sql_drop_check_constraint(ck) for ck in checks]
        statements += [self.builder.sql_drop_default_constraint(df) for df in defaults]
        statements.append(
            self.builder.sql_drop_column(table.schema_name, table.table_name, column_name)
        )
        await self._execute_all(db, statements, tx)
        logger.debug(f"Dropped column {table.table_name}.{column_name}")
        return True

    async def rename_column_if_exists(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str,
        column_name: str,
        new_column_name: str,
        tx: DatabaseTransaction | None = None,
    ) -> bool:
        """Rename a column in place.

        Args:
            db: Connection to run on
            schema_name: Schema of the table; the provider default when None
            table_name: Table owning the column
            column_name: Current column name
            new_column_name: Name to rename to
            tx: Transaction to run in

        Returns:
            False when the column is missing or ``new_column_name`` is taken
        """
        require_name(table_name, "Table name")
        require_name(column_name, "Column name")
        require_name(new_column_name, "New column name")
        table = await self._get_table(db, schema_name, table_name, tx)
        if table is None:
            return False
        column = table.get_column(self.builder.normalize_name(column_name))
        if column is None:
            return False
        if table.get_column(self.builder.normalize_name(new_column_name)) is not None:
            return False

        await self._execute(
            db,
            self.builder.sql_rename_column(
                table.schema_name, table.table_name, column.column_name, new_column_name
            ),
            tx=tx,
        )
        return True

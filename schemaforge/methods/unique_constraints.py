"""Unique constraint operations."""

from schemaforge.database import DatabaseConnection, DatabaseTransaction
from schemaforge.log import get_logger
from schemaforge.models import Table, UniqueConstraint

from .base import MethodsBase, has_column, require_columns, require_name, same_name

logger = get_logger(__name__)


class UniqueConstraintMethods(MethodsBase):
    async def does_unique_constraint_exist(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str,
        constraint_name: str,
        tx: DatabaseTransaction | None = None,
    ) -> bool:
        constraint = await self.get_unique_constraint(
            db, schema_name, table_name, constraint_name, tx
        )
        return constraint is not None

    async def does_unique_constraint_exist_on_column(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str,
        column_name: str,
        tx: DatabaseTransaction | None = None,
    ) -> bool:
        constraint = await self.get_unique_constraint_on_column(
            db, schema_name, table_name, column_name, tx
        )
        return constraint is not None

    async def create_unique_constraint_if_not_exists(
        self,
        db: DatabaseConnection,
        constraint: UniqueConstraint,
        tx: DatabaseTransaction | None = None,
    ) -> bool:
        """Add a unique constraint.

        Args:
            db: Connection to run on
            constraint: Unique constraint to add
            tx: Transaction to run in

        Returns:
            False when the table is missing or already has a constraint with
            this name

        Raises:
            InvalidArgumentError: a name or the column list is blank
        """
        require_name(constraint.table_name, "Table name")
        require_name(constraint.constraint_name, "Constraint name")
        require_columns(constraint.columns, "Unique constraint")

        table = await self._get_table(db, constraint.schema_name, constraint.table_name, tx)
        if table is None:
            return False
        if self._find_named(
            table.unique_constraints, lambda c: c.constraint_name, constraint.constraint_name
        ):
            return False

        def add(updated: Table) -> None:
            updated.unique_constraints.append(constraint)

        await self._alter_table(
            db,
            table,
            lambda: self.builder.sql_add_unique_constraint(constraint),
            add,
            tx,
        )
        logger.debug(f"Created unique constraint {constraint.constraint_name}")
        return True

    async def get_unique_constraint(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str,
        constraint_name: str,
        tx: DatabaseTransaction | None = None,
    ) -> UniqueConstraint | None:
        require_name(constraint_name, "Constraint name")
        constraints = await self.get_unique_constraints(
            db, schema_name, table_name, None, tx
        )
        return self._find_named(constraints, lambda c: c.constraint_name, constraint_name)

    async def get_unique_constraints(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str,
        constraint_name_filter: str | None = None,
        tx: DatabaseTransaction | None = None,
    ) -> list[UniqueConstraint]:
        """Unique constraints on a table, optionally filtered by a wildcard name."""
        require_name(table_name, "Table name")
        table = await self._get_table(db, schema_name, table_name, tx)
        if table is None:
            return []
        return self._filter_named(
            table.unique_constraints, lambda c: c.constraint_name, constraint_name_filter
        )

    async def get_unique_constraint_names(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str,
        constraint_name_filter: str | None = None,
        tx: DatabaseTransaction | None = None,
    ) -> list[str]:
        constraints = await self.get_unique_constraints(
            db, schema_name, table_name, constraint_name_filter, tx
        )
        return [c.constraint_name for c in constraints]

    async def get_unique_constraint_on_column(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str,
        column_name: str,
        tx: DatabaseTransaction | None = None,
    ) -> UniqueConstraint | None:
        """First unique constraint that includes the column."""
        require_name(column_name, "Column name")
        column_name = self.builder.normalize_name(column_name)
        for constraint in await self.get_unique_constraints(
            db, schema_name, table_name, None, tx
        ):
            if has_column(constraint.columns, column_name):
                return constraint
        return None

    async def get_unique_constraint_name_on_column(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str,
        column_name: str,
        tx: DatabaseTransaction | None = None,
    ) -> str | None:
        constraint = await self.get_unique_constraint_on_column(
            db, schema_name, table_name, column_name, tx
        )
        return constraint.constraint_name if constraint else None

    async def drop_unique_constraint_if_exists(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str,
        constraint_name: str,
        tx: DatabaseTransaction | None = None,
    ) -> bool:
        """Drop a unique constraint by name.

        Returns:
            False when the table or the constraint is missing
        """
        require_name(table_name, "Table name")
        require_name(constraint_name, "Constraint name")
        table = await self._get_table(db, schema_name, table_name, tx)
        if table is None:
            return False
        constraint = self._find_named(
            table.unique_constraints, lambda c: c.constraint_name, constraint_name
        )
        if constraint is None:
            return False
        await self._drop_unique_constraint(db, table, constraint, tx)
        return True

    async def drop_unique_constraint_on_column_if_exists(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str,
        column_name: str,
        tx: DatabaseTransaction | None = None,
    ) -> bool:
        require_name(table_name, "Table name")
        require_name(column_name, "Column name")
        table = await self._get_table(db, schema_name, table_name, tx)
        if table is None:
            return False
        column_name = self.builder.normalize_name(column_name)
        for constraint in table.unique_constraints:
            if has_column(constraint.columns, column_name):
                await self._drop_unique_constraint(db, table, constraint, tx)
                return True
        return False

    async def _drop_unique_constraint(
        self,
        db: DatabaseConnection,
        table: Table,
        constraint: UniqueConstraint,
        tx: DatabaseTransaction | None,
    ) -> None:
        def remove(updated: Table) -> None:
            updated.unique_constraints = [
                c
                for c in updated.unique_constraints
                if not same_name(c.constraint_name, constraint.constraint_name)
            ]

        await self._alter_table(
            db,
            table,
            lambda: self.builder.sql_drop_unique_constraint(constraint),
            remove,
            tx,
        )
        logger.debug(f"Dropped unique constraint {constraint.constraint_name}")

"""Default constraint operations. A default always belongs to one column."""

from schemaforge.database import DatabaseConnection, DatabaseTransaction
from schemaforge.ddl import naming
from schemaforge.exceptions import InvalidArgumentError
from schemaforge.log import get_logger
from schemaforge.models import DefaultConstraint, Table

from .base import MethodsBase, require_name, same_name

logger = get_logger(__name__)


class DefaultConstraintMethods(MethodsBase):
    async def does_default_constraint_exist(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str,
        constraint_name: str,
        tx: DatabaseTransaction | None = None,
    ) -> bool:
        constraint = await self.get_default_constraint(
            db, schema_name, table_name, constraint_name, tx
        )
        return constraint is not None

    async def does_default_constraint_exist_on_column(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str,
        column_name: str,
        tx: DatabaseTransaction | None = None,
    ) -> bool:
        constraint = await self.get_default_constraint_on_column(
            db, schema_name, table_name, column_name, tx
        )
        return constraint is not None

    async def create_default_constraint_if_not_exists(
        self,
        db: DatabaseConnection,
        constraint: DefaultConstraint,
        tx: DatabaseTransaction | None = None,
    ) -> bool:
        """Give a column a default.

        Providers without named defaults only know a default by its column, so
        there the name must be the derived ``df_<table>_<column>``.

        Returns:
            False when the table or column is missing, or the column already
            has a default
        """
        require_name(constraint.table_name, "Table name")
        require_name(constraint.column_name, "Column name")
        require_name(constraint.constraint_name, "Constraint name")
        if not constraint.expression or not constraint.expression.strip():
            raise InvalidArgumentError("Default constraint expression is required")
        if not self.builder.supports_named_default_constraints:
            derived = naming.default_constraint_name(
                self.builder.normalize_name(constraint.table_name),
                self.builder.normalize_name(constraint.column_name),
            )
            if not same_name(
                self.builder.normalize_name(constraint.constraint_name), derived
            ):
                raise InvalidArgumentError(
                    f"{self.provider_type.value} defaults are unnamed; "
                    f"use {derived} for {constraint.column_name}"
                )

        table = await self._get_table(db, constraint.schema_name, constraint.table_name, tx)
        if table is None or table.get_column(constraint.column_name) is None:
            return False
        if self._find_named(
            table.default_constraints, lambda c: c.constraint_name, constraint.constraint_name
        ):
            return False
        if any(
            same_name(c.column_name, constraint.column_name)
            for c in table.default_constraints
        ):
            return False

        def add(updated: Table) -> None:
            updated.default_constraints.append(constraint)

        await self._alter_table(
            db,
            table,
            lambda: self.builder.sql_add_default_constraint(constraint),
            add,
            tx,
        )
        logger.debug(f"Created default constraint {constraint.constraint_name}")
        return True

    async def get_default_constraint(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str,
        constraint_name: str,
        tx: DatabaseTransaction | None = None,
    ) -> DefaultConstraint | None:
        require_name(constraint_name, "Constraint name")
        constraints = await self.get_default_constraints(
            db, schema_name, table_name, None, tx
        )
        return self._find_named(constraints, lambda c: c.constraint_name, constraint_name)

    async def get_default_constraints(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str,
        constraint_name_filter: str | None = None,
        tx: DatabaseTransaction | None = None,
    ) -> list[DefaultConstraint]:
        require_name(table_name, "Table name")
        table = await self._get_table(db, schema_name, table_name, tx)
        if table is None:
            return []
        return self._filter_named(
            table.default_constraints, lambda c: c.constraint_name, constraint_name_filter
        )

    async def get_default_constraint_names(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str,
        constraint_name_filter: str | None = None,
        tx: DatabaseTransaction | None = None,
    ) -> list[str]:
        constraints = await self.get_default_constraints(
            db, schema_name, table_name, constraint_name_filter, tx
        )
        return [c.constraint_name for c in constraints]

    async def get_default_constraint_on_column(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str,
        column_name: str,
        tx: DatabaseTransaction | None = None,
    ) -> DefaultConstraint | None:
        """The default bound to ``column_name``, or None."""
        require_name(column_name, "Column name")
        column_name = self.builder.normalize_name(column_name)
        for constraint in await self.get_default_constraints(
            db, schema_name, table_name, None, tx
        ):
            if same_name(constraint.column_name, column_name):
                return constraint
        return None

    async def get_default_constraint_name_on_column(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str,
        column_name: str,
        tx: DatabaseTransaction | None = None,
    ) -> str | None:
        constraint = await self.get_default_constraint_on_column(
            db, schema_name, table_name, column_name, tx
        )
        return constraint.constraint_name if constraint else None

    async def drop_default_constraint_if_exists(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str,
        constraint_name: str,
        tx: DatabaseTransaction | None = None,
    ) -> bool:
        """Drop a default by name.

        Returns:
            False when the table or the default is missing
        """
        require_name(table_name, "Table name")
        require_name(constraint_name, "Constraint name")
        table = await self._get_table(db, schema_name, table_name, tx)
        if table is None:
            return False
        constraint = self._find_named(
            table.default_constraints, lambda c: c.constraint_name, constraint_name
        )
        if constraint is None:
            return False
        await self._drop_default_constraint(db, table, constraint, tx)
        return True

    async def drop_default_constraint_on_column_if_exists(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str,
        column_name: str,
        tx: DatabaseTransaction | None = None,
    ) -> bool:
        """Drop whatever default ``column_name`` has, whatever its name."""
        require_name(table_name, "Table name")
        require_name(column_name, "Column name")
        table = await self._get_table(db, schema_name, table_name, tx)
        if table is None:
            return False
        column_name = self.builder.normalize_name(column_name)
        for constraint in table.default_constraints:
            if same_name(constraint.column_name, column_name):
                await self._drop_default_constraint(db, table, constraint, tx)
                return True
        return False

    async def _drop_default_constraint(
        self,
        db: DatabaseConnection,
        table: Table,
        constraint: DefaultConstraint,
        tx: DatabaseTransaction | None,
    ) -> None:
        def remove(updated: Table) -> None:
            updated.default_constraints = [
                c
                for c in updated.default_constraints
                if not same_name(c.column_name, constraint.column_name)
            ]

        # drop statements use the column recorded on the constraint
        await self._alter_table(
            db,
            table,
            lambda: self.builder.sql_drop_default_constraint(constraint),
            remove,
            tx,
        )
        logger.debug(f"Dropped default constraint {constraint.constraint_name}")

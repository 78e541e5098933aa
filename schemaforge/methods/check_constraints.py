"""Check constraint operations. Every call is a no-op where checks are unsupported."""

from schemaforge.database import DatabaseConnection, DatabaseTransaction
from schemaforge.exceptions import InvalidArgumentError
from schemaforge.log import get_logger
from schemaforge.models import CheckConstraint, Table

from .base import MethodsBase, require_name, same_name

logger = get_logger(__name__)


class CheckConstraintMethods(MethodsBase):
    async def does_check_constraint_exist(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str,
        constraint_name: str,
        tx: DatabaseTransaction | None = None,
    ) -> bool:
        constraint = await self.get_check_constraint(
            db, schema_name, table_name, constraint_name, tx
        )
        return constraint is not None

    async def does_check_constraint_exist_on_column(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str,
        column_name: str,
        tx: DatabaseTransaction | None = None,
    ) -> bool:
        constraint = await self.get_check_constraint_on_column(
            db, schema_name, table_name, column_name, tx
        )
        return constraint is not None

    async def create_check_constraint_if_not_exists(
        self,
        db: DatabaseConnection,
        constraint: CheckConstraint,
        tx: DatabaseTransaction | None = None,
    ) -> bool:
        require_name(constraint.table_name, "Table name")
        require_name(constraint.constraint_name, "Constraint name")
        if not constraint.expression or not constraint.expression.strip():
            raise InvalidArgumentError("Check constraint expression is required")
        if not await self.supports_check_constraints(db, tx):
            return False

        table = await self._get_table(db, constraint.schema_name, constraint.table_name, tx)
        if table is None:
            return False
        if self._find_named(
            table.check_constraints, lambda c: c.constraint_name, constraint.constraint_name
        ):
            return False
        if constraint.column_name and any(
            same_name(c.column_name, constraint.column_name)
            for c in table.check_constraints
        ):
            return False

        def add(updated: Table) -> None:
            updated.check_constraints.append(constraint)

        await self._alter_table(
            db,
            table,
            lambda: self.builder.sql_add_check_constraint(constraint),
            add,
            tx,
        )
        logger.debug(f"Created check constraint {constraint.constraint_name}")
        return True

    async def get_check_constraint(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str,
        constraint_name: str,
        tx: DatabaseTransaction | None = None,
    ) -> CheckConstraint | None:
        require_name(constraint_name, "Constraint name")
        constraints = await self.get_check_constraints(db, schema_name, table_name, None, tx)
        return self._find_named(constraints, lambda c: c.constraint_name, constraint_name)

    async def get_check_constraints(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str,
        constraint_name_filter: str | None = None,
        tx: DatabaseTransaction | None = None,
    ) -> list[CheckConstraint]:
        """Check constraints on a table, optionally filtered by a wildcard name."""
        require_name(table_name, "Table name")
        if not await self.supports_check_constraints(db, tx):
            return []
        table = await self._get_table(db, schema_name, table_name, tx)
        if table is None:
            return []
        return self._filter_named(
            table.check_constraints, lambda c: c.constraint_name, constraint_name_filter
        )

    async def get_check_constraint_names(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str,
        constraint_name_filter: str | None = None,
        tx: DatabaseTransaction | None = None,
    ) -> list[str]:
        constraints = await self.get_check_constraints(
            db, schema_name, table_name, constraint_name_filter, tx
        )
        return [c.constraint_name for c in constraints]

    async def get_check_constraint_on_column(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str,
        column_name: str,
        tx: DatabaseTransaction | None = None,
    ) -> CheckConstraint | None:
        require_name(column_name, "Column name")
        column_name = self.builder.normalize_name(column_name)
        for constraint in await self.get_check_constraints(
            db, schema_name, table_name, None, tx
        ):
            if constraint.column_name and same_name(constraint.column_name, column_name):
                return constraint
        return None

    async def get_check_constraint_name_on_column(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str,
        column_name: str,
        tx: DatabaseTransaction | None = None,
    ) -> str | None:
        constraint = await self.get_check_constraint_on_column(
            db, schema_name, table_name, column_name, tx
        )
        return constraint.constraint_name if constraint else None

    async def drop_check_constraint_if_exists(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str,
        constraint_name: str,
        tx: DatabaseTransaction | None = None,
    ) -> bool:
        """Drop a check constraint by name.

        Returns:
            False when the table or the constraint is missing
        """
        require_name(constraint_name, "Constraint name")
        table = await self._checked_table(db, schema_name, table_name, tx)
        if table is None:
            return False
        constraint = self._find_named(
            table.check_constraints, lambda c: c.constraint_name, constraint_name
        )
        if constraint is None:
            return False
        await self._drop_check_constraint(db, table, constraint, tx)
        return True

    async def drop_check_constraint_on_column_if_exists(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str,
        column_name: str,
        tx: DatabaseTransaction | None = None,
    ) -> bool:
        """Drop the check constraint scoped to ``column_name``."""
        require_name(column_name, "Column name")
        table = await self._checked_table(db, schema_name, table_name, tx)
        if table is None:
            return False
        column_name = self.builder.normalize_name(column_name)
        for constraint in table.check_constraints:
            if constraint.column_name and same_name(constraint.column_name, column_name):
                await self._drop_check_constraint(db, table, constraint, tx)
                return True
        return False

    async def _checked_table(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str,
        tx: DatabaseTransaction | None,
    ) -> Table | None:
        """The table, or None when it is missing or checks are unsupported."""
        require_name(table_name, "Table name")
        if not await self.supports_check_constraints(db, tx):
            return None
        return await self._get_table(db, schema_name, table_name, tx)

    async def _drop_check_constraint(
        self,
        db: DatabaseConnection,
        table: Table,
        constraint: CheckConstraint,
        tx: DatabaseTransaction | None,
    ) -> None:
        def remove(updated: Table) -> None:
            updated.check_constraints = [
                c
                for c in updated.check_constraints
                if not same_name(c.constraint_name, constraint.constraint_name)
            ]

        await self._alter_table(
            db,
            table,
            lambda: self.builder.sql_drop_check_constraint(constraint),
            remove,
            tx,
        )
        logger.debug(f"Dropped check constraint {constraint.constraint_name}")

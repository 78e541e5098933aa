"""Primary key operations. A table has at most one primary key."""

from schemaforge.database import DatabaseConnection, DatabaseTransaction
from schemaforge.log import get_logger
from schemaforge.models import PrimaryKeyConstraint, Table

from .base import MethodsBase, require_columns, require_name

logger = get_logger(__name__)


class PrimaryKeyConstraintMethods(MethodsBase):
    async def does_primary_key_constraint_exist(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str,
        tx: DatabaseTransaction | None = None,
    ) -> bool:
        constraint = await self.get_primary_key_constraint(db, schema_name, table_name, tx)
        return constraint is not None

    async def create_primary_key_constraint_if_not_exists(
        self,
        db: DatabaseConnection,
        constraint: PrimaryKeyConstraint,
        tx: DatabaseTransaction | None = None,
    ) -> bool:
        """Give a table its primary key.

        Args:
            db: Connection to run on
            constraint: Primary key to add
            tx: Transaction to run in

        Returns:
            False when the table is missing or already has a primary key
        """
        require_name(constraint.table_name, "Table name")
        require_name(constraint.constraint_name, "Constraint name")
        require_columns(constraint.columns, "Primary key")

        table = await self._get_table(db, constraint.schema_name, constraint.table_name, tx)
        if table is None or table.primary_key_constraint is not None:
            return False

        def add(updated: Table) -> None:
            updated.primary_key_constraint = constraint

        await self._alter_table(
            db,
            table,
            lambda: self.builder.sql_add_primary_key(constraint),
            add,
            tx,
        )
        logger.debug(f"Created primary key {constraint.constraint_name}")
        return True

    async def get_primary_key_constraint(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str,
        tx: DatabaseTransaction | None = None,
    ) -> PrimaryKeyConstraint | None:
        """The table's primary key, or None when it has none."""
        require_name(table_name, "Table name")
        table = await self._get_table(db, schema_name, table_name, tx)
        if table is None:
            return None
        return table.primary_key_constraint

    async def drop_primary_key_constraint_if_exists(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str,
        tx: DatabaseTransaction | None = None,
    ) -> bool:
        """Drop the table's primary key whatever its name.

        Returns:
            False when the table is missing or has no primary key
        """
        require_name(table_name, "Table name")
        table = await self._get_table(db, schema_name, table_name, tx)
        if table is None or table.primary_key_constraint is None:
            return False
        constraint = table.primary_key_constraint

        def remove(updated: Table) -> None:
            updated.primary_key_constraint = None
            # AUTOINCREMENT is only valid on an INTEGER PRIMARY KEY
            for column in updated.columns:
                column.is_auto_increment = False

        await self._alter_table(
            db,
            table,
            lambda: self.builder.sql_drop_primary_key(constraint),
            remove,
            tx,
        )
        logger.debug(f"Dropped primary key {constraint.constraint_name}")
        return True

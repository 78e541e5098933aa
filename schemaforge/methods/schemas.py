"""Schema operations."""

from schemaforge.database import DatabaseConnection, DatabaseTransaction
from schemaforge.log import get_logger

from .base import MethodsBase, require_name, same_name

logger = get_logger(__name__)


class SchemaMethods(MethodsBase):
    async def does_schema_exist(
        self,
        db: DatabaseConnection,
        schema_name: str,
        tx: DatabaseTransaction | None = None,
    ) -> bool:
        """Whether ``schema_name`` exists.

        Always False on providers without schemas.
        """
        require_name(schema_name, "Schema name")
        if not self.supports_schemas:
            return False
        schema_name = self.builder.normalize_schema_name(schema_name)
        names = await self.get_schema_names(db, schema_name, tx)
        return any(same_name(n, schema_name) for n in names)

    async def create_schema_if_not_exists(
        self,
        db: DatabaseConnection,
        schema_name: str,
        tx: DatabaseTransaction | None = None,
    ) -> bool:
        """Create a schema.

        Args:
            db: Connection to run on
            schema_name: Schema to create
            tx: Transaction to run in

        Returns:
            False when the schema exists or the provider has no schemas
        """
        require_name(schema_name, "Schema name")
        if not self.supports_schemas:
            return False
        if await self.does_schema_exist(db, schema_name, tx):
            return False

        await self._execute(db, self.builder.sql_create_schema(schema_name), tx=tx)
        logger.debug(f"Created schema {schema_name}")
        return True

    async def get_schema_names(
        self,
        db: DatabaseConnection,
        name_filter: str | None = None,
        tx: DatabaseTransaction | None = None,
    ) -> list[str]:
        """Schema names, optionally filtered by a wildcard pattern."""
        if not self.supports_schemas:
            return []
        return await self.introspector.get_schema_names(db, name_filter, tx)

    async def drop_schema_if_exists(
        self,
        db: DatabaseConnection,
        schema_name: str,
        tx: DatabaseTransaction | None = None,
    ) -> bool:
        """Drop a schema and everything in it.

        Providers without ``DROP SCHEMA ... CASCADE`` drop the schema's views,
        foreign keys and tables first. That sequence runs in its own
        transaction when the caller did not pass one.
        """
        require_name(schema_name, "Schema name")
        if not self.supports_schemas:
            return False
        if not await self.does_schema_exist(db, schema_name, tx):
            return False

        if self.builder.supports_drop_schema_cascade:
            await self._execute(db, self.builder.sql_drop_schema(schema_name), tx=tx)
        elif tx is not None:
            await self._drop_schema_contents(db, schema_name, tx)
        else:
            async with await db.begin_transaction() as owned_tx:
                await self._drop_schema_contents(db, schema_name, owned_tx)

        logger.debug(f"Dropped schema {schema_name}")
        return True

    async def _drop_schema_contents(
        self,
        db: DatabaseConnection,
        schema_name: str,
        tx: DatabaseTransaction,
    ) -> None:
        for view_name in await self.introspector.get_view_names(db, schema_name, None, tx):
            await self._execute(db, self.builder.sql_drop_view(schema_name, view_name), tx=tx)

        # foreign keys first so tables can go in any order
        tables = await self.introspector.get_tables(db, schema_name, None, tx)
        for table in tables:
            for foreign_key in table.foreign_key_constraints:
                await self._execute(db, self.builder.sql_drop_foreign_key(foreign_key), tx=tx)
        for table in tables:
            table.foreign_key_constraints = []
            await self._drop_table(db, table, tx)

        await self._execute(db, self.builder.sql_drop_schema(schema_name), tx=tx)

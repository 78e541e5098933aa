"""Shared plumbing for the schema operation mixins."""

import copy
from collections.abc import Callable, Iterable
from typing import Any, TypeVar

from schemaforge.database import DatabaseConnection, DatabaseTransaction, SqlRunner
from schemaforge.ddl import DdlBuilder, RebuildPlan
from schemaforge.ddl.naming import filter_names
from schemaforge.exceptions import InvalidArgumentError, TableRebuildError
from schemaforge.introspection import Introspector, apply_constraint_flags
from schemaforge.log import get_logger
from schemaforge.models import OrderedColumn, Table
from schemaforge.typemap import SqlTypeDescriptor, TypeDescriptor
from schemaforge.types import DatabaseParamType, DatabaseRowType, ProviderType

logger = get_logger(__name__)

T = TypeVar("T")


def same_name(a: str | None, b: str | None) -> bool:
    return (a or "").lower() == (b or "").lower()


def has_column(columns: list[OrderedColumn], column_name: str) -> bool:
    return any(same_name(c.column_name, column_name) for c in columns)


def require_name(value: str | None, what: str) -> str:
    """Reject blank names before any statement runs.

    Raises:
        InvalidArgumentError: ``value`` is None or whitespace
    """
    if value is None or not str(value).strip():
        raise InvalidArgumentError(f"{what} is required")
    return value


def require_columns(columns: list[Any] | None, what: str) -> None:
    if not columns:
        raise InvalidArgumentError(f"{what} requires at least one column")
    for column in columns:
        require_name(getattr(column, "column_name", None), f"{what} column name")


class MethodsBase:
    """State and helpers every operation mixin relies on.

    All operations take the connection first and an optional transaction
    last. The transaction is handed unchanged to every nested call.
    """

    def __init__(
        self, builder: DdlBuilder, introspector: Introspector, runner: SqlRunner
    ) -> None:
        self.builder = builder
        self.introspector = introspector
        self.runner = runner
        self.registry = builder.registry

    # -- provider facts ------------------------------------------------------

    @property
    def provider_type(self) -> ProviderType:
        return self.builder.provider_type

    @property
    def default_schema(self) -> str:
        return self.builder.default_schema

    @property
    def supports_schemas(self) -> bool:
        return self.builder.supports_schemas

    async def supports_check_constraints(
        self, db: DatabaseConnection, tx: DatabaseTransaction | None = None
    ) -> bool:
        return await self.introspector.supports_check_constraints(db, tx)

    async def supports_ordered_keys_in_constraints(
        self, db: DatabaseConnection, tx: DatabaseTransaction | None = None
    ) -> bool:
        return self.builder.supports_ordered_keys_in_constraints

    async def get_database_version(
        self, db: DatabaseConnection, tx: DatabaseTransaction | None = None
    ) -> str:
        return await self.introspector.get_database_version(db, tx)

    def get_last_sql(self, db: DatabaseConnection) -> str | None:
        """Last statement sent on ``db`` by this provider's operations."""
        return self.runner.get_last_sql(db)

    def get_last_sql_with_params(
        self, db: DatabaseConnection
    ) -> tuple[str, DatabaseParamType] | None:
        return self.runner.get_last_sql_with_params(db)

    def get_host_type(self, sql_type: str | SqlTypeDescriptor) -> TypeDescriptor:
        return self.registry.resolve_host_type(sql_type)

    def get_sql_type(self, descriptor: TypeDescriptor | type) -> SqlTypeDescriptor:
        if not isinstance(descriptor, TypeDescriptor):
            descriptor = TypeDescriptor(descriptor)
        return self.registry.resolve_sql_type(descriptor)

    # -- execution -----------------------------------------------------------

    async def _execute(
        self,
        db: DatabaseConnection,
        sql: str,
        params: DatabaseParamType = None,
        tx: DatabaseTransaction | None = None,
    ) -> int:
        return await self.runner.execute(db, sql, params, tx)

    async def _execute_all(
        self,
        db: DatabaseConnection,
        statements: list[str],
        tx: DatabaseTransaction | None = None,
    ) -> None:
        await self.runner.execute_all(db, statements, tx)

    async def _fetch_all(
        self,
        db: DatabaseConnection,
        sql: str,
        params: DatabaseParamType = None,
        tx: DatabaseTransaction | None = None,
    ) -> list[DatabaseRowType]:
        return await self.runner.fetch_all(db, sql, params, tx)

    async def _fetch_scalar(
        self,
        db: DatabaseConnection,
        sql: str,
        params: DatabaseParamType = None,
        tx: DatabaseTransaction | None = None,
    ) -> Any:
        return await self.runner.fetch_scalar(db, sql, params, tx)

    # -- lookups -------------------------------------------------------------

    async def _get_table(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str,
        tx: DatabaseTransaction | None = None,
    ) -> Table | None:
        return await self.introspector.get_table(db, schema_name, table_name, tx)

    def _find_named(
        self, items: Iterable[T], name_of: Callable[[T], str], name: str
    ) -> T | None:
        name = self.builder.normalize_name(name)
        for item in items:
            if same_name(self.builder.normalize_name(name_of(item)), name):
                return item
        return None

    def _filter_named(
        self, items: Iterable[T], name_of: Callable[[T], str], name_filter: str | None
    ) -> list[T]:
        items = list(items)
        keep = set(filter_names([name_of(i) for i in items], name_filter))
        return [i for i in items if name_of(i) in keep]

    # -- tables that cannot be altered in place ------------------------------

    async def _rebuild_table(
        self,
        db: DatabaseConnection,
        current: Table,
        mutate: Callable[[Table], None],
        tx: DatabaseTransaction | None = None,
    ) -> None:
        """Recreate ``current`` after applying ``mutate`` to a copy of it.

        Column flags on the copy are recomputed from its constraint lists,
        so ``mutate`` only has to edit those lists (and columns).
        """
        updated = copy.deepcopy(current)
        mutate(updated)
        for column in updated.columns:
            column.check_expression = None
            column.default_expression = None
            column.referenced_table_name = None
            column.referenced_column_name = None
        apply_constraint_flags(updated)

        plan = self.builder.build_rebuild_table(current, updated)
        logger.debug(f"Rebuilding table {current.table_name}")
        await self._execute_all(db, plan.prepare, tx)
        try:
            if tx is None:
                async with await db.begin_transaction() as inner:
                    await self._run_rebuild(db, current, plan, inner)
            else:
                await self._run_rebuild(db, current, plan, tx)
        finally:
            await self._execute_all(db, plan.cleanup, tx)

    async def _run_rebuild(
        self,
        db: DatabaseConnection,
        current: Table,
        plan: RebuildPlan,
        tx: DatabaseTransaction,
    ) -> None:
        """Run the rebuild statements once no other table can lose rows.

        SQLite ignores ``PRAGMA foreign_keys`` inside a transaction, so a
        caller-supplied transaction leaves foreign keys enforced.

        Raises:
            TableRebuildError: foreign keys are enforced and another table
                references ``current``
        """
        if plan.referencing_query and await self._fetch_scalar(
            db, plan.foreign_keys_query, tx=tx
        ):
            rows = await self._fetch_all(db, plan.referencing_query, plan.params, tx)
            if rows:
                names = ", ".join(row["table_name"] for row in rows)
                raise TableRebuildError(
                    f"Cannot rebuild {current.table_name} while foreign keys are "
                    f"enforced; it is referenced by {names}"
                )
        await self._execute_all(db, plan.statements, tx)

    async def _alter_table(
        self,
        db: DatabaseConnection,
        table: Table,
        statement: Callable[[], str],
        mutate: Callable[[Table], None],
        tx: DatabaseTransaction | None = None,
    ) -> None:
        """Run an ALTER TABLE statement, or rebuild where the provider has none."""
        if self.builder.supports_alter_table_constraints:
            await self._execute(db, statement(), tx=tx)
        else:
            await self._rebuild_table(db, table, mutate, tx)

    async def _drop_table(
        self,
        db: DatabaseConnection,
        table: Table,
        tx: DatabaseTransaction | None = None,
    ) -> None:
        """Drop a table after the objects that would block it.

        Order: indexes, foreign keys, unique constraints, defaults, checks,
        then the table. The primary key goes with the table.
        """
        schema_name, table_name = table.schema_name, table.table_name
        statements = [
            self.builder.sql_drop_index(schema_name, table_name, ix.index_name)
            for ix in table.indexes
        ]
        if self.builder.supports_alter_table_constraints:
            statements += [
                self.builder.sql_drop_foreign_key(fk)
                for fk in table.foreign_key_constraints
            ]
            statements += [
                self.builder.sql_drop_unique_constraint(uc)
                for uc in table.unique_constraints
            ]
            statements += [
                self.builder.sql_drop_default_constraint(df)
                for df in table.default_constraints
            ]
            if await self.supports_check_constraints(db, tx):
                statements += [
                    self.builder.sql_drop_check_constraint(ck)
                    for ck in table.check_constraints
                ]
        statements.append(self.builder.sql_drop_table(schema_name, table_name))
        await self._execute_all(db, statements, tx)

"""Catalog introspection shared by every provider.

Providers run flat catalog queries and hand the rows to the helpers here,
which group them per table and rebuild the declarative ``Table`` model.
Column flags (primary key, unique, indexed, foreign key) are always derived
from the constraint lists so they cannot disagree with them.
"""

import re
from abc import ABC, abstractmethod
from collections.abc import Callable, Hashable, Iterable
from typing import Any

from schemaforge.database import DatabaseConnection, DatabaseTransaction, SqlRunner
from schemaforge.ddl import DdlBuilder
from schemaforge.ddl.naming import filter_names
from schemaforge.exceptions import SqlParseError
from schemaforge.log import get_logger
from schemaforge.models import Column, Index, OrderedColumn, Table, View
from schemaforge.types import DatabaseParamType, DatabaseRowType, ProviderType

logger = get_logger(__name__)

_VIEW_AS = re.compile(r"\sAS\s", re.IGNORECASE)


def group_rows(
    rows: Iterable[DatabaseRowType], key: Callable[[DatabaseRowType], Hashable]
) -> dict[Any, list[DatabaseRowType]]:
    """Group rows by key, keeping first-seen order of keys and rows."""
    groups: dict[Any, list[DatabaseRowType]] = {}
    for row in rows:
        groups.setdefault(key(row), []).append(row)
    return groups


def table_key(row: DatabaseRowType) -> tuple[str, str]:
    return ((row.get("schema_name") or "").lower(), row["table_name"].lower())


def split_csv(value: str | None) -> list[str]:
    if not value:
        return []
    return [part.strip() for part in str(value).split(",") if part.strip()]


def normalize_view_definition(definition: str) -> str:
    """Strip ``CREATE VIEW name AS`` and keep the query.

    Raises:
        SqlParseError: The text has no whitespace-delimited ``AS``
    """
    match = _VIEW_AS.search(definition)
    if match is None:
        raise SqlParseError(f"Cannot find AS in view definition: {definition!r}")
    return definition[match.end() :].strip()


def _same(a: str | None, b: str | None) -> bool:
    return (a or "").lower() == (b or "").lower()


def _in_columns(columns: list[OrderedColumn], column_name: str) -> bool:
    return any(_same(c.column_name, column_name) for c in columns)


def apply_constraint_flags(table: Table) -> Table:
    """Set column flags from the table's constraints and indexes."""
    primary_key = table.primary_key_constraint
    for column in table.columns:
        name = column.column_name

        column.is_primary_key = primary_key is not None and _in_columns(
            primary_key.columns, name
        )
        column.is_unique = any(
            len(u.columns) == 1 and _same(u.columns[0].column_name, name)
            for u in table.unique_constraints
        ) or any(
            ix.is_unique and len(ix.columns) == 1 and _same(ix.columns[0].column_name, name)
            for ix in table.indexes
        )
        column.is_indexed = any(_in_columns(ix.columns, name) for ix in table.indexes)

        column.is_foreign_key = False
        for fk in table.foreign_key_constraints:
            for position, source in enumerate(fk.source_columns):
                if not _same(source.column_name, name):
                    continue
                column.is_foreign_key = True
                column.referenced_table_name = fk.referenced_table_name
                if position < len(fk.referenced_columns):
                    column.referenced_column_name = fk.referenced_columns[
                        position
                    ].column_name
                column.on_delete = fk.on_delete
                column.on_update = fk.on_update
                break
            if column.is_foreign_key:
                break

        for check in table.check_constraints:
            if check.column_name and _same(check.column_name, name):
                column.check_expression = check.expression
                break
        for default in table.default_constraints:
            if _same(default.column_name, name):
                column.default_expression = default.expression
                break
    return table


class Introspector(ABC):
    """Reads schema objects back from a provider's system catalog."""

    provider_type: ProviderType

    def __init__(self, builder: DdlBuilder, runner: SqlRunner) -> None:
        self.builder = builder
        self.registry = builder.registry
        self.runner = runner

    # -- query helpers -------------------------------------------------------

    async def fetch_all(
        self,
        db: DatabaseConnection,
        sql: str,
        params: DatabaseParamType = None,
        tx: DatabaseTransaction | None = None,
    ) -> list[DatabaseRowType]:
        return await self.runner.fetch_all(db, sql, params, tx)

    async def fetch_scalar(
        self,
        db: DatabaseConnection,
        sql: str,
        params: DatabaseParamType = None,
        tx: DatabaseTransaction | None = None,
    ) -> Any:
        return await self.runner.fetch_scalar(db, sql, params, tx)

    def like_filter(self, name_filter: str | None) -> str | None:
        """LIKE pattern for a caller filter, None when the filter is blank."""
        if not name_filter or not name_filter.strip():
            return None
        return self.builder.to_like_string(name_filter)

    def filter_names(self, names: Iterable[str], name_filter: str | None) -> list[str]:
        """Exact wildcard match after the LIKE pre-filter."""
        return filter_names(names, name_filter)

    def make_column(
        self,
        schema_name: str | None,
        table_name: str,
        column_name: str,
        sql_type: str,
        is_nullable: bool = False,
        is_auto_increment: bool = False,
        length: int | None = None,
        precision: int | None = None,
        scale: int | None = None,
    ) -> Column:
        """Build a column from its catalog type, resolving the host type.

        Raises:
            NotSupportedError: The type map has no host type for ``sql_type``
        """
        host = self.registry.resolve_host_type(sql_type)
        return Column(
            schema_name,
            table_name,
            column_name,
            host_type=host.base_type,
            provider_data_types={self.provider_type: sql_type},
            length=length if length is not None else host.length,
            precision=precision if precision is not None else host.precision,
            scale=scale if scale is not None else host.scale,
            is_nullable=is_nullable,
            is_auto_increment=is_auto_increment or host.auto_increment,
            is_unicode=host.unicode,
            is_fixed_length=host.fixed_length,
        )

    def finish_tables(
        self, tables: list[Table], name_filter: str | None
    ) -> list[Table]:
        names = set(self.filter_names([t.table_name for t in tables], name_filter))
        return [apply_constraint_flags(t) for t in tables if t.table_name in names]

    # -- catalog -------------------------------------------------------------

    async def supports_check_constraints(
        self, db: DatabaseConnection, tx: DatabaseTransaction | None = None
    ) -> bool:
        return self.builder.supports_check_constraints

    @abstractmethod
    async def get_database_version(
        self, db: DatabaseConnection, tx: DatabaseTransaction | None = None
    ) -> str:
        pass

    @abstractmethod
    async def get_schema_names(
        self,
        db: DatabaseConnection,
        name_filter: str | None = None,
        tx: DatabaseTransaction | None = None,
    ) -> list[str]:
        pass

    @abstractmethod
    async def get_table_names(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        name_filter: str | None = None,
        tx: DatabaseTransaction | None = None,
    ) -> list[str]:
        pass

    @abstractmethod
    async def get_tables(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        name_filter: str | None = None,
        tx: DatabaseTransaction | None = None,
    ) -> list[Table]:
        pass

    async def get_table(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str,
        tx: DatabaseTransaction | None = None,
    ) -> Table | None:
        table_name = self.builder.normalize_name(table_name)
        for table in await self.get_tables(db, schema_name, table_name, tx):
            if _same(table.table_name, table_name):
                return table
        return None

    @abstractmethod
    async def get_indexes(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str | None = None,
        name_filter: str | None = None,
        tx: DatabaseTransaction | None = None,
    ) -> list[Index]:
        """Indexes that do not back a primary key or unique constraint."""
        pass

    @abstractmethod
    async def get_view_names(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        name_filter: str | None = None,
        tx: DatabaseTransaction | None = None,
    ) -> list[str]:
        pass

    @abstractmethod
    async def get_views(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        name_filter: str | None = None,
        tx: DatabaseTransaction | None = None,
    ) -> list[View]:
        pass


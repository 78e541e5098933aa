"""SQLite catalog: ``sqlite_master`` plus the index pragmas."""

from schemaforge.database import DatabaseConnection, DatabaseTransaction
from schemaforge.log import get_logger
from schemaforge.models import ColumnOrder, Index, OrderedColumn, Table, View
from schemaforge.types import ProviderType

from .base import Introspector, group_rows, normalize_view_definition
from .sqlite_parser import parse_create_table

logger = get_logger(__name__)


class SqliteIntrospector(Introspector):
    provider_type = ProviderType.SQLITE

    async def get_database_version(
        self, db: DatabaseConnection, tx: DatabaseTransaction | None = None
    ) -> str:
        return str(await self.fetch_scalar(db, "SELECT sqlite_version()", tx=tx) or "")

    async def get_schema_names(
        self,
        db: DatabaseConnection,
        name_filter: str | None = None,
        tx: DatabaseTransaction | None = None,
    ) -> list[str]:
        return []

    async def _master_rows(
        self,
        db: DatabaseConnection,
        object_type: str,
        name_filter: str | None,
        tx: DatabaseTransaction | None,
    ) -> list[dict]:
        where = self.like_filter(name_filter)
        sql = (
            "SELECT name, sql FROM sqlite_master "
            "WHERE type = :object_type AND name NOT LIKE 'sqlite_%'"
        )
        params: dict = {"object_type": object_type}
        if where:
            sql += " AND name LIKE :where"
            params["where"] = where
        sql += " ORDER BY name"
        rows = await self.fetch_all(db, sql, params, tx)
        names = set(self.filter_names([r["name"] for r in rows], name_filter))
        return [r for r in rows if r["name"] in names]

    async def get_table_names(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        name_filter: str | None = None,
        tx: DatabaseTransaction | None = None,
    ) -> list[str]:
        rows = await self._master_rows(db, "table", name_filter, tx)
        return [r["name"] for r in rows]

    async def get_tables(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        name_filter: str | None = None,
        tx: DatabaseTransaction | None = None,
    ) -> list[Table]:
        rows = await self._master_rows(db, "table", name_filter, tx)
        indexes = await self.get_indexes(db, None, None, None, tx)
        indexes_by_table = group_rows(indexes, lambda ix: ix.table_name.lower())

        tables = []
        for row in rows:
            parsed = parse_create_table(row["sql"])
            table = Table(
                None,
                row["name"],
                columns=[
                    self.make_column(
                        None,
                        row["name"],
                        c.column_name,
                        c.sql_type,
                        is_nullable=c.is_nullable,
                        is_auto_increment=c.is_auto_increment,
                    )
                    for c in parsed.columns
                ],
                primary_key_constraint=parsed.primary_key,
                check_constraints=parsed.check_constraints,
                default_constraints=parsed.default_constraints,
                unique_constraints=parsed.unique_constraints,
                foreign_key_constraints=parsed.foreign_key_constraints,
                indexes=indexes_by_table.get(row["name"].lower(), []),
            )
            tables.append(table)
        return self.finish_tables(tables, name_filter)

    async def get_indexes(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str | None = None,
        name_filter: str | None = None,
        tx: DatabaseTransaction | None = None,
    ) -> list[Index]:
        # origin 'c' = CREATE INDEX; 'u'/'pk' back constraints parsed from the DDL
        sql = (
            "SELECT m.name AS table_name, il.name AS index_name, "
            'il."unique" AS is_unique, ii.name AS column_name, '
            'ii."desc" AS is_desc '
            "FROM sqlite_master m "
            "JOIN pragma_index_list(m.name) il "
            "JOIN pragma_index_xinfo(il.name) ii "
            "WHERE m.type = 'table' AND il.origin = 'c' AND ii.key = 1"
        )
        params: dict = {}
        if table_name:
            sql += " AND lower(m.name) = lower(:table_name)"
            params["table_name"] = self.builder.normalize_name(table_name)
        where = self.like_filter(name_filter)
        if where:
            sql += " AND il.name LIKE :where"
            params["where"] = where
        sql += " ORDER BY m.name, il.name, ii.seqno"

        rows = await self.fetch_all(db, sql, params or None, tx)
        keep = set(self.filter_names({r["index_name"] for r in rows}, name_filter))
        indexes = []
        for (table, index_name), index_rows in group_rows(
            rows, lambda r: (r["table_name"], r["index_name"])
        ).items():
            if index_name not in keep:
                continue
            indexes.append(
                Index(
                    None,
                    table,
                    index_name,
                    [
                        OrderedColumn(
                            r["column_name"],
                            ColumnOrder.DESCENDING
                            if r["is_desc"]
                            else ColumnOrder.ASCENDING,
                        )
                        for r in index_rows
                    ],
                    is_unique=bool(index_rows[0]["is_unique"]),
                )
            )
        return indexes

    async def get_view_names(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        name_filter: str | None = None,
        tx: DatabaseTransaction | None = None,
    ) -> list[str]:
        rows = await self._master_rows(db, "view", name_filter, tx)
        return [r["name"] for r in rows]

    async def get_views(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        name_filter: str | None = None,
        tx: DatabaseTransaction | None = None,
    ) -> list[View]:
        rows = await self._master_rows(db, "view", name_filter, tx)
        return [
            View(None, r["name"], normalize_view_definition(r["sql"])) for r in rows
        ]

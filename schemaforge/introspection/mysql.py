"""MySQL / MariaDB catalog queries, scoped to ``DATABASE()``."""

import re

from schemaforge.database import DatabaseConnection, DatabaseTransaction
from schemaforge.ddl import naming
from schemaforge.log import get_logger
from schemaforge.models import (
    CheckConstraint,
    ColumnOrder,
    DefaultConstraint,
    ForeignKeyAction,
    ForeignKeyConstraint,
    Index,
    OrderedColumn,
    PrimaryKeyConstraint,
    Table,
    UniqueConstraint,
    View,
)
from schemaforge.types import DatabaseRowType, ProviderType

from .base import Introspector, group_rows, split_csv

logger = get_logger(__name__)

# first releases that enforce CHECK constraints
MYSQL_CHECK_VERSION = (8, 0, 16)
MARIADB_CHECK_VERSION = (10, 2, 1)

_NUMERIC_DEFAULT = re.compile(r"^-?\d+(\.\d+)?$")

_COLUMNS_SQL = """
SELECT
    c.TABLE_NAME AS table_name,
    c.COLUMN_NAME AS column_name,
    c.ORDINAL_POSITION AS column_ordinal,
    c.COLUMN_DEFAULT AS column_default,
    CASE WHEN c.IS_NULLABLE = 'YES' THEN 1 ELSE 0 END AS is_nullable,
    c.COLUMN_TYPE AS data_type,
    c.EXTRA AS extra
FROM INFORMATION_SCHEMA.COLUMNS c
    JOIN INFORMATION_SCHEMA.TABLES t
        ON t.TABLE_SCHEMA = c.TABLE_SCHEMA AND t.TABLE_NAME = c.TABLE_NAME
WHERE t.TABLE_TYPE = 'BASE TABLE' AND c.TABLE_SCHEMA = DATABASE()
"""

_KEYS_SQL = """
SELECT
    tc.TABLE_NAME AS table_name,
    tc.CONSTRAINT_NAME AS constraint_name,
    tc.CONSTRAINT_TYPE AS constraint_type,
    k.COLUMN_NAME AS column_name,
    k.ORDINAL_POSITION AS column_ordinal,
    k.REFERENCED_TABLE_NAME AS referenced_table_name,
    k.REFERENCED_COLUMN_NAME AS referenced_column_name,
    rc.DELETE_RULE AS delete_rule,
    rc.UPDATE_RULE AS update_rule
FROM INFORMATION_SCHEMA.TABLE_CONSTRAINTS tc
    JOIN INFORMATION_SCHEMA.KEY_COLUMN_USAGE k
        ON k.CONSTRAINT_SCHEMA = tc.CONSTRAINT_SCHEMA
        AND k.TABLE_NAME = tc.TABLE_NAME
        AND k.CONSTRAINT_NAME = tc.CONSTRAINT_NAME
    LEFT OUTER JOIN INFORMATION_SCHEMA.REFERENTIAL_CONSTRAINTS rc
        ON rc.CONSTRAINT_SCHEMA = tc.CONSTRAINT_SCHEMA
        AND rc.TABLE_NAME = tc.TABLE_NAME
        AND rc.CONSTRAINT_NAME = tc.CONSTRAINT_NAME
WHERE tc.TABLE_SCHEMA = DATABASE()
    AND tc.CONSTRAINT_TYPE IN ('PRIMARY KEY', 'UNIQUE', 'FOREIGN KEY')
"""

_CHECKS_SQL = """
SELECT
    tc.TABLE_NAME AS table_name,
    cc.CONSTRAINT_NAME AS constraint_name,
    cc.CHECK_CLAUSE AS expression
FROM INFORMATION_SCHEMA.CHECK_CONSTRAINTS cc
    JOIN INFORMATION_SCHEMA.TABLE_CONSTRAINTS tc
        ON tc.CONSTRAINT_SCHEMA = cc.CONSTRAINT_SCHEMA
        AND tc.CONSTRAINT_NAME = cc.CONSTRAINT_NAME
WHERE tc.TABLE_SCHEMA = DATABASE() AND tc.CONSTRAINT_TYPE = 'CHECK'
"""

# indexes named after a key constraint back that constraint
_INDEXES_SQL = """
SELECT
    stats.TABLE_NAME AS table_name,
    stats.INDEX_NAME AS index_name,
    CASE WHEN stats.NON_UNIQUE = 1 THEN 0 ELSE 1 END AS is_unique,
    GROUP_CONCAT(stats.COLUMN_NAME ORDER BY stats.SEQ_IN_INDEX ASC) AS columns_csv,
    GROUP_CONCAT(CASE WHEN stats.COLLATION = 'D' THEN 'DESC' ELSE 'ASC' END
        ORDER BY stats.SEQ_IN_INDEX ASC) AS columns_desc_csv
FROM INFORMATION_SCHEMA.STATISTICS stats
WHERE stats.TABLE_SCHEMA = DATABASE()
    AND stats.INDEX_NAME != 'PRIMARY'
    AND stats.INDEX_NAME NOT IN (
        SELECT tc.CONSTRAINT_NAME FROM INFORMATION_SCHEMA.TABLE_CONSTRAINTS tc
        WHERE tc.TABLE_SCHEMA = DATABASE()
            AND tc.TABLE_NAME = stats.TABLE_NAME
            AND tc.CONSTRAINT_TYPE IN ('PRIMARY KEY', 'UNIQUE', 'FOREIGN KEY', 'CHECK')
    )
"""


def parse_version(version: str) -> tuple[int, ...]:
    """``8.0.36-log`` -> (8, 0, 36)."""
    match = re.match(r"(\d+(?:\.\d+)*)", version.strip())
    if match is None:
        return ()
    return tuple(int(part) for part in match.group(1).split("."))


def version_supports_check_constraints(version: str) -> bool:
    numbers = parse_version(version)
    if "mariadb" in version.lower():
        return numbers >= MARIADB_CHECK_VERSION
    return numbers >= MYSQL_CHECK_VERSION


def check_expression_column(expression: str, column_names: list[str]) -> str | None:
    """The only table column an expression mentions, if exactly one."""
    found = [
        name
        for name in column_names
        if re.search(rf"(?<![\w`]){re.escape(name)}(?![\w`])|`{re.escape(name)}`", expression)
    ]
    return found[0] if len(found) == 1 else None


def format_default(default: str, extra: str) -> str:
    """Render ``COLUMN_DEFAULT`` as an expression usable in DDL."""
    if "DEFAULT_GENERATED" in extra.upper():
        return default
    if _NUMERIC_DEFAULT.match(default) or default.upper() in ("NULL", "CURRENT_TIMESTAMP"):
        return default
    if default.startswith("'") or default.startswith("("):
        return default
    return "'" + default.replace("'", "''") + "'"


class MySqlIntrospector(Introspector):
    provider_type = ProviderType.MYSQL

    async def get_database_version(
        self, db: DatabaseConnection, tx: DatabaseTransaction | None = None
    ) -> str:
        return str(await self.fetch_scalar(db, "SELECT VERSION()", tx=tx) or "")

    async def supports_check_constraints(
        self, db: DatabaseConnection, tx: DatabaseTransaction | None = None
    ) -> bool:
        return version_supports_check_constraints(
            await self.get_database_version(db, tx)
        )

    async def get_schema_names(
        self,
        db: DatabaseConnection,
        name_filter: str | None = None,
        tx: DatabaseTransaction | None = None,
    ) -> list[str]:
        return []

    async def get_table_names(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        name_filter: str | None = None,
        tx: DatabaseTransaction | None = None,
    ) -> list[str]:
        sql = (
            "SELECT TABLE_NAME AS table_name FROM INFORMATION_SCHEMA.TABLES "
            "WHERE TABLE_TYPE = 'BASE TABLE' AND TABLE_SCHEMA = DATABASE()"
        )
        params = {}
        where = self.like_filter(name_filter)
        if where:
            sql += " AND TABLE_NAME LIKE :where"
            params["where"] = where
        sql += " ORDER BY TABLE_NAME"
        rows = await self.fetch_all(db, sql, params or None, tx)
        return self.filter_names([r["table_name"] for r in rows], name_filter)

    async def get_tables(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        name_filter: str | None = None,
        tx: DatabaseTransaction | None = None,
    ) -> list[Table]:
        params = {}
        where = self.like_filter(name_filter)
        if where:
            params["where"] = where

        def narrowed(sql: str, table_column: str, order_by: str) -> str:
            if where:
                sql += f" AND {table_column} LIKE :where"
            return f"{sql} ORDER BY {order_by}"

        column_rows = await self.fetch_all(
            db,
            narrowed(_COLUMNS_SQL, "c.TABLE_NAME", "c.TABLE_NAME, c.ORDINAL_POSITION"),
            params or None,
            tx,
        )
        key_rows = await self.fetch_all(
            db,
            narrowed(
                _KEYS_SQL,
                "tc.TABLE_NAME",
                "tc.TABLE_NAME, tc.CONSTRAINT_NAME, k.ORDINAL_POSITION",
            ),
            params or None,
            tx,
        )
        check_rows = []
        if await self.supports_check_constraints(db, tx):
            check_rows = await self.fetch_all(
                db,
                narrowed(_CHECKS_SQL, "tc.TABLE_NAME", "tc.TABLE_NAME, cc.CONSTRAINT_NAME"),
                params or None,
                tx,
            )
        indexes = await self.get_indexes(db, None, None, None, tx)

        def by_table(row: DatabaseRowType) -> str:
            return row["table_name"].lower()

        keys = group_rows(key_rows, by_table)
        checks = group_rows(check_rows, by_table)
        indexes_by_table = group_rows(indexes, lambda ix: ix.table_name.lower())

        tables = []
        for key, rows in group_rows(column_rows, by_table).items():
            name = rows[0]["table_name"]
            table = Table(None, name, indexes=indexes_by_table.get(key, []))
            for row in rows:
                extra = row["extra"] or ""
                table.columns.append(
                    self.make_column(
                        None,
                        name,
                        row["column_name"],
                        row["data_type"],
                        is_nullable=bool(row["is_nullable"]),
                        is_auto_increment="auto_increment" in extra.lower(),
                    )
                )
                if row["column_default"] is not None:
                    table.default_constraints.append(
                        DefaultConstraint(
                            None,
                            name,
                            row["column_name"],
                            naming.default_constraint_name(name, row["column_name"]),
                            format_default(str(row["column_default"]), extra),
                        )
                    )
            self._add_keys(table, keys.get(key, []))
            for row in checks.get(key, []):
                table.check_constraints.append(
                    CheckConstraint(
                        None,
                        name,
                        check_expression_column(row["expression"], table.column_names),
                        row["constraint_name"],
                        row["expression"],
                    )
                )
            tables.append(table)
        return self.finish_tables(tables, name_filter)

    def _add_keys(self, table: Table, rows: list[DatabaseRowType]) -> None:
        name = table.table_name
        for constraint_name, key_rows in group_rows(
            rows, lambda r: r["constraint_name"]
        ).items():
            first = key_rows[0]
            columns = [OrderedColumn(r["column_name"]) for r in key_rows]
            if first["constraint_type"] == "PRIMARY KEY":
                table.primary_key_constraint = PrimaryKeyConstraint(
                    None, name, constraint_name, columns
                )
            elif first["constraint_type"] == "UNIQUE":
                table.unique_constraints.append(
                    UniqueConstraint(None, name, constraint_name, columns)
                )
            else:
                table.foreign_key_constraints.append(
                    ForeignKeyConstraint(
                        None,
                        name,
                        constraint_name,
                        columns,
                        first["referenced_table_name"],
                        [OrderedColumn(r["referenced_column_name"]) for r in key_rows],
                        ForeignKeyAction.parse(first["delete_rule"]),
                        ForeignKeyAction.parse(first["update_rule"]),
                    )
                )

    async def get_indexes(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str | None = None,
        name_filter: str | None = None,
        tx: DatabaseTransaction | None = None,
    ) -> list[Index]:
        sql = _INDEXES_SQL
        params = {}
        if table_name:
            sql += " AND stats.TABLE_NAME = :table_name"
            params["table_name"] = self.builder.normalize_name(table_name)
        where = self.like_filter(name_filter)
        if where:
            sql += " AND stats.INDEX_NAME LIKE :where"
            params["where"] = where
        sql += (
            " GROUP BY stats.TABLE_NAME, stats.INDEX_NAME, stats.NON_UNIQUE"
            " ORDER BY table_name, index_name"
        )
        rows = await self.fetch_all(db, sql, params or None, tx)
        keep = set(self.filter_names([r["index_name"] for r in rows], name_filter))

        indexes = []
        for row in rows:
            if row["index_name"] not in keep:
                continue
            directions = split_csv(row["columns_desc_csv"])
            columns = [
                OrderedColumn(
                    column_name,
                    ColumnOrder.DESCENDING
                    if i < len(directions) and directions[i].upper() == "DESC"
                    else ColumnOrder.ASCENDING,
                )
                for i, column_name in enumerate(split_csv(row["columns_csv"]))
            ]
            indexes.append(
                Index(
                    None,
                    row["table_name"],
                    row["index_name"],
                    columns,
                    is_unique=bool(row["is_unique"]),
                )
            )
        return indexes

    async def _view_rows(
        self,
        db: DatabaseConnection,
        name_filter: str | None,
        tx: DatabaseTransaction | None,
    ) -> list[DatabaseRowType]:
        # VIEW_DEFINITION already holds the query without CREATE VIEW ... AS
        sql = (
            "SELECT TABLE_NAME AS view_name, VIEW_DEFINITION AS view_definition "
            "FROM INFORMATION_SCHEMA.VIEWS "
            "WHERE VIEW_DEFINITION IS NOT NULL AND TABLE_SCHEMA = DATABASE()"
        )
        params = {}
        where = self.like_filter(name_filter)
        if where:
            sql += " AND TABLE_NAME LIKE :where"
            params["where"] = where
        sql += " ORDER BY TABLE_NAME"
        rows = await self.fetch_all(db, sql, params or None, tx)
        keep = set(self.filter_names([r["view_name"] for r in rows], name_filter))
        return [r for r in rows if r["view_name"] in keep]

    async def get_view_names(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        name_filter: str | None = None,
        tx: DatabaseTransaction | None = None,
    ) -> list[str]:
        return [r["view_name"] for r in await self._view_rows(db, name_filter, tx)]

    async def get_views(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        name_filter: str | None = None,
        tx: DatabaseTransaction | None = None,
    ) -> list[View]:
        rows = await self._view_rows(db, name_filter, tx)
        return [View(None, r["view_name"], r["view_definition"].strip()) for r in rows]

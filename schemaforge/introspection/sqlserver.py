"""SQL Server catalog queries (``sys.*`` and ``INFORMATION_SCHEMA``)."""

from schemaforge.database import DatabaseConnection, DatabaseTransaction
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

from .base import Introspector, group_rows, normalize_view_definition, table_key

logger = get_logger(__name__)

_LENGTH_TYPES = ("char", "varchar", "nchar", "nvarchar", "binary", "varbinary")
_PRECISION_TYPES = ("decimal", "numeric")

_COLUMNS_SQL = """
SELECT
    t.TABLE_SCHEMA AS schema_name,
    t.TABLE_NAME AS table_name,
    c.COLUMN_NAME AS column_name,
    c.ORDINAL_POSITION AS column_ordinal,
    CASE WHEN c.IS_NULLABLE = 'YES' THEN 1 ELSE 0 END AS is_nullable,
    COLUMNPROPERTY(OBJECT_ID(t.TABLE_SCHEMA + '.' + t.TABLE_NAME), c.COLUMN_NAME, 'IsIdentity') AS is_identity,
    c.DATA_TYPE AS data_type,
    c.CHARACTER_MAXIMUM_LENGTH AS max_length,
    c.NUMERIC_PRECISION AS numeric_precision,
    c.NUMERIC_SCALE AS numeric_scale
FROM INFORMATION_SCHEMA.TABLES t
    JOIN INFORMATION_SCHEMA.COLUMNS c
        ON t.TABLE_SCHEMA = c.TABLE_SCHEMA AND t.TABLE_NAME = c.TABLE_NAME
WHERE t.TABLE_TYPE = 'BASE TABLE'
    AND t.TABLE_SCHEMA = :schema_name
"""

# primary keys, unique constraints and plain indexes in one pass
_KEYS_SQL = """
SELECT
    sh.name AS schema_name,
    t.name AS table_name,
    i.name AS constraint_name,
    c.name AS column_name,
    ic.key_ordinal AS column_key_ordinal,
    ic.is_descending_key AS is_desc,
    i.is_unique,
    i.is_primary_key,
    i.is_unique_constraint
FROM sys.indexes i
    JOIN sys.index_columns ic ON i.index_id = ic.index_id AND i.object_id = ic.object_id
    JOIN sys.tables t ON t.object_id = i.object_id
    JOIN sys.columns c ON t.object_id = c.object_id AND ic.column_id = c.column_id
    JOIN sys.schemas sh ON sh.schema_id = t.schema_id
WHERE t.is_ms_shipped = 0
    AND ic.key_ordinal > 0
    AND sh.name = :schema_name
"""

_FOREIGN_KEYS_SQL = """
SELECT
    kfk.TABLE_SCHEMA AS schema_name,
    kfk.TABLE_NAME AS table_name,
    kfk.COLUMN_NAME AS column_name,
    rc.CONSTRAINT_NAME AS constraint_name,
    kpk.TABLE_NAME AS referenced_table_name,
    kpk.COLUMN_NAME AS referenced_column_name,
    rc.UPDATE_RULE AS update_rule,
    rc.DELETE_RULE AS delete_rule
FROM INFORMATION_SCHEMA.REFERENTIAL_CONSTRAINTS rc
    JOIN INFORMATION_SCHEMA.KEY_COLUMN_USAGE kfk
        ON rc.CONSTRAINT_SCHEMA = kfk.CONSTRAINT_SCHEMA AND rc.CONSTRAINT_NAME = kfk.CONSTRAINT_NAME
    JOIN INFORMATION_SCHEMA.KEY_COLUMN_USAGE kpk
        ON rc.UNIQUE_CONSTRAINT_SCHEMA = kpk.CONSTRAINT_SCHEMA
        AND rc.UNIQUE_CONSTRAINT_NAME = kpk.CONSTRAINT_NAME
        AND kfk.ORDINAL_POSITION = kpk.ORDINAL_POSITION
WHERE kfk.TABLE_SCHEMA = :schema_name
"""

_CHECKS_SQL = """
SELECT
    SCHEMA_NAME(t.schema_id) AS schema_name,
    t.name AS table_name,
    col.name AS column_name,
    con.name AS constraint_name,
    con.definition AS expression
FROM sys.check_constraints con
    JOIN sys.objects t ON con.parent_object_id = t.object_id
    LEFT OUTER JOIN sys.all_columns col
        ON con.parent_column_id = col.column_id AND con.parent_object_id = col.object_id
WHERE con.definition IS NOT NULL
    AND SCHEMA_NAME(t.schema_id) = :schema_name
"""

_DEFAULTS_SQL = """
SELECT
    SCHEMA_NAME(t.schema_id) AS schema_name,
    t.name AS table_name,
    col.name AS column_name,
    con.name AS constraint_name,
    con.definition AS expression
FROM sys.default_constraints con
    JOIN sys.objects t ON con.parent_object_id = t.object_id
    JOIN sys.all_columns col
        ON con.parent_column_id = col.column_id AND con.parent_object_id = col.object_id
WHERE SCHEMA_NAME(t.schema_id) = :schema_name
"""


def format_sql_type(
    data_type: str,
    max_length: int | None,
    precision: int | None,
    scale: int | None,
) -> str:
    """Rebuild the full type text from its ``INFORMATION_SCHEMA`` parts."""
    name = data_type.lower()
    if name in _LENGTH_TYPES and max_length is not None:
        return f"{name}(max)" if max_length == -1 else f"{name}({max_length})"
    if name in _PRECISION_TYPES and precision is not None:
        return f"{name}({precision},{scale or 0})"
    return name


def _ordered(rows: list[DatabaseRowType]) -> list[OrderedColumn]:
    return [
        OrderedColumn(
            r["column_name"],
            ColumnOrder.DESCENDING if r["is_desc"] else ColumnOrder.ASCENDING,
        )
        for r in sorted(rows, key=lambda r: r["column_key_ordinal"])
    ]


class SqlServerIntrospector(Introspector):
    provider_type = ProviderType.SQLSERVER

    async def get_database_version(
        self, db: DatabaseConnection, tx: DatabaseTransaction | None = None
    ) -> str:
        version = await self.fetch_scalar(
            db, "SELECT CAST(SERVERPROPERTY('ProductVersion') AS varchar(128))", tx=tx
        )
        return str(version or "")

    async def get_schema_names(
        self,
        db: DatabaseConnection,
        name_filter: str | None = None,
        tx: DatabaseTransaction | None = None,
    ) -> list[str]:
        sql = "SELECT name AS schema_name FROM sys.schemas"
        params = {}
        where = self.like_filter(name_filter)
        if where:
            sql += " WHERE name LIKE :where"
            params["where"] = where
        sql += " ORDER BY name"
        rows = await self.fetch_all(db, sql, params or None, tx)
        return self.filter_names([r["schema_name"] for r in rows], name_filter)

    async def get_table_names(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        name_filter: str | None = None,
        tx: DatabaseTransaction | None = None,
    ) -> list[str]:
        sql = (
            "SELECT TABLE_NAME AS table_name FROM INFORMATION_SCHEMA.TABLES "
            "WHERE TABLE_TYPE = 'BASE TABLE' AND TABLE_SCHEMA = :schema_name"
        )
        params = {"schema_name": self.builder.normalize_schema_name(schema_name)}
        where = self.like_filter(name_filter)
        if where:
            sql += " AND TABLE_NAME LIKE :where"
            params["where"] = where
        sql += " ORDER BY TABLE_NAME"
        rows = await self.fetch_all(db, sql, params, tx)
        return self.filter_names([r["table_name"] for r in rows], name_filter)

    async def get_tables(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        name_filter: str | None = None,
        tx: DatabaseTransaction | None = None,
    ) -> list[Table]:
        params = {"schema_name": self.builder.normalize_schema_name(schema_name)}
        where = self.like_filter(name_filter)
        if where:
            params["where"] = where

        def narrowed(sql: str, table_column: str, order_by: str) -> str:
            if where:
                sql += f" AND {table_column} LIKE :where"
            return f"{sql} ORDER BY {order_by}"

        column_rows = await self.fetch_all(
            db,
            narrowed(_COLUMNS_SQL, "t.TABLE_NAME", "t.TABLE_NAME, c.ORDINAL_POSITION"),
            params,
            tx,
        )
        key_rows = await self.fetch_all(
            db,
            narrowed(_KEYS_SQL, "t.name", "t.name, i.name, ic.key_ordinal"),
            params,
            tx,
        )
        foreign_key_rows = await self.fetch_all(
            db,
            narrowed(
                _FOREIGN_KEYS_SQL,
                "kfk.TABLE_NAME",
                "kfk.TABLE_NAME, rc.CONSTRAINT_NAME, kfk.ORDINAL_POSITION",
            ),
            params,
            tx,
        )
        check_rows = await self.fetch_all(
            db, narrowed(_CHECKS_SQL, "t.name", "t.name, con.name"), params, tx
        )
        default_rows = await self.fetch_all(
            db, narrowed(_DEFAULTS_SQL, "t.name", "t.name, con.name"), params, tx
        )

        keys = group_rows(key_rows, table_key)
        foreign_keys = group_rows(foreign_key_rows, table_key)
        checks = group_rows(check_rows, table_key)
        defaults = group_rows(default_rows, table_key)

        tables = []
        for key, rows in group_rows(column_rows, table_key).items():
            schema, name = rows[0]["schema_name"], rows[0]["table_name"]
            table = Table(schema, name)
            for row in rows:
                table.columns.append(
                    self.make_column(
                        schema,
                        name,
                        row["column_name"],
                        format_sql_type(
                            row["data_type"],
                            row["max_length"],
                            row["numeric_precision"],
                            row["numeric_scale"],
                        ),
                        is_nullable=bool(row["is_nullable"]),
                        is_auto_increment=bool(row["is_identity"]),
                    )
                )
            self._add_keys(table, keys.get(key, []))
            self._add_foreign_keys(table, foreign_keys.get(key, []))
            table.check_constraints = [
                CheckConstraint(
                    schema, name, r["column_name"], r["constraint_name"], r["expression"]
                )
                for r in checks.get(key, [])
            ]
            table.default_constraints = [
                DefaultConstraint(
                    schema, name, r["column_name"], r["constraint_name"], r["expression"]
                )
                for r in defaults.get(key, [])
            ]
            tables.append(table)
        return self.finish_tables(tables, name_filter)

    def _add_keys(self, table: Table, rows: list[DatabaseRowType]) -> None:
        schema, name = table.schema_name, table.table_name
        for constraint_name, index_rows in group_rows(
            rows, lambda r: r["constraint_name"]
        ).items():
            first = index_rows[0]
            columns = _ordered(index_rows)
            if first["is_primary_key"]:
                table.primary_key_constraint = PrimaryKeyConstraint(
                    schema, name, constraint_name, columns
                )
            elif first["is_unique_constraint"]:
                table.unique_constraints.append(
                    UniqueConstraint(schema, name, constraint_name, columns)
                )
            else:
                table.indexes.append(
                    Index(
                        schema,
                        name,
                        constraint_name,
                        columns,
                        is_unique=bool(first["is_unique"]),
                    )
                )

    def _add_foreign_keys(self, table: Table, rows: list[DatabaseRowType]) -> None:
        for constraint_name, fk_rows in group_rows(
            rows, lambda r: r["constraint_name"]
        ).items():
            first = fk_rows[0]
            table.foreign_key_constraints.append(
                ForeignKeyConstraint(
                    table.schema_name,
                    table.table_name,
                    constraint_name,
                    [OrderedColumn(r["column_name"]) for r in fk_rows],
                    first["referenced_table_name"],
                    [OrderedColumn(r["referenced_column_name"]) for r in fk_rows],
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
        sql = (
            "SELECT SCHEMA_NAME(t.schema_id) AS schema_name, t.name AS table_name, "
            "ind.name AS index_name, col.name AS column_name, "
            "ind.is_unique AS is_unique, ic.key_ordinal AS column_key_ordinal, "
            "ic.is_descending_key AS is_desc "
            "FROM sys.indexes ind "
            "JOIN sys.tables t ON ind.object_id = t.object_id "
            "JOIN sys.index_columns ic ON ind.object_id = ic.object_id AND ind.index_id = ic.index_id "
            "JOIN sys.columns col ON ic.object_id = col.object_id AND ic.column_id = col.column_id "
            "WHERE ind.is_primary_key = 0 AND ind.is_unique_constraint = 0 "
            "AND t.is_ms_shipped = 0 AND ic.key_ordinal > 0 "
            "AND SCHEMA_NAME(t.schema_id) = :schema_name"
        )
        params = {"schema_name": self.builder.normalize_schema_name(schema_name)}
        if table_name:
            sql += " AND t.name = :table_name"
            params["table_name"] = self.builder.normalize_name(table_name)
        where = self.like_filter(name_filter)
        if where:
            sql += " AND ind.name LIKE :where"
            params["where"] = where
        sql += " ORDER BY t.name, ind.name, ic.key_ordinal"

        rows = await self.fetch_all(db, sql, params, tx)
        keep = set(self.filter_names({r["index_name"] for r in rows}, name_filter))
        return [
            Index(
                index_rows[0]["schema_name"],
                index_rows[0]["table_name"],
                index_name,
                _ordered(index_rows),
                is_unique=bool(index_rows[0]["is_unique"]),
            )
            for (_, index_name), index_rows in group_rows(
                rows, lambda r: (r["table_name"], r["index_name"])
            ).items()
            if index_name in keep
        ]

    async def _view_rows(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        name_filter: str | None,
        tx: DatabaseTransaction | None,
    ) -> list[DatabaseRowType]:
        sql = (
            "SELECT SCHEMA_NAME(v.schema_id) AS schema_name, v.name AS view_name, "
            "m.definition AS view_definition "
            "FROM sys.objects v JOIN sys.sql_modules m ON v.object_id = m.object_id "
            "WHERE v.type = 'V' AND v.is_ms_shipped = 0 "
            "AND SCHEMA_NAME(v.schema_id) = :schema_name"
        )
        params = {"schema_name": self.builder.normalize_schema_name(schema_name)}
        where = self.like_filter(name_filter)
        if where:
            sql += " AND v.name LIKE :where"
            params["where"] = where
        sql += " ORDER BY v.name"
        rows = await self.fetch_all(db, sql, params, tx)
        keep = set(self.filter_names([r["view_name"] for r in rows], name_filter))
        return [r for r in rows if r["view_name"] in keep]

    async def get_view_names(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        name_filter: str | None = None,
        tx: DatabaseTransaction | None = None,
    ) -> list[str]:
        rows = await self._view_rows(db, schema_name, name_filter, tx)
        return [r["view_name"] for r in rows]

    async def get_views(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        name_filter: str | None = None,
        tx: DatabaseTransaction | None = None,
    ) -> list[View]:
        rows = await self._view_rows(db, schema_name, name_filter, tx)
        return [
            View(
                r["schema_name"],
                r["view_name"],
                normalize_view_definition(r["view_definition"]),
            )
            for r in rows
        ]

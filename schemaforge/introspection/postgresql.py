"""PostgreSQL catalog queries (``pg_catalog``)."""

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

from .base import Introspector, group_rows, split_csv, table_key

logger = get_logger(__name__)

# PostGIS bookkeeping objects created alongside the extension
POSTGIS_TABLES = ("spatial_ref_sys",)
POSTGIS_VIEWS = (
    "geography_columns",
    "geometry_columns",
    "raster_columns",
    "raster_overviews",
)

_USER_SCHEMAS = "schemas.nspname NOT LIKE 'pg_%' AND schemas.nspname != 'information_schema'"

_COLUMNS_SQL = f"""
SELECT
    schemas.nspname AS schema_name,
    tables.relname AS table_name,
    columns.attname AS column_name,
    columns.attnum AS column_ordinal,
    pg_get_expr(column_defs.adbin, column_defs.adrelid) AS column_default,
    CASE WHEN columns.attnotnull THEN 0 ELSE 1 END AS is_nullable,
    CASE WHEN columns.attidentity = '' THEN 0 ELSE 1 END AS is_identity,
    format_type(columns.atttypid, columns.atttypmod) AS data_type
FROM pg_catalog.pg_attribute AS columns
    JOIN pg_catalog.pg_class AS tables
        ON columns.attrelid = tables.oid AND tables.relkind = 'r' AND tables.relpersistence = 'p'
    JOIN pg_catalog.pg_namespace AS schemas ON tables.relnamespace = schemas.oid
    LEFT OUTER JOIN pg_catalog.pg_attrdef AS column_defs
        ON columns.attrelid = column_defs.adrelid AND columns.attnum = column_defs.adnum
WHERE {_USER_SCHEMAS}
    AND columns.attnum > 0 AND NOT columns.attisdropped
    AND lower(schemas.nspname) = :schema_name
    AND tables.relname NOT IN ('spatial_ref_sys')
"""

_CONSTRAINTS_SQL = f"""
SELECT
    schemas.nspname AS schema_name,
    tables.relname AS table_name,
    r.conname AS constraint_name,
    CASE
        WHEN r.contype = 'c' THEN 'CHECK'
        WHEN r.contype = 'f' THEN 'FOREIGN KEY'
        WHEN r.contype = 'p' THEN 'PRIMARY KEY'
        WHEN r.contype = 'u' THEN 'UNIQUE'
    END AS constraint_type,
    pg_catalog.pg_get_constraintdef(r.oid, true) AS constraint_definition,
    referenced_tables.relname AS referenced_table_name,
    array_to_string(r.conkey, ',') AS column_ordinals_csv,
    array_to_string(ARRAY(
        SELECT a.attname
        FROM unnest(r.confkey) WITH ORDINALITY AS k(attnum, n)
            JOIN pg_catalog.pg_attribute AS a
                ON a.attrelid = r.confrelid AND a.attnum = k.attnum
        ORDER BY k.n
    ), ',') AS referenced_columns_csv,
    CASE r.confdeltype
        WHEN 'a' THEN 'NO ACTION' WHEN 'r' THEN 'RESTRICT' WHEN 'c' THEN 'CASCADE'
        WHEN 'n' THEN 'SET NULL' WHEN 'd' THEN 'SET DEFAULT'
    END AS delete_rule,
    CASE r.confupdtype
        WHEN 'a' THEN 'NO ACTION' WHEN 'r' THEN 'RESTRICT' WHEN 'c' THEN 'CASCADE'
        WHEN 'n' THEN 'SET NULL' WHEN 'd' THEN 'SET DEFAULT'
    END AS update_rule
FROM pg_catalog.pg_constraint AS r
    JOIN pg_catalog.pg_namespace AS schemas ON r.connamespace = schemas.oid
    JOIN pg_catalog.pg_class AS tables ON r.conrelid = tables.oid
    LEFT OUTER JOIN pg_catalog.pg_class AS referenced_tables ON r.confrelid = referenced_tables.oid
WHERE {_USER_SCHEMAS}
    AND r.contype IN ('c', 'f', 'p', 'u')
    AND lower(schemas.nspname) = :schema_name
"""

# indexes backing primary key and unique constraints are reported as constraints
_INDEXES_SQL = f"""
SELECT
    schemas.nspname AS schema_name,
    tables.relname AS table_name,
    indexes.relname AS index_name,
    CASE WHEN i.indisunique THEN 1 ELSE 0 END AS is_unique,
    array_to_string(array_agg(
        a.attname || ' ' || CASE o.option & 1 WHEN 1 THEN 'DESC' ELSE 'ASC' END
        ORDER BY c.ordinality
    ), ',') AS columns_csv
FROM pg_catalog.pg_index AS i
    JOIN pg_catalog.pg_class AS tables ON tables.oid = i.indrelid
    JOIN pg_catalog.pg_namespace AS schemas ON tables.relnamespace = schemas.oid
    JOIN pg_catalog.pg_class AS indexes ON indexes.oid = i.indexrelid
    CROSS JOIN LATERAL unnest(i.indkey) WITH ORDINALITY AS c(colnum, ordinality)
    LEFT JOIN LATERAL unnest(i.indoption) WITH ORDINALITY AS o(option, ordinality)
        ON c.ordinality = o.ordinality
    JOIN pg_catalog.pg_attribute AS a ON tables.oid = a.attrelid AND a.attnum = c.colnum
WHERE {_USER_SCHEMAS}
    AND i.indislive
    AND NOT i.indisprimary
    AND lower(schemas.nspname) = :schema_name
    AND NOT EXISTS (
        SELECT 1 FROM pg_catalog.pg_constraint AS x WHERE x.conindid = i.indexrelid
    )
"""


class PostgreSqlIntrospector(Introspector):
    provider_type = ProviderType.POSTGRESQL

    async def get_database_version(
        self, db: DatabaseConnection, tx: DatabaseTransaction | None = None
    ) -> str:
        version = await self.fetch_scalar(
            db, "SELECT current_setting('server_version')", tx=tx
        )
        return str(version or "")

    async def get_schema_names(
        self,
        db: DatabaseConnection,
        name_filter: str | None = None,
        tx: DatabaseTransaction | None = None,
    ) -> list[str]:
        sql = f"SELECT schemas.nspname AS schema_name FROM pg_catalog.pg_namespace AS schemas WHERE {_USER_SCHEMAS}"
        params = {}
        where = self.like_filter(name_filter)
        if where:
            sql += " AND lower(schemas.nspname) LIKE :where"
            params["where"] = where
        sql += " ORDER BY schemas.nspname"
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
            "SELECT tables.relname AS table_name "
            "FROM pg_catalog.pg_class AS tables "
            "JOIN pg_catalog.pg_namespace AS schemas ON tables.relnamespace = schemas.oid "
            "WHERE tables.relkind = 'r' AND lower(schemas.nspname) = :schema_name "
            "AND tables.relname NOT IN ('spatial_ref_sys')"
        )
        params = {"schema_name": self.builder.normalize_schema_name(schema_name)}
        where = self.like_filter(name_filter)
        if where:
            sql += " AND lower(tables.relname) LIKE :where"
            params["where"] = where
        sql += " ORDER BY tables.relname"
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
        table_filter = ""
        where = self.like_filter(name_filter)
        if where:
            params["where"] = where
            table_filter = " AND lower(tables.relname) LIKE :where"

        column_rows = await self.fetch_all(
            db,
            _COLUMNS_SQL
            + table_filter
            + " ORDER BY schema_name, table_name, column_ordinal",
            params,
            tx,
        )
        constraint_rows = await self.fetch_all(
            db,
            _CONSTRAINTS_SQL
            + table_filter
            + " ORDER BY schema_name, table_name, constraint_type, constraint_name",
            params,
            tx,
        )
        indexes = await self.get_indexes(db, schema_name, None, None, tx)
        indexes_by_table = group_rows(
            indexes, lambda ix: ((ix.schema_name or "").lower(), ix.table_name.lower())
        )
        constraints_by_table = group_rows(constraint_rows, table_key)

        tables = []
        for key, rows in group_rows(column_rows, table_key).items():
            tables.append(
                self._build_table(
                    rows,
                    constraints_by_table.get(key, []),
                    indexes_by_table.get(key, []),
                )
            )
        return self.finish_tables(tables, name_filter)

    def _build_table(
        self,
        column_rows: list[DatabaseRowType],
        constraint_rows: list[DatabaseRowType],
        indexes: list[Index],
    ) -> Table:
        schema_name = column_rows[0]["schema_name"]
        table_name = column_rows[0]["table_name"]
        by_ordinal = {int(r["column_ordinal"]): r["column_name"] for r in column_rows}

        def ordinal_columns(csv: str | None) -> list[OrderedColumn]:
            return [OrderedColumn(by_ordinal[int(n)]) for n in split_csv(csv)]

        table = Table(schema_name, table_name, indexes=indexes)
        for row in column_rows:
            default = row["column_default"]
            is_sequence = bool(default) and default.lower().startswith("nextval(")
            table.columns.append(
                self.make_column(
                    schema_name,
                    table_name,
                    row["column_name"],
                    row["data_type"],
                    is_nullable=bool(row["is_nullable"]),
                    is_auto_increment=bool(row["is_identity"]) or is_sequence,
                )
            )
            # serial columns get a nextval() default, which is not a user default
            if default and not is_sequence:
                table.default_constraints.append(
                    DefaultConstraint(
                        schema_name,
                        table_name,
                        row["column_name"],
                        naming.default_constraint_name(table_name, row["column_name"]),
                        default,
                    )
                )

        for row in constraint_rows:
            constraint_type = row["constraint_type"]
            name = row["constraint_name"]
            columns = ordinal_columns(row["column_ordinals_csv"])
            if constraint_type == "PRIMARY KEY":
                table.primary_key_constraint = PrimaryKeyConstraint(
                    schema_name, table_name, name, columns
                )
            elif constraint_type == "UNIQUE":
                table.unique_constraints.append(
                    UniqueConstraint(schema_name, table_name, name, columns)
                )
            elif constraint_type == "FOREIGN KEY":
                table.foreign_key_constraints.append(
                    ForeignKeyConstraint(
                        schema_name,
                        table_name,
                        name,
                        columns,
                        row["referenced_table_name"],
                        [OrderedColumn(c) for c in split_csv(row["referenced_columns_csv"])],
                        ForeignKeyAction.parse(row["delete_rule"]),
                        ForeignKeyAction.parse(row["update_rule"]),
                    )
                )
            elif constraint_type == "CHECK":
                definition = row["constraint_definition"] or ""
                if not definition.upper().startswith("CHECK ("):
                    continue
                table.check_constraints.append(
                    CheckConstraint(
                        schema_name,
                        table_name,
                        columns[0].column_name if len(columns) == 1 else None,
                        name,
                        definition[len("CHECK (") : -1].strip(),
                    )
                )
        return table

    async def get_indexes(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        table_name: str | None = None,
        name_filter: str | None = None,
        tx: DatabaseTransaction | None = None,
    ) -> list[Index]:
        sql = _INDEXES_SQL
        params = {"schema_name": self.builder.normalize_schema_name(schema_name)}
        if table_name:
            sql += " AND lower(tables.relname) = :table_name"
            params["table_name"] = self.builder.normalize_name(table_name)
        where = self.like_filter(name_filter)
        if where:
            sql += " AND lower(indexes.relname) LIKE :where"
            params["where"] = where
        sql += (
            " GROUP BY schemas.nspname, tables.relname, indexes.relname, i.indisunique"
            " ORDER BY schema_name, table_name, index_name"
        )
        rows = await self.fetch_all(db, sql, params, tx)
        keep = set(self.filter_names([r["index_name"] for r in rows], name_filter))

        indexes = []
        for row in rows:
            if row["index_name"] not in keep:
                continue
            columns = []
            for entry in split_csv(row["columns_csv"]):
                parts = entry.split()
                order = (
                    ColumnOrder.DESCENDING
                    if len(parts) > 1 and parts[1].upper() == "DESC"
                    else ColumnOrder.ASCENDING
                )
                columns.append(OrderedColumn(parts[0], order))
            indexes.append(
                Index(
                    row["schema_name"],
                    row["table_name"],
                    row["index_name"],
                    columns,
                    is_unique=bool(row["is_unique"]),
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
        return [v.view_name for v in await self._view_rows(db, schema_name, name_filter, tx)]

    async def get_views(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        name_filter: str | None = None,
        tx: DatabaseTransaction | None = None,
    ) -> list[View]:
        return await self._view_rows(db, schema_name, name_filter, tx)

    async def _view_rows(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        name_filter: str | None,
        tx: DatabaseTransaction | None,
    ) -> list[View]:
        # pg_views.definition is the query alone, without CREATE VIEW ... AS
        sql = (
            "SELECT schemaname AS schema_name, viewname AS view_name, "
            "definition AS view_definition FROM pg_catalog.pg_views "
            "WHERE lower(schemaname) = :schema_name "
            f"AND viewname NOT IN ({', '.join(repr(v) for v in POSTGIS_VIEWS)})"
        )
        params = {"schema_name": self.builder.normalize_schema_name(schema_name)}
        where = self.like_filter(name_filter)
        if where:
            sql += " AND lower(viewname) LIKE :where"
            params["where"] = where
        sql += " ORDER BY viewname"
        rows = await self.fetch_all(db, sql, params, tx)
        keep = set(self.filter_names([r["view_name"] for r in rows], name_filter))
        return [
            View(r["schema_name"], r["view_name"], (r["view_definition"] or "").strip())
            for r in rows
            if r["view_name"] in keep
        ]

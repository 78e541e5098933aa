"""SQLite DDL, including the copy-and-recreate plan used instead of ALTER."""

from dataclasses import dataclass, field

from schemaforge.models import Column, Table
from schemaforge.types import DatabaseParamType, ProviderType

from .builder import DdlBuilder


@dataclass
class RebuildPlan:
    """Statements recreating a table with a new definition.

    ``prepare`` and ``cleanup`` run outside any transaction; ``cleanup`` must
    run even when ``statements`` fail part-way. ``statements`` must not run
    while ``foreign_keys_query`` is non-zero and ``referencing_query``
    returns rows: dropping the table would then delete or fail on rows in
    the referencing tables.
    """

    prepare: list[str] = field(default_factory=list)
    statements: list[str] = field(default_factory=list)
    cleanup: list[str] = field(default_factory=list)
    foreign_keys_query: str = ""
    referencing_query: str = ""
    params: DatabaseParamType = None


class SqliteDdlBuilder(DdlBuilder):
    """SQLite: no schemas, AUTOINCREMENT and no ALTER TABLE ADD/DROP CONSTRAINT."""

    provider_type = ProviderType.SQLITE
    supports_schemas = False
    supports_alter_table_constraints = False
    allows_auto_increment_outside_primary_key = False

    def sql_auto_increment(self, column: Column, sql_type: str) -> str:
        return "AUTOINCREMENT"

    def sql_truncate_table(self, schema_name: str | None, table_name: str) -> str:
        return f"DELETE FROM {self.qualify(schema_name, table_name)}"

    def sql_drop_index(
        self, schema_name: str | None, table_name: str, index_name: str
    ) -> str:
        return f"DROP INDEX {self.normalize_name(index_name)}"

    def build_rebuild_table(self, current: Table, updated: Table) -> RebuildPlan:
        """Plan replacing ``current`` with ``updated`` while keeping its rows.

        Rows are copied for the columns both definitions share.
        """
        table_name = self.normalize_name(current.table_name)
        temp_name = f"{table_name}_temp"
        updated_names = {c.column_name.lower() for c in updated.columns}
        shared = [
            self.normalize_name(c.column_name)
            for c in current.columns
            if c.column_name.lower() in updated_names
        ]
        shared_list = ", ".join(shared)

        create = self.build_create_table(updated)
        statements = [
            f"CREATE TEMP TABLE {temp_name} AS SELECT * FROM {table_name}",
            f"DROP TABLE {table_name}",
            *create.statements,
        ]
        if shared:
            statements.append(
                f"INSERT INTO {table_name} ({shared_list}) "
                f"SELECT {shared_list} FROM {temp_name}"
            )
        statements.append(f"DROP TABLE {temp_name}")

        return RebuildPlan(
            prepare=["PRAGMA foreign_keys = 0"],
            statements=statements,
            cleanup=["PRAGMA foreign_keys = 1"],
            foreign_keys_query="PRAGMA foreign_keys",
            referencing_query=self.sql_referencing_table_names(),
            params={"table_name": table_name},
        )

    def sql_referencing_table_names(self) -> str:
        """Other tables with a foreign key to ``:table_name``."""
        return (
            "SELECT m.name AS table_name FROM sqlite_master m "
            "JOIN pragma_foreign_key_list(m.name) p "
            "WHERE m.type = 'table' "
            "AND lower(m.name) <> lower(:table_name) "
            "AND lower(p.\"table\") = lower(:table_name) "
            "GROUP BY m.name ORDER BY m.name"
        )

"""Tests for SQLite DDL rendering and table rebuild plans."""

from schemaforge.ddl import SqliteDdlBuilder
from schemaforge.models import Column, Table


class TestCreateTable:
    def test_column_flags(self, sqlite_builder: SqliteDdlBuilder, customers: Table) -> None:
        plan = sqlite_builder.build_create_table(customers)

        assert plan.create_table_sql == (
            "CREATE TABLE customers ("
            "id integer NOT NULL CONSTRAINT pk_customers_id PRIMARY KEY AUTOINCREMENT, "
            "email varchar(200) NOT NULL CONSTRAINT uc_customers_email UNIQUE, "
            "status varchar(20) NOT NULL CONSTRAINT df_customers_status DEFAULT 'active' "
            "CONSTRAINT ck_customers_status CHECK (status <> ''), "
            "notes text NULL)"
        )

    def test_foreign_key_inline(self, sqlite_builder: SqliteDdlBuilder, orders: Table) -> None:
        plan = sqlite_builder.build_create_table(orders)

        assert plan.create_table_sql == (
            "CREATE TABLE orders ("
            "id integer NOT NULL CONSTRAINT pk_orders_id PRIMARY KEY, "
            "customer_id integer NOT NULL CONSTRAINT fk_orders_customer_id_customers_id "
            "REFERENCES customers (id) ON DELETE CASCADE)"
        )
        assert plan.index_statements == [
            "CREATE INDEX ix_orders_customer_id ON orders (customer_id)"
        ]

    def test_auto_increment_needs_primary_key(
        self, sqlite_builder: SqliteDdlBuilder
    ) -> None:
        table = Table(None, "t", [Column(None, "t", "n", int, is_auto_increment=True)])
        plan = sqlite_builder.build_create_table(table)
        assert plan.create_table_sql == "CREATE TABLE t (n integer NOT NULL)"


class TestStatements:
    def test_truncate_is_delete(self, sqlite_builder: SqliteDdlBuilder) -> None:
        assert sqlite_builder.sql_truncate_table("main", "t1") == "DELETE FROM t1"

    def test_drop_index(self, sqlite_builder: SqliteDdlBuilder) -> None:
        assert sqlite_builder.sql_drop_index(None, "t1", "ix_t1_c") == "DROP INDEX ix_t1_c"

    def test_rename(self, sqlite_builder: SqliteDdlBuilder) -> None:
        assert sqlite_builder.sql_rename_table(None, "t1", "t2") == (
            "ALTER TABLE t1 RENAME TO t2"
        )


class TestRebuildTable:
    """Test the copy-and-recreate plan."""

    def test_copies_shared_columns(self, sqlite_builder: SqliteDdlBuilder) -> None:
        current = Table(
            None,
            "t1",
            [
                Column(None, "t1", "a", int, is_primary_key=True),
                Column(None, "t1", "b", str),
            ],
        )
        updated = Table(
            None,
            "t1",
            [
                Column(None, "t1", "a", int, is_primary_key=True),
                Column(None, "t1", "c", str | None),
            ],
        )

        plan = sqlite_builder.build_rebuild_table(current, updated)

        assert plan.prepare == ["PRAGMA foreign_keys = 0"]
        assert plan.statements == [
            "CREATE TEMP TABLE t1_temp AS SELECT * FROM t1",
            "DROP TABLE t1",
            "CREATE TABLE t1 (a integer NOT NULL CONSTRAINT pk_t1_a PRIMARY KEY, "
            "c varchar(255) NULL)",
            "INSERT INTO t1 (a) SELECT a FROM t1_temp",
            "DROP TABLE t1_temp",
        ]
        assert plan.cleanup == ["PRAGMA foreign_keys = 1"]
        assert plan.foreign_keys_query == "PRAGMA foreign_keys"
        assert plan.params == {"table_name": "t1"}
        assert "pragma_foreign_key_list" in plan.referencing_query

    def test_no_shared_columns_skips_copy(self, sqlite_builder: SqliteDdlBuilder) -> None:
        current = Table(None, "t1", [Column(None, "t1", "a", int)])
        updated = Table(None, "t1", [Column(None, "t1", "b", int)])

        plan = sqlite_builder.build_rebuild_table(current, updated)

        assert not any(s.startswith("INSERT") for s in plan.statements)
        assert plan.statements[-1] == "DROP TABLE t1_temp"

"""Tests for MySQL DDL rendering."""

from schemaforge.ddl import MySqlDdlBuilder
from schemaforge.models import (
    CheckConstraint,
    DefaultConstraint,
    ForeignKeyConstraint,
    PrimaryKeyConstraint,
    Table,
    UniqueConstraint,
)


class TestCreateTable:
    def test_column_flags(self, mysql_builder: MySqlDdlBuilder, customers: Table) -> None:
        plan = mysql_builder.build_create_table(customers)

        assert plan.create_table_sql == (
            "CREATE TABLE customers ("
            "id int NOT NULL AUTO_INCREMENT PRIMARY KEY, "
            "email varchar(200) NOT NULL, "
            "status varchar(20) NOT NULL DEFAULT 'active' "
            "CONSTRAINT ck_customers_status CHECK (status <> ''), "
            "notes text NULL, "
            "CONSTRAINT uc_customers_email UNIQUE (email))"
        )

    def test_foreign_keys_are_table_clauses(
        self, mysql_builder: MySqlDdlBuilder, orders: Table
    ) -> None:
        plan = mysql_builder.build_create_table(orders)

        assert plan.create_table_sql == (
            "CREATE TABLE orders ("
            "id int NOT NULL PRIMARY KEY, "
            "customer_id int NOT NULL, "
            "CONSTRAINT fk_orders_customer_id_customers_id FOREIGN KEY (customer_id) "
            "REFERENCES customers (id) ON DELETE CASCADE ON UPDATE NO ACTION)"
        )
        assert plan.index_statements == [
            "CREATE INDEX ix_orders_customer_id ON orders (customer_id)"
        ]

    def test_schema_is_ignored(self, mysql_builder: MySqlDdlBuilder) -> None:
        assert mysql_builder.qualify("sales", "orders") == "orders"
        assert mysql_builder.normalize_schema_name("sales") == ""


class TestStatements:
    """Test MySQL specific ALTER and DROP forms."""

    def test_rename_table(self, mysql_builder: MySqlDdlBuilder) -> None:
        assert mysql_builder.sql_rename_table(None, "t1", "t2") == "RENAME TABLE t1 TO t2"

    def test_defaults(self, mysql_builder: MySqlDdlBuilder) -> None:
        constraint = DefaultConstraint(None, "t1", "qty", "df_t1_qty", "1 + 1")
        assert mysql_builder.sql_add_default_constraint(constraint) == (
            "ALTER TABLE t1 ALTER COLUMN qty SET DEFAULT (1 + 1)"
        )
        assert mysql_builder.sql_drop_default_constraint(constraint) == (
            "ALTER TABLE t1 ALTER COLUMN qty DROP DEFAULT"
        )

    def test_constraint_drops(self, mysql_builder: MySqlDdlBuilder) -> None:
        assert mysql_builder.sql_drop_check_constraint(
            CheckConstraint(None, "t1", "qty", "ck_t1_qty", "qty > 0")
        ) == "ALTER TABLE t1 DROP CHECK ck_t1_qty"
        assert mysql_builder.sql_drop_unique_constraint(
            UniqueConstraint(None, "t1", "uc_t1_code", ["code"])
        ) == "ALTER TABLE t1 DROP INDEX uc_t1_code"
        assert mysql_builder.sql_drop_primary_key(
            PrimaryKeyConstraint(None, "t1", "PRIMARY", ["id"])
        ) == "ALTER TABLE t1 DROP PRIMARY KEY"
        assert mysql_builder.sql_drop_foreign_key(
            ForeignKeyConstraint(None, "t1", "fk_t1_t2", ["t2_id"], "t2", ["id"])
        ) == "ALTER TABLE t1 DROP FOREIGN KEY fk_t1_t2"

    def test_drop_index(self, mysql_builder: MySqlDdlBuilder) -> None:
        assert mysql_builder.sql_drop_index(None, "t1", "ix_t1_c") == (
            "DROP INDEX ix_t1_c ON t1"
        )

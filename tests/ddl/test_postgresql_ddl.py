"""Tests for PostgreSQL DDL rendering."""

from schemaforge.ddl import PostgreSqlDdlBuilder
from schemaforge.models import (
    Column,
    ColumnOrder,
    DefaultConstraint,
    OrderedColumn,
    PrimaryKeyConstraint,
    Table,
)
from schemaforge.types import ProviderType


class TestCreateTable:
    def test_column_flags(
        self, postgresql_builder: PostgreSqlDdlBuilder, customers: Table
    ) -> None:
        plan = postgresql_builder.build_create_table(customers)

        assert plan.create_table_sql == (
            "CREATE TABLE public.customers ("
            "id integer NOT NULL CONSTRAINT pk_customers_id PRIMARY KEY "
            "GENERATED BY DEFAULT AS IDENTITY, "
            "email varchar(200) NOT NULL CONSTRAINT uc_customers_email UNIQUE, "
            "status varchar(20) NOT NULL DEFAULT 'active' "
            "CONSTRAINT ck_customers_status CHECK (status <> ''), "
            "notes text NULL)"
        )

    def test_names_are_lowered(self, postgresql_builder: PostgreSqlDdlBuilder) -> None:
        table = Table(
            "Sales",
            "Customers",
            [Column("Sales", "Customers", "Id", int, is_primary_key=True)],
        )

        plan = postgresql_builder.build_create_table(table)

        assert plan.create_table_sql == (
            "CREATE TABLE sales.customers "
            "(id integer NOT NULL CONSTRAINT pk_customers_id PRIMARY KEY)"
        )

    def test_normalize_names(self, postgresql_builder: PostgreSqlDdlBuilder) -> None:
        assert postgresql_builder.normalize_names(None, '"Orders"', " Ix_Total ") == (
            "public",
            "orders",
            "ix_total",
        )

    def test_serial_column(self, postgresql_builder: PostgreSqlDdlBuilder) -> None:
        table = Table(
            None,
            "t",
            [
                Column(
                    None,
                    "t",
                    "id",
                    int,
                    provider_data_types={ProviderType.POSTGRESQL: "serial"},
                    is_primary_key=True,
                    is_auto_increment=True,
                )
            ],
        )

        plan = postgresql_builder.build_create_table(table)

        assert plan.create_table_sql == (
            "CREATE TABLE public.t (id serial CONSTRAINT pk_t_id PRIMARY KEY)"
        )

    def test_nullable_unique_column_stays_nullable(
        self, postgresql_builder: PostgreSqlDdlBuilder
    ) -> None:
        table = Table(None, "t", [Column(None, "t", "code", str | None, is_unique=True)])

        plan = postgresql_builder.build_create_table(table)

        assert plan.create_table_sql == (
            "CREATE TABLE public.t "
            "(code varchar(255) NULL CONSTRAINT uc_t_code UNIQUE)"
        )

    def test_constraint_columns_have_no_direction(
        self, postgresql_builder: PostgreSqlDdlBuilder
    ) -> None:
        constraint = PrimaryKeyConstraint(
            None, "t", "pk_t", ["a", OrderedColumn("b", ColumnOrder.DESCENDING)]
        )
        assert postgresql_builder.sql_add_primary_key(constraint) == (
            "ALTER TABLE public.t ADD CONSTRAINT pk_t PRIMARY KEY (a, b)"
        )

    def test_array_column(self, postgresql_builder: PostgreSqlDdlBuilder) -> None:
        column = Column(None, "t", "tags", tuple[int, ...])
        assert postgresql_builder.resolve_column_type(column) == "integer[]"


class TestStatements:
    def test_defaults_are_column_properties(
        self, postgresql_builder: PostgreSqlDdlBuilder
    ) -> None:
        constraint = DefaultConstraint(None, "t1", "qty", "df_t1_qty", "0")
        assert postgresql_builder.sql_add_default_constraint(constraint) == (
            "ALTER TABLE public.t1 ALTER COLUMN qty SET DEFAULT 0"
        )
        assert postgresql_builder.sql_drop_default_constraint(constraint) == (
            "ALTER TABLE public.t1 ALTER COLUMN qty DROP DEFAULT"
        )

    def test_cascading_drops(self, postgresql_builder: PostgreSqlDdlBuilder) -> None:
        assert postgresql_builder.sql_drop_table(None, "t1") == (
            "DROP TABLE IF EXISTS public.t1 CASCADE"
        )
        assert postgresql_builder.sql_drop_schema("Sales") == (
            "DROP SCHEMA IF EXISTS sales CASCADE"
        )
        assert postgresql_builder.sql_drop_index(None, "t1", "ix_t1_c") == (
            "DROP INDEX public.ix_t1_c CASCADE"
        )

    def test_rename(self, postgresql_builder: PostgreSqlDdlBuilder) -> None:
        assert postgresql_builder.sql_rename_table(None, "T1", "T2") == (
            "ALTER TABLE public.t1 RENAME TO t2"
        )
        assert postgresql_builder.sql_rename_column(None, "t1", "a", "b") == (
            "ALTER TABLE public.t1 RENAME COLUMN a TO b"
        )

    def test_like_string_is_lowered(
        self, postgresql_builder: PostgreSqlDdlBuilder
    ) -> None:
        assert postgresql_builder.to_like_string("User_*") == "user_%"

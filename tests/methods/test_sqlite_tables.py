"""Schema, table and column operations against a live SQLite database."""

import pytest

from schemaforge.database import SQLiteConnection
from schemaforge.exceptions import InvalidArgumentError
from schemaforge.methods import DatabaseMethods
from schemaforge.models import Column, ForeignKeyAction, Table


def t1_table() -> Table:
    return Table(
        None,
        "t1",
        [
            Column(None, "t1", "id", int, is_primary_key=True, is_auto_increment=True),
            Column(None, "t1", "email", str, length=255, is_unique=True),
        ],
    )


def customers_table() -> Table:
    return Table(
        None,
        "customers",
        [
            Column(None, "customers", "id", int, is_primary_key=True),
            Column(None, "customers", "name", str, length=100),
        ],
    )


def orders_table() -> Table:
    return Table(
        None,
        "orders",
        [
            Column(None, "orders", "id", int, is_primary_key=True),
            Column(
                None,
                "orders",
                "customer_id",
                int,
                is_foreign_key=True,
                referenced_table_name="customers",
                referenced_column_name="id",
                on_delete=ForeignKeyAction.CASCADE,
                is_indexed=True,
            ),
        ],
    )


class TestTableLifecycle:
    """The create / inspect / alter / drop round trip."""

    @pytest.mark.asyncio
    async def test_t1_scenario(
        self, sqlite_db: SQLiteConnection, sqlite_methods: DatabaseMethods
    ) -> None:
        m = sqlite_methods

        assert await m.create_table_if_not_exists(sqlite_db, t1_table()) is True
        assert await m.does_table_exist(sqlite_db, None, "t1") is True

        columns = await m.get_columns(sqlite_db, None, "t1")
        assert [c.column_name for c in columns] == ["id", "email"]
        assert columns[0].is_primary_key is True
        assert columns[0].is_auto_increment is True
        assert columns[1].is_unique is True
        assert columns[1].host_type is str
        assert columns[1].length == 255

        email = Column(None, "t1", "email", str, length=255, is_unique=True)
        assert await m.create_column_if_not_exists(sqlite_db, email) is False

        assert await m.drop_column_if_exists(sqlite_db, None, "t1", "email") is True
        assert await m.get_column_names(sqlite_db, None, "t1") == ["id"]
        assert await m.get_unique_constraints(sqlite_db, None, "t1") == []

        assert await m.drop_table_if_exists(sqlite_db, None, "t1") is True
        assert await m.drop_table_if_exists(sqlite_db, None, "t1") is False
        assert await m.does_table_exist(sqlite_db, None, "t1") is False

    @pytest.mark.asyncio
    async def test_create_is_idempotent(
        self, sqlite_db: SQLiteConnection, sqlite_methods: DatabaseMethods
    ) -> None:
        assert await sqlite_methods.create_table_if_not_exists(sqlite_db, t1_table())
        assert not await sqlite_methods.create_table_if_not_exists(sqlite_db, t1_table())

    @pytest.mark.asyncio
    async def test_table_round_trip(
        self, sqlite_db: SQLiteConnection, sqlite_methods: DatabaseMethods
    ) -> None:
        await sqlite_methods.create_table_if_not_exists(sqlite_db, t1_table())

        table = await sqlite_methods.get_table(sqlite_db, None, "T1")

        assert table is not None
        assert table.table_name == "t1"
        assert table.primary_key_constraint is not None
        assert table.primary_key_constraint.constraint_name == "pk_t1_id"
        assert [u.constraint_name for u in table.unique_constraints] == ["uc_t1_email"]
        assert await sqlite_methods.get_table(sqlite_db, None, "missing") is None

    @pytest.mark.asyncio
    async def test_validation(
        self, sqlite_db: SQLiteConnection, sqlite_methods: DatabaseMethods
    ) -> None:
        with pytest.raises(InvalidArgumentError):
            await sqlite_methods.create_table_if_not_exists(
                sqlite_db, Table(None, " ", [Column(None, " ", "a", int)])
            )
        with pytest.raises(InvalidArgumentError):
            await sqlite_methods.create_table_if_not_exists(
                sqlite_db, Table(None, "empty", [])
            )
        with pytest.raises(InvalidArgumentError):
            await sqlite_methods.does_table_exist(sqlite_db, None, "")


class TestBatchCreation:
    @pytest.mark.asyncio
    async def test_forward_references(
        self, sqlite_db: SQLiteConnection, sqlite_methods: DatabaseMethods
    ) -> None:
        """A table may reference one created later in the same batch."""
        created = await sqlite_methods.create_tables_if_not_exist(
            sqlite_db, [orders_table(), customers_table()]
        )

        assert created == ["orders", "customers"]
        fk = await sqlite_methods.get_foreign_key_constraint_on_column(
            sqlite_db, None, "orders", "customer_id"
        )
        assert fk is not None
        assert fk.referenced_table_name == "customers"
        assert fk.on_delete == ForeignKeyAction.CASCADE
        assert await sqlite_methods.get_index_names(sqlite_db, None, "orders") == [
            "ix_orders_customer_id"
        ]

        column = await sqlite_methods.get_column(sqlite_db, None, "orders", "customer_id")
        assert column is not None
        assert column.is_foreign_key is True
        assert column.referenced_column_name == "id"
        assert column.is_indexed is True

    @pytest.mark.asyncio
    async def test_existing_tables_are_skipped(
        self, sqlite_db: SQLiteConnection, sqlite_methods: DatabaseMethods
    ) -> None:
        await sqlite_methods.create_table_if_not_exists(sqlite_db, customers_table())

        created = await sqlite_methods.create_tables_if_not_exist(
            sqlite_db, [customers_table(), orders_table()]
        )

        assert created == ["orders"]


class TestTableOperations:
    @pytest.mark.asyncio
    async def test_name_filters(
        self, sqlite_db: SQLiteConnection, sqlite_methods: DatabaseMethods
    ) -> None:
        for name in ["user_a", "user_b", "userxa", "orders"]:
            await sqlite_methods.create_table_if_not_exists(
                sqlite_db, Table(None, name, [Column(None, name, "id", int)])
            )

        assert await sqlite_methods.get_table_names(sqlite_db, None, "user_*") == [
            "user_a",
            "user_b",
        ]
        assert await sqlite_methods.get_table_names(sqlite_db, None, "USER_?") == [
            "user_a",
            "user_b",
        ]
        assert len(await sqlite_methods.get_tables(sqlite_db, None)) == 4

    @pytest.mark.asyncio
    async def test_rename(
        self, sqlite_db: SQLiteConnection, sqlite_methods: DatabaseMethods
    ) -> None:
        await sqlite_methods.create_table_if_not_exists(sqlite_db, t1_table())

        assert await sqlite_methods.rename_table_if_exists(sqlite_db, None, "t1", "t2")
        assert not await sqlite_methods.rename_table_if_exists(sqlite_db, None, "t1", "t3")
        assert await sqlite_methods.get_table_names(sqlite_db, None) == ["t2"]
        assert sqlite_methods.get_last_sql(sqlite_db) == "ALTER TABLE t1 RENAME TO t2"

    @pytest.mark.asyncio
    async def test_truncate(
        self, sqlite_db: SQLiteConnection, sqlite_methods: DatabaseMethods
    ) -> None:
        await sqlite_methods.create_table_if_not_exists(sqlite_db, t1_table())
        await sqlite_db.execute("INSERT INTO t1 (email) VALUES ('a@example.com')")

        assert await sqlite_methods.truncate_table_if_exists(sqlite_db, None, "t1")
        assert await sqlite_db.fetch_scalar("SELECT count(*) FROM t1") == 0
        assert not await sqlite_methods.truncate_table_if_exists(sqlite_db, None, "nope")


class TestColumns:
    """Column changes rebuild the table and keep its rows."""

    @pytest.mark.asyncio
    async def test_add_columns_keeps_rows(
        self, sqlite_db: SQLiteConnection, sqlite_methods: DatabaseMethods
    ) -> None:
        await sqlite_methods.create_table_if_not_exists(sqlite_db, t1_table())
        await sqlite_db.execute("INSERT INTO t1 (email) VALUES ('a@example.com')")

        nickname = Column(None, "t1", "nickname", str | None, length=50)
        status = Column(None, "t1", "status", str, length=10, default_expression="'new'")
        assert await sqlite_methods.create_column_if_not_exists(sqlite_db, nickname)
        assert await sqlite_methods.create_column_if_not_exists(sqlite_db, status)

        rows = await sqlite_db.fetch_all("SELECT id, email, nickname, status FROM t1")
        assert rows == [
            {"id": 1, "email": "a@example.com", "nickname": None, "status": "new"}
        ]
        column = await sqlite_methods.get_column(sqlite_db, None, "t1", "status")
        assert column is not None
        assert column.default_expression == "'new'"
        assert column.is_nullable is False

        # unique constraint survived both rebuilds
        assert await sqlite_methods.does_unique_constraint_exist_on_column(
            sqlite_db, None, "t1", "email"
        )

    @pytest.mark.asyncio
    async def test_add_column_to_missing_table(
        self, sqlite_db: SQLiteConnection, sqlite_methods: DatabaseMethods
    ) -> None:
        column = Column(None, "missing", "c", int)
        assert not await sqlite_methods.create_column_if_not_exists(sqlite_db, column)

    @pytest.mark.asyncio
    async def test_rename_column(
        self, sqlite_db: SQLiteConnection, sqlite_methods: DatabaseMethods
    ) -> None:
        await sqlite_methods.create_table_if_not_exists(sqlite_db, customers_table())

        assert await sqlite_methods.rename_column_if_exists(
            sqlite_db, None, "customers", "name", "full_name"
        )
        assert not await sqlite_methods.rename_column_if_exists(
            sqlite_db, None, "customers", "name", "other"
        )
        assert not await sqlite_methods.rename_column_if_exists(
            sqlite_db, None, "customers", "id", "full_name"
        )
        assert await sqlite_methods.get_column_names(sqlite_db, None, "customers") == [
            "id",
            "full_name",
        ]

    @pytest.mark.asyncio
    async def test_column_filter(
        self, sqlite_db: SQLiteConnection, sqlite_methods: DatabaseMethods
    ) -> None:
        await sqlite_methods.create_table_if_not_exists(sqlite_db, t1_table())
        assert await sqlite_methods.get_column_names(sqlite_db, None, "t1", "e*") == [
            "email"
        ]
        assert await sqlite_methods.does_column_exist(sqlite_db, None, "t1", "EMAIL")
        assert not await sqlite_methods.drop_column_if_exists(
            sqlite_db, None, "t1", "missing"
        )


class TestProviderFacts:
    @pytest.mark.asyncio
    async def test_sqlite_has_no_schemas(
        self, sqlite_db: SQLiteConnection, sqlite_methods: DatabaseMethods
    ) -> None:
        assert sqlite_methods.supports_schemas is False
        assert await sqlite_methods.get_schema_names(sqlite_db) == []
        assert not await sqlite_methods.create_schema_if_not_exists(sqlite_db, "sales")
        assert not await sqlite_methods.does_schema_exist(sqlite_db, "sales")
        assert not await sqlite_methods.drop_schema_if_exists(sqlite_db, "sales")

    @pytest.mark.asyncio
    async def test_version_and_types(
        self, sqlite_db: SQLiteConnection, sqlite_methods: DatabaseMethods
    ) -> None:
        version = await sqlite_methods.get_database_version(sqlite_db)
        assert version.startswith("3.")
        assert await sqlite_methods.supports_check_constraints(sqlite_db) is True
        assert sqlite_methods.get_sql_type(bool).sql_type == "boolean"
        assert sqlite_methods.get_host_type("varchar(36)").base_type.__name__ == "UUID"

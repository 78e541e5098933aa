"""Index and view operations against a live SQLite database."""

import pytest
import pytest_asyncio

from schemaforge.database import SQLiteConnection
from schemaforge.exceptions import InvalidArgumentError
from schemaforge.methods import DatabaseMethods
from schemaforge.models import Column, ColumnOrder, Index, OrderedColumn, Table, View


@pytest_asyncio.fixture
async def people(sqlite_db: SQLiteConnection, sqlite_methods: DatabaseMethods) -> str:
    table = Table(
        None,
        "people",
        [
            Column(None, "people", "id", int, is_primary_key=True),
            Column(None, "people", "first_name", str, length=50),
            Column(None, "people", "last_name", str, length=50),
        ],
    )
    await sqlite_methods.create_table_if_not_exists(sqlite_db, table)
    return "people"


class TestIndexes:
    @pytest.mark.asyncio
    async def test_create_and_inspect(
        self, sqlite_db: SQLiteConnection, sqlite_methods: DatabaseMethods, people: str
    ) -> None:
        index = Index(
            None,
            people,
            "ix_people_name",
            ["last_name", OrderedColumn("first_name", ColumnOrder.DESCENDING)],
        )

        assert await sqlite_methods.create_index_if_not_exists(sqlite_db, index)
        assert not await sqlite_methods.create_index_if_not_exists(sqlite_db, index)

        found = await sqlite_methods.get_index(sqlite_db, None, people, "IX_PEOPLE_NAME")
        assert found is not None
        assert found.is_unique is False
        assert [c.column_name for c in found.columns] == ["last_name", "first_name"]
        assert [c.order for c in found.columns] == [
            ColumnOrder.ASCENDING,
            ColumnOrder.DESCENDING,
        ]

        assert await sqlite_methods.does_index_exist_on_column(
            sqlite_db, None, people, "first_name"
        )
        assert not await sqlite_methods.does_index_exist_on_column(
            sqlite_db, None, people, "id"
        )

    @pytest.mark.asyncio
    async def test_unique_index_marks_column(
        self, sqlite_db: SQLiteConnection, sqlite_methods: DatabaseMethods, people: str
    ) -> None:
        index = Index(None, people, "ux_people_last_name", ["last_name"], is_unique=True)
        await sqlite_methods.create_index_if_not_exists(sqlite_db, index)

        column = await sqlite_methods.get_column(sqlite_db, None, people, "last_name")

        assert column is not None
        assert column.is_unique is True
        assert column.is_indexed is True

    @pytest.mark.asyncio
    async def test_filters_and_drops(
        self, sqlite_db: SQLiteConnection, sqlite_methods: DatabaseMethods, people: str
    ) -> None:
        await sqlite_methods.create_index_if_not_exists(
            sqlite_db, Index(None, people, "ix_people_first_name", ["first_name"])
        )
        await sqlite_methods.create_index_if_not_exists(
            sqlite_db, Index(None, people, "ix_people_both", ["first_name", "last_name"])
        )
        await sqlite_methods.create_index_if_not_exists(
            sqlite_db, Index(None, people, "ax_people_last", ["last_name"])
        )

        assert sorted(
            await sqlite_methods.get_index_names(sqlite_db, None, people, "ix_*")
        ) == ["ix_people_both", "ix_people_first_name"]
        assert sorted(
            await sqlite_methods.get_index_names_on_column(
                sqlite_db, None, people, "first_name"
            )
        ) == ["ix_people_both", "ix_people_first_name"]

        assert await sqlite_methods.drop_indexes_on_column_if_exists(
            sqlite_db, None, people, "first_name"
        )
        assert not await sqlite_methods.drop_indexes_on_column_if_exists(
            sqlite_db, None, people, "first_name"
        )
        assert await sqlite_methods.drop_index_if_exists(
            sqlite_db, None, people, "ax_people_last"
        )
        assert not await sqlite_methods.drop_index_if_exists(
            sqlite_db, None, people, "ax_people_last"
        )
        assert await sqlite_methods.get_indexes(sqlite_db, None, people) == []

    @pytest.mark.asyncio
    async def test_constraint_indexes_are_not_reported(
        self, sqlite_db: SQLiteConnection, sqlite_methods: DatabaseMethods
    ) -> None:
        table = Table(
            None,
            "tags",
            [
                Column(None, "tags", "id", int, is_primary_key=True),
                Column(None, "tags", "label", str, length=30, is_unique=True),
            ],
        )
        await sqlite_methods.create_table_if_not_exists(sqlite_db, table)

        assert await sqlite_methods.get_indexes(sqlite_db, None, "tags") == []

    @pytest.mark.asyncio
    async def test_requires_columns(
        self, sqlite_db: SQLiteConnection, sqlite_methods: DatabaseMethods, people: str
    ) -> None:
        with pytest.raises(InvalidArgumentError):
            await sqlite_methods.create_index_if_not_exists(
                sqlite_db, Index(None, people, "ix_people_none", [])
            )


class TestViews:
    @pytest.mark.asyncio
    async def test_lifecycle(
        self, sqlite_db: SQLiteConnection, sqlite_methods: DatabaseMethods, people: str
    ) -> None:
        view = View(None, "v_people", "SELECT id, last_name FROM people")

        assert await sqlite_methods.create_view_if_not_exists(sqlite_db, view)
        assert not await sqlite_methods.create_view_if_not_exists(sqlite_db, view)
        assert await sqlite_methods.does_view_exist(sqlite_db, None, "V_PEOPLE")

        found = await sqlite_methods.get_view(sqlite_db, None, "v_people")
        assert found is not None
        assert found.definition == "SELECT id, last_name FROM people"

        assert await sqlite_methods.rename_view_if_exists(
            sqlite_db, None, "v_people", "v_staff"
        )
        assert not await sqlite_methods.rename_view_if_exists(
            sqlite_db, None, "v_people", "v_other"
        )
        assert await sqlite_methods.get_view_names(sqlite_db, None) == ["v_staff"]

        assert await sqlite_methods.drop_view_if_exists(sqlite_db, None, "v_staff")
        assert not await sqlite_methods.drop_view_if_exists(sqlite_db, None, "v_staff")

    @pytest.mark.asyncio
    async def test_views_are_not_tables(
        self, sqlite_db: SQLiteConnection, sqlite_methods: DatabaseMethods, people: str
    ) -> None:
        await sqlite_methods.create_view_if_not_exists(
            sqlite_db, View(None, "v_people", "SELECT id FROM people")
        )

        assert await sqlite_methods.get_table_names(sqlite_db, None) == ["people"]
        assert len(await sqlite_methods.get_views(sqlite_db, None, "v_*")) == 1

    @pytest.mark.asyncio
    async def test_blank_definition(
        self, sqlite_db: SQLiteConnection, sqlite_methods: DatabaseMethods
    ) -> None:
        with pytest.raises(InvalidArgumentError):
            await sqlite_methods.create_view_if_not_exists(
                sqlite_db, View(None, "v_empty", " ")
            )

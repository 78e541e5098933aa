"""Fixtures for schema operations against providers without a live server."""

import copy
from collections.abc import Callable, Iterable
from typing import Any

import pytest

from schemaforge.database import DatabaseConnection, DatabaseTransaction
from schemaforge.ddl.naming import filter_names
from schemaforge.methods import DatabaseMethods
from schemaforge.models import Table
from schemaforge.types import DatabaseParamType, DatabaseRowType, ProviderType


class RecordingTransaction(DatabaseTransaction):
    def __init__(self) -> None:
        self.committed = False
        self.rolled_back = False

    async def commit(self) -> None:
        self.committed = True

    async def rollback(self) -> None:
        self.rolled_back = True


class RecordingConnection(DatabaseConnection):
    """Connection that records statements instead of running them.

    Queries return no rows, except ``SELECT VERSION()`` which answers with
    ``version``.
    """

    def __init__(self, provider_type: ProviderType, version: str = "") -> None:
        self._provider_type = provider_type
        self.version = version
        self.executed: list[tuple[str, DatabaseTransaction | None]] = []
        self.transactions: list[RecordingTransaction] = []

    @property
    def statements(self) -> list[str]:
        return [sql for sql, _ in self.executed]

    @property
    def provider_type(self) -> ProviderType:
        return self._provider_type

    async def connect(self) -> None:
        pass

    async def disconnect(self) -> None:
        pass

    async def execute(
        self,
        query: str,
        params: DatabaseParamType = None,
        tx: DatabaseTransaction | None = None,
    ) -> int:
        self.executed.append((query, tx))
        return 0

    async def fetch_one(
        self,
        query: str,
        params: DatabaseParamType = None,
        tx: DatabaseTransaction | None = None,
    ) -> DatabaseRowType | None:
        if "VERSION()" in query:
            return {"version": self.version}
        return None

    async def fetch_all(
        self,
        query: str,
        params: DatabaseParamType = None,
        tx: DatabaseTransaction | None = None,
    ) -> list[DatabaseRowType]:
        return []

    async def begin_transaction(self) -> DatabaseTransaction:
        tx = RecordingTransaction()
        self.transactions.append(tx)
        return tx

    @property
    def is_connected(self) -> bool:
        return True


@pytest.fixture
def recording_db() -> Callable[..., RecordingConnection]:
    """Factory for recording connections of a given provider."""

    def make(provider_type: ProviderType, version: str = "") -> RecordingConnection:
        return RecordingConnection(provider_type, version)

    return make


@pytest.fixture
def stub_catalog(monkeypatch: pytest.MonkeyPatch) -> Callable[..., None]:
    """Make an introspector report a fixed set of tables, views and schemas.

    Each lookup hands out copies, so operations may mutate what they get.
    """

    def stub(
        methods: DatabaseMethods,
        tables: Iterable[Table] = (),
        views: Iterable[str] = (),
        schemas: Iterable[str] = (),
    ) -> None:
        tables, views, schemas = list(tables), list(views), list(schemas)
        introspector = methods.introspector

        async def get_tables(
            db: Any, schema_name: Any, name_filter: Any = None, tx: Any = None
        ) -> list[Table]:
            keep = set(filter_names([t.table_name for t in tables], name_filter))
            return [copy.deepcopy(t) for t in tables if t.table_name in keep]

        async def get_table_names(
            db: Any, schema_name: Any, name_filter: Any = None, tx: Any = None
        ) -> list[str]:
            return filter_names([t.table_name for t in tables], name_filter)

        async def get_view_names(
            db: Any, schema_name: Any, name_filter: Any = None, tx: Any = None
        ) -> list[str]:
            return filter_names(views, name_filter)

        async def get_schema_names(
            db: Any, name_filter: Any = None, tx: Any = None
        ) -> list[str]:
            return filter_names(schemas, name_filter)

        monkeypatch.setattr(introspector, "get_tables", get_tables)
        monkeypatch.setattr(introspector, "get_table_names", get_table_names)
        monkeypatch.setattr(introspector, "get_view_names", get_view_names)
        monkeypatch.setattr(introspector, "get_schema_names", get_schema_names)

    return stub

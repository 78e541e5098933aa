"""Database connection interface."""

from abc import ABC, abstractmethod
from types import TracebackType
from typing import Any

from schemaforge.log import get_logger
from schemaforge.types import DatabaseParamType, DatabaseRowType, ProviderType

logger = get_logger(__name__)


class DatabaseConnection(ABC):
    """Abstract database connection interface.

    Schema operations only need to execute statements and read rows; the
    connection owns everything else (driver, pooling, lifetime).
    """

    @property
    @abstractmethod
    def provider_type(self) -> ProviderType:
        """Database provider behind this connection."""
        pass

    @abstractmethod
    async def connect(self) -> None:
        """Establish database connection."""
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """Close database connection."""
        pass

    @abstractmethod
    async def execute(
        self,
        query: str,
        params: DatabaseParamType = None,
        tx: "DatabaseTransaction | None" = None,
    ) -> int:
        """Execute a statement.

        Args:
            query: SQL statement with named ``:param`` placeholders
            params: Query parameters
            tx: Transaction to run in; None commits immediately

        Returns:
            Number of affected rows (-1 when the driver does not report it)
        """
        pass

    @abstractmethod
    async def fetch_one(
        self,
        query: str,
        params: DatabaseParamType = None,
        tx: "DatabaseTransaction | None" = None,
    ) -> DatabaseRowType | None:
        """Fetch single row.

        Returns:
            Single row as dictionary or None if not found
        """
        pass

    @abstractmethod
    async def fetch_all(
        self,
        query: str,
        params: DatabaseParamType = None,
        tx: "DatabaseTransaction | None" = None,
    ) -> list[DatabaseRowType]:
        """Fetch all rows.

        Returns:
            List of rows as dictionaries
        """
        pass

    async def fetch_scalar(
        self,
        query: str,
        params: DatabaseParamType = None,
        tx: "DatabaseTransaction | None" = None,
    ) -> Any:
        """Fetch the first column of the first row, or None."""
        row = await self.fetch_one(query, params, tx)
        if not row:
            return None
        return next(iter(row.values()))

    @abstractmethod
    async def begin_transaction(self) -> "DatabaseTransaction":
        """Begin a new transaction.

        Returns:
            Transaction object
        """
        pass

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        """Check if connection is active."""
        pass

    async def __aenter__(self) -> "DatabaseConnection":
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Async context manager exit."""
        await self.disconnect()


class DatabaseTransaction(ABC):
    """Abstract database transaction interface."""

    @abstractmethod
    async def commit(self) -> None:
        """Commit the transaction."""
        pass

    @abstractmethod
    async def rollback(self) -> None:
        """Rollback the transaction."""
        pass

    async def close(self) -> None:
        """Release the transaction. Committed or rolled back work is unaffected."""
        pass

    async def __aenter__(self) -> "DatabaseTransaction":
        """Async context manager entry."""
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Async context manager exit."""
        try:
            if exc_type is None:
                await self.commit()
            else:
                await self.rollback()
        finally:
            await self.close()

"""View operations."""

from schemaforge.database import DatabaseConnection, DatabaseTransaction
from schemaforge.exceptions import InvalidArgumentError
from schemaforge.log import get_logger
from schemaforge.models import View

from .base import MethodsBase, require_name, same_name

logger = get_logger(__name__)


class ViewMethods(MethodsBase):
    async def does_view_exist(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        view_name: str,
        tx: DatabaseTransaction | None = None,
    ) -> bool:
        require_name(view_name, "View name")
        view_name = self.builder.normalize_name(view_name)
        names = await self.introspector.get_view_names(db, schema_name, view_name, tx)
        return any(same_name(n, view_name) for n in names)

    async def create_view_if_not_exists(
        self,
        db: DatabaseConnection,
        view: View,
        tx: DatabaseTransaction | None = None,
    ) -> bool:
        """Create a view.

        Args:
            db: Connection to run on
            view: View name and ``SELECT`` definition
            tx: Transaction to run in

        Returns:
            False when a view with this name already exists

        Raises:
            InvalidArgumentError: the name or definition is blank
        """
        require_name(view.view_name, "View name")
        if not view.definition or not view.definition.strip():
            raise InvalidArgumentError("View definition is required")
        if await self.does_view_exist(db, view.schema_name, view.view_name, tx):
            return False

        await self._execute(db, self.builder.sql_create_view(view), tx=tx)
        logger.debug(f"Created view {view.view_name}")
        return True

    async def get_view(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        view_name: str,
        tx: DatabaseTransaction | None = None,
    ) -> View | None:
        """Introspect one view, or None when it is missing."""
        require_name(view_name, "View name")
        view_name = self.builder.normalize_name(view_name)
        views = await self.introspector.get_views(db, schema_name, view_name, tx)
        return self._find_named(views, lambda v: v.view_name, view_name)

    async def get_views(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        view_name_filter: str | None = None,
        tx: DatabaseTransaction | None = None,
    ) -> list[View]:
        return await self.introspector.get_views(db, schema_name, view_name_filter, tx)

    async def get_view_names(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        view_name_filter: str | None = None,
        tx: DatabaseTransaction | None = None,
    ) -> list[str]:
        return await self.introspector.get_view_names(
            db, schema_name, view_name_filter, tx
        )

    async def drop_view_if_exists(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        view_name: str,
        tx: DatabaseTransaction | None = None,
    ) -> bool:
        """Drop a view.

        Returns:
            False when the view is missing
        """
        if not await self.does_view_exist(db, schema_name, view_name, tx):
            return False

        await self._execute(db, self.builder.sql_drop_view(schema_name, view_name), tx=tx)
        logger.debug(f"Dropped view {view_name}")
        return True

    async def rename_view_if_exists(
        self,
        db: DatabaseConnection,
        schema_name: str | None,
        view_name: str,
        new_view_name: str,
        tx: DatabaseTransaction | None = None,
    ) -> bool:
        """Recreate the view under a new name with the same definition.

        Returns:
            False when the view is missing or the new name is taken
        """
        require_name(new_view_name, "New view name")
        view = await self.get_view(db, schema_name, view_name, tx)
        if view is None:
            return False
        if await self.does_view_exist(db, schema_name, new_view_name, tx):
            return False

        await self._execute_all(
            db,
            [
                self.builder.sql_drop_view(schema_name, view.view_name),
                self.builder.sql_create_view(
                    View(view.schema_name, new_view_name, view.definition)
                ),
            ],
            tx,
        )
        return True

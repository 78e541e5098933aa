"""Per-provider wiring of type map, DDL builder, introspector and operations."""

from dataclasses import dataclass

from schemaforge.database import DatabaseConnection, SqlRunner
from schemaforge.ddl import (
    DdlBuilder,
    MySqlDdlBuilder,
    PostgreSqlDdlBuilder,
    SqlServerDdlBuilder,
    SqliteDdlBuilder,
)
from schemaforge.introspection import (
    Introspector,
    MySqlIntrospector,
    PostgreSqlIntrospector,
    SqlServerIntrospector,
    SqliteIntrospector,
)
from schemaforge.log import get_logger
from schemaforge.methods import DatabaseMethods
from schemaforge.typemap import (
    MySqlTypeMap,
    PostgreSqlTypeMap,
    SqlServerTypeMap,
    SqliteTypeMap,
    TypeMapRegistry,
)
from schemaforge.types import ProviderType

logger = get_logger(__name__)

_PROVIDER_CLASSES: dict[
    ProviderType,
    tuple[type[TypeMapRegistry], type[DdlBuilder], type[Introspector]],
] = {
    ProviderType.SQLSERVER: (SqlServerTypeMap, SqlServerDdlBuilder, SqlServerIntrospector),
    ProviderType.POSTGRESQL: (
        PostgreSqlTypeMap,
        PostgreSqlDdlBuilder,
        PostgreSqlIntrospector,
    ),
    ProviderType.MYSQL: (MySqlTypeMap, MySqlDdlBuilder, MySqlIntrospector),
    ProviderType.SQLITE: (SqliteTypeMap, SqliteDdlBuilder, SqliteIntrospector),
}


@dataclass(frozen=True)
class Provider:
    """Everything one provider needs, built once and shared."""

    provider_type: ProviderType
    registry: TypeMapRegistry
    builder: DdlBuilder
    runner: SqlRunner
    introspector: Introspector
    methods: DatabaseMethods


def create_provider(provider_type: ProviderType) -> Provider:
    """Build a fresh, uncached provider bundle."""
    registry_cls, builder_cls, introspector_cls = _PROVIDER_CLASSES[provider_type]
    registry = registry_cls()
    builder = builder_cls(registry)
    runner = SqlRunner()
    introspector = introspector_cls(builder, runner)
    methods = DatabaseMethods(builder, introspector, runner)
    return Provider(provider_type, registry, builder, runner, introspector, methods)


# Global instances, one per provider
_providers: dict[ProviderType, Provider] = {}


def get_provider(provider_type: ProviderType | str) -> Provider:
    """Get the shared provider bundle, creating it on first use."""
    provider_type = ProviderType(provider_type)
    provider = _providers.get(provider_type)
    if provider is None:
        provider = create_provider(provider_type)
        _providers[provider_type] = provider
        logger.debug(f"Initialized {provider_type.value} provider")
    return provider


def get_database_methods(provider_type: ProviderType | str) -> DatabaseMethods:
    """Get the schema operations for a provider."""
    return get_provider(provider_type).methods


def get_database_methods_for(db: DatabaseConnection) -> DatabaseMethods:
    """Get the schema operations matching a connection's provider."""
    return get_database_methods(db.provider_type)


def get_type_map(provider_type: ProviderType | str) -> TypeMapRegistry:
    """Get the type-mapping registry for a provider."""
    return get_provider(provider_type).registry


def reset_providers() -> None:
    """Forget the cached providers. Registered custom converters are lost."""
    _providers.clear()

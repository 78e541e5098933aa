"""Bidirectional host-type / SQL-type converter registry."""

import array
import collections.abc
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Iterator, Mapping
from enum import Enum
from types import MappingProxyType
from typing import Any, TypeAlias, get_args, get_origin

from schemaforge.exceptions import NotSupportedError
from schemaforge.log import get_logger
from schemaforge.types import ProviderType

from .descriptors import (
    PLACEHOLDER_TYPES,
    ArrayPlaceholder,
    EnumPlaceholder,
    PocoPlaceholder,
    SqlTypeDescriptor,
    TypeDescriptor,
)

logger = get_logger(__name__)

HostConverter: TypeAlias = Callable[[TypeDescriptor], SqlTypeDescriptor | None]
SqlConverter: TypeAlias = Callable[[SqlTypeDescriptor], TypeDescriptor | None]

# Host types every provider stores as a JSON document (or its text equivalent)
JSON_HOST_TYPES: tuple[Any, ...] = (
    dict,
    list,
    set,
    frozenset,
    collections.abc.Mapping,
    collections.abc.MutableSequence,
    collections.abc.Set,
)
BINARY_HOST_TYPES: tuple[Any, ...] = (bytes, bytearray, memoryview)


class ConverterTable:
    """Ordered converter lists keyed by host type or SQL base name.

    Only used while a registry is being populated; ``freeze`` produces the
    read-only mapping the registry publishes.
    """

    def __init__(self, normalize: Callable[[Any], Any] | None = None) -> None:
        self._entries: dict[Any, list[Any]] = {}
        self._normalize = normalize or (lambda key: key)

    def add(self, keys: Iterable[Any], converter: Any) -> None:
        for key in keys:
            self._entries.setdefault(self._normalize(key), []).append(converter)

    def keys(self) -> list[Any]:
        return list(self._entries)

    def freeze(self) -> Mapping[Any, tuple[Any, ...]]:
        return MappingProxyType({k: tuple(v) for k, v in self._entries.items()})


def is_plain_class(host_type: Any) -> bool:
    """True for real classes, False for generic aliases such as ``list[int]``."""
    return isinstance(host_type, type) and get_origin(host_type) is None


def array_element_type(host_type: Any) -> Any | None:
    """Element type of ``tuple[T, ...]``, ``object`` for ``array.array``."""
    if host_type is array.array:
        return object
    if get_origin(host_type) is tuple:
        args = get_args(host_type)
        if len(args) == 2 and args[1] is Ellipsis:
            return args[0]
    return None


class TypeMapRegistry(ABC):
    """Per-provider registry resolving host types to SQL types and back.

    Converter tables are populated lazily on first lookup. Population builds
    fresh dicts and publishes them in one assignment, so readers see either
    the empty tables or the complete ones. Later registrations replace the
    published mapping with an extended copy.
    """

    provider_type: ProviderType

    def __init__(self) -> None:
        self._host_converters: Mapping[Any, tuple[HostConverter, ...]] = (
            MappingProxyType({})
        )
        self._sql_converters: Mapping[str, tuple[SqlConverter, ...]] = (
            MappingProxyType({})
        )
        self._populated = False

    @abstractmethod
    def register_host_converters(self, table: ConverterTable) -> None:
        """Add host type -> SQL type converters, most specific first."""
        pass

    @abstractmethod
    def register_sql_converters(self, table: ConverterTable) -> None:
        """Add SQL base name -> host type converters, most specific first."""
        pass

    def normalize_base_type_name(self, base_type_name: str) -> str:
        return base_type_name.strip().lower()

    def _ensure_populated(self) -> None:
        if self._populated:
            return

        host_table = ConverterTable()
        sql_table = ConverterTable(self.normalize_base_type_name)
        self.register_host_converters(host_table)
        self.register_sql_converters(sql_table)

        self._host_converters = host_table.freeze()
        self._sql_converters = sql_table.freeze()
        self._populated = True
        logger.debug(
            f"Populated {self.provider_type.value} type map: "
            f"{len(self._host_converters)} host types, "
            f"{len(self._sql_converters)} SQL types"
        )

    def register_host_converter(
        self, host_types: Iterable[Any], converter: HostConverter
    ) -> None:
        """Register a custom converter ahead of the built-in ones."""
        self._ensure_populated()
        entries = {k: list(v) for k, v in self._host_converters.items()}
        for host_type in host_types:
            entries.setdefault(host_type, []).insert(0, converter)
        self._host_converters = MappingProxyType(
            {k: tuple(v) for k, v in entries.items()}
        )

    def register_sql_converter(
        self, base_type_names: Iterable[str], converter: SqlConverter
    ) -> None:
        """Register a custom converter ahead of the built-in ones."""
        self._ensure_populated()
        entries = {k: list(v) for k, v in self._sql_converters.items()}
        for name in base_type_names:
            entries.setdefault(self.normalize_base_type_name(name), []).insert(
                0, converter
            )
        self._sql_converters = MappingProxyType(
            {k: tuple(v) for k, v in entries.items()}
        )

    def _host_lookup_keys(self, host_type: Any) -> Iterator[Any]:
        if host_type is Any:
            yield object
            return

        yield host_type

        origin = get_origin(host_type)
        if origin is not None:
            yield origin

        if is_plain_class(host_type) and issubclass(host_type, Enum):
            yield EnumPlaceholder

        if array_element_type(host_type) is not None:
            yield ArrayPlaceholder

        if is_plain_class(host_type):
            for registered in self._host_converters:
                if (
                    is_plain_class(registered)
                    and registered is not object
                    and registered not in PLACEHOLDER_TYPES
                    and issubclass(host_type, registered)
                ):
                    yield registered
            yield PocoPlaceholder

    def resolve_sql_type(self, descriptor: TypeDescriptor) -> SqlTypeDescriptor:
        """Resolve the SQL type for a host type descriptor.

        Raises:
            NotSupportedError: No registered converter produced a SQL type
        """
        self._ensure_populated()
        for key in self._host_lookup_keys(descriptor.base_type):
            converters = self._host_converters.get(key)
            if not converters:
                continue
            for converter in converters:
                result = converter(descriptor)
                if result is not None:
                    return result
            break

        raise NotSupportedError(
            f"No {self.provider_type.value} SQL type for host type "
            f"{descriptor.base_type!r}"
        )

    def resolve_host_type(
        self, sql_type: SqlTypeDescriptor | str
    ) -> TypeDescriptor:
        """Resolve the host type for a SQL type (descriptor or full type string).

        Raises:
            NotSupportedError: No registered converter produced a host type
        """
        self._ensure_populated()
        descriptor = (
            SqlTypeDescriptor.parse(sql_type) if isinstance(sql_type, str) else sql_type
        )
        name = self.normalize_base_type_name(descriptor.base_type_name)
        for converter in self._sql_converters.get(name, ()):
            result = converter(descriptor)
            if result is not None:
                return result

        raise NotSupportedError(
            f"No host type for {self.provider_type.value} SQL type "
            f"{descriptor.sql_type!r}"
        )

    def sql_base_type_names(self) -> list[str]:
        self._ensure_populated()
        return list(self._sql_converters)

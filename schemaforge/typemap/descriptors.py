"""Host-side and SQL-side type descriptors."""

import re
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any
from uuid import UUID

from schemaforge.utils import unwrap_optional

# Length marker for unbounded strings/binaries (varchar(max), text, blob)
MAX_LENGTH = -1

DEFAULT_STRING_LENGTH = 255
DEFAULT_BINARY_LENGTH = 255
DEFAULT_DECIMAL_PRECISION = 16
DEFAULT_DECIMAL_SCALE = 4
ENUM_STRING_LENGTH = 128
GUID_STRING_LENGTH = 36

_PAREN_GROUP = re.compile(r"\(([^)]*)\)")
_STRING_LIKE = ("char", "text", "binary")


class EnumPlaceholder:
    """Registry key standing in for every ``enum.Enum`` subclass."""


class ArrayPlaceholder:
    """Registry key standing in for homogeneous arrays (``tuple[T, ...]``)."""


class PocoPlaceholder:
    """Registry key standing in for arbitrary classes stored as documents."""


PLACEHOLDER_TYPES = (EnumPlaceholder, ArrayPlaceholder, PocoPlaceholder)


@dataclass
class TypeDescriptor:
    """What an application-level type looks like, independent of any database."""

    base_type: Any
    length: int | None = None
    precision: int | None = None
    scale: int | None = None
    auto_increment: bool = False
    unicode: bool = False
    fixed_length: bool = False
    other_supported_types: list[Any] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.base_type, _ = unwrap_optional(self.base_type)

    @property
    def is_max_length(self) -> bool:
        return self.length is not None and self.length == MAX_LENGTH


@dataclass
class SqlTypeDescriptor:
    """A native SQL type broken into its base name and modifiers."""

    sql_type: str
    base_type_name: str = ""
    length: int | None = None
    precision: int | None = None
    scale: int | None = None
    auto_increment: bool = False
    unicode: bool = False
    fixed_length: bool = False

    @classmethod
    def parse(cls, sql_type: str) -> "SqlTypeDescriptor":
        """Parse a full SQL type string.

        ``varchar(255)`` becomes base ``varchar`` with length 255,
        ``decimal(10,2)`` base ``decimal`` with precision 10 and scale 2,
        ``nvarchar(max)`` base ``nvarchar`` with length MAX_LENGTH.
        """
        text = sql_type.strip()
        base = " ".join(_PAREN_GROUP.sub("", text).split()).lower()
        groups = _PAREN_GROUP.findall(text)
        args = [a.strip() for a in groups[0].split(",")] if groups else []
        args = [a for a in args if a]

        descriptor = cls(sql_type=text, base_type_name=base)
        descriptor.auto_increment = "serial" in base

        if any(marker in base for marker in _STRING_LIKE):
            if len(args) == 1:
                if args[0].lower() == "max":
                    descriptor.length = MAX_LENGTH
                elif args[0].isdigit():
                    descriptor.length = int(args[0])
            descriptor.fixed_length = (
                "char" in base and "varchar" not in base and "varying" not in base
            ) or ("binary" in base and "varbinary" not in base)
            descriptor.unicode = base.startswith("n") and (
                "char" in base or "text" in base
            )
            return descriptor

        numbers = [int(a) for a in args if a.isdigit()]
        if numbers:
            descriptor.precision = numbers[0]
        if len(numbers) > 1:
            descriptor.scale = numbers[1]
        return descriptor

    @property
    def is_array(self) -> bool:
        return self.base_type_name.endswith("[]")

    def __str__(self) -> str:
        return self.sql_type


def create_simple_type(sql_type: str) -> SqlTypeDescriptor:
    return SqlTypeDescriptor.parse(sql_type)


def create_string_type(
    descriptor: TypeDescriptor,
    unicode_prefix: str = "",
    max_type: str | None = None,
    max_length: int | None = None,
) -> SqlTypeDescriptor:
    """Render a character type from a string descriptor.

    Args:
        descriptor: Host descriptor carrying length/unicode/fixed-length hints
        unicode_prefix: Prefix for national types (``n`` on SQL Server/SQLite)
        max_type: Type used for unbounded strings; None renders ``varchar(max)``
        max_length: Longest bounded length; anything longer is unbounded
    """
    length = descriptor.length if descriptor.length is not None else DEFAULT_STRING_LENGTH
    prefix = unicode_prefix if descriptor.unicode else ""
    if length == MAX_LENGTH or length <= 0 or (max_length and length > max_length):
        if max_type is None:
            return SqlTypeDescriptor.parse(f"{prefix}varchar(max)")
        return SqlTypeDescriptor.parse(max_type)

    name = "char" if descriptor.fixed_length else "varchar"
    return SqlTypeDescriptor.parse(f"{prefix}{name}({length})")


def create_binary_type(
    descriptor: TypeDescriptor,
    max_type: str | None = None,
    max_length: int | None = None,
) -> SqlTypeDescriptor:
    """Render a binary type; mirrors ``create_string_type``."""
    length = descriptor.length if descriptor.length is not None else DEFAULT_BINARY_LENGTH
    if length == MAX_LENGTH or length <= 0 or (max_length and length > max_length):
        if max_type is None:
            return SqlTypeDescriptor.parse("varbinary(max)")
        return SqlTypeDescriptor.parse(max_type)

    name = "binary" if descriptor.fixed_length else "varbinary"
    return SqlTypeDescriptor.parse(f"{name}({length})")


def create_decimal_type(descriptor: TypeDescriptor, name: str = "decimal") -> SqlTypeDescriptor:
    precision = descriptor.precision or DEFAULT_DECIMAL_PRECISION
    scale = descriptor.scale if descriptor.scale is not None else DEFAULT_DECIMAL_SCALE
    return SqlTypeDescriptor.parse(f"{name}({precision},{scale})")


def create_enum_string_type() -> SqlTypeDescriptor:
    return SqlTypeDescriptor.parse(f"varchar({ENUM_STRING_LENGTH})")


def create_guid_string_type(name: str = "char") -> SqlTypeDescriptor:
    return SqlTypeDescriptor.parse(f"{name}({GUID_STRING_LENGTH})")


def host_string_type(sql: SqlTypeDescriptor) -> TypeDescriptor:
    """Host descriptor for any character type."""
    return TypeDescriptor(
        str,
        length=sql.length,
        unicode=sql.unicode,
        fixed_length=sql.fixed_length,
    )


def host_binary_type(sql: SqlTypeDescriptor) -> TypeDescriptor:
    return TypeDescriptor(bytes, length=sql.length, fixed_length=sql.fixed_length)


def host_decimal_type(sql: SqlTypeDescriptor) -> TypeDescriptor:
    return TypeDescriptor(Decimal, precision=sql.precision, scale=sql.scale)


def host_integer_type(sql: SqlTypeDescriptor) -> TypeDescriptor:
    return TypeDescriptor(int, auto_increment=sql.auto_increment)


def host_guid_type(sql: SqlTypeDescriptor) -> TypeDescriptor | None:
    """UUID for char/varchar(36), None otherwise so string converters run next."""
    if sql.length == GUID_STRING_LENGTH:
        return TypeDescriptor(UUID)
    return None

"""Table, column and view value objects."""

from dataclasses import dataclass, field
from typing import Any

from schemaforge.types import ProviderType
from schemaforge.utils import unwrap_optional

from .constraints import (
    CheckConstraint,
    DefaultConstraint,
    ForeignKeyConstraint,
    Index,
    PrimaryKeyConstraint,
    UniqueConstraint,
)
from .enums import ForeignKeyAction


@dataclass
class Column:
    """A column and the constraints it declares through its flags.

    The flags (``is_primary_key``, ``is_unique``, ...) express intent only.
    The DDL builder materialises a constraint for a flag unless the owning
    table already lists an equivalent constraint object.
    """

    schema_name: str | None
    table_name: str
    column_name: str
    host_type: Any = str
    provider_data_types: dict[ProviderType, str] = field(default_factory=dict)
    length: int | None = None
    precision: int | None = None
    scale: int | None = None
    check_expression: str | None = None
    default_expression: str | None = None
    is_nullable: bool = False
    is_primary_key: bool = False
    is_auto_increment: bool = False
    is_unique: bool = False
    is_unicode: bool = False
    is_fixed_length: bool = False
    is_indexed: bool = False
    is_foreign_key: bool = False
    referenced_table_name: str | None = None
    referenced_column_name: str | None = None
    on_delete: ForeignKeyAction | None = None
    on_update: ForeignKeyAction | None = None

    def __post_init__(self) -> None:
        self.host_type, was_optional = unwrap_optional(self.host_type)
        if was_optional:
            self.is_nullable = True

    def get_provider_data_type(self, provider_type: ProviderType) -> str | None:
        return self.provider_data_types.get(provider_type)

    def set_provider_data_type(self, provider_type: ProviderType, sql_type: str) -> None:
        self.provider_data_types[provider_type] = sql_type


@dataclass
class Table:
    """A table together with every constraint and index it owns."""

    schema_name: str | None
    table_name: str
    columns: list[Column] = field(default_factory=list)
    primary_key_constraint: PrimaryKeyConstraint | None = None
    check_constraints: list[CheckConstraint] = field(default_factory=list)
    default_constraints: list[DefaultConstraint] = field(default_factory=list)
    unique_constraints: list[UniqueConstraint] = field(default_factory=list)
    foreign_key_constraints: list[ForeignKeyConstraint] = field(default_factory=list)
    indexes: list[Index] = field(default_factory=list)

    def get_column(self, column_name: str) -> Column | None:
        """Find a column by name, ignoring case."""
        for column in self.columns:
            if column.column_name.lower() == column_name.lower():
                return column
        return None

    @property
    def column_names(self) -> list[str]:
        return [c.column_name for c in self.columns]


@dataclass
class View:
    schema_name: str | None
    view_name: str
    definition: str

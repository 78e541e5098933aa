"""Constraint and index value objects."""

from dataclasses import dataclass, field
from typing import Union

from schemaforge.exceptions import InvalidArgumentError

from .enums import ColumnOrder, ForeignKeyAction


@dataclass
class OrderedColumn:
    """A column reference with an optional sort direction."""

    column_name: str
    order: ColumnOrder = ColumnOrder.ASCENDING

    def to_sql(self, supports_ordering: bool = True) -> str:
        if supports_ordering and self.order == ColumnOrder.DESCENDING:
            return f"{self.column_name} DESC"
        return self.column_name

    @classmethod
    def parse(cls, text: str) -> "OrderedColumn":
        """Parse ``name``, ``name ASC`` or ``name DESC``."""
        parts = text.strip().split()
        if len(parts) > 1 and parts[-1].upper() in ("ASC", "DESC"):
            order = (
                ColumnOrder.DESCENDING
                if parts[-1].upper() == "DESC"
                else ColumnOrder.ASCENDING
            )
            return cls(" ".join(parts[:-1]), order)
        return cls(text.strip())


ColumnRef = Union[OrderedColumn, str]


def to_ordered_columns(columns: list[ColumnRef]) -> list[OrderedColumn]:
    """Accept plain column names wherever ordered columns are expected."""
    return [c if isinstance(c, OrderedColumn) else OrderedColumn(c) for c in columns]


def column_names(columns: list[OrderedColumn]) -> list[str]:
    return [c.column_name for c in columns]


@dataclass
class PrimaryKeyConstraint:
    schema_name: str | None
    table_name: str
    constraint_name: str
    columns: list[OrderedColumn] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.columns = to_ordered_columns(self.columns)


@dataclass
class CheckConstraint:
    """A CHECK constraint, optionally scoped to a single column."""

    schema_name: str | None
    table_name: str
    column_name: str | None
    constraint_name: str
    expression: str


@dataclass
class DefaultConstraint:
    """A column default. Always bound to exactly one column."""

    schema_name: str | None
    table_name: str
    column_name: str
    constraint_name: str
    expression: str


@dataclass
class UniqueConstraint:
    schema_name: str | None
    table_name: str
    constraint_name: str
    columns: list[OrderedColumn] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.columns = to_ordered_columns(self.columns)


@dataclass
class ForeignKeyConstraint:
    """A foreign key from ``source_columns`` to ``referenced_columns``."""

    schema_name: str | None
    table_name: str
    constraint_name: str
    source_columns: list[OrderedColumn]
    referenced_table_name: str
    referenced_columns: list[OrderedColumn]
    on_delete: ForeignKeyAction = ForeignKeyAction.NO_ACTION
    on_update: ForeignKeyAction = ForeignKeyAction.NO_ACTION

    def __post_init__(self) -> None:
        self.source_columns = to_ordered_columns(self.source_columns)
        self.referenced_columns = to_ordered_columns(self.referenced_columns)
        if len(self.source_columns) != len(self.referenced_columns):
            raise InvalidArgumentError(
                f"Foreign key {self.constraint_name} has {len(self.source_columns)} "
                f"source columns but {len(self.referenced_columns)} referenced columns"
            )


@dataclass
class Index:
    schema_name: str | None
    table_name: str
    index_name: str
    columns: list[OrderedColumn] = field(default_factory=list)
    is_unique: bool = False

    def __post_init__(self) -> None:
        self.columns = to_ordered_columns(self.columns)

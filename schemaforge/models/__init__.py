"""Declarative schema object model."""

from .constraints import (
    CheckConstraint,
    DefaultConstraint,
    ForeignKeyConstraint,
    Index,
    OrderedColumn,
    PrimaryKeyConstraint,
    UniqueConstraint,
    column_names,
    to_ordered_columns,
)
from .enums import ColumnOrder, ForeignKeyAction
from .table import Column, Table, View

__all__ = [
    "CheckConstraint",
    "Column",
    "ColumnOrder",
    "DefaultConstraint",
    "ForeignKeyAction",
    "ForeignKeyConstraint",
    "Index",
    "OrderedColumn",
    "PrimaryKeyConstraint",
    "Table",
    "UniqueConstraint",
    "View",
    "column_names",
    "to_ordered_columns",
]

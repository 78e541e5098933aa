"""Schema operations composed into one per-provider object."""

from .base import MethodsBase
from .check_constraints import CheckConstraintMethods
from .columns import ColumnMethods
from .default_constraints import DefaultConstraintMethods
from .foreign_keys import ForeignKeyConstraintMethods
from .indexes import IndexMethods
from .primary_keys import PrimaryKeyConstraintMethods
from .schemas import SchemaMethods
from .tables import TableMethods
from .unique_constraints import UniqueConstraintMethods
from .views import ViewMethods


class DatabaseMethods(
    SchemaMethods,
    TableMethods,
    ColumnMethods,
    CheckConstraintMethods,
    DefaultConstraintMethods,
    PrimaryKeyConstraintMethods,
    UniqueConstraintMethods,
    ForeignKeyConstraintMethods,
    IndexMethods,
    ViewMethods,
):
    """Every schema operation for one provider."""


__all__ = [
    "CheckConstraintMethods",
    "ColumnMethods",
    "DatabaseMethods",
    "DefaultConstraintMethods",
    "ForeignKeyConstraintMethods",
    "IndexMethods",
    "MethodsBase",
    "PrimaryKeyConstraintMethods",
    "SchemaMethods",
    "TableMethods",
    "UniqueConstraintMethods",
    "ViewMethods",
]

"""Table and view definitions declared as annotated dataclasses.

Every dataclass field becomes a column. ``Annotated`` metadata on a field
tunes the column or attaches constraints to it; constraints spanning
several columns go on the :func:`table` decorator::

    @table("orders", schema_name="sales", constraints=[Unique(columns=["number", "year"])])
    @dataclass
    class Order:
        id: Annotated[int, PrimaryKey(), ColumnInfo(is_auto_increment=True)]
        customer_id: Annotated[int, References("customers", "id"), Indexed()]
        number: Annotated[str, ColumnInfo(length=20)]
        year: int
        qty: Annotated[int, Check("qty > 0"), Default("1")]
        note: str | None = None
        lines: Annotated[list, Ignore()] = field(default_factory=list)

Unnamed constraints get the same generated names the DDL builder uses.
"""

import copy
import dataclasses
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Annotated, Any, TypeVar, get_args, get_origin, get_type_hints

from schemaforge.ddl import naming
from schemaforge.exceptions import InvalidArgumentError
from schemaforge.log import get_logger
from schemaforge.models import (
    CheckConstraint,
    Column,
    DefaultConstraint,
    ForeignKeyAction,
    ForeignKeyConstraint,
    Index,
    OrderedColumn,
    PrimaryKeyConstraint,
    Table,
    UniqueConstraint,
    View,
    column_names,
    to_ordered_columns,
)
from schemaforge.types import ProviderType

logger = get_logger(__name__)

ClassT = TypeVar("ClassT", bound=type)

ColumnRef = OrderedColumn | str


@dataclass(frozen=True)
class ColumnInfo:
    """Column settings the field type alone cannot express.

    ``is_nullable`` left as None follows the type: ``X | None`` is nullable.
    """

    column_name: str | None = None
    provider_data_types: dict[ProviderType, str] = field(default_factory=dict)
    length: int | None = None
    precision: int | None = None
    scale: int | None = None
    is_nullable: bool | None = None
    is_auto_increment: bool = False
    is_unicode: bool = False
    is_fixed_length: bool = False


@dataclass(frozen=True)
class PrimaryKey:
    """Primary key membership. ``columns`` is only read on :func:`table`."""

    constraint_name: str | None = None
    columns: Sequence[ColumnRef] = ()


@dataclass(frozen=True)
class Check:
    expression: str
    constraint_name: str | None = None


@dataclass(frozen=True)
class Default:
    expression: str
    constraint_name: str | None = None


@dataclass(frozen=True)
class Unique:
    constraint_name: str | None = None
    columns: Sequence[ColumnRef] = ()


@dataclass(frozen=True)
class Indexed:
    index_name: str | None = None
    is_unique: bool = False
    columns: Sequence[ColumnRef] = ()


@dataclass(frozen=True)
class References:
    """Foreign key. On a field, ``columns`` defaults to that field's column."""

    referenced_table_name: str
    referenced_columns: str | Sequence[str]
    constraint_name: str | None = None
    columns: Sequence[str] = ()
    on_delete: ForeignKeyAction = ForeignKeyAction.NO_ACTION
    on_update: ForeignKeyAction = ForeignKeyAction.NO_ACTION

    @property
    def referenced_column_names(self) -> list[str]:
        if isinstance(self.referenced_columns, str):
            return [self.referenced_columns]
        return list(self.referenced_columns)


@dataclass(frozen=True)
class Ignore:
    """Field that is not a column."""


TableConstraint = Check | Unique | Indexed | References


@dataclass(frozen=True)
class TableOptions:
    table_name: str | None = None
    schema_name: str | None = None
    primary_key: PrimaryKey | None = None
    constraints: tuple[TableConstraint, ...] = ()


@dataclass(frozen=True)
class ViewOptions:
    definition: str
    view_name: str | None = None
    schema_name: str | None = None


_TABLE_OPTIONS = "__schemaforge_table__"
_VIEW_OPTIONS = "__schemaforge_view__"

_tables: dict[type, Table] = {}
_views: dict[type, View] = {}


def table(
    table_name: str | None = None,
    *,
    schema_name: str | None = None,
    primary_key: PrimaryKey | None = None,
    constraints: Sequence[TableConstraint] = (),
) -> Callable[[ClassT], ClassT]:
    """Mark a dataclass as a table definition.

    Args:
        table_name: Table name; the class name when omitted
        schema_name: Schema; the provider default when omitted
        primary_key: Primary key over ``primary_key.columns``; replaces any
            field-level ``PrimaryKey`` markers
        constraints: Table-level checks, unique constraints, indexes and
            foreign keys. Each must list its ``columns`` (checks excepted)
    """
    options = TableOptions(table_name, schema_name, primary_key, tuple(constraints))

    def decorate(cls: ClassT) -> ClassT:
        setattr(cls, _TABLE_OPTIONS, options)
        return cls

    return decorate


def view(
    definition: str,
    view_name: str | None = None,
    *,
    schema_name: str | None = None,
) -> Callable[[ClassT], ClassT]:
    """Mark a class as a view with the given ``SELECT`` definition."""
    options = ViewOptions(definition, view_name, schema_name)

    def decorate(cls: ClassT) -> ClassT:
        setattr(cls, _VIEW_OPTIONS, options)
        return cls

    return decorate


def table_from_class(cls: type) -> Table | None:
    """Describe a :func:`table` dataclass as a :class:`Table`.

    The description is built once per class; every call returns a copy the
    caller may modify.

    Returns:
        None when ``cls`` is not marked with :func:`table`

    Raises:
        InvalidArgumentError: ``cls`` is not a dataclass, or a table-level
            constraint names a column the class does not have
    """
    described = _tables.get(cls)
    if described is None:
        options = getattr(cls, _TABLE_OPTIONS, None)
        if options is None:
            return None
        described = _build_table(cls, options)
        _tables[cls] = described
        logger.debug(f"Described table {described.table_name} from {cls.__name__}")
    return copy.deepcopy(described)


def view_from_class(cls: type) -> View | None:
    """Describe a :func:`view` class as a :class:`View`.

    Returns:
        None when ``cls`` is not marked with :func:`view`

    Raises:
        InvalidArgumentError: the definition is blank
    """
    described = _views.get(cls)
    if described is None:
        options = getattr(cls, _VIEW_OPTIONS, None)
        if options is None:
            return None
        if not options.definition or not options.definition.strip():
            raise InvalidArgumentError(f"{cls.__name__} is missing a view definition")
        described = View(
            _blank_to_none(options.schema_name),
            _blank_to_none(options.view_name) or cls.__name__,
            options.definition.strip(),
        )
        _views[cls] = described
    return copy.deepcopy(described)


def clear_class_cache() -> None:
    """Forget every description built so far."""
    _tables.clear()
    _views.clear()


def _blank_to_none(value: str | None) -> str | None:
    if value is None or not value.strip():
        return None
    return value


def _split_annotated(hint: Any) -> tuple[Any, tuple[Any, ...]]:
    if get_origin(hint) is Annotated:
        host_type, *metadata = get_args(hint)
        return host_type, tuple(metadata)
    return hint, ()


def _build_table(cls: type, options: TableOptions) -> Table:
    if not dataclasses.is_dataclass(cls):
        raise InvalidArgumentError(f"{cls.__name__} is not a dataclass")

    schema_name = _blank_to_none(options.schema_name)
    table_name = _blank_to_none(options.table_name) or cls.__name__
    described = Table(schema_name, table_name)
    hints = get_type_hints(cls, include_extras=True)

    primary_key_columns: list[str] = []
    primary_key_name: str | None = None
    for f in dataclasses.fields(cls):
        host_type, metadata = _split_annotated(hints.get(f.name, f.type))
        if any(isinstance(m, Ignore) for m in metadata):
            continue

        info = next((m for m in metadata if isinstance(m, ColumnInfo)), ColumnInfo())
        column = Column(
            schema_name,
            table_name,
            info.column_name or f.name,
            host_type,
            provider_data_types=dict(info.provider_data_types),
            length=info.length,
            precision=info.precision,
            scale=info.scale,
            is_auto_increment=info.is_auto_increment,
            is_unicode=info.is_unicode,
            is_fixed_length=info.is_fixed_length,
        )
        if info.is_nullable is not None:
            column.is_nullable = info.is_nullable
        described.columns.append(column)

        for marker in metadata:
            if isinstance(marker, PrimaryKey):
                column.is_primary_key = True
                primary_key_columns.append(column.column_name)
                primary_key_name = marker.constraint_name or primary_key_name
            elif isinstance(marker, (Check, Default, Unique, Indexed, References)):
                _add_constraint(described, marker, [column.column_name])

    if options.primary_key is not None:
        primary_key_columns = column_names(
            to_ordered_columns(list(options.primary_key.columns))
        )
        primary_key_name = options.primary_key.constraint_name
        _require_columns(described, primary_key_columns, "Primary key")
        for column in described.columns:
            column.is_primary_key = any(
                column.column_name.lower() == name.lower() for name in primary_key_columns
            )
    if primary_key_columns:
        key_columns: list[ColumnRef] = (
            list(options.primary_key.columns)
            if options.primary_key
            else list(primary_key_columns)
        )
        described.primary_key_constraint = PrimaryKeyConstraint(
            schema_name,
            table_name,
            primary_key_name
            or naming.primary_key_constraint_name(table_name, primary_key_columns),
            key_columns,
        )

    for constraint in options.constraints:
        _add_constraint(described, constraint, None)
    return described


def _require_columns(described: Table, names: list[str], what: str) -> None:
    if not names:
        raise InvalidArgumentError(f"{what} on {described.table_name} lists no columns")
    for name in names:
        if described.get_column(name) is None:
            raise InvalidArgumentError(
                f"{what} on {described.table_name} names unknown column {name}"
            )


def _add_constraint(
    described: Table, marker: TableConstraint | Default, field_columns: list[str] | None
) -> None:
    """Attach ``marker`` to the table and flag the columns it covers.

    ``field_columns`` is the annotated field's column; None for table-level
    markers, which name their own columns.
    """
    schema_name, table_name = described.schema_name, described.table_name

    if isinstance(marker, (Check, Default)):
        column = described.get_column(field_columns[0]) if field_columns else None
        if isinstance(marker, Check):
            if column is None:
                position = len(described.check_constraints) + 1
                name = marker.constraint_name or naming.to_raw_identifier(
                    "ck", table_name, str(position)
                )
            else:
                name = marker.constraint_name or naming.check_constraint_name(
                    table_name, column.column_name
                )
                column.check_expression = marker.expression
            described.check_constraints.append(
                CheckConstraint(
                    schema_name,
                    table_name,
                    column.column_name if column else None,
                    name,
                    marker.expression,
                )
            )
        elif column is not None:
            column.default_expression = marker.expression
            described.default_constraints.append(
                DefaultConstraint(
                    schema_name,
                    table_name,
                    column.column_name,
                    marker.constraint_name
                    or naming.default_constraint_name(table_name, column.column_name),
                    marker.expression,
                )
            )
        return

    columns = to_ordered_columns(list(field_columns or marker.columns))
    names = column_names(columns)
    _require_columns(described, names, type(marker).__name__)
    single = described.get_column(names[0]) if len(names) == 1 else None

    if isinstance(marker, Unique):
        described.unique_constraints.append(
            UniqueConstraint(
                schema_name,
                table_name,
                marker.constraint_name or naming.unique_constraint_name(table_name, names),
                columns,
            )
        )
        if single is not None:
            single.is_unique = True
    elif isinstance(marker, Indexed):
        described.indexes.append(
            Index(
                schema_name,
                table_name,
                marker.index_name or naming.index_name(table_name, names),
                columns,
                is_unique=marker.is_unique,
            )
        )
        if single is not None:
            single.is_indexed = True
    else:
        referenced = marker.referenced_column_names
        described.foreign_key_constraints.append(
            ForeignKeyConstraint(
                schema_name,
                table_name,
                marker.constraint_name
                or naming.foreign_key_constraint_name(
                    table_name, names, marker.referenced_table_name, referenced
                ),
                columns,
                marker.referenced_table_name,
                list(referenced),
                marker.on_delete,
                marker.on_update,
            )
        )
        for name, referenced_name in zip(names, referenced):
            column = described.get_column(name)
            if column is not None:
                column.is_foreign_key = True
                column.referenced_table_name = marker.referenced_table_name
                column.referenced_column_name = referenced_name
                column.on_delete = marker.on_delete
                column.on_update = marker.on_update

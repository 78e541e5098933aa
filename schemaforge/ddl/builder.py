"""Provider-neutral DDL rendering.

``DdlBuilder`` renders every statement with the shared (mostly ANSI) syntax.
Provider builders override individual templates and capability flags; the
orchestrator only ever talks to this interface.
"""

from dataclasses import dataclass, field, replace

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
)
from schemaforge.typemap.descriptors import TypeDescriptor
from schemaforge.typemap.registry import TypeMapRegistry
from schemaforge.types import ProviderType

from . import naming

logger = get_logger(__name__)


def _same_name(a: str, b: str) -> bool:
    return a.lower() == b.lower()


def _has_column(columns: list[OrderedColumn], column_name: str) -> bool:
    return any(_same_name(c.column_name, column_name) for c in columns)


@dataclass
class TableConstraints:
    """Constraints a table already has, explicitly or from the catalog.

    Column rendering consults this to avoid emitting a constraint twice when
    a column flag and an explicit constraint object describe the same thing.
    """

    primary_key: PrimaryKeyConstraint | None = None
    check_constraints: list[CheckConstraint] = field(default_factory=list)
    default_constraints: list[DefaultConstraint] = field(default_factory=list)
    unique_constraints: list[UniqueConstraint] = field(default_factory=list)
    foreign_key_constraints: list[ForeignKeyConstraint] = field(default_factory=list)
    indexes: list[Index] = field(default_factory=list)

    @classmethod
    def from_table(cls, table: Table) -> "TableConstraints":
        return cls(
            primary_key=table.primary_key_constraint,
            check_constraints=list(table.check_constraints),
            default_constraints=list(table.default_constraints),
            unique_constraints=list(table.unique_constraints),
            foreign_key_constraints=list(table.foreign_key_constraints),
            indexes=list(table.indexes),
        )

    def check_on_column(self, column_name: str) -> CheckConstraint | None:
        for check in self.check_constraints:
            if check.column_name and _same_name(check.column_name, column_name):
                return check
        return None

    def default_on_column(self, column_name: str) -> DefaultConstraint | None:
        for default in self.default_constraints:
            if _same_name(default.column_name, column_name):
                return default
        return None

    def has_single_column_unique(self, column_name: str) -> bool:
        return any(
            len(u.columns) == 1 and _same_name(u.columns[0].column_name, column_name)
            for u in self.unique_constraints
        )

    def foreign_key_on_column(self, column_name: str) -> ForeignKeyConstraint | None:
        for fk in self.foreign_key_constraints:
            if _has_column(fk.source_columns, column_name):
                return fk
        return None

    def has_index_on_column(self, column_name: str) -> bool:
        return any(_has_column(ix.columns, column_name) for ix in self.indexes)


@dataclass
class ColumnDefinition:
    """A rendered column clause and what it did with the column's constraints.

    ``primary_key`` and the ``inline_*`` lists hold constraints that were
    emitted inside ``sql``. The ``deferred_*`` lists hold constraints the
    column asked for that must be emitted separately.
    """

    sql: str
    primary_key: PrimaryKeyConstraint | None = None
    inline_check_constraints: list[CheckConstraint] = field(default_factory=list)
    inline_default_constraints: list[DefaultConstraint] = field(default_factory=list)
    inline_unique_constraints: list[UniqueConstraint] = field(default_factory=list)
    inline_foreign_keys: list[ForeignKeyConstraint] = field(default_factory=list)
    deferred_unique_constraints: list[UniqueConstraint] = field(default_factory=list)
    deferred_foreign_keys: list[ForeignKeyConstraint] = field(default_factory=list)
    deferred_indexes: list[Index] = field(default_factory=list)


@dataclass
class CreateTablePlan:
    """Statements creating one table, in execution order.

    ``foreign_key_statements`` is only populated when foreign keys were not
    inlined (batch creation); the caller runs them after every table exists.
    """

    create_table_sql: str
    index_statements: list[str] = field(default_factory=list)
    foreign_key_statements: list[str] = field(default_factory=list)

    @property
    def statements(self) -> list[str]:
        return [self.create_table_sql, *self.index_statements]


class DdlBuilder:
    """Shared DDL templates. Provider builders override what differs."""

    provider_type: ProviderType
    default_schema: str = ""

    supports_schemas: bool = True
    supports_check_constraints: bool = True
    supports_ordered_keys_in_constraints: bool = True
    supports_alter_table_constraints: bool = True
    supports_named_default_constraints: bool = True
    supports_inline_unique_constraints: bool = True
    supports_inline_foreign_keys: bool = True
    supports_drop_schema_cascade: bool = False
    allows_auto_increment_outside_primary_key: bool = True
    auto_increment_follows_type: bool = False

    def __init__(self, registry: TypeMapRegistry) -> None:
        self.registry = registry

    # -- names -------------------------------------------------------------

    def unquote(self, name: str) -> str:
        return naming.unquote_identifier(name)

    def normalize_name(self, name: str | None) -> str:
        if not name:
            return ""
        return naming.to_alphanumeric(self.unquote(name.strip()), "_")

    def normalize_schema_name(self, schema_name: str | None) -> str:
        if not self.supports_schemas:
            return ""
        if not schema_name or not schema_name.strip():
            return self.default_schema
        return self.normalize_name(schema_name)

    def normalize_names(
        self,
        schema_name: str | None = None,
        table_name: str | None = None,
        identifier_name: str | None = None,
    ) -> tuple[str, str, str]:
        return (
            self.normalize_schema_name(schema_name),
            self.normalize_name(table_name),
            self.normalize_name(identifier_name),
        )

    def to_like_string(self, name_filter: str) -> str:
        return naming.to_like_string(name_filter)

    def qualify(self, schema_name: str | None, name: str) -> str:
        """Schema-qualify an identifier where the provider has schemas."""
        schema = self.normalize_schema_name(schema_name)
        name = self.normalize_name(name)
        if self.supports_schemas and schema:
            return f"{schema}.{name}"
        return name

    def column_list(
        self, columns: list[OrderedColumn], supports_ordering: bool = True
    ) -> str:
        return ", ".join(
            replace(c, column_name=self.normalize_name(c.column_name)).to_sql(
                supports_ordering
            )
            for c in columns
        )

    def constraint_column_list(self, columns: list[OrderedColumn]) -> str:
        return self.column_list(columns, self.supports_ordered_keys_in_constraints)

    # -- types -------------------------------------------------------------

    def resolve_column_type(self, column: Column) -> str:
        """Explicit provider type if the column has one, else the type map's."""
        provider_type = column.get_provider_data_type(self.provider_type)
        if provider_type:
            return provider_type
        descriptor = TypeDescriptor(
            column.host_type,
            length=column.length,
            precision=column.precision,
            scale=column.scale,
            auto_increment=column.is_auto_increment,
            unicode=column.is_unicode,
            fixed_length=column.is_fixed_length,
        )
        return self.registry.resolve_sql_type(descriptor).sql_type

    # -- column fragments ----------------------------------------------------

    def sql_nullability(self, column: Column, sql_type: str) -> str:
        if column.is_nullable and not column.is_primary_key:
            return "NULL"
        return "NOT NULL"

    def sql_auto_increment(self, column: Column, sql_type: str) -> str:
        return ""

    def sql_inline_primary_key(
        self, constraint: PrimaryKeyConstraint, column: Column, sql_type: str
    ) -> str:
        sql = f"CONSTRAINT {self.normalize_name(constraint.constraint_name)} PRIMARY KEY"
        if column.is_auto_increment and not self.auto_increment_follows_type:
            auto_increment = self.sql_auto_increment(column, sql_type)
            if auto_increment:
                sql += f" {auto_increment}"
        return sql

    def format_default_expression(self, expression: str) -> str:
        """Parenthesise expressions with whitespace unless already wrapped."""
        expression = expression.strip()
        if any(c.isspace() for c in expression) and not (
            (expression.startswith("'") and expression.endswith("'"))
            or (expression.startswith("(") and expression.endswith(")"))
        ):
            return f"({expression})"
        return expression

    def sql_inline_default(self, constraint: DefaultConstraint) -> str:
        expression = self.format_default_expression(constraint.expression)
        if self.supports_named_default_constraints:
            name = self.normalize_name(constraint.constraint_name)
            return f"CONSTRAINT {name} DEFAULT {expression}"
        return f"DEFAULT {expression}"

    def sql_inline_check(self, constraint: CheckConstraint) -> str:
        name = self.normalize_name(constraint.constraint_name)
        return f"CONSTRAINT {name} CHECK ({constraint.expression})"

    def sql_inline_unique(self, constraint: UniqueConstraint) -> str:
        return f"CONSTRAINT {self.normalize_name(constraint.constraint_name)} UNIQUE"

    def sql_inline_foreign_key(
        self,
        constraint: ForeignKeyConstraint,
        on_delete: ForeignKeyAction | None,
        on_update: ForeignKeyAction | None,
    ) -> str:
        referenced = self.qualify(constraint.schema_name, constraint.referenced_table_name)
        sql = (
            f"CONSTRAINT {self.normalize_name(constraint.constraint_name)} "
            f"REFERENCES {referenced} "
            f"({self.column_list(constraint.referenced_columns, False)})"
        )
        if on_delete is not None:
            sql += f" ON DELETE {on_delete.to_sql()}"
        if on_update is not None:
            sql += f" ON UPDATE {on_update.to_sql()}"
        return sql

    def render_column_definition(
        self,
        schema_name: str | None,
        table_name: str,
        column: Column,
        existing: TableConstraints,
        allow_inline_foreign_keys: bool = True,
    ) -> ColumnDefinition:
        """Render one column clause for CREATE TABLE or ADD COLUMN.

        ``existing`` describes constraints the table already has. A flag on
        the column only produces a constraint when ``existing`` does not
        cover it; constraints that cannot be written inline come back as
        deferred entries on the result.
        """
        column_name = column.column_name
        sql_type = self.resolve_column_type(column)
        parts = [self.normalize_name(column_name), sql_type]
        result = ColumnDefinition(sql="")

        if column.is_auto_increment and self.auto_increment_follows_type:
            auto_increment = self.sql_auto_increment(column, sql_type)
            if auto_increment:
                parts.append(auto_increment)

        nullability = self.sql_nullability(column, sql_type)
        if nullability:
            parts.append(nullability)

        # primary key
        primary_key = existing.primary_key
        if primary_key is None and column.is_primary_key:
            primary_key = PrimaryKeyConstraint(
                schema_name,
                table_name,
                naming.primary_key_constraint_name(table_name, [column_name]),
                [OrderedColumn(column_name)],
            )
        if (
            primary_key is not None
            and len(primary_key.columns) == 1
            and _same_name(primary_key.columns[0].column_name, column_name)
        ):
            parts.append(self.sql_inline_primary_key(primary_key, column, sql_type))
            result.primary_key = primary_key
        elif column.is_auto_increment and not self.auto_increment_follows_type:
            auto_increment = self.sql_auto_increment(column, sql_type)
            if auto_increment and self.allows_auto_increment_outside_primary_key:
                parts.append(auto_increment)

        # default
        default = existing.default_on_column(column_name)
        if default is None and column.default_expression:
            default = DefaultConstraint(
                schema_name,
                table_name,
                column_name,
                naming.default_constraint_name(table_name, column_name),
                column.default_expression,
            )
        if default is not None:
            parts.append(self.sql_inline_default(default))
            result.inline_default_constraints.append(default)

        # check
        if (
            self.supports_check_constraints
            and column.check_expression
            and existing.check_on_column(column_name) is None
        ):
            check = CheckConstraint(
                schema_name,
                table_name,
                column_name,
                naming.check_constraint_name(table_name, column_name),
                column.check_expression,
            )
            parts.append(self.sql_inline_check(check))
            result.inline_check_constraints.append(check)

        # unique
        if (
            column.is_unique
            and not column.is_indexed
            and not existing.has_single_column_unique(column_name)
        ):
            unique = UniqueConstraint(
                schema_name,
                table_name,
                naming.unique_constraint_name(table_name, [column_name]),
                [OrderedColumn(column_name)],
            )
            if self.supports_inline_unique_constraints:
                parts.append(self.sql_inline_unique(unique))
                result.inline_unique_constraints.append(unique)
            else:
                result.deferred_unique_constraints.append(unique)

        # foreign key
        if (
            column.is_foreign_key
            and column.referenced_table_name
            and column.referenced_column_name
            and existing.foreign_key_on_column(column_name) is None
        ):
            foreign_key = ForeignKeyConstraint(
                schema_name,
                table_name,
                naming.foreign_key_constraint_name(
                    table_name,
                    [column_name],
                    column.referenced_table_name,
                    [column.referenced_column_name],
                ),
                [OrderedColumn(column_name)],
                column.referenced_table_name,
                [OrderedColumn(column.referenced_column_name)],
                column.on_delete or ForeignKeyAction.NO_ACTION,
                column.on_update or ForeignKeyAction.NO_ACTION,
            )
            if allow_inline_foreign_keys and self.supports_inline_foreign_keys:
                parts.append(
                    self.sql_inline_foreign_key(
                        foreign_key, column.on_delete, column.on_update
                    )
                )
                result.inline_foreign_keys.append(foreign_key)
            else:
                result.deferred_foreign_keys.append(foreign_key)

        # indexes never go inline
        if column.is_indexed and not existing.has_index_on_column(column_name):
            result.deferred_indexes.append(
                Index(
                    schema_name,
                    table_name,
                    naming.index_name(table_name, [column_name]),
                    [OrderedColumn(column_name)],
                    is_unique=column.is_unique,
                )
            )

        result.sql = " ".join(parts)
        return result

    # -- table-level clauses -----------------------------------------------

    def sql_primary_key_clause(self, constraint: PrimaryKeyConstraint) -> str:
        return (
            f"CONSTRAINT {self.normalize_name(constraint.constraint_name)} "
            f"PRIMARY KEY ({self.constraint_column_list(constraint.columns)})"
        )

    def sql_check_clause(self, constraint: CheckConstraint) -> str:
        return self.sql_inline_check(constraint)

    def sql_unique_clause(self, constraint: UniqueConstraint) -> str:
        return (
            f"CONSTRAINT {self.normalize_name(constraint.constraint_name)} "
            f"UNIQUE ({self.constraint_column_list(constraint.columns)})"
        )

    def sql_foreign_key_clause(self, constraint: ForeignKeyConstraint) -> str:
        referenced = self.qualify(constraint.schema_name, constraint.referenced_table_name)
        return (
            f"CONSTRAINT {self.normalize_name(constraint.constraint_name)} "
            f"FOREIGN KEY ({self.column_list(constraint.source_columns, False)}) "
            f"REFERENCES {referenced} "
            f"({self.column_list(constraint.referenced_columns, False)}) "
            f"ON DELETE {constraint.on_delete.to_sql()} "
            f"ON UPDATE {constraint.on_update.to_sql()}"
        )

    # -- tables --------------------------------------------------------------

    def effective_primary_key(self, table: Table) -> PrimaryKeyConstraint | None:
        """The explicit primary key, else one built from flagged columns."""
        if table.primary_key_constraint is not None:
            return table.primary_key_constraint
        flagged = [c.column_name for c in table.columns if c.is_primary_key]
        if not flagged:
            return None
        return PrimaryKeyConstraint(
            table.schema_name,
            table.table_name,
            naming.primary_key_constraint_name(table.table_name, flagged),
            [OrderedColumn(name) for name in flagged],
        )

    def build_create_table(
        self, table: Table, inline_foreign_keys: bool = True
    ) -> CreateTablePlan:
        """Render CREATE TABLE plus the statements that must follow it.

        Clause order: columns, remaining primary key, checks, uniques,
        foreign keys. Indexes always follow the table. With
        ``inline_foreign_keys`` off every foreign key is returned as an
        ALTER TABLE statement for the caller to run later.
        """
        schema_name = table.schema_name
        existing = TableConstraints.from_table(table)
        existing.primary_key = self.effective_primary_key(table)

        clauses: list[str] = []
        primary_key_inlined = False
        unique_constraints = list(table.unique_constraints)
        foreign_keys = list(table.foreign_key_constraints)
        indexes = list(table.indexes)

        for column in table.columns:
            definition = self.render_column_definition(
                schema_name,
                table.table_name,
                column,
                existing,
                allow_inline_foreign_keys=inline_foreign_keys,
            )
            clauses.append(definition.sql)
            primary_key_inlined = primary_key_inlined or definition.primary_key is not None
            unique_constraints.extend(definition.deferred_unique_constraints)
            foreign_keys.extend(definition.deferred_foreign_keys)
            indexes.extend(definition.deferred_indexes)

        if existing.primary_key is not None and not primary_key_inlined:
            clauses.append(self.sql_primary_key_clause(existing.primary_key))
        if self.supports_check_constraints:
            clauses.extend(self.sql_check_clause(c) for c in table.check_constraints)
        clauses.extend(self.sql_unique_clause(u) for u in unique_constraints)

        post_foreign_keys: list[str] = []
        if inline_foreign_keys:
            clauses.extend(self.sql_foreign_key_clause(fk) for fk in foreign_keys)
        else:
            post_foreign_keys = [self.sql_add_foreign_key(fk) for fk in foreign_keys]

        create_sql = (
            f"CREATE TABLE {self.qualify(schema_name, table.table_name)} "
            f"({', '.join(clauses)})"
        )
        logger.debug(
            f"Planned {table.table_name}: {len(indexes)} indexes, "
            f"{len(post_foreign_keys)} deferred foreign keys"
        )
        return CreateTablePlan(
            create_table_sql=create_sql,
            index_statements=[self.sql_create_index(ix) for ix in indexes],
            foreign_key_statements=post_foreign_keys,
        )

    def sql_drop_table(self, schema_name: str | None, table_name: str) -> str:
        return f"DROP TABLE {self.qualify(schema_name, table_name)}"

    def sql_rename_table(
        self, schema_name: str | None, table_name: str, new_table_name: str
    ) -> str:
        return (
            f"ALTER TABLE {self.qualify(schema_name, table_name)} "
            f"RENAME TO {self.normalize_name(new_table_name)}"
        )

    def sql_truncate_table(self, schema_name: str | None, table_name: str) -> str:
        return f"TRUNCATE TABLE {self.qualify(schema_name, table_name)}"

    # -- schemas -------------------------------------------------------------

    def sql_create_schema(self, schema_name: str) -> str:
        return f"CREATE SCHEMA {self.normalize_schema_name(schema_name)}"

    def sql_drop_schema(self, schema_name: str) -> str:
        return f"DROP SCHEMA {self.normalize_schema_name(schema_name)}"

    # -- columns -------------------------------------------------------------

    def sql_add_column(
        self, schema_name: str | None, table_name: str, column_sql: str
    ) -> str:
        return f"ALTER TABLE {self.qualify(schema_name, table_name)} ADD {column_sql}"

    def sql_drop_column(
        self, schema_name: str | None, table_name: str, column_name: str
    ) -> str:
        return (
            f"ALTER TABLE {self.qualify(schema_name, table_name)} "
            f"DROP COLUMN {self.normalize_name(column_name)}"
        )

    def sql_rename_column(
        self,
        schema_name: str | None,
        table_name: str,
        column_name: str,
        new_column_name: str,
    ) -> str:
        return (
            f"ALTER TABLE {self.qualify(schema_name, table_name)} "
            f"RENAME COLUMN {self.normalize_name(column_name)} "
            f"TO {self.normalize_name(new_column_name)}"
        )

    # -- constraints ---------------------------------------------------------

    def _alter_table(self, schema_name: str | None, table_name: str) -> str:
        return f"ALTER TABLE {self.qualify(schema_name, table_name)}"

    def sql_add_check_constraint(self, constraint: CheckConstraint) -> str:
        table = self._alter_table(constraint.schema_name, constraint.table_name)
        return f"{table} ADD {self.sql_check_clause(constraint)}"

    def sql_add_default_constraint(self, constraint: DefaultConstraint) -> str:
        table = self._alter_table(constraint.schema_name, constraint.table_name)
        return f"{table} ADD {self.sql_inline_default(constraint)}"

    def sql_add_primary_key(self, constraint: PrimaryKeyConstraint) -> str:
        table = self._alter_table(constraint.schema_name, constraint.table_name)
        return f"{table} ADD {self.sql_primary_key_clause(constraint)}"

    def sql_add_unique_constraint(self, constraint: UniqueConstraint) -> str:
        table = self._alter_table(constraint.schema_name, constraint.table_name)
        return f"{table} ADD {self.sql_unique_clause(constraint)}"

    def sql_add_foreign_key(self, constraint: ForeignKeyConstraint) -> str:
        table = self._alter_table(constraint.schema_name, constraint.table_name)
        return f"{table} ADD {self.sql_foreign_key_clause(constraint)}"

    def sql_drop_constraint(
        self, schema_name: str | None, table_name: str, constraint_name: str
    ) -> str:
        return (
            f"{self._alter_table(schema_name, table_name)} "
            f"DROP CONSTRAINT {self.normalize_name(constraint_name)}"
        )

    def sql_drop_check_constraint(self, constraint: CheckConstraint) -> str:
        return self.sql_drop_constraint(
            constraint.schema_name, constraint.table_name, constraint.constraint_name
        )

    def sql_drop_default_constraint(self, constraint: DefaultConstraint) -> str:
        return self.sql_drop_constraint(
            constraint.schema_name, constraint.table_name, constraint.constraint_name
        )

    def sql_drop_primary_key(self, constraint: PrimaryKeyConstraint) -> str:
        return self.sql_drop_constraint(
            constraint.schema_name, constraint.table_name, constraint.constraint_name
        )

    def sql_drop_unique_constraint(self, constraint: UniqueConstraint) -> str:
        return self.sql_drop_constraint(
            constraint.schema_name, constraint.table_name, constraint.constraint_name
        )

    def sql_drop_foreign_key(self, constraint: ForeignKeyConstraint) -> str:
        return self.sql_drop_constraint(
            constraint.schema_name, constraint.table_name, constraint.constraint_name
        )

    # -- indexes -------------------------------------------------------------

    def sql_create_index(self, index: Index) -> str:
        unique = "UNIQUE " if index.is_unique else ""
        return (
            f"CREATE {unique}INDEX {self.normalize_name(index.index_name)} "
            f"ON {self.qualify(index.schema_name, index.table_name)} "
            f"({self.column_list(index.columns)})"
        )

    def sql_drop_index(
        self, schema_name: str | None, table_name: str, index_name: str
    ) -> str:
        return (
            f"DROP INDEX {self.normalize_name(index_name)} "
            f"ON {self.qualify(schema_name, table_name)}"
        )

    # -- views ---------------------------------------------------------------

    def sql_create_view(self, view: View) -> str:
        return (
            f"CREATE VIEW {self.qualify(view.schema_name, view.view_name)} "
            f"AS {view.definition.strip()}"
        )

    def sql_drop_view(self, schema_name: str | None, view_name: str) -> str:
        return f"DROP VIEW {self.qualify(schema_name, view_name)}"

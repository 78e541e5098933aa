"""MySQL / MariaDB DDL."""

from schemaforge.models import (
    CheckConstraint,
    Column,
    DefaultConstraint,
    ForeignKeyConstraint,
    PrimaryKeyConstraint,
    UniqueConstraint,
)
from schemaforge.types import ProviderType

from .builder import DdlBuilder


class MySqlDdlBuilder(DdlBuilder):
    """MySQL has no schemas below the database and its own DROP forms.

    Column-level UNIQUE and REFERENCES clauses are either ignored or not
    named the way the other providers name them, so both are emitted as
    table-level clauses.
    """

    provider_type = ProviderType.MYSQL
    supports_schemas = False
    supports_named_default_constraints = False
    supports_inline_unique_constraints = False
    supports_inline_foreign_keys = False

    def sql_auto_increment(self, column: Column, sql_type: str) -> str:
        return "AUTO_INCREMENT"

    def sql_inline_primary_key(
        self, constraint: PrimaryKeyConstraint, column: Column, sql_type: str
    ) -> str:
        if column.is_auto_increment:
            return "AUTO_INCREMENT PRIMARY KEY"
        return "PRIMARY KEY"

    def sql_rename_table(
        self, schema_name: str | None, table_name: str, new_table_name: str
    ) -> str:
        return (
            f"RENAME TABLE {self.qualify(schema_name, table_name)} "
            f"TO {self.qualify(schema_name, new_table_name)}"
        )

    def sql_add_default_constraint(self, constraint: DefaultConstraint) -> str:
        return (
            f"ALTER TABLE {self.qualify(constraint.schema_name, constraint.table_name)} "
            f"ALTER COLUMN {self.normalize_name(constraint.column_name)} "
            f"SET DEFAULT {self.format_default_expression(constraint.expression)}"
        )

    def sql_drop_default_constraint(self, constraint: DefaultConstraint) -> str:
        return (
            f"ALTER TABLE {self.qualify(constraint.schema_name, constraint.table_name)} "
            f"ALTER COLUMN {self.normalize_name(constraint.column_name)} DROP DEFAULT"
        )

    def sql_drop_check_constraint(self, constraint: CheckConstraint) -> str:
        return (
            f"ALTER TABLE {self.qualify(constraint.schema_name, constraint.table_name)} "
            f"DROP CHECK {self.normalize_name(constraint.constraint_name)}"
        )

    def sql_drop_unique_constraint(self, constraint: UniqueConstraint) -> str:
        return (
            f"ALTER TABLE {self.qualify(constraint.schema_name, constraint.table_name)} "
            f"DROP INDEX {self.normalize_name(constraint.constraint_name)}"
        )

    def sql_drop_primary_key(self, constraint: PrimaryKeyConstraint) -> str:
        return (
            f"ALTER TABLE {self.qualify(constraint.schema_name, constraint.table_name)} "
            "DROP PRIMARY KEY"
        )

    def sql_drop_foreign_key(self, constraint: ForeignKeyConstraint) -> str:
        return (
            f"ALTER TABLE {self.qualify(constraint.schema_name, constraint.table_name)} "
            f"DROP FOREIGN KEY {self.normalize_name(constraint.constraint_name)}"
        )

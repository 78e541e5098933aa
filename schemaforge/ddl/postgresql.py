"""PostgreSQL DDL."""

from schemaforge.models import Column, DefaultConstraint
from schemaforge.types import ProviderType

from .builder import DdlBuilder


def _is_serial(sql_type: str) -> bool:
    return "serial" in sql_type.lower()


class PostgreSqlDdlBuilder(DdlBuilder):
    """PostgreSQL folds unquoted identifiers to lower case, so names are lowered.

    Defaults are column properties rather than named constraints and unique
    or primary key column lists cannot carry a sort direction.
    """

    provider_type = ProviderType.POSTGRESQL
    default_schema = "public"
    supports_ordered_keys_in_constraints = False
    supports_named_default_constraints = False
    supports_drop_schema_cascade = True

    def normalize_name(self, name: str | None) -> str:
        return super().normalize_name(name).lower()

    def to_like_string(self, name_filter: str) -> str:
        return super().to_like_string(name_filter).lower()

    def sql_nullability(self, column: Column, sql_type: str) -> str:
        if _is_serial(sql_type):
            return ""
        return super().sql_nullability(column, sql_type)

    def sql_auto_increment(self, column: Column, sql_type: str) -> str:
        if _is_serial(sql_type):
            return ""
        return "GENERATED BY DEFAULT AS IDENTITY"

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

    def sql_drop_schema(self, schema_name: str) -> str:
        return f"DROP SCHEMA IF EXISTS {self.normalize_schema_name(schema_name)} CASCADE"

    def sql_drop_table(self, schema_name: str | None, table_name: str) -> str:
        return f"DROP TABLE IF EXISTS {self.qualify(schema_name, table_name)} CASCADE"

    def sql_drop_index(
        self, schema_name: str | None, table_name: str, index_name: str
    ) -> str:
        return f"DROP INDEX {self.qualify(schema_name, index_name)} CASCADE"

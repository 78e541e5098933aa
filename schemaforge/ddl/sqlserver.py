"""SQL Server DDL."""

from schemaforge.models import Column, DefaultConstraint
from schemaforge.types import ProviderType

from .builder import DdlBuilder


class SqlServerDdlBuilder(DdlBuilder):
    """T-SQL: ``dbo`` schema, IDENTITY columns, sp_rename and named defaults."""

    provider_type = ProviderType.SQLSERVER
    default_schema = "dbo"
    auto_increment_follows_type = True

    def sql_auto_increment(self, column: Column, sql_type: str) -> str:
        return "IDENTITY(1,1)"

    def sql_rename_table(
        self, schema_name: str | None, table_name: str, new_table_name: str
    ) -> str:
        schema = self.normalize_schema_name(schema_name)
        return (
            f"EXEC sp_rename '{schema}.{self.normalize_name(table_name)}', "
            f"'{self.normalize_name(new_table_name)}'"
        )

    def sql_rename_column(
        self,
        schema_name: str | None,
        table_name: str,
        column_name: str,
        new_column_name: str,
    ) -> str:
        schema = self.normalize_schema_name(schema_name)
        return (
            f"EXEC sp_rename "
            f"'{schema}.{self.normalize_name(table_name)}.{self.normalize_name(column_name)}', "
            f"'{self.normalize_name(new_column_name)}', 'COLUMN'"
        )

    def sql_add_default_constraint(self, constraint: DefaultConstraint) -> str:
        return (
            f"ALTER TABLE {self.qualify(constraint.schema_name, constraint.table_name)} "
            f"ADD CONSTRAINT {self.normalize_name(constraint.constraint_name)} "
            f"DEFAULT {self.format_default_expression(constraint.expression)} "
            f"FOR {self.normalize_name(constraint.column_name)}"
        )

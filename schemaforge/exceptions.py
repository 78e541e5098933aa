"""Exceptions raised by schemaforge."""


class SchemaForgeError(Exception):
    """Base exception for schemaforge."""

    pass


class InvalidArgumentError(SchemaForgeError, ValueError):
    """Raised when a required name, column list or expression is missing."""

    pass


class NotSupportedError(SchemaForgeError, NotImplementedError):
    """Raised when a type has no registered converter."""

    pass


class SqlParseError(SchemaForgeError):
    """Raised when catalog DDL text cannot be parsed."""

    pass


class TableRebuildError(SchemaForgeError):
    """Raised when a table cannot be recreated without touching rows of other tables."""

    pass

"""Enumerations shared by the schema object model."""

import re
from enum import Enum


class ColumnOrder(str, Enum):
    """Sort direction of a column inside a key or index."""

    ASCENDING = "ASC"
    DESCENDING = "DESC"


class ForeignKeyAction(str, Enum):
    """Referential action for ON DELETE / ON UPDATE clauses."""

    NO_ACTION = "NO ACTION"
    CASCADE = "CASCADE"
    RESTRICT = "RESTRICT"
    SET_NULL = "SET NULL"

    def to_sql(self) -> str:
        return self.value

    @classmethod
    def parse(cls, text: str | None) -> "ForeignKeyAction":
        """Parse catalog text such as ``set_null`` or ``SET NULL``.

        Anything that is not recognised falls back to NO_ACTION.
        """
        if not text:
            return cls.NO_ACTION
        letters = re.sub(r"[^A-Za-z]", "", text).upper()
        for action in cls:
            if action.value.replace(" ", "") == letters:
                return action
        return cls.NO_ACTION

"""Parser for the ``CREATE TABLE`` text SQLite keeps in ``sqlite_master``.

SQLite has no catalog views for constraints, so the table definition is
recovered from its DDL. Column-level constraints are lifted into the
table-level constraint lists; unnamed constraints get the same generated
names the builder would give them.
"""

import re
from dataclasses import dataclass, field

from schemaforge.ddl import naming
from schemaforge.exceptions import SqlParseError
from schemaforge.models import (
    CheckConstraint,
    ColumnOrder,
    DefaultConstraint,
    ForeignKeyAction,
    ForeignKeyConstraint,
    OrderedColumn,
    PrimaryKeyConstraint,
    UniqueConstraint,
)

_TOKEN = re.compile(
    r"""
    (?P<ws>\s+)
    | (?P<comment>--[^\n]*|/\*.*?\*/)
    | (?P<string>'(?:[^']|'')*')
    | (?P<quoted>"(?:[^"]|"")*"|`(?:[^`]|``)*`|\[[^\]]*\])
    | (?P<number>\d+(?:\.\d*)?(?:[eE][+-]?\d+)?|\.\d+(?:[eE][+-]?\d+)?)
    | (?P<word>[A-Za-z_][A-Za-z0-9_$]*)
    | (?P<punct>\|\||<=|>=|<>|!=|==|<<|>>|[(),;.+\-*/%<>=&|~])
    """,
    re.VERBOSE | re.DOTALL,
)

COLUMN_CONSTRAINT_KEYWORDS = {
    "CONSTRAINT",
    "PRIMARY",
    "NOT",
    "NULL",
    "UNIQUE",
    "CHECK",
    "DEFAULT",
    "COLLATE",
    "REFERENCES",
    "GENERATED",
    "AS",
}
TABLE_CONSTRAINT_KEYWORDS = {"CONSTRAINT", "PRIMARY", "UNIQUE", "CHECK", "FOREIGN"}


@dataclass
class Token:
    kind: str
    text: str
    start: int
    end: int

    @property
    def upper(self) -> str:
        return self.text.upper() if self.kind == "word" else ""


def tokenize(sql: str) -> list[Token]:
    """Split SQL into tokens, dropping whitespace and comments."""
    tokens: list[Token] = []
    position = 0
    while position < len(sql):
        match = _TOKEN.match(sql, position)
        if match is None:
            raise SqlParseError(
                f"Unexpected character {sql[position]!r} at offset {position}"
            )
        kind = match.lastgroup or ""
        if kind not in ("ws", "comment"):
            tokens.append(Token(kind, match.group(), match.start(), match.end()))
        position = match.end()
    return tokens


def identifier(token: Token) -> str:
    """Identifier text with one level of quoting removed."""
    if token.kind == "quoted" or token.kind == "string":
        inner = token.text[1:-1]
        quote = token.text[0]
        if quote in "\"`'":
            inner = inner.replace(quote * 2, quote)
        return inner
    return token.text


@dataclass
class ParsedColumn:
    column_name: str
    sql_type: str
    is_nullable: bool = True
    is_auto_increment: bool = False


@dataclass
class ParsedTable:
    """Everything SQLite's DDL says about one table."""

    table_name: str
    columns: list[ParsedColumn] = field(default_factory=list)
    primary_key: PrimaryKeyConstraint | None = None
    check_constraints: list[CheckConstraint] = field(default_factory=list)
    default_constraints: list[DefaultConstraint] = field(default_factory=list)
    unique_constraints: list[UniqueConstraint] = field(default_factory=list)
    foreign_key_constraints: list[ForeignKeyConstraint] = field(default_factory=list)


class _Cursor:
    """Forward-only view over a token list."""

    def __init__(self, sql: str, tokens: list[Token]) -> None:
        self.sql = sql
        self.tokens = tokens
        self.position = 0

    @property
    def done(self) -> bool:
        return self.position >= len(self.tokens)

    def peek(self, offset: int = 0) -> Token | None:
        index = self.position + offset
        return self.tokens[index] if index < len(self.tokens) else None

    def peek_upper(self, offset: int = 0) -> str:
        token = self.peek(offset)
        return token.upper if token else ""

    def next(self) -> Token:
        token = self.peek()
        if token is None:
            raise SqlParseError("Unexpected end of CREATE TABLE statement")
        self.position += 1
        return token

    def accept(self, *words: str) -> bool:
        """Consume the keyword sequence if it is next."""
        for offset, word in enumerate(words):
            if self.peek_upper(offset) != word:
                return False
        self.position += len(words)
        return True

    def expect(self, *words: str) -> None:
        if not self.accept(*words):
            found = self.peek()
            raise SqlParseError(
                f"Expected {' '.join(words)}, found {found.text if found else 'end'!r}"
            )

    def expect_punct(self, text: str) -> Token:
        token = self.next()
        if token.kind != "punct" or token.text != text:
            raise SqlParseError(f"Expected {text!r}, found {token.text!r}")
        return token

    def parenthesized(self) -> tuple[list[Token], str]:
        """Consume ``( ... )`` and return the inner tokens and source text."""
        opening = self.expect_punct("(")
        depth = 1
        start = self.position
        while True:
            token = self.next()
            if token.kind == "punct" and token.text == "(":
                depth += 1
            elif token.kind == "punct" and token.text == ")":
                depth -= 1
                if depth == 0:
                    inner = self.tokens[start : self.position - 1]
                    return inner, self.sql[opening.end : token.start].strip()


def split_top_level(tokens: list[Token]) -> list[list[Token]]:
    """Split on commas that are not nested inside parentheses."""
    parts: list[list[Token]] = [[]]
    depth = 0
    for token in tokens:
        if token.kind == "punct" and token.text == "(":
            depth += 1
        elif token.kind == "punct" and token.text == ")":
            depth -= 1
        if depth == 0 and token.kind == "punct" and token.text == ",":
            parts.append([])
            continue
        parts[-1].append(token)
    return [p for p in parts if p]


def _ordered_columns(tokens: list[Token]) -> list[OrderedColumn]:
    columns = []
    for part in split_top_level(tokens):
        name = identifier(part[0])
        order = ColumnOrder.ASCENDING
        if any(t.upper == "DESC" for t in part[1:]):
            order = ColumnOrder.DESCENDING
        columns.append(OrderedColumn(name, order))
    return columns


def _skip_conflict_clause(cursor: _Cursor) -> None:
    if cursor.accept("ON", "CONFLICT"):
        cursor.next()


def _referential_action(cursor: _Cursor) -> ForeignKeyAction:
    words = []
    while not cursor.done and cursor.peek_upper() in (
        "SET",
        "NULL",
        "DEFAULT",
        "CASCADE",
        "RESTRICT",
        "NO",
        "ACTION",
    ):
        words.append(cursor.next().text)
        if words[-1].upper() in ("NULL", "DEFAULT", "CASCADE", "RESTRICT", "ACTION"):
            break
    return ForeignKeyAction.parse(" ".join(words))


def _references_clause(
    cursor: _Cursor,
) -> tuple[str, list[OrderedColumn], ForeignKeyAction, ForeignKeyAction]:
    cursor.expect("REFERENCES")
    referenced_table = identifier(cursor.next())
    referenced_columns: list[OrderedColumn] = []
    peek = cursor.peek()
    if peek is not None and peek.kind == "punct" and peek.text == "(":
        inner, _ = cursor.parenthesized()
        referenced_columns = _ordered_columns(inner)

    on_delete = ForeignKeyAction.NO_ACTION
    on_update = ForeignKeyAction.NO_ACTION
    while not cursor.done:
        if cursor.accept("ON", "DELETE"):
            on_delete = _referential_action(cursor)
        elif cursor.accept("ON", "UPDATE"):
            on_update = _referential_action(cursor)
        elif cursor.accept("MATCH"):
            cursor.next()
        elif cursor.peek_upper() in ("NOT", "DEFERRABLE") and (
            cursor.peek_upper() == "DEFERRABLE" or cursor.peek_upper(1) == "DEFERRABLE"
        ):
            cursor.accept("NOT")
            cursor.expect("DEFERRABLE")
            if cursor.accept("INITIALLY"):
                cursor.next()
        else:
            break
    return referenced_table, referenced_columns, on_delete, on_update


def _default_expression(cursor: _Cursor) -> str:
    token = cursor.peek()
    if token is None:
        raise SqlParseError("DEFAULT without a value")
    if token.kind == "punct" and token.text == "(":
        _, text = cursor.parenthesized()
        return f"({text})"
    if token.kind == "punct" and token.text in "+-":
        sign = cursor.next()
        value = cursor.next()
        return f"{sign.text}{value.text}"
    return cursor.next().text


class _TableParser:
    def __init__(self, sql: str) -> None:
        self.sql = sql
        self.cursor = _Cursor(sql, tokenize(sql))
        self.table: ParsedTable | None = None

    def parse(self) -> ParsedTable:
        cursor = self.cursor
        cursor.expect("CREATE")
        if not cursor.accept("TEMP"):
            cursor.accept("TEMPORARY")
        cursor.expect("TABLE")
        cursor.accept("IF", "NOT", "EXISTS")
        name = identifier(cursor.next())
        peek = cursor.peek()
        if peek is not None and peek.kind == "punct" and peek.text == ".":
            cursor.next()
            name = identifier(cursor.next())
        if cursor.peek_upper() == "AS":
            raise SqlParseError(f"CREATE TABLE {name} AS SELECT has no column list")

        self.table = ParsedTable(table_name=name)
        body, _ = cursor.parenthesized()
        for definition in split_top_level(body):
            if definition[0].upper in TABLE_CONSTRAINT_KEYWORDS:
                self._table_constraint(definition)
            else:
                self._column(definition)
        return self.table

    def _sub(self, tokens: list[Token]) -> _Cursor:
        return _Cursor(self.sql, tokens)

    # -- columns -------------------------------------------------------------

    def _column(self, tokens: list[Token]) -> None:
        assert self.table is not None
        table_name = self.table.table_name
        cursor = self._sub(tokens)
        column_name = identifier(cursor.next())

        type_tokens: list[Token] = []
        depth = 0
        while not cursor.done:
            token = cursor.peek()
            assert token is not None
            if depth == 0 and token.upper in COLUMN_CONSTRAINT_KEYWORDS:
                break
            if token.kind == "punct" and token.text == "(":
                depth += 1
            elif token.kind == "punct" and token.text == ")":
                depth -= 1
            type_tokens.append(cursor.next())
        sql_type = ""
        if type_tokens:
            raw = self.sql[type_tokens[0].start : type_tokens[-1].end]
            sql_type = " ".join(raw.split())
        column = ParsedColumn(column_name, sql_type or "blob")
        self.table.columns.append(column)

        constraint_name: str | None = None
        while not cursor.done:
            if cursor.accept("CONSTRAINT"):
                constraint_name = identifier(cursor.next())
                continue
            if cursor.accept("PRIMARY", "KEY"):
                order = ColumnOrder.ASCENDING
                if cursor.accept("DESC"):
                    order = ColumnOrder.DESCENDING
                else:
                    cursor.accept("ASC")
                _skip_conflict_clause(cursor)
                if cursor.accept("AUTOINCREMENT"):
                    column.is_auto_increment = True
                self.table.primary_key = PrimaryKeyConstraint(
                    None,
                    table_name,
                    constraint_name
                    or naming.primary_key_constraint_name(table_name, [column_name]),
                    [OrderedColumn(column_name, order)],
                )
                column.is_nullable = False
            elif cursor.accept("NOT", "NULL"):
                _skip_conflict_clause(cursor)
                column.is_nullable = False
            elif cursor.accept("NULL"):
                _skip_conflict_clause(cursor)
            elif cursor.accept("UNIQUE"):
                _skip_conflict_clause(cursor)
                self.table.unique_constraints.append(
                    UniqueConstraint(
                        None,
                        table_name,
                        constraint_name
                        or naming.unique_constraint_name(table_name, [column_name]),
                        [OrderedColumn(column_name)],
                    )
                )
            elif cursor.accept("CHECK"):
                _, expression = cursor.parenthesized()
                self.table.check_constraints.append(
                    CheckConstraint(
                        None,
                        table_name,
                        column_name,
                        constraint_name
                        or naming.check_constraint_name(table_name, column_name),
                        expression,
                    )
                )
            elif cursor.accept("DEFAULT"):
                self.table.default_constraints.append(
                    DefaultConstraint(
                        None,
                        table_name,
                        column_name,
                        constraint_name
                        or naming.default_constraint_name(table_name, column_name),
                        _default_expression(cursor),
                    )
                )
            elif cursor.accept("COLLATE"):
                cursor.next()
            elif cursor.peek_upper() == "REFERENCES":
                referenced_table, referenced_columns, on_delete, on_update = (
                    _references_clause(cursor)
                )
                self.table.foreign_key_constraints.append(
                    ForeignKeyConstraint(
                        None,
                        table_name,
                        constraint_name
                        or naming.foreign_key_constraint_name(
                            table_name,
                            [column_name],
                            referenced_table,
                            [c.column_name for c in referenced_columns],
                        ),
                        [OrderedColumn(column_name)],
                        referenced_table,
                        referenced_columns or [OrderedColumn(column_name)],
                        on_delete,
                        on_update,
                    )
                )
            elif cursor.accept("GENERATED", "ALWAYS") or cursor.peek_upper() == "AS":
                cursor.expect("AS")
                cursor.parenthesized()
                if not cursor.accept("STORED"):
                    cursor.accept("VIRTUAL")
            else:
                token = cursor.next()
                raise SqlParseError(
                    f"Unexpected {token.text!r} in definition of column {column_name}"
                )
            constraint_name = None

    # -- table constraints ---------------------------------------------------

    def _table_constraint(self, tokens: list[Token]) -> None:
        assert self.table is not None
        table_name = self.table.table_name
        cursor = self._sub(tokens)
        constraint_name: str | None = None
        if cursor.accept("CONSTRAINT"):
            constraint_name = identifier(cursor.next())

        if cursor.accept("PRIMARY", "KEY"):
            inner, _ = cursor.parenthesized()
            columns = _ordered_columns(inner)
            self.table.primary_key = PrimaryKeyConstraint(
                None,
                table_name,
                constraint_name
                or naming.primary_key_constraint_name(
                    table_name, [c.column_name for c in columns]
                ),
                columns,
            )
            for column in self.table.columns:
                if any(c.column_name.lower() == column.column_name.lower() for c in columns):
                    column.is_nullable = False
        elif cursor.accept("UNIQUE"):
            inner, _ = cursor.parenthesized()
            columns = _ordered_columns(inner)
            self.table.unique_constraints.append(
                UniqueConstraint(
                    None,
                    table_name,
                    constraint_name
                    or naming.unique_constraint_name(
                        table_name, [c.column_name for c in columns]
                    ),
                    columns,
                )
            )
        elif cursor.accept("CHECK"):
            _, expression = cursor.parenthesized()
            column_name = self._single_column_in(expression)
            if not constraint_name:
                constraint_name = (
                    naming.check_constraint_name(table_name, column_name)
                    if column_name
                    else naming.to_raw_identifier(
                        "ck", table_name, str(len(self.table.check_constraints))
                    )
                )
            self.table.check_constraints.append(
                CheckConstraint(
                    None, table_name, column_name, constraint_name, expression
                )
            )
        elif cursor.accept("FOREIGN", "KEY"):
            inner, _ = cursor.parenthesized()
            source_columns = _ordered_columns(inner)
            referenced_table, referenced_columns, on_delete, on_update = (
                _references_clause(cursor)
            )
            self.table.foreign_key_constraints.append(
                ForeignKeyConstraint(
                    None,
                    table_name,
                    constraint_name
                    or naming.foreign_key_constraint_name(
                        table_name,
                        [c.column_name for c in source_columns],
                        referenced_table,
                        [c.column_name for c in referenced_columns],
                    ),
                    source_columns,
                    referenced_table,
                    referenced_columns or source_columns,
                    on_delete,
                    on_update,
                )
            )
        else:
            token = cursor.peek()
            raise SqlParseError(
                f"Unexpected {token.text if token else 'end'!r} in table constraint"
            )

    def _single_column_in(self, expression: str) -> str | None:
        """The column a table-level CHECK refers to, when it names exactly one."""
        assert self.table is not None
        words = {
            identifier(t).lower()
            for t in tokenize(expression)
            if t.kind in ("word", "quoted")
        }
        matches = [c.column_name for c in self.table.columns if c.column_name.lower() in words]
        return matches[0] if len(matches) == 1 else None


def parse_create_table(sql: str) -> ParsedTable:
    """Parse one ``CREATE TABLE`` statement.

    Raises:
        SqlParseError: The statement is not a CREATE TABLE with a column list
    """
    return _TableParser(sql).parse()

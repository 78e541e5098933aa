"""Identifier sanitising, constraint auto-naming and wildcard filters.

Generated names are deterministic: creating the same table twice produces
the same constraint and index names, which is what lets the
``*_if_not_exists`` operations recognise objects they created earlier.
"""

import re
from collections.abc import Iterable

_ASCII_ALNUM = re.compile(r"[A-Za-z0-9]")


def to_alphanumeric(text: str, allowed: str = "") -> str:
    """Keep ASCII letters, digits and any character listed in ``allowed``."""
    return "".join(c for c in text if _ASCII_ALNUM.match(c) or c in allowed)


def to_raw_identifier(prefix: str, *segments: str) -> str:
    """Join sanitised segments behind a prefix, e.g. ``pk_orders_id``."""
    parts = [to_alphanumeric(prefix, "_")]
    for segment in segments:
        if not segment or not segment.strip():
            continue
        parts.append(to_alphanumeric(segment, "_"))
    return "_".join(parts).strip("_")


def primary_key_constraint_name(table_name: str, column_names: Iterable[str]) -> str:
    return to_raw_identifier("pk", table_name, *column_names)


def unique_constraint_name(table_name: str, column_names: Iterable[str]) -> str:
    return to_raw_identifier("uc", table_name, *column_names)


def check_constraint_name(table_name: str, column_name: str) -> str:
    return to_raw_identifier("ck", table_name, column_name)


def default_constraint_name(table_name: str, column_name: str) -> str:
    return to_raw_identifier("df", table_name, column_name)


def index_name(table_name: str, column_names: Iterable[str]) -> str:
    return to_raw_identifier("ix", table_name, *column_names)


def foreign_key_constraint_name(
    table_name: str,
    column_names: Iterable[str],
    referenced_table_name: str,
    referenced_column_names: Iterable[str],
) -> str:
    return to_raw_identifier(
        "fk",
        table_name,
        *column_names,
        referenced_table_name,
        *referenced_column_names,
    )


def to_like_string(name_filter: str, allowed: str = "-_.*") -> str:
    """Sanitise a caller filter for interpolation into a LIKE pattern.

    Only alphanumerics and ``allowed`` survive, then ``*`` becomes ``%``.
    """
    return to_alphanumeric(name_filter, allowed).replace("*", "%")


def is_wildcard_match(text: str, pattern: str, ignore_case: bool = True) -> bool:
    """Shell-style match supporting ``*`` (any run) and ``?`` (one character)."""
    if not text or not pattern or not pattern.strip():
        return False
    regex = "".join(
        ".*" if c == "*" else "." if c == "?" else re.escape(c) for c in pattern
    )
    flags = re.IGNORECASE if ignore_case else 0
    return re.fullmatch(regex, text, flags | re.DOTALL) is not None


def filter_names(
    names: Iterable[str], name_filter: str | None, ignore_case: bool = True
) -> list[str]:
    """Narrow names by an optional wildcard filter; blank filters keep everything."""
    if not name_filter or not name_filter.strip():
        return list(names)
    return [n for n in names if is_wildcard_match(n, name_filter, ignore_case)]


def unquote_identifier(name: str) -> str:
    """Strip one level of identifier quoting: ``"x"``, ``[x]``, `` `x` ``, ``'x'``."""
    name = name.strip()
    if len(name) >= 2 and (name[0], name[-1]) in (
        ('"', '"'),
        ("[", "]"),
        ("`", "`"),
        ("'", "'"),
    ):
        return name[1:-1]
    return name

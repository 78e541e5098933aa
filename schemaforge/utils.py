"""Utility functions shared across schemaforge."""

import types
from typing import Any, Union, get_args, get_origin


def unwrap_optional(host_type: Any) -> tuple[Any, bool]:
    """Strip ``Optional[...]`` / ``X | None`` from a host type.

    Returns:
        Tuple of (inner type, whether None was part of the union)
    """
    origin = get_origin(host_type)
    if origin is Union or origin is types.UnionType:
        args = [a for a in get_args(host_type) if a is not type(None)]
        if len(args) < len(get_args(host_type)) and len(args) == 1:
            return args[0], True
    return host_type, False

"""
Utility functions for CLI operations.

Parsing of command-line header and variable arguments, and conversion of a
client's diagnostic snapshot into JSON-friendly data.
"""

import json
from http.cookies import SimpleCookie
from typing import Any, Dict, Iterable, List, Optional, Tuple

from multidict import MultiMapping


def parse_headers(header_strings: Optional[Iterable[str]]) -> List[Tuple[str, str]]:
    """
    Parse header strings into ``(name, value)`` pairs.

    Repeated names are kept, so ``-H "X-A: 1" -H "X-A: 2"`` sends both values.

    Args:
        header_strings: Header strings in "Name: value" format

    Returns:
        List of (name, value) pairs in argument order

    Raises:
        ValueError: If a header string has no colon or an empty name

    Example:
        ```python
        parse_headers(["Authorization: Bearer token", "X-A:1"])
        # [("Authorization", "Bearer token"), ("X-A", "1")]
        ```
    """
    headers: List[Tuple[str, str]] = []
    for header_string in header_strings or ():
        name, sep, value = header_string.partition(":")
        if not sep or not name.strip():
            raise ValueError(f"Invalid header format: {header_string!r} (expected 'Name: value')")
        headers.append((name.strip(), value.strip()))
    return headers


def parse_variables(var_strings: Optional[Iterable[str]]) -> Dict[str, Any]:
    """
    Parse ``name=value`` variable assignments.

    The value is parsed as JSON when possible (``count=3``, ``ids=[1,2]``,
    ``flag=true``); otherwise the raw string is used (``code=AF``).

    Raises:
        ValueError: If an assignment has no ``=`` or an empty name
    """
    variables: Dict[str, Any] = {}
    for var_string in var_strings or ():
        name, sep, raw = var_string.partition("=")
        if not sep or not name.strip():
            raise ValueError(f"Invalid variable format: {var_string!r} (expected 'name=value')")
        try:
            variables[name.strip()] = json.loads(raw)
        except ValueError:
            variables[name.strip()] = raw
    return variables


def to_jsonable(value: Any) -> Any:
    """Convert diagnostic snapshot values into JSON-serializable data."""
    if isinstance(value, MultiMapping):
        result: Dict[str, List[str]] = {}
        for name, item in value.items():
            result.setdefault(name, []).append(item)
        return result
    if isinstance(value, SimpleCookie):
        return {name: morsel.value for name, morsel in value.items()}
    if isinstance(value, dict):
        return {key: to_jsonable(item) for key, item in value.items()}
    return value

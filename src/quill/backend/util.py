"""Shared utilities for Quill backends."""

from __future__ import annotations

import json
import math


def escape_string(value: str) -> str:
    """Escape a string for use in a double-quoted literal (without quotes)."""
    return (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\t", "\\t")
        .replace("\r", "\\r")
        .replace("\f", "\\f")
        .replace("\v", "\\v")
        .replace("\x00", "\\x00")
        .replace("\x7f", "\\u007f")
    )


def quote_string(value: str) -> str:
    return '"' + escape_string(value) + '"'


def escape_template(value: str) -> str:
    """Escape literal text for a backtick template segment.

    Line breaks are escaped so re-indenting the enclosing statement cannot
    change the string value.
    """
    return (
        value.replace("\\", "\\\\")
        .replace("`", "\\`")
        .replace("${", "\\${")
        .replace("\n", "\\n")
        .replace("\r", "\\r")
    )


def format_number(value: int | float) -> str:
    """Format a number the way a JavaScript engine prints it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer():
        return str(int(value))
    return repr(value)


def fallback_json(value: object) -> str:
    """JSON-like text for a value no renderer claims.

    Values JSON cannot express are rendered as the JSON string of their repr.
    """
    return json.dumps(value, ensure_ascii=False, default=repr)


def is_identifier(name: str) -> bool:
    """Check if name can be written as a bare property key or variable."""
    return name.isidentifier() or (name.startswith("$") and (name[1:] == "" or name[1:].isidentifier()))

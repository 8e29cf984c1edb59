"""Quill: build syntax trees from Python calls and render them. Public API."""

from __future__ import annotations

from .backend.pytree import UnsupportedValueError as UnsupportedValueError, to_tree, unparse
from .backend.text import to_source
from .nodes import Node, Value
from .sequence import Sequence as Sequence, SequenceError as SequenceError, drive as drive
from .splice import SpliceError as SpliceError


def render(node: Value) -> str:
    """Render a node (or bare value) as source text."""
    return to_source(node)


def render_tree(node: Value) -> str:
    """Render a node through the Python `ast` backend and its unparser."""
    return unparse(node)


__all__ = [
    "Node",
    "Sequence",
    "SequenceError",
    "SpliceError",
    "UnsupportedValueError",
    "drive",
    "render",
    "render_tree",
    "to_source",
    "to_tree",
    "unparse",
]

"""Insert generated statements at the top of a named function in existing source."""

from __future__ import annotations

import ast

from .backend.pytree import to_statements
from .nodes import Value


class SpliceError(Exception):
    """Raised when the target function is not found."""


class _Inserter(ast.NodeTransformer):
    def __init__(self, function: str, statements: list[ast.stmt]) -> None:
        self.function = function
        self.statements = statements
        self.count = 0

    def visit_FunctionDef(self, node: ast.FunctionDef) -> ast.AST:
        return self._insert(node)

    def visit_AsyncFunctionDef(self, node: ast.AsyncFunctionDef) -> ast.AST:
        return self._insert(node)

    def _insert(self, node: ast.FunctionDef | ast.AsyncFunctionDef) -> ast.AST:
        self.generic_visit(node)
        if node.name != self.function:
            return node
        self.count += 1
        at = 1 if _has_docstring(node) else 0
        rest = node.body[at:]
        if self.statements and len(rest) == 1 and isinstance(rest[0], ast.Pass):
            # a stub body is replaced rather than extended
            rest = []
        node.body = node.body[:at] + list(self.statements) + rest
        return node


def _has_docstring(node: ast.FunctionDef | ast.AsyncFunctionDef) -> bool:
    first = node.body[0] if node.body else None
    return isinstance(first, ast.Expr) and isinstance(first.value, ast.Constant) and isinstance(first.value.value, str)


def splice(source: str, function: str, statements: Value | list[ast.stmt]) -> str:
    """Return source with statements inserted at the top of every def named function.

    statements is a node (converted with the tree backend) or a ready list of
    `ast.stmt`. Raises SyntaxError when source does not parse and SpliceError
    when no function matches.
    """
    tree = ast.parse(source)
    if isinstance(statements, list):
        stmts = statements
    else:
        stmts = to_statements(statements)
    inserter = _Inserter(function, stmts)
    tree = inserter.visit(tree)
    if inserter.count == 0:
        raise SpliceError(f"no function named '{function}'")
    return ast.unparse(ast.fix_missing_locations(tree))

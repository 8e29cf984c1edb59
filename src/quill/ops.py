"""Operator builders.

Numeric (arithmetic and comparison) and logical operators build the two
BinaryOp variants; consuming either through a Sequence mints a typed
reference (number for arithmetic, boolean for comparisons and logic).
"""

from __future__ import annotations

from .dsl import coerce
from .nodes import (
    COMPARISON_OPS,
    LOGICAL_OPS,
    NUMERIC_OPS,
    UNARY_OPS,
    UPDATE_OPS,
    LogicalOp,
    NumericOp,
    UnaryOp,
)


def numeric(left: object, op: str, right: object) -> NumericOp:
    if op not in NUMERIC_OPS and op not in COMPARISON_OPS:
        raise ValueError(f"unknown numeric operator: {op!r}")
    return NumericOp(coerce(left), op, coerce(right))


def logical(left: object, op: str, right: object) -> LogicalOp:
    if op not in LOGICAL_OPS:
        raise ValueError(f"unknown logical operator: {op!r}")
    return LogicalOp(coerce(left), op, coerce(right))


def unary(op: str, operand: object, prefix: bool = True) -> UnaryOp:
    if op not in UNARY_OPS:
        raise ValueError(f"unknown unary operator: {op!r}")
    if not prefix and op not in UPDATE_OPS:
        raise ValueError(f"operator {op!r} is prefix only")
    return UnaryOp(op, coerce(operand), prefix)


# ── Numeric ─────────────────────────────────────────────────


def add(left: object, right: object) -> NumericOp:
    return numeric(left, "+", right)


def subtract(left: object, right: object) -> NumericOp:
    return numeric(left, "-", right)


def multiply(left: object, right: object) -> NumericOp:
    return numeric(left, "*", right)


def divide(left: object, right: object) -> NumericOp:
    return numeric(left, "/", right)


def modulo(left: object, right: object) -> NumericOp:
    return numeric(left, "%", right)


def power(left: object, right: object) -> NumericOp:
    return numeric(left, "**", right)


def gt(left: object, right: object) -> NumericOp:
    return numeric(left, ">", right)


def lt(left: object, right: object) -> NumericOp:
    return numeric(left, "<", right)


def gte(left: object, right: object) -> NumericOp:
    return numeric(left, ">=", right)


def lte(left: object, right: object) -> NumericOp:
    return numeric(left, "<=", right)


def eq(left: object, right: object) -> NumericOp:
    return numeric(left, "==", right)


# ── Logical ─────────────────────────────────────────────────


def and_(left: object, right: object) -> LogicalOp:
    return logical(left, "&&", right)


def or_(left: object, right: object) -> LogicalOp:
    return logical(left, "||", right)


# ── Unary ───────────────────────────────────────────────────


def not_(operand: object) -> UnaryOp:
    return unary("!", operand)


def negate(operand: object) -> UnaryOp:
    return unary("-", operand)


def plus(operand: object) -> UnaryOp:
    return unary("+", operand)


def increment(operand: object, prefix: bool = True) -> UnaryOp:
    """`++x`, or `x++` when prefix is False."""
    return unary("++", operand, prefix)


def decrement(operand: object, prefix: bool = True) -> UnaryOp:
    return unary("--", operand, prefix)

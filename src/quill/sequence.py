"""Binding protocol: drive a producer into an ordered statement sequence.

A producer is any callable taking a `Sequence` (plus the references it binds,
for loop and function bodies). It declares statements in program order:

    def body(seq):
        a = seq.emit(let("a", 10))        # a is Reference("a")
        seq.emit(call("print", add(a, 5)))
        seq.finish(a)                     # completion value

A producer may instead be a generator, in which case each yielded node is
emitted and the minted reference is sent back:

    def body(seq):
        a = yield let("a", 10)
        b = yield from let("b", add(a, 1))
        return b

Construction order is binding order. No symbol table is threaded, nothing is
reordered, hoisted or deduplicated, and use-before-bind is not detected.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable, Generator

from .backend.text import to_source
from .nodes import (
    COMPARISON_OPS,
    Block,
    Declaration,
    LogicalOp,
    NumericOp,
    PropertyAccess,
    Reference,
    Value,
)
from .types import BOOLEAN, NUMBER, UNKNOWN, ObjectType, Type

Producer = Callable[..., object]


class SequenceError(Exception):
    """Raised when a producer breaks the emit/finish protocol."""


class Sequence:
    """Ordered statement accumulator with a one-shot completion value.

    Invariants:
    - statements are kept in exactly the order emit() was called
    - finish() is called at most once; emit() after finish() is an error
    - every emit() of a binding node mints a fresh Reference
    """

    def __init__(self) -> None:
        self.statements: list[Value] = []
        self.result: Value = None
        self.finished: bool = False

    def emit(self, value: Value) -> Reference | None:
        """Append value as the next statement; return the reference it binds."""
        if self.finished:
            raise SequenceError("cannot emit after the sequence has finished")
        self.statements.append(value)
        return mint_reference(value)

    def finish(self, value: Value = None) -> None:
        """Record the completion value (the return expression of a body)."""
        if self.finished:
            raise SequenceError("sequence already finished")
        self.finished = True
        self.result = value

    def close(self) -> Block:
        return Block(tuple(self.statements), self.result)


def drive(producer: Producer, *bound: Reference) -> Block:
    """Run producer to exhaustion and return the resulting Block.

    A plain function sets the completion value only through seq.finish();
    whatever it returns is ignored. A generator may also return it.
    """
    seq = Sequence()
    outcome = producer(seq, *bound)
    if inspect.isgenerator(outcome):
        result = _run(seq, outcome)
        if result is not None:
            seq.finish(result)
    return seq.close()


def _run(seq: Sequence, gen: Generator[Value, object, object]) -> object:
    reply: Reference | None = None
    while True:
        try:
            value = gen.send(reply)
        except StopIteration as stop:
            return stop.value
        reply = seq.emit(value)


# ============================================================
# REFERENCE MINTING
# ============================================================


def mint_reference(value: Value) -> Reference | None:
    """Reference bound by consuming value, or None if it binds nothing.

    | Consumed        | Reference name     | Reference type                     |
    |-----------------|--------------------|------------------------------------|
    | Declaration     | declared name      | declared type                      |
    | PropertyAccess  | rendered access    | schema entry for the prop, else any |
    | NumericOp       | rendered operation | number (boolean for comparisons)   |
    | LogicalOp       | rendered operation | boolean                            |
    """
    match value:
        case Declaration(name=name, typ=typ):
            return Reference(name, typ, declared_schema(value))
        case PropertyAccess():
            typ = property_type(value)
            schema = typ.property_types() if isinstance(typ, ObjectType) else None
            return Reference(to_source(value), typ, schema, value)
        case NumericOp(op=op):
            return Reference(to_source(value), BOOLEAN if op in COMPARISON_OPS else NUMBER, expr=value)
        case LogicalOp():
            return Reference(to_source(value), BOOLEAN, expr=value)
        case _:
            return None


def declared_schema(decl: Declaration) -> dict[str, Type] | None:
    """Property schema of a declaration: explicit schema, else its object type."""
    if decl.schema is not None:
        return dict(decl.schema)
    if isinstance(decl.typ, ObjectType):
        return decl.typ.property_types()
    return None


def property_type(access: PropertyAccess) -> Type:
    """Statically tracked type of obj.prop, UNKNOWN when nothing is known."""
    obj = access.obj
    if access.computed or not isinstance(obj, Reference) or obj.schema is None:
        return UNKNOWN
    return obj.schema.get(access.prop, UNKNOWN)

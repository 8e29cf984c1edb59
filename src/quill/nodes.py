"""Quill nodes: the closed set of expression and statement constructs.

This module defines the node algebra and documents each node's semantics and
invariants. Backends (`quill.backend.text`, `quill.backend.pytree`) dispatch
over these classes with `match`; nodes carry no rendering logic of their own
beyond the `render()` convenience.

Architecture:
    dsl/ops builders -> [nodes] -> sequence (binding) -> backend -> text | ast

All nodes are frozen: children are built before their parent and never
mutated afterwards. Amending a node means building a new one.
"""

from __future__ import annotations

from collections.abc import Generator
from dataclasses import dataclass, field
from typing import Literal, Union

from .types import Type


# ============================================================
# BASE
# ============================================================


@dataclass(frozen=True)
class Node:
    """Base for all nodes. Abstract.

    Iterating a node yields the node itself exactly once and returns
    whatever the driver sends back, so a generator producer can write
    `ref = yield from node` as well as `ref = yield node`.
    """

    def __iter__(self) -> Generator[Node, object, object]:
        reply = yield self
        return reply

    def render(self) -> str:
        """Pretty-print this node as source text."""
        from .backend.text import to_source

        return to_source(self)

    def __str__(self) -> str:
        return self.render()


Value = Union[Node, int, float, str, bool, None]
"""Anything accepted where a node is expected.

Bare Python values are literal shorthand. The text backend renders them
through a JSON fallback; the tree backend converts the ones it understands
and rejects the rest.
"""


# ============================================================
# LITERALS
# ============================================================


@dataclass(frozen=True)
class NumberLiteral(Node):
    """Numeric literal, optionally annotated: `10`, `1.5: number`."""

    value: int | float
    typ: Type | None = None


@dataclass(frozen=True)
class StringLiteral(Node):
    """String literal, rendered double-quoted with JSON escapes."""

    value: str
    typ: Type | None = None


@dataclass(frozen=True)
class BoolLiteral(Node):
    """`true` / `false`."""

    value: bool
    typ: Type | None = None


# ============================================================
# BINDINGS
# ============================================================


@dataclass(frozen=True)
class Reference(Node):
    """Read-only handle to a bound name.

    Semantics:
    - Renders as the bare name, never the initializer it was bound to
    - typ is the declared type, or None when nothing was declared
    - schema maps property names to types for property-type flow-through
    - expr is the operation or property access the reference was minted
      from; backends use it for precedence and tree conversion, and name
      is its rendered text

    Invariants:
    - No link back to the declaration that produced it; copies are free
    - expr is None for references to declared names
    - equality ignores expr
    """

    name: str
    typ: Type | None = None
    schema: dict[str, Type] | None = None
    expr: Value = field(default=None, compare=False)


@dataclass(frozen=True)
class Declaration(Node):
    """Variable binding: `let name: T = value;`

    Semantics:
    - Consuming a declaration through a Sequence mints a Reference carrying
      name, typ and schema
    - Redeclaring a name is allowed; shadowing is not checked

    Invariants:
    - kind is "let" or "const"
    """

    name: str
    value: Value
    typ: Type | None = None
    schema: dict[str, Type] | None = None
    kind: Literal["let", "const"] = "let"


# ============================================================
# BLOCKS
# ============================================================


@dataclass(frozen=True)
class Block(Node):
    """Driven statement sequence: `{ stmt; stmt; }`

    Semantics:
    - statements are in exactly the order the producer emitted them
    - result is the producer's completion value, distinct from the
      statements; only function bodies render it (as a return)
    """

    statements: tuple[Value, ...] = ()
    result: Value = None


@dataclass(frozen=True)
class Program(Node):
    """Top-level statement sequence, rendered without braces."""

    statements: tuple[Value, ...] = ()


# ============================================================
# CONTROL FLOW
# ============================================================


@dataclass(frozen=True)
class Conditional(Node):
    """`if (cond) { ... } else { ... }`

    Invariants:
    - else_branch is None when there is no else clause
    """

    condition: Value
    then_branch: Block
    else_branch: Block | None = None


@dataclass(frozen=True)
class IterateOver(Node):
    """`for (const name of source) { body }` iterates values."""

    name: str
    source: Value
    body: Block


@dataclass(frozen=True)
class IterateKeys(Node):
    """`for (const name in source) { body }` iterates keys."""

    name: str
    source: Value
    body: Block


@dataclass(frozen=True)
class CountedLoop(Node):
    """C-style loop: `for (init; condition; update) { body }`

    Semantics:
    - Execute init
    - While condition holds: execute body, then update
    - Any of init/condition/update may be None (empty clause)
    """

    init: Value
    condition: Value
    update: Value
    body: Block


@dataclass(frozen=True)
class WhileLoop(Node):
    """`while (condition) { body }`"""

    condition: Value
    body: Block


# ============================================================
# COMPOSITES
# ============================================================


@dataclass(frozen=True)
class ObjectLiteral(Node):
    """`{ k: v, ... }` with properties in insertion order."""

    properties: dict[str, Value]
    typ: Type | None = None


@dataclass(frozen=True)
class ArrayLiteral(Node):
    """`[ e, ... ]`"""

    elements: tuple[Value, ...]
    typ: Type | None = None


@dataclass(frozen=True)
class Param(Node):
    """Function parameter; typ None means unannotated."""

    name: str
    typ: Type | None = None


@dataclass(frozen=True)
class FunctionLiteral(Node):
    """Arrow function: `<T>(p: T): R => { body; return result; }`

    Semantics:
    - body.statements become body statements
    - body.result, when present, becomes the trailing return statement
    """

    params: tuple[Param, ...]
    body: Block
    return_type: Type | None = None
    type_params: tuple[str, ...] = ()


# ============================================================
# CALLS AND ACCESS
# ============================================================


@dataclass(frozen=True)
class Call(Node):
    """`callee(args...)`"""

    callee: Value
    args: tuple[Value, ...] = ()


@dataclass(frozen=True)
class MethodCall(Node):
    """`obj.method(args...)`"""

    obj: Value
    method: str
    args: tuple[Value, ...] = ()


@dataclass(frozen=True)
class PropertyAccess(Node):
    """`obj.prop` or, when computed, `obj[prop]`.

    Invariants:
    - when computed is False, prop is a plain property name (str)
    """

    obj: Value
    prop: Value
    computed: bool = False


# ============================================================
# OPERATORS
# ============================================================

NUMERIC_OPS: tuple[str, ...] = ("+", "-", "*", "/", "%", "**")
COMPARISON_OPS: tuple[str, ...] = (">", "<", ">=", "<=", "==")
LOGICAL_OPS: tuple[str, ...] = ("&&", "||")
UNARY_OPS: tuple[str, ...] = ("!", "-", "+", "++", "--")
UPDATE_OPS: tuple[str, ...] = ("++", "--")


@dataclass(frozen=True)
class BinaryOp(Node):
    """Infix operation `left op right`. Abstract; see subclasses."""

    left: Value
    op: str
    right: Value


@dataclass(frozen=True)
class NumericOp(BinaryOp):
    """Arithmetic or comparison operator.

    Invariants:
    - op in NUMERIC_OPS or COMPARISON_OPS
    """


@dataclass(frozen=True)
class LogicalOp(BinaryOp):
    """`&&` / `||`.

    Invariants:
    - op in LOGICAL_OPS
    """


@dataclass(frozen=True)
class UnaryOp(Node):
    """Prefix or postfix operator.

    Semantics:
    - `!`, `-`, `+` are always prefix
    - `++` / `--` are prefix when prefix is True, postfix otherwise
    """

    op: str
    operand: Value
    prefix: bool = True


# ============================================================
# TEXT
# ============================================================


@dataclass(frozen=True)
class Raw(Node):
    """Opaque source fragment, emitted verbatim. Escape hatch."""

    text: str


@dataclass(frozen=True)
class TemplateLiteral(Node):
    """`` `q0${e0}q1${e1}...qN` ``

    Invariants:
    - len(quasis) == len(expressions) + 1
    """

    quasis: tuple[str, ...]
    expressions: tuple[Value, ...] = ()


# ============================================================
# TYPE DECLARATIONS
# ============================================================


@dataclass(frozen=True)
class TypeAlias(Node):
    """`type Name<P> = T;`"""

    name: str
    typ: Type
    type_params: tuple[str, ...] = ()


@dataclass(frozen=True)
class Interface(Node):
    """`interface Name<P> { key: T; ... }`"""

    name: str
    properties: dict[str, Type]
    type_params: tuple[str, ...] = ()

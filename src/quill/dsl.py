"""Builder facade: factory functions for expression and statement nodes.

Body-shaped arguments (loop bodies, branches, function bodies) are producers,
driven immediately through `quill.sequence.drive` and stored as Blocks.
Loop bodies receive a reference to the loop variable; function bodies
receive one reference per parameter:

    for_of("item", "items", lambda seq, item: seq.emit(method("console", "log", item)))

    def body(seq, x):
        y = yield let("y", add(x, 1))
        return y

    fn(["x"], body)

Conveniences: a bare dict becomes an ObjectLiteral and a bare list or tuple
an ArrayLiteral, recursively; a bare str naming a callee, a receiver or a
loop source is a variable reference.
"""

from __future__ import annotations

from collections.abc import Iterable

from .backend.util import is_identifier
from .nodes import (
    ArrayLiteral,
    Block,
    BoolLiteral,
    Call,
    Conditional,
    CountedLoop,
    Declaration,
    FunctionLiteral,
    Interface,
    IterateKeys,
    IterateOver,
    MethodCall,
    NumberLiteral,
    ObjectLiteral,
    Param,
    Program,
    PropertyAccess,
    Raw,
    Reference,
    StringLiteral,
    TemplateLiteral,
    TypeAlias,
    Value,
    WhileLoop,
)
from .sequence import Producer, drive, mint_reference
from .types import STRING, Type


def coerce(value: object) -> Value:
    """Turn bare dicts and lists into literal nodes; leave everything else."""
    if isinstance(value, dict):
        return ObjectLiteral({k: coerce(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return ArrayLiteral(tuple(coerce(e) for e in value))
    return value


def _named(value: object) -> Value:
    if isinstance(value, str):
        return Reference(value)
    return coerce(value)


def _body(body: Producer | Block, *bound: Reference) -> Block:
    if isinstance(body, Block):
        return body
    return drive(body, *bound)


def _check_name(name: str) -> None:
    if not is_identifier(name):
        raise ValueError(f"invalid binding name: {name!r}")


# ============================================================
# LITERALS
# ============================================================


def number(value: int | float, typ: Type | None = None) -> NumberLiteral:
    return NumberLiteral(value, typ)


def string(value: str, typ: Type | None = None) -> StringLiteral:
    return StringLiteral(value, typ)


def boolean(value: bool, typ: Type | None = None) -> BoolLiteral:
    return BoolLiteral(value, typ)


# ============================================================
# BINDINGS
# ============================================================


def var(name: str, typ: Type | None = None, schema: dict[str, Type] | None = None) -> Reference:
    """Reference to a name bound outside the current producer (globals, imports)."""
    return Reference(name, typ, schema)


def param(name: str, typ: Type | None = None) -> Param:
    _check_name(name)
    return Param(name, typ)


def let(name: str, value: object, typ: Type | None = None, schema: dict[str, Type] | None = None) -> Declaration:
    _check_name(name)
    return Declaration(name, coerce(value), typ, schema, "let")


def const(name: str, value: object, typ: Type | None = None, schema: dict[str, Type] | None = None) -> Declaration:
    _check_name(name)
    return Declaration(name, coerce(value), typ, schema, "const")


# ============================================================
# CONTROL FLOW
# ============================================================


def if_(condition: object, then: Producer | Block, else_: Producer | Block | None = None) -> Conditional:
    else_branch = _body(else_) if else_ is not None else None
    return Conditional(coerce(condition), _body(then), else_branch)


def for_of(name: str, source: object, body: Producer | Block) -> IterateOver:
    """`for (const name of source)`; body receives the loop variable."""
    _check_name(name)
    return IterateOver(name, _named(source), _body(body, Reference(name)))


def for_in(name: str, source: object, body: Producer | Block) -> IterateKeys:
    """`for (const name in source)`; body receives the key variable."""
    _check_name(name)
    return IterateKeys(name, _named(source), _body(body, Reference(name, STRING)))


def for_(init: object, condition: object, update: object, body: Producer | Block) -> CountedLoop:
    """C-style counted loop; str clauses are raw text.

    When init is a declaration the body receives a reference to it.
    """
    init, condition, update = [_clause(c) for c in (init, condition, update)]
    bound = mint_reference(init) if isinstance(init, Declaration) else None
    refs = (bound,) if bound is not None else ()
    return CountedLoop(init, condition, update, _body(body, *refs))


def _clause(value: object) -> Value:
    if isinstance(value, str):
        return Raw(value)
    return coerce(value)


def while_(condition: object, body: Producer | Block) -> WhileLoop:
    return WhileLoop(coerce(condition), _body(body))


def block(body: Producer, *bound: Reference) -> Block:
    return drive(body, *bound)


def program(body: Producer | Iterable[object]) -> Program:
    """Top-level statement sequence from a producer or a list of statements."""
    if callable(body):
        return Program(drive(body).statements)
    return Program(tuple(coerce(s) for s in body))


# ============================================================
# COMPOSITES
# ============================================================


def obj(properties: dict[str, object], typ: Type | None = None) -> ObjectLiteral:
    return ObjectLiteral({k: coerce(v) for k, v in properties.items()}, typ)


def array(elements: Iterable[object], typ: Type | None = None) -> ArrayLiteral:
    return ArrayLiteral(tuple(coerce(e) for e in elements), typ)


def fn(
    params: Iterable[Param | str | tuple[str, Type | None]],
    body: Producer | Block,
    return_type: Type | None = None,
    type_params: Iterable[str] = (),
) -> FunctionLiteral:
    """Arrow function; body receives one reference per parameter.

    The body's completion value becomes the trailing return statement.
    """
    plist = tuple(_param(p) for p in params)
    refs = [Reference(p.name, p.typ) for p in plist]
    return FunctionLiteral(plist, _body(body, *refs), return_type, tuple(type_params))


def _param(p: Param | str | tuple[str, Type | None]) -> Param:
    if isinstance(p, Param):
        return p
    if isinstance(p, str):
        return param(p)
    if isinstance(p, tuple) and len(p) == 2:
        return param(p[0], p[1])
    raise ValueError(f"invalid parameter: {p!r}")


# ============================================================
# CALLS AND ACCESS
# ============================================================


def call(callee: object, *args: object) -> Call:
    return Call(_named(callee), tuple(coerce(a) for a in args))


def method(receiver: object, name: str, *args: object) -> MethodCall:
    return MethodCall(_named(receiver), name, tuple(coerce(a) for a in args))


def prop(receiver: object, name: str) -> PropertyAccess:
    return PropertyAccess(_named(receiver), name)


def index(receiver: object, key: object) -> PropertyAccess:
    return PropertyAccess(_named(receiver), coerce(key), computed=True)


# ============================================================
# TEXT
# ============================================================


def raw(text: str) -> Raw:
    return Raw(text)


def nl() -> Raw:
    """Blank line."""
    return Raw("")


def template(*parts: object) -> TemplateLiteral:
    """Template string from alternating text and expressions.

    str parts are literal text (adjacent ones are merged); anything else is
    an interpolated expression.
    """
    quasis: list[str] = [""]
    expressions: list[Value] = []
    for part in parts:
        if isinstance(part, str):
            quasis[-1] += part
        else:
            expressions.append(coerce(part))
            quasis.append("")
    return template_literal(quasis, expressions)


def template_literal(quasis: Iterable[str], expressions: Iterable[object]) -> TemplateLiteral:
    """Template string from explicit segments: one more quasi than expressions."""
    quasis = tuple(quasis)
    expressions = tuple(coerce(e) for e in expressions)
    if len(quasis) != len(expressions) + 1:
        raise ValueError(f"template needs {len(expressions) + 1} text segments, got {len(quasis)}")
    return TemplateLiteral(quasis, expressions)


# ============================================================
# TYPE DECLARATIONS
# ============================================================


def type_alias(name: str, typ: Type, type_params: Iterable[str] = ()) -> TypeAlias:
    _check_name(name)
    return TypeAlias(name, typ, tuple(type_params))


def interface(name: str, properties: dict[str, Type], type_params: Iterable[str] = ()) -> Interface:
    _check_name(name)
    return Interface(name, dict(properties), tuple(type_params))

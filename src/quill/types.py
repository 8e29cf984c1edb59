"""Quill type model: type expressions that annotate nodes.

Types are printed, never checked: any string is accepted as a primitive or
type-variable name. Every variant renders through `render()`, which is pure
and total over well-formed inputs.
"""

from __future__ import annotations

import json
from dataclasses import dataclass


# ============================================================
# TYPES
# ============================================================


@dataclass(frozen=True)
class Type:
    """Base for all type expressions. Abstract."""

    def render(self) -> str:
        raise NotImplementedError

    def __str__(self) -> str:
        return self.render()


@dataclass(frozen=True)
class Primitive(Type):
    """Named built-in type: number, string, boolean, void, ..."""

    name: str

    def render(self) -> str:
        return self.name


@dataclass(frozen=True)
class TypeVariable(Type):
    """Generic type parameter, e.g. the T in `<T>(x: T) => T`."""

    name: str

    def render(self) -> str:
        return self.name


@dataclass(frozen=True)
class Generic(Type):
    """Parameterized type: Promise<T>, Map<K, V>.

    Invariants:
    - with zero args renders as the bare name
    """

    name: str
    args: tuple[Type, ...] = ()

    def render(self) -> str:
        if not self.args:
            return self.name
        args = ", ".join(a.render() for a in self.args)
        return f"{self.name}<{args}>"


@dataclass(frozen=True)
class ObjectType(Type):
    """Record type `{ x: number; y: "fixed" }`.

    Property values are either types or literal values; literal values
    render as JSON (string/number/boolean literal types).
    """

    properties: dict[str, object]

    def render(self) -> str:
        parts: list[str] = []
        for key, value in self.properties.items():
            if isinstance(value, Type):
                parts.append(f"{key}: {value.render()}")
            else:
                parts.append(f"{key}: {json.dumps(value, default=repr)}")
        if not parts:
            return "{}"
        return "{ " + "; ".join(parts) + " }"

    def property_types(self) -> dict[str, Type]:
        """Properties whose value is a type, in declaration order."""
        return {k: v for k, v in self.properties.items() if isinstance(v, Type)}


@dataclass(frozen=True)
class ArrayType(Type):
    """Homogeneous array: T[]."""

    element: Type

    def render(self) -> str:
        inner = self.element.render()
        if isinstance(self.element, (UnionType, IntersectionType, FunctionType)):
            inner = f"({inner})"
        return f"{inner}[]"


@dataclass(frozen=True)
class FunctionType(Type):
    """Function signature: (A, B) => R."""

    params: tuple[Type, ...]
    ret: Type

    def render(self) -> str:
        params = ", ".join(p.render() for p in self.params)
        return f"({params}) => {self.ret.render()}"


@dataclass(frozen=True)
class UnionType(Type):
    """A | B | C."""

    members: tuple[Type, ...]

    def render(self) -> str:
        return " | ".join(m.render() for m in self.members)


@dataclass(frozen=True)
class IntersectionType(Type):
    """A & B & C."""

    members: tuple[Type, ...]

    def render(self) -> str:
        return " & ".join(m.render() for m in self.members)


@dataclass(frozen=True)
class UnknownType(Type):
    """Unconstrained type, used when no schema says otherwise."""

    def render(self) -> str:
        return "any"


NUMBER = Primitive("number")
STRING = Primitive("string")
BOOLEAN = Primitive("boolean")
VOID = Primitive("void")
UNKNOWN = UnknownType()


# ============================================================
# CONSTRUCTORS
# ============================================================


def primitive(name: str) -> Primitive:
    return Primitive(name)


def variable(name: str) -> TypeVariable:
    return TypeVariable(name)


def generic(name: str, args: list[Type] | tuple[Type, ...] = ()) -> Generic:
    return Generic(name, tuple(args))


def obj(properties: dict[str, object]) -> ObjectType:
    return ObjectType(dict(properties))


def array(element: Type) -> ArrayType:
    return ArrayType(element)


def function(params: list[Type] | tuple[Type, ...], ret: Type) -> FunctionType:
    return FunctionType(tuple(params), ret)


def union(*members: Type) -> UnionType:
    return UnionType(members)


def intersection(*members: Type) -> IntersectionType:
    return IntersectionType(members)

"""Tests for type expression rendering."""

import pytest

from quill import types as t
from quill.types import BOOLEAN, NUMBER, STRING, UNKNOWN, VOID


@pytest.mark.parametrize(
    "typ,expected",
    [
        (NUMBER, "number"),
        (t.variable("T"), "T"),
        (t.generic("Map"), "Map"),
        (t.generic("Promise", [t.variable("T")]), "Promise<T>"),
        (t.generic("Map", [STRING, NUMBER]), "Map<string, number>"),
        (t.obj({"x": NUMBER}), "{ x: number }"),
        (t.obj({"x": NUMBER, "kind": "point"}), '{ x: number; kind: "point" }'),
        (t.obj({}), "{}"),
        (t.array(NUMBER), "number[]"),
        (t.array(t.union(NUMBER, STRING)), "(number | string)[]"),
        (t.function([NUMBER, STRING], BOOLEAN), "(number, string) => boolean"),
        (t.function([], VOID), "() => void"),
        (t.union(NUMBER, STRING, VOID), "number | string | void"),
        (t.intersection(t.generic("A"), t.generic("B")), "A & B"),
        (UNKNOWN, "any"),
    ],
)
def test_render(typ, expected):
    assert typ.render() == expected


def test_str_matches_render():
    typ = t.generic("Promise", [t.array(STRING)])
    assert str(typ) == "Promise<string[]>"


def test_any_name_is_accepted():
    assert t.primitive("not a real type!").render() == "not a real type!"


def test_property_types_skips_literals():
    typ = t.obj({"x": NUMBER, "kind": "point", "flag": True})
    assert typ.property_types() == {"x": NUMBER}


def test_constructors_copy_inputs():
    props = {"x": NUMBER}
    typ = t.obj(props)
    props["y"] = STRING
    assert typ.render() == "{ x: number }"

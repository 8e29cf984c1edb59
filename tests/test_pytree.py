"""Tests for the strict Python ast backend beyond the golden files."""

import ast

import pytest

from quill import types as t
from quill.backend.pytree import UnsupportedValueError, to_expression, to_statements, to_tree, unparse
from quill.dsl import call, fn, let, obj, prop, program, var
from quill.nodes import ObjectLiteral, Param, Reference
from quill.ops import add, and_, decrement, increment, multiply, or_
from quill.sequence import drive


def _handler():
    pass


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


def test_expression_in_statement_position_is_wrapped():
    stmts = to_statements(call("f"))
    assert len(stmts) == 1
    assert isinstance(stmts[0], ast.Expr)
    assert isinstance(stmts[0].value, ast.Call)


def test_statement_in_expression_position_fails():
    with pytest.raises(UnsupportedValueError):
        to_expression(let("a", 1))


def test_update_in_expression_position_needs_a_name():
    with pytest.raises(UnsupportedValueError):
        unparse(call("f", increment(prop("o", "n"))))


def test_postfix_update_in_expression_position():
    assert unparse(call("f", increment(var("i"), prefix=False))) == "f((i := i + 1) - 1)"


def test_prefix_update_in_expression_position():
    assert unparse(call("f", decrement(var("i")))) == "f((i := i - 1))"


def test_program_becomes_module():
    tree = to_tree(program([let("a", 1), call("print", var("a"))]))
    assert isinstance(tree, ast.Module)
    assert [type(s) for s in tree.body] == [ast.Assign, ast.Expr]


def test_tree_compiles():
    tree = to_tree(program([let("a", add(1, 2)), call("print", var("a"))]))
    compile(tree, "<quill>", "exec")


# ---------------------------------------------------------------------------
# Strict rejection
# ---------------------------------------------------------------------------


def test_function_value_rejected():
    with pytest.raises(UnsupportedValueError):
        to_expression(_handler)


def test_foreign_value_inside_node_rejected():
    with pytest.raises(UnsupportedValueError):
        unparse(call("log", object()))


def test_non_string_object_key_rejected():
    with pytest.raises(UnsupportedValueError):
        to_expression(ObjectLiteral({1: 2}))


def test_param_outside_function_rejected():
    with pytest.raises(UnsupportedValueError):
        to_expression(Param("x"))


def test_function_literal_with_statements_is_hoisted():
    def body(seq, x):
        seq.finish(seq.emit(let("y", add(x, 1))))

    out = unparse(call("map", var("xs"), fn(["x"], body)))
    assert out == "def _fn0(x):\n    y = x + 1\n    return y\nmap(xs, _fn0)"


def test_hoisted_function_needs_enclosing_statement():
    def body(seq, x):
        seq.finish(seq.emit(let("y", add(x, 1))))

    with pytest.raises(UnsupportedValueError):
        to_expression(call("map", var("xs"), fn(["x"], body)))


def test_hoisted_function_stays_inside_enclosing_function():
    def inner(seq, x):
        seq.finish(seq.emit(let("y", add(x, 1))))

    def outer(seq, xs):
        seq.finish(call("map", xs, fn(["x"], inner)))

    out = unparse(let("g", fn(["xs"], outer)))
    assert out == "def g(xs):\n\n    def _fn0(x):\n        y = x + 1\n        return y\n    return map(xs, _fn0)"


def test_unsupported_value_error_is_type_error():
    assert issubclass(UnsupportedValueError, TypeError)


def test_invalid_reference_name_rejected():
    with pytest.raises(UnsupportedValueError):
        to_expression(Reference("$el"))


# ---------------------------------------------------------------------------
# Minted references
# ---------------------------------------------------------------------------


def test_property_reference_converts_its_expression():
    def body(seq):
        name = seq.emit(prop("user", "name"))
        seq.emit(call("print", name))

    assert unparse(drive(body)) == "user.name\nprint(user.name)"


def test_operation_reference_converts_its_expression():
    def body(seq):
        total = seq.emit(add(var("a"), 1))
        seq.emit(call("print", total))

    assert unparse(drive(body)) == "a + 1\nprint(a + 1)"


def test_operation_reference_keeps_grouping():
    def body(seq):
        s = seq.emit(add(var("a"), 5))
        seq.emit(let("b", multiply(s, 2)))

    assert unparse(drive(body)) == "a + 5\nb = (a + 5) * 2"


def test_logical_reference_converts():
    def body(seq):
        c = seq.emit(and_(var("x"), var("y")))
        seq.emit(let("ok", c))

    assert unparse(drive(body)) == "x and y\nok = x and y"


def test_logical_reference_inside_other_logical_op():
    def body(seq):
        either = seq.emit(or_(var("a"), var("b")))
        seq.emit(and_(either, var("c")))

    assert unparse(drive(body)) == "a or b\n(a or b) and c"


def test_property_reference_is_assignable():
    def body(seq):
        count = seq.emit(prop("o", "n"))
        seq.emit(increment(count))

    assert unparse(drive(body)) == "o.n\no.n += 1"


def test_non_identifier_property_becomes_subscript():
    assert unparse(prop("o", "my-key")) == "o['my-key']"
    assert unparse(increment(prop("o", "my-key"))) == "o['my-key'] += 1"


# ---------------------------------------------------------------------------
# Declarations
# ---------------------------------------------------------------------------


def test_function_with_statements_and_return():
    def body(seq, x):
        seq.finish(seq.emit(let("y", add(x, 1))))

    out = unparse(let("f", fn([("x", t.NUMBER)], body)))
    assert out == "def f(x: number):\n    y = x + 1\n    return y"


def test_typed_object_declaration():
    out = unparse(let("p", obj({"x": 1}), t.obj({"x": t.NUMBER})))
    assert out == "p: TypedDict[{'x': number}] = {'x': 1}"


def test_bare_values_convert():
    assert unparse(let("a", None)) == "a = None"
    assert unparse(let("b", [1, "x", True])) == "b = [1, 'x', True]"

"""Tests for the source text backend beyond the golden files."""

from quill import render
from quill.backend.text import reindent, to_source
from quill.dsl import block, call, fn, for_of, let, method, obj, program, template, var
from quill.nodes import Block, Declaration, NumberLiteral, Reference
from quill.ops import add, and_, multiply, or_
from quill.sequence import drive


def _handler():
    pass


# ---------------------------------------------------------------------------
# Bindings
# ---------------------------------------------------------------------------


def test_reference_renders_name_not_initializer():
    captured = []

    def body(seq):
        a = seq.emit(let("a", 10))
        captured.append(add(a, 5))

    drive(body)
    assert to_source(captured[0]) == "a + 5"


def test_function_returns_completion_value():
    def body(seq):
        total = seq.emit(let("total", 1))
        seq.finish(total)

    assert to_source(fn([], body)) == "() => {\n  let total = 1;\n  return total;\n}"


def test_function_without_completion_value_has_no_return():
    def body(seq):
        seq.emit(let("total", 1))

    assert to_source(fn([], body)) == "() => {\n  let total = 1;\n}"


def test_block_result_not_rendered_outside_functions():
    blk = block(lambda seq: seq.finish(seq.emit(let("x", 1))))
    assert blk.result == Reference("x")
    assert to_source(blk) == "{\n  let x = 1;\n}"


def test_lambda_body_without_finish_has_no_return():
    f = fn(["x"], lambda seq, x: seq.emit(let("y", add(x, 1))))
    assert to_source(f) == "(x) => {\n  let y = x + 1;\n}"


# ---------------------------------------------------------------------------
# Minted references
# ---------------------------------------------------------------------------


def test_operation_reference_as_operand_keeps_grouping():
    def body(seq):
        s = seq.emit(add(var("a"), 5))
        seq.emit(let("b", multiply(s, 2)))

    assert to_source(drive(body)) == "{\n  a + 5;\n  let b = (a + 5) * 2;\n}"


def test_logical_reference_inside_other_logical_op():
    def body(seq):
        either = seq.emit(or_(var("a"), var("b")))
        seq.emit(and_(either, var("c")))

    assert to_source(program(body)) == "a || b;\n(a || b) && c;"


def test_operation_reference_in_tighter_context_only():
    def body(seq):
        s = seq.emit(multiply(var("a"), 5))
        seq.emit(let("b", add(s, 2)))

    assert to_source(program(body)) == "a * 5;\nlet b = a * 5 + 2;"


# ---------------------------------------------------------------------------
# Indentation
# ---------------------------------------------------------------------------


def test_nested_loop_indents_two_units_deeper():
    def inner(seq, cell):
        seq.emit(call("print", cell))

    outer = for_of("row", "rows", lambda seq, row: seq.emit(for_of("cell", row, inner)))
    lines = to_source(outer).split("\n")
    outer_stmt = lines[1]
    inner_stmt = lines[2]
    assert outer_stmt == "  for (const cell of row) {"
    assert inner_stmt == "    print(cell);"


def test_multiline_statement_is_reindented():
    nested = fn([], lambda seq: seq.emit(method("console", "log", obj({"a": 1}))))
    loop = for_of("x", "xs", lambda seq, x: seq.emit(let("f", nested)))
    assert to_source(loop) == (
        "for (const x of xs) {\n"
        "  let f = () => {\n"
        "    console.log({ a: 1 });\n"
        "  };\n"
        "}"
    )


def test_multiline_template_is_not_reindented():
    loop = for_of("x", "xs", lambda seq, x: seq.emit(call("log", template("a\nb", x))))
    assert to_source(loop) == "for (const x of xs) {\n  log(`a\\nb${x}`);\n}"


def test_reindent_skips_empty_lines():
    assert reindent("a\n\nb", "  ") == "  a\n\n  b"


def test_program_has_no_braces():
    assert to_source(program([let("a", 1), let("b", 2)])) == "let a = 1;\nlet b = 2;"


# ---------------------------------------------------------------------------
# Fallback and purity
# ---------------------------------------------------------------------------


def test_foreign_value_renders_quoted_fallback():
    out = to_source(_handler)
    assert out.startswith('"<function')
    assert out.endswith('"')


def test_foreign_value_inside_node_falls_back():
    out = to_source(call("log", _handler))
    assert out.startswith('log("<function')


def test_bare_values_render_as_json():
    assert to_source(5) == "5"
    assert to_source("hi") == '"hi"'
    assert to_source(None) == "null"
    assert to_source(True) == "true"


def test_render_is_pure():
    node = program([let("a", add(var("x"), 1)), call("print", var("a"))])
    first = to_source(node)
    assert to_source(node) == first
    assert node.statements[0] == Declaration("a", add(var("x"), 1))


def test_node_render_and_str():
    n = NumberLiteral(42)
    assert n.render() == "42"
    assert str(n) == "42"
    assert render(n) == "42"


def test_empty_block():
    assert to_source(Block()) == "{}"

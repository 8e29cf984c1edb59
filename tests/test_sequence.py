"""Tests for the emit/finish binding protocol and reference minting."""

import pytest

from quill import types as t
from quill.dsl import call, for_, let, obj, prop, var
from quill.nodes import Block, Reference
from quill.ops import add, and_, gt
from quill.sequence import Sequence, SequenceError, drive, mint_reference
from quill.types import BOOLEAN, NUMBER, STRING, UNKNOWN

POINT = t.obj({"x": NUMBER, "label": STRING, "pos": t.obj({"x": NUMBER})})


# ---------------------------------------------------------------------------
# Sequence
# ---------------------------------------------------------------------------


def test_emit_declaration_mints_typed_reference():
    seq = Sequence()
    ref = seq.emit(let("a", 10, NUMBER))
    assert ref == Reference("a", NUMBER)


def test_emit_non_binding_returns_none():
    seq = Sequence()
    assert seq.emit(call("f")) is None
    assert seq.emit(5) is None


def test_statements_keep_emit_order_without_dedup():
    seq = Sequence()
    stmt = call("f")
    seq.emit(stmt)
    seq.emit(let("a", 1))
    seq.emit(stmt)
    assert seq.close() == Block((stmt, let("a", 1), stmt))


def test_finish_twice_fails():
    seq = Sequence()
    seq.finish(1)
    with pytest.raises(SequenceError):
        seq.finish(2)


def test_emit_after_finish_fails():
    seq = Sequence()
    seq.finish()
    with pytest.raises(SequenceError):
        seq.emit(call("f"))


def test_each_emit_mints_fresh_reference():
    seq = Sequence()
    first = seq.emit(let("a", 1))
    second = seq.emit(let("a", 2))
    assert first == second
    assert first is not second


# ---------------------------------------------------------------------------
# Reference minting
# ---------------------------------------------------------------------------


def test_numeric_op_mints_number():
    assert mint_reference(add(var("a"), 1)) == Reference("a + 1", NUMBER)


def test_comparison_mints_boolean():
    assert mint_reference(gt(var("a"), 1)) == Reference("a > 1", BOOLEAN)


def test_logical_op_mints_boolean():
    assert mint_reference(and_(var("a"), var("b"))) == Reference("a && b", BOOLEAN)


def test_declared_object_type_becomes_schema():
    ref = mint_reference(let("p", obj({"x": 1}), POINT))
    assert ref.schema == {"x": NUMBER, "label": STRING, "pos": t.obj({"x": NUMBER})}


def test_explicit_schema_wins_over_declared_type():
    ref = mint_reference(let("p", obj({}), POINT, schema={"y": BOOLEAN}))
    assert ref.schema == {"y": BOOLEAN}


def test_property_access_uses_schema():
    def body(seq):
        p = seq.emit(let("p", obj({"x": 1}), POINT))
        x = seq.emit(prop(p, "x"))
        missing = seq.emit(prop(p, "z"))
        seq.finish([x, missing])

    x, missing = drive(body).result
    assert x == Reference("p.x", NUMBER)
    assert missing == Reference("p.z", UNKNOWN)


def test_property_access_flows_through_nested_objects():
    def body(seq):
        p = seq.emit(let("p", obj({}), POINT))
        pos = seq.emit(prop(p, "pos"))
        seq.finish(seq.emit(prop(pos, "x")))

    assert drive(body).result == Reference("p.pos.x", NUMBER)


def test_property_access_on_untyped_reference_is_unknown():
    assert mint_reference(prop("user", "name")) == Reference("user.name", UNKNOWN)


def test_minted_reference_keeps_its_expression():
    total = add(var("a"), 1)
    ref = mint_reference(total)
    assert ref.expr == total
    assert ref == Reference("a + 1", NUMBER)
    assert mint_reference(let("a", 1)).expr is None


# ---------------------------------------------------------------------------
# drive()
# ---------------------------------------------------------------------------


def test_drive_plain_function_return_is_ignored():
    assert drive(lambda seq: 42) == Block((), None)
    blk = drive(lambda seq: seq.emit(let("y", 1)))
    assert blk.statements == (let("y", 1),)
    assert blk.result is None


def test_drive_plain_function_completes_through_finish():
    assert drive(lambda seq: seq.finish(42)) == Block((), 42)


def test_drive_passes_bound_references():
    x = Reference("x", NUMBER)
    assert drive(lambda seq, ref: seq.finish(ref), x).result is x


def test_drive_generator_yield_and_yield_from():
    def body(seq):
        a = yield let("a", 1)
        b = yield from let("b", add(a, 1))
        yield call("print", b)
        return b

    blk = drive(body)
    assert blk.statements == (
        let("a", 1),
        let("b", add(Reference("a"), 1)),
        call("print", Reference("b")),
    )
    assert blk.result == Reference("b")


def test_drive_generator_receives_none_for_non_binding():
    seen = []

    def body(seq):
        seen.append((yield call("f")))

    drive(body)
    assert seen == [None]


def test_drive_generator_emit_after_finish_fails():
    def body(seq):
        seq.finish(1)
        yield call("f")

    with pytest.raises(SequenceError):
        drive(body)


def test_generator_return_after_finish_fails():
    def body(seq):
        seq.finish(1)
        return 2
        yield

    with pytest.raises(SequenceError):
        drive(body)


def test_use_before_bind_is_not_detected():
    blk = drive(lambda seq: seq.emit(call("print", var("ghost"))))
    assert blk.statements == (call("print", Reference("ghost")),)


def test_counted_loop_binds_init():
    loop = for_(let("i", 0), "i < 3", "i++", lambda seq, i: seq.finish(i))
    assert loop.body.result == Reference("i")


def test_node_iteration_protocol():
    node = call("f")
    gen = iter(node)
    assert next(gen) is node
    with pytest.raises(StopIteration) as info:
        gen.send("reply")
    assert info.value.value == "reply"

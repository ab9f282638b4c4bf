from __future__ import annotations

import pytest

from eggviz.engine import *
from eggviz.lispy import ParseError
from eggviz.snapshot import ENode, InvariantViolation


def test_flatten_rules():
    assert flatten_rules([("a", "b"), ("c", "d")]) == ["a", "b", "c", "d"]


def test_construct_snapshot():
    session = construct("(f x)", ["(f pa)", "pa"])
    assert session.snapshot().classes == {0: ((0, ENode("x")),), 1: ((1, ENode("f", (0,))),)}
    assert session.root == 1
    assert session.steps == []


def test_snapshot_is_pure():
    session = construct("(f x)", ["(f pa)", "pa"])
    assert session.snapshot() == session.snapshot()
    assert session.steps == []


@pytest.mark.parametrize(
    "flat_rules",
    [
        pytest.param(["(f pa)"], id="odd"),
        pytest.param(["(f pa)", 1], id="non-string"),
    ],
)
def test_malformed_rules(flat_rules):
    with pytest.raises(InvariantViolation):
        construct("(f x)", flat_rules)


def test_parse_error_in_program():
    with pytest.raises(ParseError, match="Unexpected generic variable"):
        construct("(f px)", ["(f pa)", "pa"])


def test_parse_error_in_rule_is_numbered():
    with pytest.raises(ParseError) as exc_info:
        construct("(f x)", ["(f pa)", "pa", "(f pa pb)", "pa"])
    assert exc_info.value.message.startswith("Rule 2 (left): Cannot instantiate function with symbol 'f'")


class TestStepping:
    def test_step_rule(self):
        session = construct("(and true true)", ["(and true true)", "true", "(or pa pb)", "pa"])
        snapshot = session.step_rule(0)
        assert snapshot.classes == {0: ((0, ENode("true")), (1, ENode("and", (0, 0))))}
        assert session.steps == [Step(0, 1)]
        assert str(session.extract()) == "true"

    def test_step_rule_repeats(self):
        session = construct("(s (s (s z)))", ["(s (s pa))", "pa"])
        first = session.step_rule(0)
        assert first.classes == {
            0: ((0, ENode("z")), (2, ENode("s", (1,)))),
            1: ((1, ENode("s", (0,))),),
        }
        assert session.step_rule(0) == first
        assert [step.matches for step in session.steps] == [2, 2]

    def test_step_rule_index(self):
        session = construct("(f x)", ["(f pa)", "pa"])
        with pytest.raises(IndexError):
            session.step_rule(1)
        with pytest.raises(IndexError):
            session.step_rule(-1)

    def test_step_all_in_order(self):
        session = construct("(f x)", ["x", "y", "y", "z"])
        snapshot = session.step_all()
        assert snapshot.classes == {
            0: ((0, ENode("x")), (2, ENode("y")), (3, ENode("z"))),
            1: ((1, ENode("f", (0,))),),
        }
        assert session.steps == [Step(None, 2)]

    def test_extract_default_root(self):
        session = construct("(+ (* x 2) (* y 2))", ["(* pa 2)", "(<< pa 1)"])
        assert str(session.extract()) == "(+ (* x 2) (* y 2))"
        session.step_all()
        assert str(session.extract(session.root)) == "(+ (* x 2) (* y 2))"

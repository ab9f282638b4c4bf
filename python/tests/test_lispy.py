from __future__ import annotations

import pytest

from eggviz.lispy import *


class TestParseProgram:
    def test_symbol(self):
        assert parse_program("x") == Call("x")

    def test_nested(self):
        assert parse_program("(+ (* x 2) y)") == Call("+", (Call("*", (Call("x"), Call("2"))), Call("y")))

    def test_whitespace(self):
        assert parse_program("  (f\n x\t(g y) )  ") == Call("f", (Call("x"), Call("g", (Call("y"),))))

    def test_str(self):
        text = "(and (if true (== (* 2 2) 4) false) (if false false (== (<< 2 1) 4)))"
        assert str(parse_program(text)) == text

    def test_function_name_may_use_generic_prefix(self):
        assert parse_program("(pow x 2)") == Call("pow", (Call("x"), Call("2")))

    def test_generic_variable_rejected(self):
        with pytest.raises(ParseError, match="Unexpected generic variable in program"):
            parse_program("(f pa)")

    @pytest.mark.parametrize(
        ("text", "message"),
        [
            pytest.param("", "Empty expression.", id="empty"),
            pytest.param("   ", "Empty expression.", id="blank"),
            pytest.param("x y", "Unexpected token at end of expression.", id="trailing"),
            pytest.param(")", "Expected function term or variable name. Got ')'.", id="close"),
            pytest.param("(f x", "Unmatched '(' token.", id="unmatched"),
            pytest.param("((f x))", "Cannot have two '(' tokens in a row.", id="double-open"),
            pytest.param("()", "Empty function body.", id="empty-body"),
            pytest.param("(", "Unexpected end of input.", id="eof"),
        ],
    )
    def test_errors(self, text, message):
        with pytest.raises(ParseError) as exc_info:
            parse_program(text)
        assert exc_info.value.message == message
        assert str(exc_info.value) == message

    def test_arity_mismatch(self):
        with pytest.raises(ParseError) as exc_info:
            parse_program("(+ (f x) (f x y))")
        assert exc_info.value.message == (
            "Cannot instantiate function with symbol 'f' with an arity of 2, "
            "because it was already declared with an arity of 1."
        )

    def test_arities_recorded(self):
        arities = ArityChecker()
        parse_program("(+ (f x) 2)", arities)
        assert arities.arities == {"f": 1, "+": 2}


class TestParseRule:
    def test_variables(self):
        rule = parse_rule("(if true pt pf)", "pt")
        assert rule == Rule(Call("if", (Call("true"), Var("pt"), Var("pf"))), Var("pt"))
        assert list(variables(rule.lhs)) == ["pt", "pf"]
        assert str(rule) == "(if true pt pf) → pt"

    def test_shares_arities(self):
        arities = ArityChecker()
        parse_program("(f x)", arities)
        with pytest.raises(ParseError, match="symbol 'f' with an arity of 2"):
            parse_rule("(f pa pb)", "pa", arities)

    def test_unbound_variable(self):
        with pytest.raises(ParseError, match="'pb' on the right-hand side is not bound"):
            parse_rule("(f pa)", "(g pb)")

    def test_lone_variable_left(self):
        with pytest.raises(ParseError, match="cannot be a lone generic variable 'pa'"):
            parse_rule("pa", "x")

    def test_numbered_errors(self):
        with pytest.raises(ParseError) as exc_info:
            parse_rule("(f x", "y", number=2)
        assert exc_info.value.message == "Rule 2 (left): Unmatched '(' token."
        with pytest.raises(ParseError) as exc_info:
            parse_rule("x", "", number=3)
        assert exc_info.value.message == "Rule 3 (right): Empty expression."

    def test_generic_prefix_from_config(self, monkeypatch):
        monkeypatch.setattr("eggviz.config.GENERIC_PREFIX", "?")
        rule = parse_rule("(f ?a)", "?a")
        assert rule.rhs == Var("?a")
        assert parse_program("pa") == Call("pa")

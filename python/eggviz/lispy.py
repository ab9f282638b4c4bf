"""
Parser for the small lisp-like term language that programs and rewrite rules are written in.

A term is either a symbol, like ``x`` or ``2``, or an invocation ``(f arg ...)``. In rewrite rules,
symbols starting with the generic prefix (``p`` by default) are pattern variables.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, TypeAlias

from typing_extensions import assert_never

from . import config

if TYPE_CHECKING:
    from collections.abc import Iterator


__all__ = [
    "ArityChecker",
    "Call",
    "ParseError",
    "Rule",
    "Term",
    "Var",
    "parse_program",
    "parse_rule",
    "variables",
]

_TOKEN_RE = re.compile(r"[()]|[^\s()]+")


class ParseError(ValueError):
    """
    Raised when a program or a rewrite rule is not valid.

    The message is meant to be shown to the user as is.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


@dataclass(frozen=True)
class Var:
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Call:
    name: str
    args: tuple[Term, ...] = ()

    def __str__(self) -> str:
        if not self.args:
            return self.name
        return f"({self.name} {' '.join(map(str, self.args))})"


Term: TypeAlias = Var | Call


@dataclass(frozen=True)
class Rule:
    lhs: Term
    rhs: Term

    def __str__(self) -> str:
        return f"{self.lhs} → {self.rhs}"


@dataclass
class ArityChecker:
    """
    Remembers the arity each function symbol was first used with, across a program and all its rules.
    """

    arities: dict[str, int] = field(default_factory=dict)

    def check(self, name: str, arity: int) -> None:
        existing = self.arities.setdefault(name, arity)
        if existing != arity:
            msg = (
                f"Cannot instantiate function with symbol '{name}' with an arity of {arity}, "
                f"because it was already declared with an arity of {existing}."
            )
            raise ParseError(msg)


def variables(term: Term) -> Iterator[str]:
    """
    Yields the names of all pattern variables in the term, in order of appearance.
    """
    match term:
        case Var(name):
            yield name
        case Call(_, args):
            for arg in args:
                yield from variables(arg)
        case _:
            assert_never(term)


def parse_program(text: str, arities: ArityChecker | None = None) -> Term:
    return _Parser(text, allow_generics=False, arities=arities or ArityChecker()).parse()


def parse_rule(left: str, right: str, arities: ArityChecker | None = None, *, number: int | None = None) -> Rule:
    """
    Parses both sides of a rewrite rule.

    If `number` is given, error messages are prefixed with it so they can be traced back to a rule row.
    """
    arities = arities or ArityChecker()
    prefix = "" if number is None else f"Rule {number} "
    try:
        lhs = _Parser(left, allow_generics=True, arities=arities).parse()
    except ParseError as err:
        msg = f"{prefix}(left): {err.message}" if prefix else err.message
        raise ParseError(msg) from err
    try:
        rhs = _Parser(right, allow_generics=True, arities=arities).parse()
    except ParseError as err:
        msg = f"{prefix}(right): {err.message}" if prefix else err.message
        raise ParseError(msg) from err
    if isinstance(lhs, Var):
        msg = f"{prefix}The left-hand side cannot be a lone generic variable '{lhs.name}'."
        raise ParseError(msg.strip())
    bound = set(variables(lhs))
    for name in variables(rhs):
        if name not in bound:
            msg = f"{prefix}Generic variable '{name}' on the right-hand side is not bound by the left-hand side."
            raise ParseError(msg.strip())
    return Rule(lhs, rhs)


class _Parser:
    def __init__(self, text: str, *, allow_generics: bool, arities: ArityChecker) -> None:
        self._tokens = iter(_TOKEN_RE.findall(text))
        self._allow_generics = allow_generics
        self._arities = arities

    def parse(self) -> Term:
        term = self._term(nested=False)
        if term is None:
            msg = "Empty expression."
            raise ParseError(msg)
        if self._next() is not None:
            msg = "Unexpected token at end of expression."
            raise ParseError(msg)
        return term

    def _next(self) -> str | None:
        return next(self._tokens, None)

    def _term(self, *, nested: bool) -> Term | None:
        """
        Parse one term. Returns None at a closing paren inside an invocation, or at the end of the input at the top
        level.
        """
        token = self._next()
        match token:
            case None:
                if nested:
                    msg = "Unmatched '(' token."
                    raise ParseError(msg)
                return None
            case "(":
                return self._invocation()
            case ")":
                if nested:
                    return None
                msg = "Expected function term or variable name. Got ')'."
                raise ParseError(msg)
            case _ if token.startswith(config.GENERIC_PREFIX):
                if not self._allow_generics:
                    msg = (
                        "Unexpected generic variable in program. Variables beginning with "
                        f"'{config.GENERIC_PREFIX}' are reserved for generic variables in rewrite rules."
                    )
                    raise ParseError(msg)
                return Var(token)
            case _:
                return Call(token)

    def _invocation(self) -> Call:
        # Function names may start with the generic prefix, only variables are special.
        name = self._next()
        match name:
            case "(":
                msg = "Cannot have two '(' tokens in a row."
                raise ParseError(msg)
            case ")":
                msg = "Empty function body."
                raise ParseError(msg)
            case None:
                msg = "Unexpected end of input."
                raise ParseError(msg)
        args: list[Term] = []
        while (arg := self._term(nested=True)) is not None:
            args.append(arg)
        self._arities.check(name, len(args))
        return Call(name, tuple(args))

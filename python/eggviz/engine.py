"""
Call boundary to the rewriting engine: build a session from program text and rules, then step it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .egraph import EGraph
from .lispy import ArityChecker, parse_program, parse_rule
from .snapshot import InvariantViolation

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from .lispy import Rule, Term
    from .snapshot import EClassId, GraphSnapshot


__all__ = ["Session", "Step", "construct", "flatten_rules"]

logger = logging.getLogger(__name__)


def flatten_rules(pairs: Iterable[tuple[str, str]]) -> list[str]:
    """
    Turns (left, right) pairs into the alternating list `construct` takes.
    """
    return [side for pair in pairs for side in pair]


def construct(program: str, flat_rules: Sequence[str]) -> Session:
    """
    Parses the program and rules, which alternate left and right sides, and starts a session on them.

    Raises a `ParseError` if any of them are invalid. All of them share one arity table.
    """
    if len(flat_rules) % 2 != 0:
        msg = f"Odd number of terms passed for rewrite rules: {len(flat_rules)}"
        raise InvariantViolation(msg)
    if not all(isinstance(side, str) for side in flat_rules):
        msg = "Non-string passed in rewrite rules"
        raise InvariantViolation(msg)
    arities = ArityChecker()
    root = parse_program(program, arities)
    rules = [
        parse_rule(left, right, arities, number=i + 1)
        for i, (left, right) in enumerate(zip(flat_rules[::2], flat_rules[1::2], strict=True))
    ]
    logger.debug("Constructed session for %s with %d rules", root, len(rules))
    return Session(root, rules)


@dataclass(frozen=True)
class Step:
    # None when every rule was applied
    rule: int | None
    matches: int


class Session:
    """
    One e-graph built from a program, plus the rules that can be applied to it.

    Stepping is not reversible.
    """

    def __init__(self, program: Term, rules: Sequence[Rule]) -> None:
        self.program = program
        self.rules = tuple(rules)
        self.steps: list[Step] = []
        self._egraph = EGraph()
        self._root = self._egraph.add_term(program)

    @property
    def root(self) -> EClassId:
        return self._egraph.find(self._root)

    def snapshot(self) -> GraphSnapshot:
        return self._egraph.snapshot()

    def step_rule(self, index: int) -> GraphSnapshot:
        if not 0 <= index < len(self.rules):
            msg = f"No rule at index {index}, there are {len(self.rules)} rules"
            raise IndexError(msg)
        matches = self._egraph.rewrite(self.rules[index])
        self.steps.append(Step(index, matches))
        return self.snapshot()

    def step_all(self) -> GraphSnapshot:
        matches = sum(self._egraph.rewrite(rule) for rule in self.rules)
        self.steps.append(Step(None, matches))
        return self.snapshot()

    def extract(self, eclass: EClassId | None = None) -> Term:
        """
        Smallest term of the class, defaulting to the class of the program.
        """
        return self._egraph.extract(self.root if eclass is None else eclass)

"""
Example programs with rewrite rules, selectable from the preset menu.
"""

from __future__ import annotations

from dataclasses import dataclass

__all__ = ["PRESETS", "Preset"]


@dataclass(frozen=True)
class Preset:
    program: str
    rules: tuple[tuple[str, str], ...] = ()


PRESETS: dict[str, Preset] = {
    "Empty": Preset(""),
    "(* pa 2) → (<< pa 1)": Preset(
        "(+ (* x 2) (* y 2))",
        (("(* pa 2)", "(<< pa 1)"),),
    ),
    "if-then-else": Preset(
        "(and (if true (== (* 2 2) 4) false) (if false false (== (<< 2 1) 4)))",
        (
            ("(and true true)", "true"),
            ("(if true pt pf)", "pt"),
            ("(if false pt pf)", "pf"),
            ("(* pa 2)", "(<< pa 1)"),
            ("(<< 2 1)", "4"),
            ("(== pa pa)", "true"),
        ),
    ),
    "Pset #4": Preset(
        "(land x y (f (g (f z))) (h y x) (h w x))",
        (
            ("x", "y"),
            ("y", "(f z)"),
            ("(f (g (f z)))", "(h x y)"),
            ("(h y x)", "w"),
            ("(h w x)", "(f (g y))"),
        ),
    ),
    "Congruence Closure w/ T/F + Inequalities": Preset(
        "(land (eq (f x (g y)) (g (g (g y)))) (eq (f z z) x) (eq z (g y)) (not (eq (g (f x z)) (g (g (g z))))))",
        (
            ("(f x (g y))", "(g (g (g y)))"),
            ("(f z z)", "x"),
            ("z", "(g y)"),
            ("(eq pa pa)", "true"),
            ("(not true)", "false"),
            ("(land true true true true)", "true"),
            ("(land false pa pb pc)", "false"),
            ("(land pa false pb pc)", "false"),
            ("(land pa pb false pc)", "false"),
            ("(land pa pb pc false)", "false"),
        ),
    ),
}

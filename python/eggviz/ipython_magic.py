import re

__all__ = ["IN_IPYTHON", "parse_cell"]

_ARROW_RE = re.compile(r"\s+(?:->|→)\s+")

try:
    get_ipython()  # type: ignore[name-defined]
    IN_IPYTHON = True
except NameError:
    IN_IPYTHON = False


def parse_cell(cell: str) -> tuple[str, list[tuple[str, str]]]:
    """
    Splits a cell into the program, on its first line, and one `left -> right` rule per following line.

    Blank lines and lines starting with `;` are skipped.
    """
    lines = [line.strip() for line in cell.splitlines()]
    lines = [line for line in lines if line and not line.startswith(";")]
    if not lines:
        return "", []
    program, *rule_lines = lines
    rules = []
    for line in rule_lines:
        parts = _ARROW_RE.split(line, maxsplit=1)
        if len(parts) != 2:
            msg = f"Expected a rule of the form `left -> right`, got {line!r}"
            raise ValueError(msg)
        left, right = parts
        rules.append((left, right))
    return program, rules


if IN_IPYTHON:
    from IPython.core.magic import register_cell_magic

    @register_cell_magic
    def eggviz(line, cell):
        """
        Open the stepper on a program and rewrite rules.

        Usage:

            %%eggviz [start]
            (program)
            (left) -> (right)
            ...

        If `start` is specified, the first graph is drawn right away.
        """
        from .app import EggvizApp  # noqa: PLC0415

        program, rules = parse_cell(cell)
        app = EggvizApp(program=program, rules=rules)
        if "start" in line:
            app.controller.start()
        return app

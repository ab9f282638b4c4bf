"""
Top level state machine, switching between authoring a program with its rules and stepping through rewrites.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from . import engine
from .lispy import ParseError
from .presets import PRESETS
from .reconciler import GraphReconciler
from .rules import RuleSetEditor
from .snapshot import InvariantViolation

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from .engine import Session
    from .reconciler import ReconcileReport, RenderSurface
    from .snapshot import GraphSnapshot


__all__ = ["AUTHORING_HELP", "STEPPING_HELP", "InteractionController", "Mode", "Status"]

logger = logging.getLogger(__name__)

AUTHORING_HELP = (
    "Write your program in the top bar, add some rewrite rules on the left pane, then press the graph button!"
)
STEPPING_HELP = (
    "Click on a rewrite rule to apply it, or click on the Auto button to apply all rewrite rules once. "
    "Click the back arrow to go back a step."
)


class Mode(Enum):
    AUTHORING = "authoring"
    STEPPING = "stepping"


@dataclass(frozen=True)
class Status:
    message: str
    is_error: bool = False


class InteractionController:
    """
    Owns the rule editor, the live session (at most one) and the reconciler drawing its snapshots.

    Starting requires at least one confirmed rule. A program or rule that fails to parse keeps the controller in
    authoring mode with the parse error as its status. Stepping without a session is a programming error and raises
    `InvariantViolation`.
    """

    def __init__(
        self,
        surface: RenderSurface,
        rules: RuleSetEditor | None = None,
        *,
        program: str = "",
        construct: Callable[[str, Sequence[str]], Session] = engine.construct,
    ) -> None:
        self.rules = rules if rules is not None else RuleSetEditor()
        self.reconciler = GraphReconciler(surface)
        self.mode = Mode.AUTHORING
        self.session: Session | None = None
        self.current: GraphSnapshot | None = None
        self.status = Status(AUTHORING_HELP)
        self._program = program
        self._construct = construct
        self._listeners: list[Callable[[InteractionController], None]] = []

    @property
    def program(self) -> str:
        return self._program

    @program.setter
    def program(self, text: str) -> None:
        if self.mode is Mode.STEPPING:
            logger.warning("Ignoring program edit while stepping")
            return
        self._program = text

    def on_change(self, callback: Callable[[InteractionController], None]) -> None:
        """
        Registers a callback to run after every transition.
        """
        self._listeners.append(callback)

    def notify(self) -> None:
        for callback in self._listeners:
            callback(self)

    def ready_to_start(self) -> bool:
        return self.mode is Mode.AUTHORING and self.rules.ready_to_start()

    def start(self) -> bool:
        """
        Tries to enter stepping mode, returning whether it did.
        """
        if not self.ready_to_start():
            logger.info("Not starting: %s", "already stepping" if self.mode is Mode.STEPPING else "no confirmed rules")
            return False
        self.rules.freeze()
        flat_rules = engine.flatten_rules(self.rules.snapshot_confirmed())
        try:
            session = self._construct(self._program, flat_rules)
        except ParseError as err:
            logger.info("Failed to start: %s", err.message)
            self.rules.unfreeze()
            self.status = Status(err.message, is_error=True)
            self.notify()
            return False
        except InvariantViolation:
            self.rules.unfreeze()
            raise
        except Exception as err:
            self.rules.unfreeze()
            msg = "Unexpected engine failure while constructing a session"
            raise InvariantViolation(msg) from err
        try:
            self._render(session.snapshot())
        except InvariantViolation:
            self.rules.unfreeze()
            raise
        self.session = session
        self.mode = Mode.STEPPING
        self.status = Status(STEPPING_HELP)
        logger.info("Started session with %d rules", len(flat_rules) // 2)
        self.notify()
        return True

    def step_one(self, rule_index: int) -> ReconcileReport:
        session = self._require_session("apply a rule")
        report = self._render(session.step_rule(rule_index))
        self._step_status(f"rule {rule_index + 1}")
        return report

    def step_all(self) -> ReconcileReport:
        session = self._require_session("apply all rules")
        report = self._render(session.step_all())
        self._step_status("all rules")
        return report

    def previous(self) -> ReconcileReport:
        """
        Redraws the current snapshot. The engine cannot undo a rewrite, so this does not go back.
        """
        self._require_session("go back")
        if self.current is None:
            msg = "Cannot go back before anything was drawn"
            raise InvariantViolation(msg)
        report = self._render(self.current)
        self.notify()
        return report

    def reset(self) -> None:
        if self.mode is Mode.AUTHORING:
            return
        self.session = None
        self.current = None
        self.reconciler.clear()
        self.rules.unfreeze()
        self.mode = Mode.AUTHORING
        self.status = Status(AUTHORING_HELP)
        logger.info("Reset to authoring")
        self.notify()

    def toggle(self) -> None:
        """
        The start/reset button.
        """
        if self.mode is Mode.AUTHORING:
            self.start()
        else:
            self.reset()

    def apply_preset(self, name: str) -> bool:
        if self.mode is Mode.STEPPING:
            logger.warning("Ignoring preset %r while stepping", name)
            return False
        preset = PRESETS[name]
        self._program = preset.program
        self.rules.load(preset.rules)
        self.notify()
        return True

    def _require_session(self, action: str) -> Session:
        if self.session is None:
            msg = f"Cannot {action} without an active session"
            raise InvariantViolation(msg)
        return self.session

    def _render(self, snapshot: GraphSnapshot) -> ReconcileReport:
        report = self.reconciler.reconcile(snapshot)
        self.current = snapshot
        return report

    def _step_status(self, applied: str) -> None:
        assert self.session is not None
        step = self.session.steps[-1]
        self.status = Status(f"Applied {applied} to {step.matches} matches. Smallest program: {self.session.extract()}")
        self.notify()

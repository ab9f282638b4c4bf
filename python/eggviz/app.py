"""
Notebook front end: program and rule editors, the step buttons, a status line and the e-graph canvas.

All state lives in the controller, the widgets are redrawn from it after every change.
"""

from __future__ import annotations

import html
import pathlib
from functools import partial
from typing import TYPE_CHECKING, Any
from warnings import warn

import ipywidgets as widgets
from IPython.display import display
from ipywidgets.embed import embed_minimal_html
from typing_extensions import assert_never

from .canvas import EGraphCanvas
from .controller import InteractionController, Mode
from .ipython_magic import IN_IPYTHON
from .presets import PRESETS
from .rules import Confirmed, Pending, RuleSetEditor

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable


__all__ = ["EggvizApp"]


def _side_layout() -> widgets.Layout:
    return widgets.Layout(width="40%")


class EggvizApp:
    def __init__(self, program: str = "", rules: Iterable[tuple[str, str]] = ()) -> None:
        self.canvas = EGraphCanvas()
        editor = RuleSetEditor(Confirmed(left, right) for left, right in rules)
        self.controller = InteractionController(self.canvas, editor, program=program)

        self.presets = widgets.Dropdown(options=list(PRESETS), value=None, description="Preset")
        self.presets.observe(self._on_preset, names="value")
        self.program = widgets.Text(
            value=program, placeholder="(+ (* x 2) (* y 2))", description="Program", layout=widgets.Layout(width="60%")
        )
        self.program.observe(self._on_program, names="value")
        self.rule_rows = widgets.VBox()
        self.left_button = widgets.Button()
        self.left_button.on_click(self._on_left)
        self.right_button = widgets.Button()
        self.right_button.on_click(self._on_right)
        self.start_button = widgets.Button()
        self.start_button.on_click(lambda _: self._act(self.controller.toggle))
        self.status = widgets.HTML()

        sidebar = widgets.VBox(
            [self.rule_rows, widgets.HBox([self.left_button, self.right_button, self.start_button])],
            layout=widgets.Layout(width="40%"),
        )
        self.widget = widgets.VBox(
            [
                widgets.HBox([self.presets, self.program]),
                widgets.HBox([sidebar, widgets.Box([self.canvas], layout=widgets.Layout(width="60%"))]),
                self.status,
            ]
        )
        self.controller.on_change(lambda _: self.refresh())
        self.refresh()

    def _ipython_display_(self) -> None:
        display(self.widget)

    def display_or_open(self) -> None:
        if IN_IPYTHON:
            display(self.widget)
            return
        warn("Not running in IPython, the buttons of the saved page will not work", stacklevel=2)
        file = pathlib.Path.cwd() / "eggviz.html"
        embed_minimal_html(file, views=[self.widget], drop_defaults=False)
        print("Eggviz saved to", file)

    def _act(self, action: Callable[..., Any], *args: Any) -> None:
        # Send all canvas changes of one action in a single message
        with self.canvas.batch():
            action(*args)

    def refresh(self) -> None:
        controller = self.controller
        stepping = controller.mode is Mode.STEPPING
        self.presets.disabled = stepping
        self.program.disabled = stepping
        if self.program.value != controller.program:
            self.program.value = controller.program
        self.rule_rows.children = self._stepping_rows() if stepping else self._authoring_rows()

        self.left_button.description = "← Previous" if stepping else "Add"
        self.right_button.description = "Auto →" if stepping else "Clear"
        self.left_button.button_style = self.right_button.button_style = "success" if stepping else "info"
        self.start_button.description = "Reset ↺" if stepping else "Graph!"
        self.start_button.disabled = not stepping and not controller.ready_to_start()
        self.start_button.button_style = "danger" if stepping else "success"

        color = "red" if controller.status.is_error else "black"
        self.status.value = f'<span style="color: {color}">{html.escape(controller.status.message)}</span>'

    def _authoring_rows(self) -> list[widgets.Widget]:
        rows = []
        for index, entry in enumerate(self.controller.rules.entries):
            match entry:
                case Pending():
                    rows.append(self._pending_row(index, entry))
                case Confirmed(left, right):
                    remove = widgets.Button(
                        description="⨯", button_style="danger", layout=widgets.Layout(width="3em")
                    )
                    remove.on_click(partial(self._on_remove, index))
                    left_label = widgets.Label(left, layout=_side_layout())
                    right_label = widgets.Label(right, layout=_side_layout())
                    rows.append(widgets.HBox([left_label, widgets.Label("→"), right_label, remove]))
                case _:
                    assert_never(entry)
        return rows

    def _pending_row(self, index: int, entry: Pending) -> widgets.HBox:
        rules = self.controller.rules
        left = widgets.Text(value=entry.left, layout=_side_layout())
        right = widgets.Text(value=entry.right, layout=_side_layout())
        confirm = widgets.Button(description="✓", button_style="success", layout=widgets.Layout(width="3em"))
        confirm.disabled = not rules.pending_valid(index)

        # Typing only toggles the confirm button, redrawing the rows would lose focus
        def on_edit(side: str, change: dict[str, Any]) -> None:
            rules.update(index, **{side: change["new"]})
            confirm.disabled = not rules.pending_valid(index)

        left.observe(partial(on_edit, "left"), names="value")
        right.observe(partial(on_edit, "right"), names="value")
        confirm.on_click(partial(self._on_confirm, index))
        return widgets.HBox([left, widgets.Label("→"), right, confirm])

    def _stepping_rows(self) -> list[widgets.Widget]:
        rows = []
        for index, (left, right) in enumerate(self.controller.rules.snapshot_confirmed()):
            apply = widgets.Button(description=f"{left} → {right}", layout=widgets.Layout(width="95%"))
            apply.on_click(partial(self._on_apply, index))
            rows.append(apply)
        return rows

    def _on_preset(self, change: dict[str, Any]) -> None:
        if change["new"] is None:
            return
        self.controller.apply_preset(change["new"])
        self.presets.value = None

    def _on_program(self, change: dict[str, Any]) -> None:
        self.controller.program = change["new"]

    def _on_left(self, _: widgets.Button) -> None:
        if self.controller.mode is Mode.STEPPING:
            self._act(self.controller.previous)
        else:
            self.controller.rules.add_pending()
            self.refresh()

    def _on_right(self, _: widgets.Button) -> None:
        if self.controller.mode is Mode.STEPPING:
            self._act(self.controller.step_all)
        else:
            self.controller.rules.clear()
            self.refresh()

    def _on_apply(self, index: int, _: widgets.Button) -> None:
        self._act(self.controller.step_one, index)

    def _on_confirm(self, index: int, _: widgets.Button) -> None:
        self.controller.rules.confirm(index)
        self.refresh()

    def _on_remove(self, index: int, _: widgets.Button) -> None:
        self.controller.rules.remove(index)
        self.refresh()

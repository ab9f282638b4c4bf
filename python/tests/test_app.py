from __future__ import annotations

from eggviz.app import EggvizApp
from eggviz.controller import Mode
from eggviz.rules import Confirmed, Pending


class TestAuthoring:
    def test_initial(self):
        app = EggvizApp()
        assert app.start_button.disabled
        assert app.start_button.description == "Graph!"
        assert app.left_button.description == "Add"
        assert app.rule_rows.children == ()
        assert "Write your program" in app.status.value

    def test_add_edit_confirm(self):
        app = EggvizApp(program="(f x)")
        app.left_button.click()
        (row,) = app.rule_rows.children
        left, _, right, confirm = row.children
        assert confirm.disabled
        left.value = "(f pa)"
        assert confirm.disabled
        right.value = "pa"
        assert not confirm.disabled
        confirm.click()
        assert app.controller.rules.entries == (Confirmed("(f pa)", "pa"),)
        assert not app.start_button.disabled

    def test_remove(self):
        app = EggvizApp(rules=[("x", "y"), ("y", "z")])
        remove = app.rule_rows.children[0].children[-1]
        remove.click()
        assert app.controller.rules.entries == (Confirmed("y", "z"),)
        assert len(app.rule_rows.children) == 1

    def test_clear(self):
        app = EggvizApp(rules=[("x", "y")])
        app.left_button.click()
        app.right_button.click()
        assert len(app.controller.rules) == 0
        assert app.rule_rows.children == ()

    def test_pending_rows_survive_refresh(self):
        app = EggvizApp(rules=[("x", "y")])
        app.left_button.click()
        app.rule_rows.children[1].children[0].value = "a"
        app.refresh()
        assert app.controller.rules[1] == Pending("a", "")
        assert app.rule_rows.children[1].children[0].value == "a"

    def test_program_text(self):
        app = EggvizApp()
        app.program.value = "(g y)"
        assert app.controller.program == "(g y)"

    def test_preset(self):
        app = EggvizApp()
        app.presets.value = "(* pa 2) → (<< pa 1)"
        assert app.program.value == "(+ (* x 2) (* y 2))"
        assert app.controller.rules.entries == (Confirmed("(* pa 2)", "(<< pa 1)"),)
        assert app.presets.value is None

    def test_parse_error_shown(self):
        app = EggvizApp(program="(f x", rules=[("x", "y")])
        app.start_button.click()
        assert app.controller.mode is Mode.AUTHORING
        assert "color: red" in app.status.value
        assert "Unmatched &#x27;(&#x27; token." in app.status.value


class TestStepping:
    def test_round_trip(self):
        app = EggvizApp(program="(+ (* x 2) (* y 2))", rules=[("(* pa 2)", "(<< pa 1)")])
        app.start_button.click()
        assert app.controller.mode is Mode.STEPPING
        assert app.program.disabled
        assert app.presets.disabled
        assert app.start_button.description == "Reset ↺"
        assert app.left_button.description == "← Previous"
        assert app.right_button.description == "Auto →"
        assert len(app.canvas.vertices) == 12

        (apply,) = app.rule_rows.children
        assert apply.description == "(* pa 2) → (<< pa 1)"
        apply.click()
        assert "Applied rule 1 to 2 matches" in app.status.value
        assert {"N6", "N7", "N8"} <= set(app.canvas.vertices)

        app.right_button.click()
        assert "Applied all rules" in app.status.value
        vertices = dict(app.canvas.vertices)
        app.left_button.click()
        assert app.canvas.vertices == vertices

        app.start_button.click()
        assert app.controller.mode is Mode.AUTHORING
        assert app.canvas.vertices == {}
        assert app.canvas.edges == {}
        assert not app.program.disabled
        assert app.rule_rows.children[0].children[0].value == "(* pa 2)"

"""Tests for the incremental snapshot selector."""

from __future__ import annotations

from typing import List

import pytest
from rich.console import Console

from cloudsweep.restore.incremental import Choice, IncrementalSelector, advance, parse_choice, start


class ScriptedReader:
    """Answers prompts from a fixed list."""

    def __init__(self, answers: List[str]) -> None:
        self.answers = list(answers)
        self.prompts: List[str] = []

    def __call__(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.answers.pop(0)


class TestSelectionStateMachine:
    """Test suite for the pure transition function."""

    def test_add_then_add_type(self) -> None:
        state = start("vm", ["x", "y", "z"])

        state = advance(state, "y")
        assert state.selected == ("x",)
        assert state.current == "y"

        state = advance(state, "a")
        assert state.finished
        assert state.selected == ("x", "y", "z")

    def test_skip_resource_and_skip_type(self) -> None:
        state = advance(start("vm", ["x", "y", "z"]), "n")
        assert state.selected == ()
        assert state.current == "y"

        state = advance(state, "d")
        assert state.finished
        assert not state.cancelled
        assert state.selected == ()

    def test_add_last_resource_finishes(self) -> None:
        state = advance(start("vm", ["x"]), "y")

        assert state.finished
        assert state.selected == ("x",)

    def test_cancel_discards_selection(self) -> None:
        state = advance(start("vm", ["x", "y"]), "y")
        state = advance(state, "q")

        assert state.finished
        assert state.cancelled
        assert state.selected == ()

    @pytest.mark.parametrize("token", ["?", "", "yes", "x"])
    def test_help_and_invalid_input_do_not_consume(self, token: str) -> None:
        state = advance(start("vm", ["x", "y"]), token)

        assert state.needs_help
        assert state.index == 0
        assert state.current == "x"
        assert not state.finished

    def test_empty_type_is_already_finished(self) -> None:
        assert start("vm", []).finished

    def test_advance_on_finished_state_raises(self) -> None:
        with pytest.raises(ValueError):
            advance(start("vm", []), "y")

    def test_parse_choice(self) -> None:
        assert parse_choice(" a ") is Choice.ADD_TYPE
        assert parse_choice("z") is None


class TestIncrementalSelector:
    """Test suite for IncrementalSelector."""

    @pytest.fixture
    def console(self) -> Console:
        return Console(record=True, width=120)

    def test_add_type_pulls_in_remaining_resources(self, console: Console) -> None:
        reader = ScriptedReader(["y", "a"])
        selector = IncrementalSelector(reader, console=console)

        selected = selector.select({"vm": ["x", "y", "z"]})

        assert selected == {"vm": ["x", "y", "z"]}
        assert reader.answers == []
        assert len(reader.prompts) == 2
        assert reader.prompts[0] == "(1/3) Add this resource [y,n,q,a,d,?]?"

    def test_types_walked_in_sorted_order(self, console: Console) -> None:
        reader = ScriptedReader(["y", "n"])
        selector = IncrementalSelector(reader, console=console)

        selected = selector.select({"vpc": ["v1"], "sg": ["g1"]})

        assert selected == {"sg": ["g1"]}
        output = console.export_text()
        assert output.index("# Type : sg") < output.index("# Type : vpc")

    def test_cancel_returns_none(self, console: Console) -> None:
        reader = ScriptedReader(["y", "q"])
        selector = IncrementalSelector(reader, console=console)

        assert selector.select({"sg": ["g1"], "vm": ["x", "y"]}) is None

    def test_help_prints_usage_and_asks_again(self, console: Console) -> None:
        reader = ScriptedReader(["?", "y"])
        selector = IncrementalSelector(reader, console=console)

        assert selector.select({"vm": ["x"]}) == {"vm": ["x"]}

        output = console.export_text()
        assert "q - cancel addition of resources" in output
        assert output.count("+ x") == 1

    def test_uses_describe_for_display(self, console: Console) -> None:
        reader = ScriptedReader(["n"])
        selector = IncrementalSelector(reader, console=console, describe=lambda i, t: f"{t}:{i.upper()}")

        assert selector.select({"vm": ["x"]}) == {}
        assert "+ vm:X" in console.export_text()

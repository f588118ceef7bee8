"""Tests for confirmation prompts."""

from __future__ import annotations

from unittest.mock import Mock

import pytest
from rich.console import Console

from cloudsweep.cli.prompts import confirm_action


class TestConfirmAction:
    """Test suite for confirm_action."""

    @pytest.fixture
    def console(self) -> Console:
        return Console(record=True, width=120)

    def test_auto_approve_skips_prompt(self, console: Console) -> None:
        reader = Mock()

        assert confirm_action("Delete?", auto_approve=True, reader=reader, console=console)
        reader.assert_not_called()

    @pytest.mark.parametrize(
        "answer,expected",
        [("yes", True), ("yes\n", True), ("y", False), ("YES", False), ("", False), ("no", False)],
    )
    def test_only_yes_confirms(self, console: Console, answer: str, expected: bool) -> None:
        assert confirm_action("Delete?", reader=lambda prompt: answer, console=console) is expected

    def test_prints_warning(self, console: Console) -> None:
        confirm_action("Delete everything?", reader=lambda prompt: "no", console=console)

        output = console.export_text()
        assert "Delete everything?" in output
        assert "There is no undo. Only 'yes' will be accepted to confirm." in output

"""Interactive prompts."""

from __future__ import annotations

from typing import Callable, Optional

import typer
from rich.console import Console


def read_answer(prompt: str) -> str:
    """Read one line from the terminal."""
    return typer.prompt(prompt, default="", show_default=False, prompt_suffix=" ")


def confirm_action(
    message: str,
    auto_approve: bool = False,
    reader: Callable[[str], str] = read_answer,
    console: Optional[Console] = None,
) -> bool:
    """Ask the operator to confirm a destructive action.

    Only the exact answer "yes" confirms.

    Args:
        message: What is about to happen
        auto_approve: Skip the prompt and approve
        reader: Input function, called with the prompt text
        console: Console for the message

    Returns:
        True if the action was approved
    """
    if auto_approve:
        return True
    console = console or Console()
    console.print()
    console.print(message)
    console.print("  There is no undo. Only 'yes' will be accepted to confirm.")
    console.print()
    response = reader("  Enter a value:")
    return response.strip() == "yes"

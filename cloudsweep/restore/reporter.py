"""Destroyer plan formatting and display."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Optional

from rich.console import Console
from rich.markup import escape

from ..providers.base import describe_objects

if TYPE_CHECKING:
    from .destroyer import Destroyer


class DestroyerReporter:
    """Format and display what a destroyer is about to delete."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def display(self, destroyer: "Destroyer") -> None:
        """Display a per-profile breakdown of the pending objects."""
        total_count = 0
        for target in destroyer.targets:
            self.console.print(
                f"[bold]Objects to delete in profile {escape(target.profile.name)} "
                f"({escape(target.provider.name())}):[/bold]"
            )
            count = target.pending_count
            total_count += count
            if count == 0:
                self.console.print("* no object *")
                continue
            for resource_type, descriptions in describe_objects(target.provider, target.objects):
                self.console.print(f"[cyan]{escape(resource_type)}[/cyan]: ({len(descriptions)})")
                for description in descriptions:
                    self.console.print(f"  - {escape(description)}")

        if total_count == 0:
            self.console.print()
            self.console.print("Nothing to delete", style="green")

    def display_json(self, destroyer: "Destroyer", omit_empty: bool = False) -> None:
        """Print the machine readable plan."""
        self.console.print(
            json.dumps(destroyer.to_dict(omit_empty=omit_empty), indent=2),
            markup=False,
            highlight=False,
            soft_wrap=True,
        )

    def display_pending(self, destroyer: "Destroyer") -> None:
        """Display objects still pending after an interrupted run."""
        for target in destroyer.targets:
            if target.pending_count == 0:
                continue
            self.console.print(
                f"Objects left in profile {escape(target.profile.name)} ({escape(target.provider.name())}):",
                style="yellow",
            )
            for resource_type, descriptions in describe_objects(target.provider, target.objects):
                self.console.print(f"[cyan]{escape(resource_type)}[/cyan]:")
                for description in descriptions:
                    self.console.print(f"  - {escape(description)}")

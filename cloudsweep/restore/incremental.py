"""Interactive selection of resources to add to an existing snapshot.

The selection logic is a pure state machine: ``advance`` takes the current
state and one input token and returns the next state. ``IncrementalSelector``
drives it with an injected input reader, so a terminal prompt and a scripted
list of answers behave the same way.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Iterable, Mapping, Optional, Tuple

from rich.console import Console
from rich.markup import escape

from ..models.object_set import ObjectSet

logger = logging.getLogger(__name__)


class Choice(str, Enum):
    """Answers accepted for each presented resource."""

    ADD_RESOURCE = "y"
    SKIP_RESOURCE = "n"
    CANCEL = "q"
    ADD_TYPE = "a"
    SKIP_TYPE = "d"
    HELP = "?"


CHOICE_DESCRIPTIONS = {
    Choice.ADD_RESOURCE: "add this resource",
    Choice.SKIP_RESOURCE: "skip the resource",
    Choice.CANCEL: "cancel addition of resources",
    Choice.ADD_TYPE: "add this resource and all later resources of this type",
    Choice.SKIP_TYPE: "skip the resource and all later resources of this type",
    Choice.HELP: "print help",
}


@dataclass(frozen=True)
class SelectionState:
    """Progress through the resources of one type.

    Attributes:
        resource_type: Type being walked through
        values: Resource ids presented one by one
        index: Position of the resource currently presented
        selected: Ids accepted so far
        finished: No more input is needed for this type
        cancelled: The whole operation was cancelled
        needs_help: Last input was help or invalid; show the legend
    """

    resource_type: str
    values: Tuple[str, ...]
    index: int = 0
    selected: Tuple[str, ...] = ()
    finished: bool = False
    cancelled: bool = False
    needs_help: bool = False

    @property
    def current(self) -> Optional[str]:
        if self.finished or self.index >= len(self.values):
            return None
        return self.values[self.index]


def start(resource_type: str, values: Iterable[str]) -> SelectionState:
    """Initial state for a type; already finished when there is nothing to ask."""
    values = tuple(values)
    return SelectionState(resource_type=resource_type, values=values, finished=not values)


def parse_choice(token: str) -> Optional[Choice]:
    try:
        return Choice(token.strip())
    except ValueError:
        return None


def advance(state: SelectionState, token: str) -> SelectionState:
    """Apply one input token to a selection state.

    Raises:
        ValueError: If the state is already finished
    """
    if state.finished:
        raise ValueError(f"Selection of {state.resource_type} is already finished")

    choice = parse_choice(token)
    if choice is None or choice is Choice.HELP:
        return replace(state, needs_help=True)

    state = replace(state, needs_help=False)
    current = state.values[state.index]
    next_index = state.index + 1
    at_end = next_index >= len(state.values)

    if choice is Choice.ADD_RESOURCE:
        return replace(state, index=next_index, selected=state.selected + (current,), finished=at_end)
    if choice is Choice.SKIP_RESOURCE:
        return replace(state, index=next_index, finished=at_end)
    if choice is Choice.ADD_TYPE:
        return replace(
            state,
            index=len(state.values),
            selected=state.selected + state.values[state.index :],
            finished=True,
        )
    if choice is Choice.SKIP_TYPE:
        return replace(state, index=len(state.values), finished=True)
    # Choice.CANCEL
    return replace(state, selected=(), finished=True, cancelled=True)


class IncrementalSelector:
    """Ask the operator, resource by resource, what to add to a snapshot."""

    def __init__(
        self,
        reader: Callable[[str], str],
        console: Optional[Console] = None,
        describe: Optional[Callable[[str, str], str]] = None,
    ) -> None:
        """Initialize selector.

        Args:
            reader: Called with a prompt, returns the operator's answer
            console: Rich console for the resource listing and legend
            describe: Renders (resource_id, resource_type) for display
        """
        self.reader = reader
        self.console = console or Console()
        self.describe = describe or (lambda resource_id, resource_type: resource_id)

    def print_usage(self) -> None:
        for choice, description in CHOICE_DESCRIPTIONS.items():
            self.console.print(f"{escape(choice.value)} - {description}", style="bold red")

    def select_type(self, resource_type: str, values: Iterable[str]) -> Optional[list]:
        """Walk through the resources of one type.

        Returns:
            Selected ids, or None when the operator cancelled
        """
        state = start(resource_type, values)
        accepted = ",".join(choice.value for choice in Choice)

        while not state.finished:
            if not state.needs_help:
                self.console.print(f"[bold]# Type : {escape(resource_type)}[/bold]")
                self.console.print(f"[green]+ {escape(self.describe(state.current, resource_type))}[/green]")
            answer = self.reader(f"({state.index + 1}/{len(state.values)}) Add this resource [{accepted}]?")
            state = advance(state, answer or "")
            if state.needs_help:
                self.print_usage()

        if state.cancelled:
            logger.debug(f"Selection cancelled while reviewing {resource_type}")
            return None
        return list(state.selected)

    def select(self, objects: Mapping[str, Iterable[str]]) -> Optional[ObjectSet]:
        """Walk through every type of an object set, in sorted type order.

        Returns:
            Object set of selected ids (types with no selection omitted), or
            None when the operator cancelled; selections already made for
            other types are discarded in that case.
        """
        selected: ObjectSet = {}
        for resource_type in sorted(objects):
            values = sorted(objects[resource_type] or [])
            if not values:
                continue
            chosen = self.select_type(resource_type, values)
            if chosen is None:
                return None
            if chosen:
                selected[resource_type] = chosen
        return selected

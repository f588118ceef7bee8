"""Convergent destroyer.

Deletes the pending objects of every target, re-reads what is left, and
repeats until nothing is pending. Ordering constraints between resources
(detach before delete, empty before remove...) are not modelled: anything
still alive after a pass is simply attempted again on the next one.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from rich.console import Console

from ..delta.calculator import DiffCalculator
from ..errors import DestroyTimeoutError
from ..models.object_set import ObjectSet, count_objects, sorted_objects
from ..models.profile import Profile
from ..providers.base import Provider, delete_pending_objects, read_pending_objects

logger = logging.getLogger(__name__)


@dataclass
class DestroyOptions:
    """Tunables of the deletion loop.

    Attributes:
        target_delay: Seconds to wait after deleting the objects of one target
        pass_delay: Seconds to wait between two deletion passes
        debug: Log per-type diff counts after each re-read
    """

    target_delay: float = 0.1
    pass_delay: float = 1.0
    debug: bool = False


@dataclass
class DestroyTarget:
    """Pending deletion work for one profile."""

    profile: Profile
    provider: Provider
    objects: ObjectSet = field(default_factory=dict)
    has_objects_left: bool = True

    @property
    def pending_count(self) -> int:
        return count_objects(self.objects)

    def to_dict(self, omit_empty: bool = False) -> Dict[str, Any]:
        return {
            "profile": {
                "name": self.profile.name,
                "provider": self.provider.name(),
            },
            "objects": sorted_objects(self.objects, omit_empty=omit_empty),
        }


class Destroyer:
    """Deletion orchestrator over one or more profiles.

    Usage:
        destroyer = Destroyer()
        destroyer.add(profile, provider, diff.created)
        destroyer.print()
        destroyer.run(confirmed=True, timeout=600)
    """

    def __init__(
        self,
        options: Optional[DestroyOptions] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize destroyer.

        Args:
            options: Loop tunables (defaults to DestroyOptions())
            sleep: Function used to pause between targets and passes
            clock: Monotonic clock used to enforce the timeout
        """
        self.options = options or DestroyOptions()
        self.targets: List[DestroyTarget] = []
        self._sleep = sleep
        self._clock = clock
        self._calculator = DiffCalculator(debug=self.options.debug)

    def add(self, profile: Profile, provider: Provider, objects: ObjectSet) -> DestroyTarget:
        target = DestroyTarget(profile=profile, provider=provider, objects=sorted_objects(objects))
        self.targets.append(target)
        return target

    @property
    def total_count(self) -> int:
        return sum(target.pending_count for target in self.targets)

    def pending(self) -> Dict[str, ObjectSet]:
        """Pending objects per profile name, empty types left out."""
        return {
            target.profile.name: sorted_objects(target.objects, omit_empty=True)
            for target in self.targets
            if target.pending_count
        }

    def to_dict(self, omit_empty: bool = False) -> Dict[str, Any]:
        return {"targets": [target.to_dict(omit_empty=omit_empty) for target in self.targets]}

    def print(self, json_output: bool = False, console: Optional[Console] = None) -> None:
        """Render the deletion plan.

        Args:
            json_output: Emit the machine readable document instead of text
            console: Rich console to print to
        """
        from .reporter import DestroyerReporter

        reporter = DestroyerReporter(console)
        if json_output:
            reporter.display_json(self)
        else:
            reporter.display(self)

    def run(self, confirmed: bool = False, timeout: Optional[float] = None) -> int:
        """Delete pending objects until none is left.

        Args:
            confirmed: Must be True; the operator approved the deletion
            timeout: Seconds after which the loop gives up (None or negative
                for no limit)

        Returns:
            Number of deletion passes performed

        Raises:
            ValueError: If not confirmed
            DestroyTimeoutError: If the timeout elapsed with objects pending
        """
        if not confirmed:
            raise ValueError("Deletion requires explicit confirmation. Set confirmed=True or use --auto-approve flag.")

        deadline = None
        if timeout is not None and timeout >= 0:
            deadline = self._clock() + timeout

        passes = 0
        while True:
            total_count = 0
            for target in self.targets:
                if not target.has_objects_left:
                    continue
                count = target.pending_count
                if count == 0:
                    target.has_objects_left = False
                    continue
                total_count += count

            if total_count == 0:
                logger.info(f"All objects deleted after {passes} pass(es)")
                return passes

            if deadline is not None and self._clock() >= deadline:
                logger.error(f"Timeout reached with {total_count} object(s) still pending")
                raise DestroyTimeoutError(self.pending(), passes)

            passes += 1
            logger.info(f"Deletion pass {passes}: {total_count} object(s) pending")

            processed = []
            for target in self.targets:
                if not target.has_objects_left:
                    continue
                delete_pending_objects(target.provider, target.objects)
                processed.append(target)
                self._sleep(self.options.target_delay)

            for target in processed:
                remaining = read_pending_objects(target.provider, target.objects)
                diff = self._calculator.calculate(remaining, target.objects)
                target.objects = diff.retained
                logger.debug(f"Profile {target.profile.name}: {target.pending_count} object(s) left")

            self._sleep(self.options.pass_delay)

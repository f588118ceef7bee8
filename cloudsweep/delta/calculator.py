"""Diff calculator for comparing two object sets."""

from __future__ import annotations

import logging
from typing import Iterable, Mapping

from ..models.object_set import Diff

logger = logging.getLogger(__name__)


class DiffCalculator:
    """Calculate retained, created and deleted ids between two object sets.

    Types and ids are emitted sorted so the result does not depend on the
    iteration order of the inputs. A type only appears in a partition when
    that partition holds at least one id for it.
    """

    def __init__(self, debug: bool = False) -> None:
        """Initialize diff calculator.

        Args:
            debug: Log per-type counts while calculating
        """
        self.debug = debug

    def calculate(
        self,
        before: Mapping[str, Iterable[str]],
        after: Mapping[str, Iterable[str]],
    ) -> Diff:
        """Calculate the diff between two object sets.

        Args:
            before: Earlier object set (e.g. a snapshot)
            after: Later object set (e.g. a fresh provider read)

        Returns:
            Diff with retained, created and deleted ids
        """
        diff = Diff()

        for resource_type in sorted(set(before) | set(after)):
            before_ids = set(before.get(resource_type) or [])
            after_ids = set(after.get(resource_type) or [])

            retained = sorted(before_ids & after_ids)
            deleted = sorted(before_ids - after_ids)
            created = sorted(after_ids - before_ids)

            if retained:
                diff.retained[resource_type] = retained
            if deleted:
                diff.deleted[resource_type] = deleted
            if created:
                diff.created[resource_type] = created

            if self.debug:
                logger.debug(
                    f"{resource_type}: {len(retained)} retained, "
                    f"{len(created)} created, {len(deleted)} deleted"
                )

        return diff


def build_diff(
    before: Mapping[str, Iterable[str]],
    after: Mapping[str, Iterable[str]],
    debug: bool = False,
) -> Diff:
    """Convenience wrapper around DiffCalculator.calculate."""
    return DiffCalculator(debug=debug).calculate(before, after)

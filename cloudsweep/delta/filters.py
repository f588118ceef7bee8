"""Resource type filters used to narrow what gets deleted."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, List, Mapping, Optional, Sequence

from ..errors import ConfigError
from ..models.object_set import ObjectSet


class ResourceFilter(ABC):
    """Predicate over resource types."""

    def __init__(self, resource_types: Iterable[str]) -> None:
        self._resource_types = frozenset(resource_types)

    @property
    def resource_types(self) -> frozenset:
        return self._resource_types

    @abstractmethod
    def select(self, resource_type: str) -> bool:
        """Return True when resources of this type must be kept."""

    def apply(self, objects: Mapping[str, Iterable[str]]) -> ObjectSet:
        """Return a new object set containing only the selected types."""
        return {t: list(ids) for t, ids in objects.items() if self.select(t)}


class OnlyFilter(ResourceFilter):
    """Keep only the listed resource types."""

    def select(self, resource_type: str) -> bool:
        return resource_type in self._resource_types

    def __repr__(self) -> str:
        return f"OnlyFilter({sorted(self._resource_types)})"


class ExcludeFilter(ResourceFilter):
    """Keep every resource type except the listed ones."""

    def select(self, resource_type: str) -> bool:
        return resource_type not in self._resource_types

    def __repr__(self) -> str:
        return f"ExcludeFilter({sorted(self._resource_types)})"


def split_types(value: Optional[str]) -> List[str]:
    """Split a comma separated list of resource types."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def build_resource_filter(
    only: Optional[Sequence[str]] = None,
    exclude: Optional[Sequence[str]] = None,
    known_types: Optional[Iterable[str]] = None,
) -> Optional[ResourceFilter]:
    """Build a resource filter from user options.

    Args:
        only: Resource types to keep exclusively
        exclude: Resource types to drop
        known_types: When given, every listed type must belong to it

    Returns:
        OnlyFilter, ExcludeFilter, or None when no filter was requested

    Raises:
        ConfigError: If both lists are given or a type is unknown
    """
    if only and exclude:
        raise ConfigError("Cannot use --only-resource-types option with --exclude-resource-types")

    listed = list(only or exclude or [])
    if not listed:
        return None

    if known_types is not None:
        known = set(known_types)
        unknown = sorted(t for t in set(listed) if t not in known)
        if unknown:
            raise ConfigError(f"Unknown resource type(s): {', '.join(unknown)}")

    if only:
        return OnlyFilter(listed)
    return ExcludeFilter(listed)

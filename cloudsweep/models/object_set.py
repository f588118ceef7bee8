"""Object set model: resource ids grouped by resource type."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping

# resource type -> resource ids
ObjectSet = Dict[str, List[str]]


def count_objects(objects: Mapping[str, Iterable[str]]) -> int:
    """Count every resource id in an object set."""
    return sum(len(list(ids)) for ids in objects.values())


def sorted_objects(objects: Mapping[str, Iterable[str]], omit_empty: bool = False) -> ObjectSet:
    """Return a copy of an object set with sorted type keys and sorted, de-duplicated ids.

    Args:
        objects: Object set to normalize
        omit_empty: Drop types without any id

    Returns:
        New object set
    """
    result: ObjectSet = {}
    for resource_type in sorted(objects):
        ids = sorted(set(objects[resource_type] or []))
        if omit_empty and not ids:
            continue
        result[resource_type] = ids
    return result


def merge_objects(base: Mapping[str, Iterable[str]], extra: Mapping[str, Iterable[str]]) -> ObjectSet:
    """Union of two object sets, type by type."""
    merged: ObjectSet = {}
    for resource_type in set(base) | set(extra):
        merged[resource_type] = list(base.get(resource_type, [])) + list(extra.get(resource_type, []))
    return sorted_objects(merged)


@dataclass
class Diff:
    """Partition of two object sets into retained, created and deleted ids.

    Attributes:
        retained: Ids present in both the before and after sets
        created: Ids only present in the after set
        deleted: Ids only present in the before set
    """

    retained: ObjectSet = field(default_factory=dict)
    created: ObjectSet = field(default_factory=dict)
    deleted: ObjectSet = field(default_factory=dict)

    @property
    def has_changes(self) -> bool:
        return bool(self.created or self.deleted)

    def to_dict(self) -> dict:
        return {
            "retained": self.retained,
            "created": self.created,
            "deleted": self.deleted,
        }

"""Snapshot data model: a named, point-in-time listing of resource ids per profile."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from .object_set import ObjectSet, count_objects, sorted_objects

SNAPSHOT_VERSION = 0

SNAPSHOT_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")


def validate_snapshot_name(name: str) -> None:
    """Raise ValueError unless the name only holds alphanumerics, hyphens and underscores."""
    if not isinstance(name, str) or not SNAPSHOT_NAME_PATTERN.fullmatch(name):
        raise ValueError(
            f"Invalid snapshot name: {name}. "
            f"Must contain only alphanumeric characters, hyphens, and underscores."
        )


@dataclass
class SnapshotData:
    """Resource ids recorded for one profile."""

    profile: str
    objects: ObjectSet = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"profile": self.profile, "objects": sorted_objects(self.objects)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SnapshotData":
        objects = {str(t): [str(i) for i in (ids or [])] for t, ids in (data.get("objects") or {}).items()}
        return cls(profile=data["profile"], objects=objects)


@dataclass
class Snapshot:
    """Represents a point-in-time listing of resources for one or more profiles.

    A snapshot only stores resource ids. It is used as the "before" side when
    computing which resources were created since it was taken.
    """

    name: str
    created_at: datetime
    data: List[SnapshotData] = field(default_factory=list)
    version: int = SNAPSHOT_VERSION

    def get_data(self, profile_name: str) -> Optional[SnapshotData]:
        for data in self.data:
            if data.profile == profile_name:
                return data
        return None

    @property
    def profiles(self) -> List[str]:
        return [data.profile for data in self.data]

    def to_dict(self) -> Dict[str, Any]:
        """Convert snapshot to dictionary for serialization."""
        return {
            "version": self.version,
            "name": self.name,
            "created_at": self.created_at.isoformat(),
            "data": [d.to_dict() for d in self.data],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Snapshot":
        created_at = data.get("created_at")
        if isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at)
        if not isinstance(created_at, datetime):
            raise ValueError(f"invalid created_at: {created_at!r}")
        return cls(
            name=data["name"],
            created_at=created_at,
            data=[SnapshotData.from_dict(d) for d in data.get("data") or []],
            # Snapshots written before versioning are version 0
            version=data.get("version", 0),
        )

    def validate(self) -> bool:
        """Validate snapshot name.

        Returns:
            True if valid, raises ValueError if invalid
        """
        validate_snapshot_name(self.name)
        return True

    def __str__(self) -> str:
        lines = [
            f"name: {self.name}",
            f"date: {self.created_at.isoformat()}",
            "profiles:",
        ]
        for data in self.data:
            lines.append(f"  - {data.profile}: ({count_objects(data.objects)} objects)")
            for resource_type, ids in sorted_objects(data.objects).items():
                lines.append(f"    - {resource_type}: {len(ids)}")
        return "\n".join(lines) + "\n"

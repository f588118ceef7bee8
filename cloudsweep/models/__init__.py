"""Data models for object sets, diffs, profiles and snapshots."""

from __future__ import annotations

__all__ = [
    "Diff",
    "ObjectSet",
    "Profile",
    "Snapshot",
    "SnapshotData",
]

from .object_set import Diff, ObjectSet
from .profile import Profile
from .snapshot import Snapshot, SnapshotData

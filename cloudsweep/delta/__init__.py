"""Object set diffing and resource type filtering."""

from __future__ import annotations

__all__ = [
    "DiffCalculator",
    "ExcludeFilter",
    "OnlyFilter",
    "ResourceFilter",
    "build_diff",
    "build_resource_filter",
]

from .calculator import DiffCalculator, build_diff
from .filters import ExcludeFilter, OnlyFilter, ResourceFilter, build_resource_filter

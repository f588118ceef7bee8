"""Resource deletion and snapshot growth.

Classes:
    Destroyer: Convergent deletion loop over one or more profiles
    DestroyerReporter: Human and JSON rendering of a deletion plan
    IncrementalSelector: Interactive per-resource selection
"""

from __future__ import annotations

__all__ = [
    "DestroyOptions",
    "DestroyTarget",
    "Destroyer",
    "DestroyerReporter",
    "IncrementalSelector",
]

from .destroyer import DestroyOptions, DestroyTarget, Destroyer
from .incremental import IncrementalSelector
from .reporter import DestroyerReporter

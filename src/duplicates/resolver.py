"""
Duplicate-resolution rules applied to each destination path before copying.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from config import DuplicateHandling
from hashing import Hasher


class Resolution(Enum):
    USE = "use"
    SKIP = "skip"
    RENAME = "rename"


@dataclass(frozen=True)
class ResolvedDestination:
    """Outcome of resolving one destination; ``path`` is None for skips."""

    outcome: Resolution
    path: Optional[Path]

    @property
    def skipped(self) -> bool:
        return self.outcome is Resolution.SKIP


def next_available_path(destination: Path) -> Path:
    """Return ``name (n).ext`` for the first n >= 1 not present on disk."""
    stem = destination.stem
    suffix = destination.suffix
    parent = destination.parent
    counter = 1
    while True:
        candidate = parent / f"{stem} ({counter}){suffix}"
        if not candidate.exists():
            return candidate
        counter += 1


class DuplicateResolver:
    """Decide whether a destination is used, skipped, or replaced by a renamed path.

    Decisions always look at the live file system; the destination index
    only feeds the ``duplicate_hint`` shortcut.
    """

    def __init__(self, policy: DuplicateHandling, hasher: Hasher) -> None:
        self.policy = policy
        self.hasher = hasher

    def resolve(self, source: Path, destination: Path, duplicate_hint: bool = False) -> ResolvedDestination:
        if self.policy is DuplicateHandling.SKIP_BY_SIZE_AND_NAME and duplicate_hint:
            return ResolvedDestination(Resolution.SKIP, None)
        if not destination.exists():
            return ResolvedDestination(Resolution.USE, destination)
        if self.policy is DuplicateHandling.KEEP_BOTH_WITH_RENAME:
            return self._renamed(destination)
        if self.policy is DuplicateHandling.SKIP_BY_SIZE_AND_NAME:
            return ResolvedDestination(Resolution.SKIP, None)

        if source.stat().st_size != destination.stat().st_size:
            return self._renamed(destination)
        if self.hasher.content_equal(source, destination):
            return ResolvedDestination(Resolution.SKIP, None)
        return self._renamed(destination)

    def _renamed(self, destination: Path) -> ResolvedDestination:
        return ResolvedDestination(Resolution.RENAME, next_available_path(destination))

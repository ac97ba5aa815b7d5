"""
Snapshot of the existing destination tree keyed by (size, file name).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional

from discovery.walker import TreeWalker
from utils import CancellationToken

IndexKey = tuple[int, str]


class DestinationIndex:
    """Read-only lookup of destination files that share a size and name."""

    def __init__(self, entries: Optional[dict[IndexKey, list[Path]]] = None) -> None:
        self._entries: dict[IndexKey, list[Path]] = entries or {}

    def contains(self, size: int, name: str) -> bool:
        return (size, name) in self._entries

    def matches(self, size: int, name: str) -> list[Path]:
        return list(self._entries.get((size, name), []))

    def __len__(self) -> int:
        return sum(len(paths) for paths in self._entries.values())

    @classmethod
    def from_paths(cls, paths: Iterable[Path]) -> "DestinationIndex":
        entries: dict[IndexKey, list[Path]] = {}
        for path in paths:
            try:
                size = path.stat().st_size
            except FileNotFoundError:
                continue
            entries.setdefault((size, path.name), []).append(path)
        return cls(entries)


def build_destination_index(
    output_root: Path,
    cancel_token: Optional[CancellationToken] = None,
    logger: Optional[logging.Logger] = None,
) -> DestinationIndex:
    """Index every file already under ``output_root``; empty on a first run."""
    logger = logger or logging.getLogger("file_backup")
    if not output_root.is_dir():
        return DestinationIndex()
    walker = TreeWalker(continue_on_error=False, cancel_token=cancel_token, logger=logger)
    index = DestinationIndex.from_paths(walker.walk(output_root))
    logger.info("Destination index: %s existing files under %s", len(index), output_root)
    return index

"""
Hashing utilities for file content.
"""

from __future__ import annotations

import hashlib
from pathlib import Path


class Hasher:
    """Compute streaming SHA-256 digests for duplicate checks and verification."""

    def __init__(self, chunk_size: int = 64 * 1024) -> None:
        self.chunk_size = max(int(chunk_size), 1)

    def digest(self, path: Path) -> bytes:
        """Return the raw SHA-256 digest of a file, read in bounded chunks."""
        hasher = hashlib.sha256()
        with Path(path).open("rb") as handle:
            while True:
                data = handle.read(self.chunk_size)
                if not data:
                    break
                hasher.update(data)
        return hasher.digest()

    def content_equal(self, left: Path, right: Path) -> bool:
        """Return True when both files have identical digests."""
        return self.digest(left) == self.digest(right)

"""
Thread-safe aggregate of backup run results.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any

from utils import ProgressSnapshot


@dataclass
class BackupReport:
    """Counters and error log shared by every backup worker.

    All mutation goes through the methods below, which serialize on a
    single lock; read the public fields only after the run has returned.
    """

    scanned_files: int = 0
    copied_files: int = 0
    skipped_duplicates: int = 0
    failed_files: int = 0
    copied_bytes: int = 0
    errors: list[str] = field(default_factory=list)
    cancelled: bool = False
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False, compare=False)

    def add_scanned(self, count: int = 1) -> None:
        with self._lock:
            self.scanned_files += count

    def add_copied(self, size: int) -> None:
        with self._lock:
            self.copied_files += 1
            self.copied_bytes += size

    def add_skipped(self) -> None:
        with self._lock:
            self.skipped_duplicates += 1

    def add_failure(self, message: str) -> None:
        with self._lock:
            self.failed_files += 1
            self.errors.append(message)

    def add_error(self, message: str) -> None:
        with self._lock:
            self.errors.append(message)

    def mark_cancelled(self) -> None:
        with self._lock:
            self.cancelled = True
            self.errors.append("Backup cancelled")

    def snapshot(self, phase: str, message: str) -> ProgressSnapshot:
        with self._lock:
            return ProgressSnapshot(
                phase=phase,
                scanned_files=self.scanned_files,
                copied_files=self.copied_files,
                skipped_duplicates=self.skipped_duplicates,
                failed_files=self.failed_files,
                message=message,
            )

    def to_dict(self) -> dict[str, Any]:
        with self._lock:
            return {
                "scanned_files": self.scanned_files,
                "copied_files": self.copied_files,
                "skipped_duplicates": self.skipped_duplicates,
                "failed_files": self.failed_files,
                "copied_bytes": self.copied_bytes,
                "cancelled": self.cancelled,
                "errors": list(self.errors),
            }

    def __str__(self) -> str:
        return (
            f"Scanned: {self.scanned_files}, Copied: {self.copied_files}, "
            f"Duplicates: {self.skipped_duplicates}, Failed: {self.failed_files}, "
            f"Bytes: {self.copied_bytes}"
        )

"""
Progress snapshots and best-effort delivery to an observer.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional


@dataclass(frozen=True)
class ProgressSnapshot:
    """Point-in-time view of a backup run."""

    phase: str
    scanned_files: int
    copied_files: int
    skipped_duplicates: int
    failed_files: int
    message: str


ProgressObserver = Callable[[ProgressSnapshot], None]


class ProgressReporter:
    """Deliver snapshots to an optional observer without letting it break the run."""

    def __init__(
        self,
        observer: Optional[ProgressObserver] = None,
        logger: Optional[logging.Logger] = None,
        performance_logger: Optional[logging.Logger] = None,
    ) -> None:
        self.observer = observer
        self.logger = logger or logging.getLogger("file_backup")
        self.performance_logger = performance_logger or logging.getLogger("file_backup.performance")
        self._lock = threading.Lock()

    def emit(self, build: Callable[[], ProgressSnapshot]) -> None:
        """Build and deliver a snapshot; ``build`` runs under the reporter lock.

        Building inside the lock keeps snapshots from concurrent workers in
        non-decreasing order.
        """
        with self._lock:
            snapshot = build()
            self.performance_logger.debug(
                "Progress %s | scanned=%s copied=%s skipped=%s failed=%s | %s",
                snapshot.phase,
                snapshot.scanned_files,
                snapshot.copied_files,
                snapshot.skipped_duplicates,
                snapshot.failed_files,
                snapshot.message,
            )
            if self.observer is None:
                return
            try:
                self.observer(snapshot)
            except Exception as exc:
                self.logger.warning("Progress observer failed: %s", exc)

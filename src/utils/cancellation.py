"""
Cooperative cancellation for long-running backup phases.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field


class OperationCancelled(Exception):
    """Raised at a checkpoint once cancellation has been requested."""


@dataclass
class CancellationToken:
    """Thread-safe flag checked between units of work."""

    _event: threading.Event = field(default_factory=threading.Event, init=False, repr=False)

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelled("Backup cancelled")

    def wait(self, timeout: float) -> bool:
        """Sleep up to ``timeout`` seconds, waking early on cancellation."""
        return self._event.wait(timeout)

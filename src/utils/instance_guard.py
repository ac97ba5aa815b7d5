"""
Single-instance guard so two backup runs never share a log/output tree.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Optional, TextIO

ENV_ALLOW_MULTI_INSTANCE = "FILE_BACKUP_ALLOW_MULTI_INSTANCE"


class InstanceLockError(RuntimeError):
    """Raised when another backup run already holds the lock."""


class InstanceLock:
    """Non-blocking advisory lock on a file, released on exit."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._handle: Optional[TextIO] = None

    def acquire(self) -> "InstanceLock":
        self.path.parent.mkdir(parents=True, exist_ok=True)
        handle = self.path.open("a+", encoding="utf-8")
        try:
            _lock_file(handle)
            handle.seek(0)
            handle.truncate()
            handle.write(f"pid={os.getpid()}\nargv={' '.join(sys.argv)}\n")
            handle.flush()
        except Exception:
            handle.close()
            raise
        self._handle = handle
        return self

    def release(self) -> None:
        if self._handle is None:
            return
        self._handle.close()
        self._handle = None

    def __enter__(self) -> "InstanceLock":
        return self.acquire()

    def __exit__(self, *exc_info: object) -> None:
        self.release()


def multi_instance_allowed() -> bool:
    return os.environ.get(ENV_ALLOW_MULTI_INSTANCE) == "1"


def _lock_file(handle: TextIO) -> None:
    if os.name == "nt":
        import msvcrt

        try:
            handle.seek(0)
            msvcrt.locking(handle.fileno(), msvcrt.LK_NBLCK, 1)
        except OSError as exc:
            raise InstanceLockError("Another backup run is already in progress.") from exc
    else:
        import fcntl

        try:
            fcntl.flock(handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
        except OSError as exc:
            raise InstanceLockError("Another backup run is already in progress.") from exc

"""
Fault-tolerant, non-recursive directory enumeration.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable, Iterator, Optional

from utils import CancellationToken

ErrorSink = Callable[[str], None]


class TreeWalker:
    """Yield every regular file under a root using an explicit stack.

    Subdirectories and files of a directory are listed in two separate
    steps, so a fault in one still lets the other proceed. Symlinks are
    neither followed nor yielded.
    """

    def __init__(
        self,
        continue_on_error: bool = True,
        on_error: Optional[ErrorSink] = None,
        cancel_token: Optional[CancellationToken] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.continue_on_error = continue_on_error
        self.on_error = on_error
        self.cancel_token = cancel_token
        self.logger = logger or logging.getLogger("file_backup")

    def walk(self, root: Path) -> Iterator[Path]:
        pending: list[Path] = [root]
        while pending:
            if self.cancel_token is not None:
                self.cancel_token.raise_if_cancelled()
            current = pending.pop()

            try:
                subdirectories = self._list_subdirectories(current)
            except OSError as exc:
                if not self.continue_on_error:
                    raise
                self._record(f"Skipping directory due to access issue: {current} ({_reason(exc)})")
            else:
                pending.extend(subdirectories)

            try:
                files = self._list_files(current)
            except OSError as exc:
                if not self.continue_on_error:
                    raise
                self._record(
                    f"Skipping files in directory due to access issue: {current} ({_reason(exc)})"
                )
                continue
            yield from files

    def _list_subdirectories(self, directory: Path) -> list[Path]:
        with os.scandir(directory) as entries:
            return [Path(entry.path) for entry in entries if entry.is_dir(follow_symlinks=False)]

    def _list_files(self, directory: Path) -> list[Path]:
        with os.scandir(directory) as entries:
            return [Path(entry.path) for entry in entries if entry.is_file(follow_symlinks=False)]

    def _record(self, message: str) -> None:
        self.logger.warning(message)
        if self.on_error is not None:
            self.on_error(message)


def _reason(exc: OSError) -> str:
    return exc.strerror or str(exc)

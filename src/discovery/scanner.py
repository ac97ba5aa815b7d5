"""
File discovery and metadata scanning utilities.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, Optional

from config import BackupJob
from discovery.categories import categorize
from discovery.walker import TreeWalker
from orchestrator.report import BackupReport
from utils import CancellationToken, is_hidden_or_system

INVALID_NAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')
DEFAULT_ROOT_LABEL = "Drive"


@dataclass(frozen=True)
class FileRecord:
    """Metadata for one discovered source file."""

    source_path: Path
    relative_path: Path
    extension: str
    size: int
    last_write_utc: datetime
    category: str
    is_photo: bool

    @property
    def file_name(self) -> str:
        return self.source_path.name


def root_label(root: Path) -> str:
    """Return a folder-safe identifier for a source root."""
    drive = root.drive
    if drive.endswith(":"):
        return drive.replace(":", "_")
    name = INVALID_NAME_CHARS.sub("_", root.name).strip()
    return name or DEFAULT_ROOT_LABEL


class Scanner:
    """Scan source trees and emit normalized file records."""

    def __init__(
        self,
        job: BackupJob,
        report: BackupReport,
        cancel_token: Optional[CancellationToken] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.job = job
        self.report = report
        self.cancel_token = cancel_token
        self.logger = logger or logging.getLogger("file_backup")
        self.skip_hidden = job.security.block_hidden_system_files
        self.ignored_names = {name.casefold() for name in job.ignore_directories}

    def scan(self) -> list[FileRecord]:
        """Index every configured source root, in order."""
        records: list[FileRecord] = []
        for root in self.job.sources:
            if self.cancel_token is not None:
                self.cancel_token.raise_if_cancelled()
            if not root.is_dir():
                message = f"Source does not exist: {root}"
                self.logger.warning(message)
                self.report.add_error(message)
                continue
            before = len(records)
            records.extend(self.scan_root(root))
            self.logger.info("Indexed %s files under %s", len(records) - before, root)
        return records

    def scan_root(self, root: Path) -> Iterator[FileRecord]:
        """Yield records for one root, applying skip rules."""
        walker = TreeWalker(
            continue_on_error=self.job.continue_on_access_denied,
            on_error=self.report.add_error,
            cancel_token=self.cancel_token,
            logger=self.logger,
        )
        label = root_label(root)
        for path in walker.walk(root):
            if self._is_excluded(path):
                continue
            record = self.build_record(path, root, label)
            if record is None:
                continue
            self.report.add_scanned()
            yield record

    def build_record(self, path: Path, root: Path, label: str) -> Optional[FileRecord]:
        """Create a FileRecord, or None when the file is skipped or unreadable."""
        try:
            stat = path.stat()
        except OSError as exc:
            message = f"Unable to read metadata: {path} ({exc.strerror or exc})"
            self.logger.warning(message)
            self.report.add_error(message)
            return None
        if self.skip_hidden and is_hidden_or_system(path, stat):
            return None
        relative = path.relative_to(root)
        if self.job.preserve_directory_pattern:
            relative = Path(label) / relative
        extension = path.suffix.lower()
        return FileRecord(
            source_path=path,
            relative_path=relative,
            extension=extension,
            size=stat.st_size,
            last_write_utc=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
            category=categorize(extension, path.name),
            is_photo=extension in self.job.photo_extensions,
        )

    def _is_excluded(self, path: Path) -> bool:
        """Return True when any parent directory is an ignored name."""
        if not self.ignored_names:
            return False
        return any(part.casefold() in self.ignored_names for part in path.parent.parts)

"""
Copy plan generation: where each discovered file should land.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from config import BackupJob
from discovery.scanner import FileRecord
from duplicates import DestinationIndex
from utils import CancellationToken

MERGED_TREE_NAME = "Merged-By-Project"
QUARANTINE_EXTS = {".exe", ".msi"}


@dataclass(frozen=True)
class CopyOperation:
    """One source file and every destination it fans out to."""

    record: FileRecord
    primary_destination: Path
    photo_destination: Optional[Path] = None
    quarantine_destination: Optional[Path] = None
    duplicate_hint: bool = False

    def fan_out(self) -> list[Path]:
        """Return the secondary destinations in copy order."""
        return [path for path in (self.photo_destination, self.quarantine_destination) if path is not None]


def build_copy_operation(job: BackupJob, record: FileRecord, index: DestinationIndex) -> CopyOperation:
    """Compute the destinations and duplicate hint for one record."""
    output_root = job.output_root
    file_name = record.file_name
    primary = output_root / MERGED_TREE_NAME / record.relative_path

    photo_destination = None
    if job.enable_photo_mirror and record.is_photo:
        stamp = record.last_write_utc
        photo_destination = output_root / job.photo_root / f"{stamp.year:04d}" / f"{stamp.month:02d}" / file_name

    quarantine_destination = None
    if job.security.quarantine_executables and record.extension in QUARANTINE_EXTS:
        quarantine_destination = (
            output_root / job.security.quarantine_folder / record.category / file_name
        )

    duplicate_hint = job.fast_duplicate_check and index.contains(record.size, file_name)
    return CopyOperation(
        record=record,
        primary_destination=primary,
        photo_destination=photo_destination,
        quarantine_destination=quarantine_destination,
        duplicate_hint=duplicate_hint,
    )


def build_copy_plan(
    job: BackupJob,
    records: Iterable[FileRecord],
    index: DestinationIndex,
    cancel_token: Optional[CancellationToken] = None,
) -> list[CopyOperation]:
    plan = []
    for record in records:
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()
        plan.append(build_copy_operation(job, record, index))
    return plan

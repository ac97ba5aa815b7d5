"""
Bounded-concurrency copy, duplicate resolution and verification.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
import threading
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable, Iterator, Optional

from config import BackupJob
from discovery.scanner import FileRecord
from duplicates import DuplicateResolver, Resolution
from hashing import Hasher
from orchestrator.report import BackupReport
from organization import CopyOperation
from utils import CancellationToken, ProgressReporter, ResourceMonitor

COPY_BUFFER_BYTES = 1024 * 1024
TEMP_PREFIX = ".fb-"
TEMP_SUFFIX = ".tmp"


class VerificationError(OSError):
    """Raised when a copied file does not match its source."""


def copy_file(
    source: Path,
    destination: Path,
    buffer_size: int = COPY_BUFFER_BYTES,
    preserve_timestamps: bool = True,
) -> None:
    """Stream ``source`` into a temporary sibling, then move it into place.

    The temporary name is short and fixed-length so any destination name
    the file system accepts can be written.
    """
    destination.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=destination.parent, prefix=TEMP_PREFIX, suffix=TEMP_SUFFIX)
    tmp = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as writer, source.open("rb") as reader:
            shutil.copyfileobj(reader, writer, length=buffer_size)
        shutil.copymode(source, tmp)
        if preserve_timestamps:
            stat = source.stat()
            os.utime(tmp, ns=(stat.st_atime_ns, stat.st_mtime_ns))
        os.replace(tmp, destination)
    except Exception:
        tmp.unlink(missing_ok=True)
        raise


class PathLocks:
    """Per-path mutexes, created on demand and dropped when unused."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, list] = {}

    @contextmanager
    def hold(self, path: Path) -> Iterator[None]:
        key = os.path.normcase(os.path.normpath(str(path)))
        with self._guard:
            entry = self._locks.setdefault(key, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[key]


class CopyOrchestrator:
    """Run copy operations on a bounded worker pool and aggregate the results.

    Resolution and copy for one computed destination path run under that
    path's lock. A renamed target such as ``x (1).txt`` is not locked itself,
    so callers should not plan another operation whose computed destination
    is literally that renamed name.
    """

    def __init__(
        self,
        job: BackupJob,
        report: BackupReport,
        hasher: Optional[Hasher] = None,
        progress: Optional[ProgressReporter] = None,
        monitor: Optional[ResourceMonitor] = None,
        logger: Optional[logging.Logger] = None,
        copy_logger: Optional[logging.Logger] = None,
    ) -> None:
        self.job = job
        self.report = report
        self.hasher = hasher or Hasher(job.hash_chunk_bytes)
        self.progress = progress or ProgressReporter(logger=logger)
        self.monitor = monitor
        self.logger = logger or logging.getLogger("file_backup")
        self.copy_logger = copy_logger or logging.getLogger("file_backup.copy")
        self.resolver = DuplicateResolver(job.duplicate_handling, self.hasher)
        self.path_locks = PathLocks()

    def run(self, operations: Iterable[CopyOperation], cancel_token: Optional[CancellationToken] = None) -> None:
        """Copy every operation, admitting at most ``max_parallel_copies`` at once.

        Once cancellation is requested no new operation starts; operations
        already running are allowed to finish.
        """
        workers = self.job.max_parallel_copies
        gate = threading.BoundedSemaphore(workers)

        def release(_future: object) -> None:
            gate.release()

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="backup-copy") as executor:
            for operation in operations:
                if cancel_token is not None and cancel_token.cancelled:
                    break
                if self.monitor is not None:
                    self.monitor.throttle(cancel_token)
                gate.acquire()
                if cancel_token is not None and cancel_token.cancelled:
                    gate.release()
                    break
                future = executor.submit(self._run_operation, operation, cancel_token)
                future.add_done_callback(release)
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()

    def _run_operation(self, operation: CopyOperation, cancel_token: Optional[CancellationToken]) -> None:
        if cancel_token is not None and cancel_token.cancelled:
            return
        record = operation.record
        try:
            self.copy_operation(operation)
        except Exception as exc:
            message = f"{record.source_path} -> {exc}"
            self.logger.error("Copy failed: %s", message)
            self.report.add_failure(message)
        self.progress.emit(lambda: self.report.snapshot("Copy", record.file_name))

    def copy_operation(self, operation: CopyOperation) -> None:
        """Copy one file to its primary destination and fan-out targets."""
        record = operation.record
        primary = self._place(
            record,
            operation.primary_destination,
            duplicate_hint=operation.duplicate_hint,
            verify=True,
        )
        if primary is None:
            return
        for destination in operation.fan_out():
            self._place(record, destination)
        self.report.add_copied(record.size)

    def _place(
        self,
        record: FileRecord,
        destination: Path,
        duplicate_hint: bool = False,
        verify: bool = False,
    ) -> Optional[Path]:
        """Resolve and copy to one destination; return None when skipped."""
        with self.path_locks.hold(destination):
            resolved = self.resolver.resolve(record.source_path, destination, duplicate_hint)
            if resolved.skipped:
                self.report.add_skipped()
                self.copy_logger.info("Duplicate skipped: %s -> %s", record.source_path, destination)
                return None
            target = resolved.path
            if resolved.outcome is Resolution.RENAME:
                self.logger.debug("Destination exists, renaming: %s -> %s", destination, target)
            if self.job.dry_run:
                self.copy_logger.info("Dry run: %s -> %s", record.source_path, target)
                return target
            copy_file(
                record.source_path,
                target,
                buffer_size=self.job.copy_buffer_bytes,
                preserve_timestamps=self.job.preserve_timestamps,
            )
            if verify and self.job.verify_copies:
                self.verify(record.source_path, target)
            self.copy_logger.info("Copied: %s -> %s", record.source_path, target)
            return target

    def verify(self, source: Path, destination: Path) -> None:
        """Compare size, then timestamps, then digests when timestamps differ."""
        source_stat = source.stat()
        destination_stat = destination.stat()
        if source_stat.st_size != destination_stat.st_size:
            raise VerificationError("Verification failed: size mismatch.")
        if source_stat.st_mtime_ns == destination_stat.st_mtime_ns:
            return
        if not self.job.hash_on_timestamp_mismatch:
            return
        if not self.hasher.content_equal(source, destination):
            raise VerificationError("Verification failed: checksum mismatch.")

"""
Backup engine entry point: index, plan, copy, report.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

from config import BackupJob
from discovery.scanner import Scanner
from duplicates import build_destination_index
from hashing import Hasher
from orchestrator.copier import CopyOrchestrator
from orchestrator.report import BackupReport
from organization import build_copy_plan
from utils import (
    CancellationToken,
    OperationCancelled,
    ProgressObserver,
    ProgressReporter,
    ResourceMonitor,
)


class BackupEngine:
    """Run one backup job from source indexing through copy verification."""

    def __init__(
        self,
        job: BackupJob,
        logger: Optional[logging.Logger] = None,
        performance_logger: Optional[logging.Logger] = None,
        copy_logger: Optional[logging.Logger] = None,
        hasher: Optional[Hasher] = None,
        monitor: Optional[ResourceMonitor] = None,
    ) -> None:
        self.job = job
        self.logger = logger or logging.getLogger("file_backup")
        self.performance_logger = performance_logger or logging.getLogger("file_backup.performance")
        self.copy_logger = copy_logger or logging.getLogger("file_backup.copy")
        self.hasher = hasher or Hasher(job.hash_chunk_bytes)
        self.monitor = monitor

    def run(
        self,
        progress: Optional[ProgressObserver] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> BackupReport:
        """Run the job and return its report.

        Raises ConfigurationError before touching the file system when the
        job is invalid. A cancelled run returns the partial report with
        ``cancelled`` set.
        """
        self.job.validate()
        reporter = ProgressReporter(progress, logger=self.logger, performance_logger=self.performance_logger)
        report = BackupReport()
        job = self.job

        self.logger.info(
            "Starting backup job %r: %s source(s) -> %s (policy=%s, dry_run=%s, workers=%s)",
            job.job_name,
            len(job.sources),
            job.output_root,
            job.duplicate_handling.value,
            job.dry_run,
            job.max_parallel_copies,
        )
        if not job.dry_run:
            job.output_root.mkdir(parents=True, exist_ok=True)
        reporter.emit(lambda: report.snapshot("Initialize", "Starting scan"))

        try:
            started = time.monotonic()
            records = Scanner(job, report, cancel_token, logger=self.logger).scan()
            self._log_phase("index", started, files=len(records))
            reporter.emit(lambda: report.snapshot("Index", f"Indexed {report.scanned_files} files"))

            started = time.monotonic()
            index = build_destination_index(job.output_root, cancel_token, logger=self.logger)
            operations = build_copy_plan(job, records, index, cancel_token)
            self._log_phase("plan", started, files=len(operations))

            started = time.monotonic()
            CopyOrchestrator(
                job,
                report,
                hasher=self.hasher,
                progress=reporter,
                monitor=self.monitor,
                logger=self.logger,
                copy_logger=self.copy_logger,
            ).run(operations, cancel_token)
            self._log_phase("copy", started, files=len(operations))
        except OperationCancelled:
            report.mark_cancelled()
            self.logger.warning("Backup cancelled: %s", report)
            reporter.emit(lambda: report.snapshot("Cancelled", "Backup cancelled"))
            return report

        reporter.emit(lambda: report.snapshot("Complete", "Backup complete"))
        self.logger.info("Backup complete. %s", report)
        return report

    def _log_phase(self, phase: str, started: float, files: int) -> None:
        self.performance_logger.info(
            "Phase %s finished in %.2fs (%s files)", phase, time.monotonic() - started, files
        )


def run_backup(
    job: BackupJob,
    progress: Optional[ProgressObserver] = None,
    cancel_token: Optional[CancellationToken] = None,
    logger: Optional[logging.Logger] = None,
) -> BackupReport:
    """Convenience wrapper around ``BackupEngine(job).run(...)``."""
    return BackupEngine(job, logger=logger).run(progress, cancel_token)

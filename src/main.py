"""
Command-line entry point for running a backup job.
"""

from __future__ import annotations

import argparse
import faulthandler
import json
import logging
import signal
import sys
import threading
import traceback
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Optional

from config import (
    AppConfig,
    BackupJob,
    ConfigurationError,
    looks_like_placeholder,
    resolve_config_path,
    write_starter_config,
)
from orchestrator.engine import BackupEngine
from orchestrator.report import BackupReport
from utils import CancellationToken, ResourceMonitor, setup_logging
from utils.instance_guard import InstanceLock, InstanceLockError, multi_instance_allowed

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_FAILED_FILES = 2
EXIT_CANCELLED = 130


def _enable_crash_diagnostics(logs_dir: Path) -> None:
    logs_dir.mkdir(parents=True, exist_ok=True)
    crash_log = logs_dir / f"crash_traceback_{datetime.utcnow().strftime('%Y%m%d')}.log"
    crash_stream = crash_log.open("a", encoding="utf-8")
    faulthandler.enable(file=crash_stream, all_threads=True)

    def _hook(exc_type, exc, tb):
        with crash_log.open("a", encoding="utf-8") as handle:
            handle.write("\n")
            handle.write(datetime.utcnow().isoformat() + " Unhandled exception\n")
            traceback.print_exception(exc_type, exc, tb, file=handle)
        sys.__excepthook__(exc_type, exc, tb)

    sys.excepthook = _hook

    def _thread_hook(args):
        _hook(args.exc_type, args.exc_value, args.exc_traceback)

    threading.excepthook = _thread_hook


def write_report(path: Path, job: BackupJob, report: BackupReport, started_at: str) -> Path:
    payload = {
        "job_name": job.job_name,
        "started_at": started_at,
        "finished_at": datetime.utcnow().isoformat(),
        "sources": [str(source) for source in job.sources],
        "output_root": str(job.output_root),
        "duplicate_handling": job.duplicate_handling.value,
        "dry_run": job.dry_run,
        "summary": report.to_dict(),
    }
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    return path


def exit_code_for(report: BackupReport) -> int:
    if report.cancelled:
        return EXIT_CANCELLED
    if report.failed_files > 0:
        return EXIT_FAILED_FILES
    return EXIT_OK


def _print_summary(job: BackupJob, report: BackupReport) -> None:
    print(f"Job: {job.job_name}")
    print(report)
    if report.errors:
        print("Errors:")
        for error in report.errors:
            print(f" - {error}")


def run_job(
    config: AppConfig,
    dry_run: bool = False,
    report_path: Optional[Path] = None,
    logger: Optional[logging.Logger] = None,
    cancel_token: Optional[CancellationToken] = None,
) -> int:
    logs_root = config.resolve_path("paths", "logs", default="logs")
    loggers = setup_logging(logs_root)
    logger = logger or loggers["main"]

    try:
        job = BackupJob.from_config(config)
        if dry_run:
            job = replace(job, dry_run=True)
        job.validate()
    except ConfigurationError as exc:
        logger.error("Invalid configuration: %s", exc)
        print(f"Configuration error: {exc}", file=sys.stderr)
        return EXIT_FATAL

    engine = BackupEngine(
        job,
        logger=logger,
        performance_logger=loggers["performance"],
        copy_logger=loggers["copy"],
        monitor=ResourceMonitor.from_config(config, logger=logger),
    )
    started_at = datetime.utcnow().isoformat()
    try:
        report = engine.run(cancel_token=cancel_token)
    except Exception as exc:
        logger.exception("Backup failed")
        print(f"Fatal error: {exc}", file=sys.stderr)
        return EXIT_FATAL

    final_report_path = report_path or (
        logs_root / f"backup_report_{datetime.utcnow().strftime('%Y%m%d_%H%M%S')}.json"
    )
    try:
        write_report(final_report_path, job, report, started_at)
        logger.info("Backup report written: %s", final_report_path)
    except OSError as exc:
        logger.warning("Report write failed: %s", exc)
    _print_summary(job, report)
    return exit_code_for(report)


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Back up source trees into a merged destination.")
    parser.add_argument("config", nargs="?", default=None, help="Backup config YAML path")
    parser.add_argument("--dry-run", action="store_true", help="Plan and count without copying")
    parser.add_argument("--report", default=None, help="Report JSON output path")
    args = parser.parse_args(argv)

    config_path = resolve_config_path(Path(args.config) if args.config else None)
    if not config_path.exists():
        if looks_like_placeholder(args.config or config_path):
            print(
                "The provided config path looks like a placeholder. Pass a real .yaml file path.",
                file=sys.stderr,
            )
            return EXIT_FATAL
        try:
            write_starter_config(config_path)
        except OSError as exc:
            print(f"Unable to create starter config at '{config_path}': {exc}", file=sys.stderr)
            return EXIT_FATAL
        print(f"Created starter config at {config_path}. Edit values and run again.")
        return EXIT_OK

    try:
        config = AppConfig.load(config_path)
    except (OSError, ValueError) as exc:
        print(f"Unable to load config '{config_path}': {exc}", file=sys.stderr)
        return EXIT_FATAL

    logs_root = config.resolve_path("paths", "logs", default="logs")
    _enable_crash_diagnostics(logs_root)

    cancel_token = CancellationToken()

    def _cancel(_signum, _frame) -> None:
        cancel_token.cancel()

    lock = InstanceLock(logs_root / "file_backup.lock")
    try:
        if not multi_instance_allowed():
            lock.acquire()
    except InstanceLockError as exc:
        print(
            f"ERROR: {exc}\nSet FILE_BACKUP_ALLOW_MULTI_INSTANCE=1 to override.",
            file=sys.stderr,
        )
        return EXIT_FATAL

    previous_handler = signal.signal(signal.SIGINT, _cancel)
    try:
        return run_job(
            config,
            dry_run=args.dry_run,
            report_path=Path(args.report) if args.report else None,
            cancel_token=cancel_token,
        )
    finally:
        signal.signal(signal.SIGINT, previous_handler)
        lock.release()


if __name__ == "__main__":
    raise SystemExit(main())

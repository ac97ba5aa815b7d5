"""
Logging configuration for the backup engine.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Dict

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _dedicated_logger(name: str, path: Path, level: int, formatter: logging.Formatter) -> logging.Logger:
    """Logger that writes only to its own file and does not reach the console."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.FileHandler(path, encoding="utf-8")
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.propagate = False
    logger.setLevel(level)
    return logger


def setup_logging(log_dir: Path, verbose: bool = False) -> Dict[str, logging.Logger]:
    """Initialize loggers and return a mapping of named loggers.

    ``main`` logs to the console, the dated backup log and the error log.
    ``performance`` records phase timings and progress snapshots; ``copy``
    records one line per placed or skipped file.
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    date_stamp = datetime.utcnow().strftime("%Y%m%d")
    formatter = logging.Formatter(LOG_FORMAT)
    level = logging.DEBUG if verbose else logging.INFO

    base_logger = logging.getLogger("file_backup")
    if not base_logger.handlers:
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(formatter)
        base_logger.addHandler(stream_handler)

        file_handler = logging.FileHandler(log_dir / f"backup_log_{date_stamp}.log", encoding="utf-8")
        file_handler.setFormatter(formatter)
        base_logger.addHandler(file_handler)

        error_handler = logging.FileHandler(log_dir / f"error_log_{date_stamp}.log", encoding="utf-8")
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(formatter)
        base_logger.addHandler(error_handler)
    base_logger.setLevel(level)

    return {
        "main": base_logger,
        "performance": _dedicated_logger(
            "file_backup.performance", log_dir / f"performance_log_{date_stamp}.log", level, formatter
        ),
        "copy": _dedicated_logger("file_backup.copy", log_dir / f"copy_log_{date_stamp}.log", level, formatter),
    }

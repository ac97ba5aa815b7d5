"""
Utility helpers for the backup engine.
"""

from .cancellation import CancellationToken, OperationCancelled
from .file_attributes import is_hidden_or_system
from .logging_setup import setup_logging
from .progress import ProgressObserver, ProgressReporter, ProgressSnapshot
from .resource_monitor import ResourceMonitor

__all__ = [
    "setup_logging",
    "ResourceMonitor",
    "ProgressReporter",
    "ProgressSnapshot",
    "ProgressObserver",
    "CancellationToken",
    "OperationCancelled",
    "is_hidden_or_system",
]

"""
Configuration package for the backup engine.
"""

from .job import BackupJob, ConfigurationError, DuplicateHandling, SecurityProfile
from .settings import AppConfig, looks_like_placeholder, resolve_config_path, write_starter_config

__all__ = [
    "AppConfig",
    "BackupJob",
    "ConfigurationError",
    "DuplicateHandling",
    "SecurityProfile",
    "looks_like_placeholder",
    "resolve_config_path",
    "write_starter_config",
]

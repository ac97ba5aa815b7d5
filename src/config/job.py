"""
Typed backup job definition built from the YAML configuration.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, Optional

import psutil

from .settings import AppConfig

DEFAULT_IGNORE_DIRECTORIES = ("$Recycle.Bin", "System Volume Information")
DEFAULT_PHOTO_EXTENSIONS = (
    ".jpg",
    ".jpeg",
    ".png",
    ".tif",
    ".tiff",
    ".heic",
    ".webp",
    ".gif",
    ".bmp",
    ".raw",
    ".dng",
)


class ConfigurationError(ValueError):
    """Raised when a backup job cannot be run as configured."""


class DuplicateHandling(Enum):
    """Rule used when a destination file already exists."""

    SKIP_BY_SIZE_AND_NAME = "skip_by_size_and_name"
    SKIP_ONLY_WHEN_CONTENT_MATCHES = "skip_only_when_content_matches"
    KEEP_BOTH_WITH_RENAME = "keep_both_with_rename"

    @classmethod
    def parse(cls, value: Any) -> "DuplicateHandling":
        """Accept enum members, snake_case values or CamelCase names."""
        if isinstance(value, cls):
            return value
        key = re.sub(r"[^a-z]", "", str(value).lower())
        for member in cls:
            if member.value.replace("_", "") == key:
                return member
        raise ConfigurationError(f"Unknown duplicate handling policy: {value}")


def default_parallel_copies() -> int:
    return max(2, psutil.cpu_count(logical=True) or 1)


def normalize_extension(value: str) -> str:
    ext = str(value).strip().lower()
    if ext and not ext.startswith("."):
        ext = f".{ext}"
    return ext


@dataclass(frozen=True)
class SecurityProfile:
    """File-level safety rules applied while indexing and planning."""

    block_hidden_system_files: bool = False
    quarantine_executables: bool = True
    quarantine_folder: str = "Quarantine"


@dataclass(frozen=True)
class BackupJob:
    """Read-only description of one backup run."""

    sources: tuple[Path, ...]
    output_root: Optional[Path]
    job_name: str = "Default Backup Job"
    duplicate_handling: DuplicateHandling = DuplicateHandling.SKIP_ONLY_WHEN_CONTENT_MATCHES
    enable_photo_mirror: bool = True
    photo_root: str = "Photo-Database"
    fast_duplicate_check: bool = True
    verify_copies: bool = True
    hash_on_timestamp_mismatch: bool = True
    preserve_directory_pattern: bool = True
    preserve_timestamps: bool = True
    continue_on_access_denied: bool = True
    dry_run: bool = False
    max_parallel_copies: int = field(default_factory=default_parallel_copies)
    security: SecurityProfile = field(default_factory=SecurityProfile)
    ignore_directories: tuple[str, ...] = DEFAULT_IGNORE_DIRECTORIES
    photo_extensions: frozenset[str] = frozenset(DEFAULT_PHOTO_EXTENSIONS)
    hash_chunk_bytes: int = 64 * 1024
    copy_buffer_bytes: int = 1024 * 1024

    def __post_init__(self) -> None:
        object.__setattr__(self, "sources", tuple(Path(source) for source in self.sources))
        if self.output_root is not None and str(self.output_root).strip():
            object.__setattr__(self, "output_root", Path(self.output_root))
        else:
            object.__setattr__(self, "output_root", None)
        object.__setattr__(self, "duplicate_handling", DuplicateHandling.parse(self.duplicate_handling))
        object.__setattr__(self, "max_parallel_copies", max(1, int(self.max_parallel_copies)))
        object.__setattr__(self, "ignore_directories", tuple(self.ignore_directories))
        object.__setattr__(
            self,
            "photo_extensions",
            frozenset(normalize_extension(ext) for ext in self.photo_extensions),
        )

    def validate(self) -> None:
        """Raise ConfigurationError unless the job has sources and an output root."""
        if not self.sources:
            raise ConfigurationError("At least one source root is required.")
        if self.output_root is None:
            raise ConfigurationError("An output root is required.")

    @classmethod
    def from_config(cls, config: AppConfig) -> "BackupJob":
        """Build a job from the ``backup`` and ``security`` config sections."""

        def option(key: str, default: Any) -> Any:
            return config.get("backup", key, default=default)

        output_value = option("output_root", None)
        output_root = config.absolute(output_value) if output_value and str(output_value).strip() else None
        security = SecurityProfile(
            block_hidden_system_files=bool(
                config.get("security", "block_hidden_system_files", default=False)
            ),
            quarantine_executables=bool(
                config.get("security", "quarantine_executables", default=True)
            ),
            quarantine_folder=str(config.get("security", "quarantine_folder", default="Quarantine")),
        )
        return cls(
            sources=tuple(config.absolute(source) for source in _as_list(option("sources", []))),
            output_root=output_root,
            job_name=str(config.get("job_name", default="Default Backup Job")),
            duplicate_handling=DuplicateHandling.parse(
                option("duplicate_handling", DuplicateHandling.SKIP_ONLY_WHEN_CONTENT_MATCHES)
            ),
            enable_photo_mirror=bool(option("enable_photo_mirror", True)),
            photo_root=str(option("photo_root", "Photo-Database")),
            fast_duplicate_check=bool(option("fast_duplicate_check", True)),
            verify_copies=bool(option("verify_copies", True)),
            hash_on_timestamp_mismatch=bool(option("hash_on_timestamp_mismatch", True)),
            preserve_directory_pattern=bool(option("preserve_directory_pattern", True)),
            preserve_timestamps=bool(option("preserve_timestamps", True)),
            continue_on_access_denied=bool(option("continue_on_access_denied", True)),
            dry_run=bool(option("dry_run", False)),
            max_parallel_copies=_as_int(
                option("max_parallel_copies", default_parallel_copies()), "backup.max_parallel_copies"
            ),
            security=security,
            ignore_directories=tuple(
                str(name) for name in _as_list(option("ignore_directories", DEFAULT_IGNORE_DIRECTORIES))
            ),
            photo_extensions=frozenset(
                str(ext) for ext in _as_list(option("photo_extensions", DEFAULT_PHOTO_EXTENSIONS))
            ),
            hash_chunk_bytes=_as_int(
                config.get("hashing", "chunk_bytes", default=64 * 1024), "hashing.chunk_bytes"
            ),
            copy_buffer_bytes=_as_int(
                config.get("copy", "buffer_bytes", default=1024 * 1024), "copy.buffer_bytes"
            ),
        )


def _as_int(value: Any, key: str) -> int:
    if isinstance(value, bool):
        raise ConfigurationError(f"Invalid value for {key}: {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid value for {key}: {value!r}") from exc


def _as_list(value: Any) -> Iterable[Any]:
    if value is None:
        return []
    if isinstance(value, (str, Path)):
        return [value]
    return list(value)

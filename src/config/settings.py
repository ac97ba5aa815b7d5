"""
Configuration loader and helpers for the backup engine.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

import yaml

DEFAULT_CONFIG_PATH = Path("backup-config.yaml")
ENV_CONFIG_PATH = "FILE_BACKUP_CONFIG"
PLACEHOLDER_MARKERS = ("path/to/", "your-backup-config")


@dataclass(frozen=True)
class AppConfig:
    """Container for raw configuration data and path helpers."""

    root_dir: Path
    raw: Dict[str, Any]

    @classmethod
    def load(cls, path: Path | None = None) -> "AppConfig":
        """Load configuration from YAML and normalize the root directory."""
        config_path = resolve_config_path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        with config_path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file must contain a mapping: {config_path}")
        root_dir = config_path.parent
        return cls(root_dir=root_dir, raw=data)

    def get(self, *keys: str, default: Any = None) -> Any:
        """Retrieve nested configuration values with an optional default."""
        node: Any = self.raw
        for key in keys:
            if not isinstance(node, dict) or key not in node:
                return default
            node = node[key]
        return node

    def resolve_path(self, *keys: str, default: str | None = None) -> Path:
        """Resolve a path from configuration keys to an absolute Path."""
        value = self.get(*keys, default=default)
        if value is None:
            raise KeyError(f"Missing config path for {'.'.join(keys)}")
        return self.absolute(value)

    def absolute(self, value: str | os.PathLike) -> Path:
        """Anchor a relative path at the config file's directory."""
        path = Path(value).expanduser()
        if not path.is_absolute():
            path = (self.root_dir / path).resolve()
        return path


def resolve_config_path(path: Path | None = None) -> Path:
    """Pick the config path from an explicit value, the environment, or the default."""
    config_value = os.environ.get(ENV_CONFIG_PATH)
    config_path = path
    if config_path is None:
        config_path = Path(config_value) if config_value else DEFAULT_CONFIG_PATH
    config_path = config_path.expanduser()
    if not config_path.is_absolute():
        config_path = (Path.cwd() / config_path).resolve()
    return config_path


def looks_like_placeholder(path: Path | str) -> bool:
    """Return True for example paths copied verbatim from documentation."""
    normalized = str(path).replace("\\", "/").lower()
    return any(marker in normalized for marker in PLACEHOLDER_MARKERS)


def starter_config() -> Dict[str, Any]:
    """Return a starter configuration document with safe defaults."""
    return {
        "job_name": "My Backup Job",
        "backup": {
            "sources": ["/data/source-one", "/data/source-two"],
            "output_root": "/mnt/backup/file_backup_output",
            "duplicate_handling": "skip_only_when_content_matches",
            "enable_photo_mirror": True,
            "photo_root": "Photo-Database",
            "fast_duplicate_check": True,
            "verify_copies": True,
            "hash_on_timestamp_mismatch": True,
            "preserve_directory_pattern": True,
            "preserve_timestamps": True,
            "continue_on_access_denied": True,
            "dry_run": True,
        },
        "security": {
            "block_hidden_system_files": False,
            "quarantine_executables": True,
            "quarantine_folder": "Quarantine",
        },
        "paths": {"logs": "logs"},
    }


def write_starter_config(path: Path) -> Path:
    """Write a starter YAML document to ``path`` and return it."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        yaml.safe_dump(starter_config(), handle, sort_keys=False)
    return path

"""
Detect hidden and system files across platforms.
"""

from __future__ import annotations

import os
import stat as stat_module
from pathlib import Path
from typing import Optional

# Windows file attribute flags
FILE_ATTRIBUTE_HIDDEN = getattr(stat_module, "FILE_ATTRIBUTE_HIDDEN", 0x00000002)
FILE_ATTRIBUTE_SYSTEM = getattr(stat_module, "FILE_ATTRIBUTE_SYSTEM", 0x00000004)


def is_hidden_or_system(path: Path, stat_result: Optional[os.stat_result] = None) -> bool:
    """Return True for files flagged hidden/system (Windows) or dot-files elsewhere."""
    if os.name != "nt":
        return path.name.startswith(".")
    if stat_result is None:
        try:
            stat_result = path.stat()
        except OSError:
            return False
    attrs = getattr(stat_result, "st_file_attributes", 0)
    return bool(attrs & (FILE_ATTRIBUTE_HIDDEN | FILE_ATTRIBUTE_SYSTEM))

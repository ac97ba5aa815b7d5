"""
Source discovery: tree walking, skip rules and file classification.
"""

from .categories import categorize
from .scanner import FileRecord, Scanner, root_label
from .walker import TreeWalker

__all__ = ["FileRecord", "Scanner", "TreeWalker", "categorize", "root_label"]

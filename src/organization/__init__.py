"""
Copy planning utilities.
"""

from .plan import MERGED_TREE_NAME, CopyOperation, build_copy_operation, build_copy_plan

__all__ = ["MERGED_TREE_NAME", "CopyOperation", "build_copy_operation", "build_copy_plan"]

"""
Content hashing utilities.
"""

from .hasher import Hasher

__all__ = ["Hasher"]

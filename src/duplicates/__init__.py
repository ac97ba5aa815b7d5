"""
Destination duplicate detection and resolution.
"""

from .index import DestinationIndex, build_destination_index
from .resolver import DuplicateResolver, Resolution, ResolvedDestination, next_available_path

__all__ = [
    "DestinationIndex",
    "DuplicateResolver",
    "Resolution",
    "ResolvedDestination",
    "build_destination_index",
    "next_available_path",
]

"""File retrieval strategies for the copy engine.

This package contains the strategy interface and the concrete ways a
referenced file can be produced: from disk, from the bundled content
archives, or from a level archive.
"""

from .archive import ContentArchiveStrategy, LevelArchiveStrategy, ZipArchiveReader
from .base import ArchiveReader, RetrievalStrategy
from .filesystem import DirectCopyStrategy

__all__ = [
    "ArchiveReader",
    "RetrievalStrategy",
    "DirectCopyStrategy",
    "ContentArchiveStrategy",
    "LevelArchiveStrategy",
    "ZipArchiveReader",
]

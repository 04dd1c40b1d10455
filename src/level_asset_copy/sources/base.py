"""Base abstractions for file retrieval.

A file referenced by a material may live on disk, inside the game's
bundled content archives, or inside a level archive. Each location is a
``RetrievalStrategy``; the file copy handler asks them in order and keeps
the first result.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Protocol, runtime_checkable

LINK_EXTENSION = ".link"


@runtime_checkable
class ArchiveReader(Protocol):
    """Protocol for reading one entry out of a compressed archive.

    Any object with a matching ``read`` method can be used, which keeps
    archive access mockable in tests.
    """

    def read(self, archive: Path, entry: str) -> bytes | None:
        """Return the entry's bytes, or None if the archive or entry is absent."""
        ...


class RetrievalStrategy(ABC):
    """Abstract base class for a single way of producing a file."""

    name = "strategy"

    @abstractmethod
    def retrieve(self, source: Path, dest: Path) -> Path | None:
        """Try to produce ``source`` at ``dest``.

        Args:
            source: Filesystem path the file is expected at
            dest: Where the file should be written

        Returns:
            The path actually written (the extension may differ from
            ``dest``), or None if this strategy could not find the file
        """
        pass


def split_after_levels(path: Path | str) -> str | None:
    """Return the part of ``path`` after its last ``levels`` segment.

    Example:
        "/game/levels/italy/art/a.png" -> "italy/art/a.png"

    Returns:
        Forward-slash relative path, or None if there is no ``levels`` segment
    """
    normalized = str(path).replace("\\", "/")
    lowered = normalized.lower()
    marker = "/levels/"
    index = lowered.rfind(marker)
    if index < 0:
        if lowered.startswith("levels/"):
            return normalized[len("levels/"):]
        return None
    return normalized[index + len(marker):]


def write_bytes(dest: Path, data: bytes) -> Path:
    dest.parent.mkdir(parents=True, exist_ok=True)
    dest.write_bytes(data)
    return dest

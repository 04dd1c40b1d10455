"""Single-file copy with archive fallback.

``FileCopyHandler`` asks an ordered list of retrieval strategies for a
file and keeps the first one that produces it. Only when every strategy
comes back empty is the file considered missing.
"""

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from .errors import FileRetrievalError
from .sources import ContentArchiveStrategy, DirectCopyStrategy, LevelArchiveStrategy, RetrievalStrategy

if TYPE_CHECKING:
    from .core.context import CopyContext

logger = logging.getLogger(__name__)


class FileCopyHandler:
    """Copies one file, falling back to archive extraction.

    Example:
        >>> handler = FileCopyHandler.from_context(context)
        >>> written = handler.copy(Path("/game/levels/italy/art/a.png"), target)
    """

    def __init__(self, strategies: Sequence[RetrievalStrategy]):
        """Initialize the handler.

        Args:
            strategies: Retrieval strategies, asked in order
        """
        self.strategies = list(strategies)

    @classmethod
    def from_context(cls, context: "CopyContext") -> "FileCopyHandler":
        """Build the default chain: disk, content archive, level archive."""
        settings = context.settings
        return cls(
            [
                DirectCopyStrategy(),
                ContentArchiveStrategy(settings.content_dir, context.archive_reader),
                LevelArchiveStrategy(settings.level_archive_dir, context.archive_reader),
            ]
        )

    def copy(self, source: Path | str, dest: Path | str) -> Path:
        """Copy ``source`` to ``dest``.

        Args:
            source: Filesystem path of the file to copy
            dest: Destination path; parent directories are created

        Returns:
            The path actually written. Archive fallbacks may change the
            extension (``.dds`` instead of ``.png``, or an added ``.link``).

        Raises:
            FileRetrievalError: If no strategy could produce the file
        """
        source = Path(source)
        dest = Path(dest)

        for strategy in self.strategies:
            written = strategy.retrieve(source, dest)
            if written is not None:
                logger.debug("Copied %s -> %s via %s", source, written, strategy.name)
                return written

        raise FileRetrievalError(source, [strategy.name for strategy in self.strategies])

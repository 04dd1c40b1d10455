"""Plain filesystem retrieval."""

import shutil
from pathlib import Path

from .base import RetrievalStrategy


class DirectCopyStrategy(RetrievalStrategy):
    """Copy the file straight from disk when it exists."""

    name = "filesystem"

    def retrieve(self, source: Path, dest: Path) -> Path | None:
        if not source.is_file():
            return None

        dest.parent.mkdir(parents=True, exist_ok=True)
        if source.resolve() != dest.resolve():
            shutil.copyfile(source, dest)
        return dest

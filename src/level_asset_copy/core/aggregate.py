"""Read-modify-write access to aggregate JSON files.

An aggregate file is one JSON object whose keys are record keys. Outside
a batch every change is a full read-modify-write of the file. Inside a
batch the parsed documents are held in memory and each touched file is
written once when the batch ends; every write is a complete document.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from . import jsontree
from .jsontree import JsonObject

logger = logging.getLogger(__name__)


class AggregateStore:
    """Loads and saves aggregate JSON files, optionally batching writes."""

    def __init__(self) -> None:
        self._depth = 0
        self._cache: dict[Path, JsonObject] = {}
        self._dirty: set[Path] = set()

    @property
    def in_batch(self) -> bool:
        return self._depth > 0

    def begin_batch(self) -> None:
        self._depth += 1

    def end_batch(self) -> None:
        """Close the innermost batch; the outermost one writes pending files."""
        if self._depth == 0:
            return
        self._depth -= 1
        if self._depth == 0:
            self.flush()

    @contextmanager
    def batch(self) -> Iterator["AggregateStore"]:
        self.begin_batch()
        try:
            yield self
        finally:
            self.end_batch()

    def flush(self) -> None:
        for path in sorted(self._dirty):
            jsontree.write_file(path, self._cache[path])
            logger.debug("Wrote aggregate file %s", path)
        self._dirty.clear()
        self._cache.clear()

    def exists(self, path: Path) -> bool:
        return path in self._cache or path.is_file()

    def load(self, path: Path) -> JsonObject:
        """Return the parsed document, ``{}`` if the file does not exist.

        Raises:
            AggregateParseError: If the file exists but cannot be parsed
        """
        path = Path(path)
        if path in self._cache:
            return self._cache[path]

        document: JsonObject = jsontree.load_object_file(path) if path.is_file() else {}
        if self.in_batch:
            self._cache[path] = document
        return document

    def save(self, path: Path, document: JsonObject) -> None:
        path = Path(path)
        if self.in_batch:
            self._cache[path] = document
            self._dirty.add(path)
        else:
            jsontree.write_file(path, document)


def find_record(
    document: JsonObject, name: str, fields: tuple[str, ...] = ("name",)
) -> tuple[str, JsonObject] | None:
    """Find the first record whose ``fields`` contain ``name`` exactly.

    Returns:
        (key, record) or None
    """
    if not name:
        return None
    for key, record in document.items():
        if not isinstance(record, dict):
            continue
        for field_name in fields:
            value = record.get(field_name)
            if isinstance(value, str) and value and value == name:
                return key, record
    return None


def has_display_name(document: JsonObject, name: str) -> bool:
    return find_record(document, name, ("name",)) is not None

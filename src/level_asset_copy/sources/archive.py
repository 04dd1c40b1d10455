"""Retrieval from compressed content and level archives.

The game ships most shared assets inside zip archives under its content
folder, and stock levels inside ``<level>.zip``. Material records still
reference those files by their unpacked path, so when a file is missing on
disk it is pulled out of the matching archive instead.
"""

import logging
import zipfile
from pathlib import Path

from .base import LINK_EXTENSION, ArchiveReader, RetrievalStrategy, split_after_levels, write_bytes

logger = logging.getLogger(__name__)

# Extensions tried, in order, when a level archive lacks the exact entry
FALLBACK_IMAGE_EXTENSIONS = (".png", ".dds", ".jpg", ".jpeg")
KNOWN_EXTENSIONS = (".dds", ".png", ".jpg", ".jpeg", LINK_EXTENSION)


class ZipArchiveReader:
    """ArchiveReader backed by ``zipfile`` with case-insensitive entry lookup."""

    def __init__(self) -> None:
        self._indexes: dict[Path, dict[str, str]] = {}

    def _index(self, archive: Path) -> dict[str, str]:
        if archive not in self._indexes:
            with zipfile.ZipFile(archive, "r") as zf:
                self._indexes[archive] = {name.lower(): name for name in zf.namelist()}
        return self._indexes[archive]

    def read(self, archive: Path, entry: str) -> bytes | None:
        if not archive.is_file():
            return None

        try:
            index = self._index(archive)
        except zipfile.BadZipFile:
            logger.warning("Not a valid zip archive: %s", archive)
            return None

        name = index.get(entry.replace("\\", "/").lstrip("/").lower())
        if name is None:
            return None

        with zipfile.ZipFile(archive, "r") as zf:
            return zf.read(name)


def _change_extension(entry: str, extension: str) -> str:
    head, sep, tail = entry.rpartition("/")
    stem = tail.rsplit(".", 1)[0] if "." in tail else tail
    return f"{head}{sep}{stem}{extension}"


def level_archive_candidates(entry: str) -> list[str]:
    """Entries to try, in order, for a file inside a level archive.

    Example:
        "levels/x/art/grass.png" ->
        ["levels/x/art/grass.png", "levels/x/art/grass.png.link",
         "levels/x/art/grass.dds", "levels/x/art/grass.dds.link", ...]
    """
    candidates: list[str] = []
    if entry.lower().endswith(LINK_EXTENSION):
        candidates.append(entry)
        entry = entry[: -len(LINK_EXTENSION)]

    tail = entry.rpartition("/")[2]
    if "." not in tail:
        entry = entry + ".png"
    elif not entry.lower().endswith(KNOWN_EXTENSIONS):
        # Meshes and other non-image files have no alternates
        candidates.extend([entry, entry + LINK_EXTENSION])
        return list(dict.fromkeys(candidates))

    for extension in FALLBACK_IMAGE_EXTENSIONS:
        candidate = _change_extension(entry, extension)
        candidates.append(candidate)
        candidates.append(candidate + LINK_EXTENSION)

    # Keep order, drop repeats
    return list(dict.fromkeys(candidates))


class ContentArchiveStrategy(RetrievalStrategy):
    """Extract shared ``levels/assets/...`` files from the content archives.

    The archive is found by walking the content folder one path segment at
    a time until ``<segment>.zip`` exists; the full relative path is then
    the entry name inside that archive.
    """

    name = "content archive"

    def __init__(self, content_dir: Path | None, reader: ArchiveReader):
        self.content_dir = content_dir
        self.reader = reader

    def retrieve(self, source: Path, dest: Path) -> Path | None:
        if self.content_dir is None:
            return None

        relative = split_after_levels(source)
        if not relative or not relative.lower().startswith("assets"):
            return None

        current = self.content_dir
        for segment in relative.split("/"):
            archive = current / f"{segment}.zip"
            if archive.is_file():
                data = self.reader.read(archive, relative)
                return write_bytes(dest, data) if data is not None else None
            if not (current / segment).is_dir():
                break
            current = current / segment

        return None


class LevelArchiveStrategy(RetrievalStrategy):
    """Extract a file from ``<level>.zip``, trying alternate image extensions."""

    name = "level archive"

    def __init__(self, archive_dir: Path | None, reader: ArchiveReader):
        self.archive_dir = archive_dir
        self.reader = reader

    def retrieve(self, source: Path, dest: Path) -> Path | None:
        if self.archive_dir is None:
            return None

        relative = split_after_levels(source)
        if not relative:
            return None

        level_name = relative.split("/", 1)[0]
        archive = self.archive_dir / f"{level_name}.zip"
        if not archive.is_file():
            logger.debug("No level archive at %s", archive)
            return None

        for entry in level_archive_candidates(f"levels/{relative}"):
            data = self.reader.read(archive, entry)
            if data is None:
                continue
            return write_bytes(self._destination_for(entry, dest), data)

        return None

    @staticmethod
    def _destination_for(entry: str, dest: Path) -> Path:
        """Match the written file's extension to the entry that was found."""
        if entry.lower().endswith(LINK_EXTENSION):
            # target.png -> target.png.link, keeping the full extension chain
            if dest.suffix.lower() == LINK_EXTENSION:
                return dest
            return dest.with_name(dest.name + LINK_EXTENSION)
        return dest.with_suffix(Path(entry).suffix)

"""Groundcover placement lines and the destination vegetation file.

A placement is kept as its full JSON tree; only the fields listed in
``PLACEMENT_FIELDS`` and ``VARIANT_FIELDS`` are lifted into a typed
``VegetationPlacement``. Everything else in the line travels untouched.
"""

import logging
import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path

from ..core import jsontree
from ..core.jsontree import JsonObject
from ..core.notify import NoticeReporter
from ..core.types import GROUNDCOVER_CLASS, Variant, VegetationPlacement
from ..core.validator import validate_placement_with_error_details
from ..errors import AggregateParseError, PlacementValidationError

logger = logging.getLogger(__name__)

# JSON field -> VegetationPlacement attribute
PLACEMENT_FIELDS = {"name": "name", "material": "material"}
VARIANTS_FIELD = "Types"
# JSON field -> Variant attribute
VARIANT_FIELDS = {"layer": "layer", "shapeFilename": "shape_filename"}

VEGETATION_FILE_NAME = "items.level.json"
DEFAULT_VEGETATION_DIRS = (
    ("main", "MissionGroup", "vegetation"),
    ("main", "MissionGroup", "Level_object", "vegetation"),
    ("main", "vegetation"),
)
_VEGETATION_CLASS = re.compile(r'"class"\s*:\s*"(GroundCover|Forest)"')


def variants_of(tree: JsonObject) -> list[JsonObject]:
    """The placement's Variant entries (the live list, for editing)."""
    types = tree.get(VARIANTS_FIELD)
    if not isinstance(types, list):
        return []
    return [entry for entry in types if isinstance(entry, dict)]


def project(tree: JsonObject) -> VegetationPlacement:
    """Build the typed projection of a placement tree.

    Raises:
        PlacementValidationError: If the tree does not match the placement schema
    """
    is_valid, error = validate_placement_with_error_details(tree)
    if not is_valid:
        raise PlacementValidationError(error)

    values = {attribute: jsontree.get_str(tree, key) for key, attribute in PLACEMENT_FIELDS.items()}
    variants = tuple(
        Variant(**{attribute: jsontree.get_str(entry, key) for key, attribute in VARIANT_FIELDS.items()})
        for entry in variants_of(tree)
    )
    return VegetationPlacement(variants=variants, **values)


@dataclass(frozen=True)
class PlacementLine:
    """One scanned groundcover line: raw text, full tree and typed projection."""

    raw: str
    tree: JsonObject
    placement: VegetationPlacement

    @classmethod
    def parse(cls, raw: str) -> "PlacementLine":
        """Parse one line.

        Raises:
            AggregateParseError: If the line is not JSON
            PlacementValidationError: If it is not a placement record
        """
        tree = jsontree.loads(raw, origin="groundcover line")
        if not isinstance(tree, dict):
            raise PlacementValidationError("groundcover line is not a JSON object")
        return cls(raw, tree, project(tree))

    def references_layer(self, layer: str) -> bool:
        return layer.lower() in {name.lower() for name in self.placement.layers}


def parse_placement_lines(lines: Iterable[str], reporter: NoticeReporter) -> list[PlacementLine]:
    """Parse scanned lines, skipping non-placements and reporting bad ones."""
    parsed: list[PlacementLine] = []
    for raw in lines:
        if not raw.strip():
            continue
        try:
            line = PlacementLine.parse(raw)
        except (AggregateParseError, PlacementValidationError) as e:
            reporter.warning(f"Skipping groundcover line: {e}")
            continue
        record_class = jsontree.get_str(line.tree, "class")
        if record_class and record_class != GROUNDCOVER_CLASS:
            continue
        parsed.append(line)
    return parsed


def find_vegetation_file(level_root: Path) -> Path | None:
    """First ``items.level.json`` holding GroundCover or Forest records."""
    level_root = Path(level_root)
    if not level_root.is_dir():
        return None

    for path in sorted(level_root.rglob(VEGETATION_FILE_NAME)):
        try:
            text = path.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as e:
            logger.debug("Cannot read %s: %s", path, e)
            continue
        if _VEGETATION_CLASS.search(text):
            return path
    return None


def default_vegetation_file(level_root: Path) -> Path:
    """Preferred location for a new vegetation file.

    The first candidate whose folder already exists wins, otherwise the
    first candidate.
    """
    candidates = [Path(level_root).joinpath(*parts, VEGETATION_FILE_NAME) for parts in DEFAULT_VEGETATION_DIRS]
    for candidate in candidates:
        if candidate.parent.is_dir():
            return candidate
    return candidates[0]


def resolve_vegetation_file(level_root: Path) -> Path:
    return find_vegetation_file(level_root) or default_vegetation_file(level_root)


@dataclass
class _Entry:
    raw: str
    tree: JsonObject | None = None
    modified: bool = False


@dataclass
class VegetationFile:
    """The destination vegetation file, one record per line.

    Placements are keyed by name, other records (forests, wind emitters)
    by persistent id. Lines that cannot be parsed or keyed are kept
    verbatim. Unchanged lines are written back exactly as read.
    """

    path: Path
    _entries: dict[str, _Entry] = field(default_factory=dict)

    @classmethod
    def load(cls, path: Path) -> "VegetationFile":
        vegetation = cls(Path(path))
        if not vegetation.path.is_file():
            return vegetation

        for number, raw in enumerate(jsontree.iter_lines(vegetation.path)):
            try:
                tree = jsontree.loads(raw, origin=str(path))
            except AggregateParseError as e:
                logger.debug("Keeping unparseable line %d of %s verbatim: %s", number, path, e.reason)
                tree = None

            key = cls.key_of(tree) if isinstance(tree, dict) else None
            if key is None or key in vegetation._entries:
                vegetation._entries[f"#line{number}"] = _Entry(raw)
            else:
                vegetation._entries[key] = _Entry(raw, tree)
        return vegetation

    @staticmethod
    def key_of(tree: JsonObject) -> str | None:
        name = jsontree.get_str(tree, "name")
        persistent_id = jsontree.get_str(tree, "persistentId")
        if jsontree.get_str(tree, "class") == GROUNDCOVER_CLASS and name:
            return name.lower()
        if persistent_id:
            return f"id:{persistent_id.lower()}"
        if name:
            return name.lower()
        return None

    def __len__(self) -> int:
        return len(self._entries)

    def put(self, tree: JsonObject) -> bool:
        """Add or overwrite a record by its key.

        Returns:
            True if an existing record was overwritten
        """
        key = self.key_of(tree)
        if key is None:
            raise PlacementValidationError("record has neither a name nor a persistentId")
        existed = key in self._entries
        self._entries[key] = _Entry("", tree, modified=True)
        return existed

    def mark_modified(self, key: str) -> None:
        self._entries[key].modified = True

    def remove(self, key: str) -> None:
        del self._entries[key]

    def placements(self) -> Iterator[tuple[str, JsonObject]]:
        """Parsed GroundCover records, as (key, tree) pairs."""
        for key, entry in list(self._entries.items()):
            if entry.tree is not None and jsontree.get_str(entry.tree, "class") == GROUNDCOVER_CLASS:
                yield key, entry.tree

    def lines(self) -> list[str]:
        return [
            jsontree.dumps_line(entry.tree) if entry.modified and entry.tree is not None else entry.raw
            for entry in self._entries.values()
        ]

    def write(self) -> None:
        jsontree.write_lines(self.path, self.lines())
        logger.debug("Wrote %d record(s) to %s", len(self._entries), self.path)

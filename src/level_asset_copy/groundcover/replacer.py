"""Groundcover follow-up for replaced terrain surfaces.

Existing destination placements lose their Variants on every replaced
target layer, and placements left without Variants are deleted. Then, for
every replaced surface whose source layer has placements in the source
level, those placements are cloned as in add mode and attached to the
target surface's layer.

All changes are merged into the destination vegetation file in one write.
"""

import logging
from collections.abc import Sequence
from pathlib import Path

from ..core import jsontree
from ..core.context import CopyContext
from ..core.notify import NoticeReporter
from ..core.types import MaterialRecord
from ..errors import AggregateParseError
from .dependencies import GroundCoverDependencyHelper
from .placements import VegetationFile, parse_placement_lines, resolve_vegetation_file

logger = logging.getLogger(__name__)


def build_internal_name_map(materials_file: Path) -> dict[str, str]:
    """Map both display and internal names (lowercased) to the internal name.

    Records without an internal name map their display name to itself.

    Raises:
        AggregateParseError: If the file exists but cannot be parsed
    """
    names: dict[str, str] = {}
    if not materials_file.is_file():
        return names

    for record in jsontree.load_object_file(materials_file).values():
        name = jsontree.get_str(record, "name")
        internal_name = jsontree.get_str(record, "internalName")
        if internal_name:
            if name:
                names[name.lower()] = internal_name
            names[internal_name.lower()] = internal_name
        elif name:
            names[name.lower()] = name
    return names


class GroundCoverReplacer(NoticeReporter):
    """Queues replaced surfaces and rewrites the vegetation file once."""

    def __init__(self, context: CopyContext, helper: GroundCoverDependencyHelper):
        super().__init__(context.notifier)
        self.context = context
        self.helper = helper
        self.lines = parse_placement_lines(context.snapshot.placement_lines, self)
        self._queued: dict[str, list[MaterialRecord]] = {}

    @property
    def pending(self) -> int:
        return len(self._queued)

    def queue(self, target: str, materials: Sequence[MaterialRecord] | MaterialRecord) -> None:
        """Remember that ``target`` (display or internal name) was replaced."""
        if isinstance(materials, MaterialRecord):
            materials = [materials]
        if not target or not materials:
            return
        self._queued[target] = list(materials)

    def flush(self) -> bool:
        """Apply every queued replacement to the destination vegetation file.

        Returns:
            False if the target surface aggregate cannot be parsed
        """
        if not self._queued:
            return True

        settings = self.context.settings
        materials_file = self.context.target_level_root / settings.terrains_dir / settings.terrain_materials_file
        try:
            internal_names = build_internal_name_map(materials_file)
        except AggregateParseError as e:
            self.error(f"Groundcover replacement skipped, {e}")
            self._queued.clear()
            return False

        vegetation = VegetationFile.load(resolve_vegetation_file(self.context.target_level_root))

        replaced: list[tuple[str, str]] = []
        for target, materials in self._queued.items():
            replaced.append((materials[0].layer_name, internal_names.get(target.lower(), target)))

        # Only records that were in the file before this flush are stripped
        modified, deleted = self._strip_layers(vegetation, {target_layer.lower() for _, target_layer in replaced})

        added = 0
        for source_layer, target_layer in replaced:
            sources = [line for line in self.lines if line.references_layer(source_layer)]
            if not sources:
                self.info(
                    f"Source material '{source_layer}' has no groundcovers. "
                    f"Removed '{target_layer}' layers from existing groundcovers."
                )
                continue

            def rename(layer: str, source_layer: str = source_layer, target_layer: str = target_layer) -> str | None:
                return target_layer if layer and layer.lower() == source_layer.lower() else None

            for line in sources:
                tree = self.helper.clone_placement(line, rename)
                if tree is None:
                    continue
                vegetation.put(tree)
                added += 1
                self.info(
                    f"Copied groundcover '{line.placement.name}' as '{tree['name']}' "
                    f"(layer: {source_layer} -> {target_layer})"
                )

        if added or modified or deleted:
            vegetation.write()
            self.info(
                f"Updated groundcovers: {added} added, {modified} modified (layers removed), "
                f"{deleted} deleted in {vegetation.path}"
            )
        else:
            self.info("No groundcover changes to write.")

        self._queued.clear()
        return True

    def _strip_layers(self, vegetation: VegetationFile, layers: set[str]) -> tuple[int, int]:
        if not layers:
            return 0, 0

        modified = deleted = 0
        for key, tree in vegetation.placements():
            types = tree.get("Types")
            if not isinstance(types, list):
                continue

            kept = [
                entry for entry in types
                if not (isinstance(entry, dict) and jsontree.get_str(entry, "layer").strip().lower() in layers)
            ]
            removed = len(types) - len(kept)
            if not removed:
                continue

            name = jsontree.get_str(tree, "name")
            if not kept:
                vegetation.remove(key)
                deleted += 1
                self.info(f"Deleted groundcover '{name}' (all layers referenced replaced materials)")
            else:
                types[:] = kept
                vegetation.mark_modified(key)
                modified += 1
                self.info(f"Groundcover '{name}': removed {removed} layer(s) referencing replaced materials")

        return modified, deleted

"""Groundcover placements that travel with added terrain surfaces.

Collection happens per terrain asset; everything collected during a run
is written to the destination vegetation file once, by ``flush``.
"""

import logging
from collections.abc import Sequence

from ..core.context import CopyContext
from ..core.jsontree import JsonObject
from ..core.notify import NoticeReporter
from ..core.types import MaterialRecord
from ..terrain.copier import added_layer_name
from .dependencies import GroundCoverDependencyHelper
from .placements import VegetationFile, parse_placement_lines, resolve_vegetation_file

logger = logging.getLogger(__name__)


class GroundCoverCopier(NoticeReporter):
    """Copies the placements that reference newly added surfaces.

    Example:
        >>> copier.collect(asset.materials)   # once per terrain asset
        >>> copier.flush()                    # once per run
    """

    def __init__(self, context: CopyContext, helper: GroundCoverDependencyHelper):
        super().__init__(context.notifier)
        self.context = context
        self.helper = helper
        self.lines = parse_placement_lines(context.snapshot.placement_lines, self)
        self._queued: dict[str, JsonObject] = {}
        # Source layer (lowercase) -> added layer name, for the whole run
        self._renames: dict[str, str] = {}

    @property
    def pending(self) -> int:
        return len(self._queued)

    def _rename(self, layer: str) -> str | None:
        return self._renames.get(layer.lower()) if layer else None

    def collect(self, materials: Sequence[MaterialRecord]) -> int:
        """Queue the placements referencing any of ``materials``.

        A placement already queued by an earlier call is cloned again
        against every surface added so far, so Variants on surfaces of
        different assets all survive.

        Returns:
            Number of placements newly queued by this call
        """
        if not self.lines:
            return 0

        added = {
            material.layer_name.lower(): added_layer_name(material, self.context.suffix)
            for material in materials
            if material.layer_name
        }
        added = {layer: name for layer, name in added.items() if self._renames.get(layer) != name}
        if not added:
            return 0
        self._renames.update(added)

        collected = updated = 0
        for line in self.lines:
            if not any(layer.lower() in added for layer in line.placement.layers):
                continue

            tree = self.helper.clone_placement(line, self._rename)
            if tree is None:
                continue

            key = line.placement.name.lower()
            if key in self._queued:
                updated += 1
            else:
                collected += 1
            self._queued[key] = tree

        if collected or updated:
            self.info(f"Collected {collected} groundcover(s) for copying, {updated} extended")
        return collected

    def flush(self) -> int:
        """Write every queued placement to the destination vegetation file.

        Returns:
            Number of placements written
        """
        if not self._queued:
            return 0

        vegetation = VegetationFile.load(resolve_vegetation_file(self.context.target_level_root))

        created = merged = 0
        for tree in self._queued.values():
            if vegetation.put(tree):
                merged += 1
            else:
                created += 1

        vegetation.write()
        self.info(f"Groundcover copy complete: {created} created, {merged} updated in {vegetation.path}")

        written = len(self._queued)
        self._queued.clear()
        return written

"""Replacing existing terrain surfaces of the target level.

Replace keeps the target surface's identity (key, name, internal name,
persistent id and class) and takes everything else from the source
surface. Records elsewhere in the target that reference the surface by
name or id keep working.
"""

import logging
from collections.abc import Callable
from typing import cast

from ..core import jsontree
from ..core.aggregate import AggregateStore, find_record
from ..core.context import CopyContext
from ..core.jsontree import JsonObject
from ..core.notify import NoticeReporter
from ..core.types import TERRAIN_MATERIAL_CLASS, CopyAsset, MaterialRecord
from ..errors import AggregateParseError
from .copier import load_source_record, terrain_target_dir
from .textures import TerrainTextureCopier

logger = logging.getLogger(__name__)

IDENTITY_FIELDS = ("name", "internalName", "persistentId", "class")

ReplacedCallback = Callable[[str, MaterialRecord], None]


def capture_identity(record: JsonObject) -> JsonObject:
    """Identity fields the target record has, in its own order."""
    return {field_name: value for field_name, value in record.items() if field_name in IDENTITY_FIELDS}


class TerrainMaterialReplacer(NoticeReporter):
    """Overwrites target surfaces with a source surface's content.

    Args:
        context: Run context
        texture_copier: Shared terrain texture step
        store: Aggregate store shared with the other copiers
        on_replaced: Called with (target name, source material) after
            each successful replacement
    """

    def __init__(
        self,
        context: CopyContext,
        texture_copier: TerrainTextureCopier,
        store: AggregateStore | None = None,
        on_replaced: ReplacedCallback | None = None,
    ):
        super().__init__(context.notifier)
        self.context = context
        self.texture_copier = texture_copier
        self.store = store or AggregateStore()
        self.on_replaced = on_replaced

    def replace(self, asset: CopyAsset) -> bool:
        """Replace every target in ``asset.replace_targets``.

        Returns:
            False if the source or target aggregate cannot be parsed
        """
        material = asset.materials[0]
        if len(asset.materials) > 1:
            self.warning(f"Only {material.layer_name} is used to replace {', '.join(asset.replace_targets)}.")

        try:
            source_record = load_source_record(self.context, self, material)
        except (AggregateParseError, FileNotFoundError) as e:
            self.error(f"Terrain material {material.layer_name} can't be read. Exception: {e}")
            return False
        if source_record is None:
            return True

        target_file = terrain_target_dir(self.context, asset) / self.context.settings.terrain_materials_file
        if not self.store.exists(target_file):
            self.warning(f"Target file {target_file} does not exist, nothing to replace.")
            return True

        for target in asset.replace_targets:
            try:
                document = self.store.load(target_file)
            except AggregateParseError as e:
                self.error(f"Target {target_file} can't be parsed. Exception: {e.reason}")
                return False

            try:
                replaced = self._replace_one(target, material, source_record, document, asset)
            except OSError as e:
                self.error(f"Replacing terrain material {target} failed. Exception: {e}")
                continue

            if replaced:
                self.store.save(target_file, document)
                if self.on_replaced is not None:
                    self.on_replaced(target, material)

        return True

    def _replace_one(
        self,
        target: str,
        material: MaterialRecord,
        source_record: JsonObject,
        document: JsonObject,
        asset: CopyAsset,
    ) -> bool:
        fields = self.context.match_policy.fields_for(TERRAIN_MATERIAL_CLASS)
        found = find_record(document, target, fields)
        if found is None:
            self.warning(f"Terrain material {target} not found in target, skipping.")
            return False

        key, target_record = found
        identity = capture_identity(target_record)

        tree = cast(JsonObject, jsontree.clone(source_record))
        for field_name in IDENTITY_FIELDS:
            tree.pop(field_name, None)

        self.texture_copier.process(material, tree, asset)

        document[key] = {**identity, **tree}
        logger.debug("Replaced terrain material %s with %s", key, material.layer_name)
        return True

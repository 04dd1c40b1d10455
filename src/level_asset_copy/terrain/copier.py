"""Adding terrain surfaces to the target level."""

import logging
import re
from pathlib import Path
from typing import cast

from ..copiers.material import new_persistent_id
from ..core import jsontree
from ..core.aggregate import AggregateStore, find_record
from ..core.context import CopyContext
from ..core.jsontree import JsonObject
from ..core.notify import NoticeReporter
from ..core.types import TERRAIN_MATERIAL_CLASS, CopyAsset, MaterialRecord
from ..errors import AggregateParseError
from .textures import TerrainTextureCopier

logger = logging.getLogger(__name__)

_UUID_SUFFIX = re.compile(r"-[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$")


def base_name(name: str) -> str:
    """Strip a trailing ``-<uuid>`` from a surface name."""
    return _UUID_SUFFIX.sub("", name)


def added_layer_name(material: MaterialRecord, suffix: str) -> str:
    """Layer name an added surface is referenced by in the target."""
    return f"{material.internal_name or base_name(material.name)}{suffix}"


def terrain_target_dir(context: CopyContext, asset: CopyAsset) -> Path:
    return asset.target_dir or context.target_level_root / context.settings.terrains_dir


def load_source_record(
    context: CopyContext, reporter: NoticeReporter, material: MaterialRecord
) -> JsonObject | None:
    """Read the surface's record from its source aggregate.

    Raises:
        AggregateParseError: If the source aggregate cannot be parsed
    """
    document = jsontree.load_object_file(material.source_file)
    fields = context.match_policy.fields_for(material.record_class or TERRAIN_MATERIAL_CLASS)
    found = find_record(document, material.name, fields) or find_record(document, material.internal_name, fields)
    if found is None:
        reporter.warning(f"Terrain material {material.layer_name} not found in {material.source_file}, skipping.")
        return None
    return found[1]


class TerrainMaterialCopier(NoticeReporter):
    """Adds terrain surfaces under new, source-suffixed names."""

    def __init__(
        self,
        context: CopyContext,
        texture_copier: TerrainTextureCopier,
        store: AggregateStore | None = None,
    ):
        super().__init__(context.notifier)
        self.context = context
        self.texture_copier = texture_copier
        self.store = store or AggregateStore()

    def copy(self, asset: CopyAsset) -> bool:
        """Add every surface of ``asset`` to the target terrain aggregate.

        Returns:
            False if a source or the target aggregate cannot be parsed
        """
        target_file = terrain_target_dir(self.context, asset) / self.context.settings.terrain_materials_file

        for material in asset.materials:
            try:
                record = load_source_record(self.context, self, material)
                if record is None:
                    continue
                document = self.store.load(target_file)
            except (AggregateParseError, FileNotFoundError) as e:
                self.error(f"Terrain material {material.layer_name} can't be copied. Exception: {e}")
                return False

            self._add(material, record, document, target_file, asset)

        return True

    def _add(
        self,
        material: MaterialRecord,
        record: JsonObject,
        document: JsonObject,
        target_file: Path,
        asset: CopyAsset,
    ) -> None:
        suffix = self.context.suffix
        base = base_name(material.name or material.internal_name)
        new_key = f"{base}{suffix}"

        if new_key in document:
            self.warning(f"Terrain material {new_key} already exists in {target_file.name}, skipping.")
            return

        tree = cast(JsonObject, jsontree.clone(record))
        tree["name"] = new_key
        if jsontree.get_str(tree, "internalName"):
            tree["internalName"] = added_layer_name(material, suffix)
        tree["persistentId"] = new_persistent_id()

        self.texture_copier.process(material, tree, asset)

        document[new_key] = tree
        self.store.save(target_file, document)
        logger.debug("Added terrain material %s", new_key)

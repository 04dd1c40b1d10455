"""Materials and meshes a groundcover placement depends on.

Shared by the add and replace paths. The helper owns a read-only
name -> material lookup built from the scan snapshot and remembers
which meshes and materials it already copied during the run.
"""

import logging
from collections.abc import Callable, Mapping, Sequence
from types import MappingProxyType
from typing import cast

from ..copiers.material import MaterialCopier, new_persistent_id
from ..copiers.mesh import DaeCopier
from ..core import jsontree
from ..core.context import CopyContext, mesh_key
from ..core.jsontree import JsonObject
from ..core.notify import NoticeReporter
from ..core.types import AssetKind, CopyAsset, MaterialRecord
from ..errors import AssetCopyError
from .placements import PlacementLine, variants_of

logger = logging.getLogger(__name__)

LayerRename = Callable[[str], str | None]


def build_material_lookup(materials: Sequence[MaterialRecord]) -> Mapping[str, MaterialRecord]:
    """Name -> material, first occurrence wins and terrain surfaces win over other classes."""
    lookup: dict[str, MaterialRecord] = {}
    for material in sorted(materials, key=lambda m: not m.is_terrain):
        if material.name and material.name not in lookup:
            lookup[material.name] = material
    return MappingProxyType(lookup)


class GroundCoverDependencyHelper(NoticeReporter):
    """Copies a placement's material and Variant meshes into the target."""

    def __init__(self, context: CopyContext, material_copier: MaterialCopier, dae_copier: DaeCopier):
        super().__init__(context.notifier)
        self.context = context
        self.material_copier = material_copier
        self.dae_copier = dae_copier
        self.materials = build_material_lookup(context.snapshot.materials)
        self._folded = {name.lower(): material for name, material in self.materials.items()}
        self.target_dir = (
            context.target_level_root / context.settings.groundcover_dir / context.namespace_token
        )
        self._copied_meshes: set[str] = set()
        self._copied_materials: dict[str, str | None] = {}

    def find_material(self, name: str) -> MaterialRecord | None:
        return self.materials.get(name) or self._folded.get(name.lower())

    def copy_dependencies(self, tree: JsonObject, placement_name: str) -> str | None:
        """Copy the placement's material and meshes.

        Args:
            tree: Placement tree with its original (source) references
            placement_name: Name used in notices

        Returns:
            New name of the copied material, or None if none was copied
        """
        new_material = None
        material_name = jsontree.get_str(tree, "material")
        if material_name:
            new_material = self.copy_material(material_name, placement_name)

        for variant in variants_of(tree):
            shape = jsontree.get_str(variant, "shapeFilename")
            if shape:
                self.copy_mesh(shape)

        return new_material

    def copy_material(self, material_name: str, placement_name: str) -> str | None:
        """Copy a placement material once per run.

        Returns:
            New material name, or None if it could not be copied
        """
        cache_key = material_name.lower()
        if cache_key not in self._copied_materials:
            self._copied_materials[cache_key] = self._copy_material(material_name, placement_name)
        return self._copied_materials[cache_key]

    def _copy_material(self, material_name: str, placement_name: str) -> str | None:
        material = self.find_material(material_name)
        if material is None:
            self.warning(
                f"Material '{material_name}' referenced by groundcover '{placement_name}' not found in source materials."
            )
            return None

        new_name = f"{material_name}{self.context.suffix}"
        asset = CopyAsset(
            kind=AssetKind.TERRAIN,
            materials=[material],
            target_dir=self.target_dir,
            name=material.name,
        )
        try:
            copied = self.material_copier.copy(asset, new_name)
        except (AssetCopyError, OSError) as e:
            self.error(f"Error copying material '{material_name}' for groundcover '{placement_name}': {e}")
            return None

        if not copied:
            self.warning(f"Failed to copy groundcover material '{material_name}' for groundcover '{placement_name}'")
            return None
        return new_name

    def copy_mesh(self, shape_filename: str) -> None:
        key = mesh_key(shape_filename)
        if key in self._copied_meshes:
            return
        self._copied_meshes.add(key)

        asset = CopyAsset(
            kind=AssetKind.MESH,
            mesh_path=shape_filename,
            materials=self.context.snapshot.materials_for_mesh(shape_filename),
            name=shape_filename.rpartition("/")[2],
        )
        try:
            if not self.dae_copier.copy(asset):
                self.warning(f"Failed to copy DAE file '{shape_filename}' for groundcover")
        except (AssetCopyError, OSError) as e:
            self.error(f"Error copying DAE file '{shape_filename}': {e}")

    def clone_placement(self, line: PlacementLine, rename_layer: LayerRename) -> JsonObject | None:
        """Clone a source placement into the target namespace.

        Variants whose layer ``rename_layer`` maps to None are dropped;
        the others get the new layer name and a rewritten mesh path.

        Returns:
            The new placement tree, or None if no Variant survived
        """
        tree = cast(JsonObject, jsontree.clone(line.tree))

        types = tree.get("Types")
        if not isinstance(types, list):
            return None
        types[:] = [
            entry for entry in types
            if isinstance(entry, dict) and rename_layer(jsontree.get_str(entry, "layer")) is not None
        ]
        if not types:
            logger.debug("No matching Variant left in %s", line.placement.name)
            return None

        new_name = f"{line.placement.name}{self.context.suffix}"
        new_material = self.copy_dependencies(tree, new_name)

        for entry in variants_of(tree):
            entry["layer"] = rename_layer(jsontree.get_str(entry, "layer"))
            shape = jsontree.get_str(entry, "shapeFilename")
            if shape:
                entry["shapeFilename"] = self.dae_copier.virtual_target(shape) or shape

        tree["name"] = new_name
        tree["persistentId"] = new_persistent_id()
        if new_material:
            tree["material"] = new_material
        return tree

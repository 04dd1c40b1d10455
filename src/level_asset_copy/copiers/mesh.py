"""Copying of mesh (DAE) assets."""

import dataclasses
import logging
from pathlib import Path

from ..core.context import CopyContext
from ..core.notify import NoticeReporter
from ..core.types import CopyAsset
from ..errors import FileRetrievalError
from ..files import FileCopyHandler
from ..paths import PathConverter, is_virtual_path, match_style, resolve_virtual_path
from .material import MaterialCopier

logger = logging.getLogger(__name__)

COMPILED_MESH_EXTENSION = ".cdae"


class DaeCopier(NoticeReporter):
    """Copies a mesh file, its compiled sibling and its materials."""

    def __init__(
        self,
        context: CopyContext,
        path_converter: PathConverter,
        file_copier: FileCopyHandler,
        material_copier: MaterialCopier,
    ):
        super().__init__(context.notifier)
        self.context = context
        self.path_converter = path_converter
        self.file_copier = file_copier
        self.material_copier = material_copier

    def resolve(self, mesh_path: str) -> Path:
        """Filesystem location of a mesh given as a virtual or filesystem path."""
        if is_virtual_path(mesh_path):
            resolve = self.context.resolve_path or resolve_virtual_path
            return resolve(self.context.source_level_root, mesh_path)
        return Path(mesh_path)

    def virtual_target(self, shape_filename: str) -> str | None:
        """Rewritten reference for a mesh path, formatted like the original.

        Example:
            "/levels/italy/art/shapes/bush.dae"
            -> "/levels/target/art/MT_italy/shapes/bush.dae"
        """
        if not shape_filename:
            return None
        target = self.path_converter.target_path(self.resolve(shape_filename))
        new_virtual = self.path_converter.virtual_path(target, strip_ext=False)
        if new_virtual is None:
            return None
        return match_style(shape_filename, new_virtual)

    def copy(self, asset: CopyAsset) -> bool:
        """Copy the asset's mesh and then its materials.

        A missing mesh is reported but does not stop the material copy.

        Returns:
            The material copier's result
        """
        target_dir = asset.target_dir

        if asset.mesh_path:
            source = self.resolve(asset.mesh_path)
            target = self.path_converter.target_path(source)
            target_dir = target_dir or target.parent

            try:
                self.file_copier.copy(source, target)
            except FileRetrievalError as e:
                self.error(f"Mesh {asset.name or asset.mesh_path} could not be copied. Exception: {e}")

            self._copy_compiled(source, target)

        if target_dir is not asset.target_dir:
            asset = dataclasses.replace(asset, target_dir=target_dir)

        return self.material_copier.copy(asset)

    def _copy_compiled(self, source: Path, target: Path) -> None:
        compiled = source.with_suffix(COMPILED_MESH_EXTENSION)
        try:
            self.file_copier.copy(compiled, target.with_suffix(COMPILED_MESH_EXTENSION))
        except FileRetrievalError:
            logger.debug("No compiled mesh for %s", source)

"""Asset copy pipeline.

This module provides the main interface for a copy run. It builds every
copier from one ``CopyContext`` and processes the work list batch by
batch: terrain surfaces first, then roads, decals and meshes.
"""

import logging
from collections.abc import Callable, Iterable

from .copiers import DaeCopier, ManagedDecalCopier, MaterialCopier
from .core.aggregate import AggregateStore
from .core.context import CopyContext
from .core.notify import NoticeReporter
from .core.types import AssetKind, CopyAsset
from .errors import AssetCopyError
from .files import FileCopyHandler
from .groundcover import GroundCoverCopier, GroundCoverDependencyHelper, GroundCoverReplacer
from .paths import PathConverter
from .terrain import TerrainMaterialCopier, TerrainMaterialReplacer, TerrainTextureCopier

logger = logging.getLogger(__name__)

COMPLETION_MESSAGE = "Done! Assets copied."

# Batches run in this order
BATCH_ORDER = (AssetKind.TERRAIN, AssetKind.ROAD, AssetKind.DECAL, AssetKind.MESH)


class AssetCopy:
    """Runs one copy of a work list into the target level.

    Every batch is fail-fast: the first asset that cannot be copied stops
    the run and no completion notice is sent.

    Example:
        >>> context = CopyContext("italy", Path("/game/levels/italy"), Path("/game/levels/mine"))
        >>> AssetCopy(context, assets).run()
        True
    """

    def __init__(self, context: CopyContext, assets: Iterable[CopyAsset]):
        """Initialize the pipeline.

        Args:
            context: Run configuration and scanner output
            assets: The work list
        """
        self.context = context
        self.assets = list(assets)
        self.reporter = NoticeReporter(context.notifier)

        self.path_converter = PathConverter.from_context(context)
        self.file_copier = FileCopyHandler.from_context(context)
        self.store = AggregateStore()

        self.material_copier = MaterialCopier(context, self.path_converter, self.file_copier, self.store)
        self.dae_copier = DaeCopier(context, self.path_converter, self.file_copier, self.material_copier)
        self.decal_copier = ManagedDecalCopier(context, self.store)

        self.groundcover_helper = GroundCoverDependencyHelper(context, self.material_copier, self.dae_copier)
        self.groundcover_copier = GroundCoverCopier(context, self.groundcover_helper)
        self.groundcover_replacer = GroundCoverReplacer(context, self.groundcover_helper)

        self.texture_copier = TerrainTextureCopier(context, self.path_converter, self.material_copier)
        self.terrain_copier = TerrainMaterialCopier(context, self.texture_copier, self.store)
        self.terrain_replacer = TerrainMaterialReplacer(
            context, self.texture_copier, self.store, on_replaced=self.groundcover_replacer.queue
        )

        self._handlers: dict[AssetKind, Callable[[CopyAsset], bool]] = {
            AssetKind.TERRAIN: self.copy_terrain,
            AssetKind.ROAD: self.copy_road,
            AssetKind.DECAL: self.copy_decal,
            AssetKind.MESH: self.dae_copier.copy,
        }

    def assets_of(self, kind: AssetKind) -> list[CopyAsset]:
        return [asset for asset in self.assets if asset.kind is kind]

    def run(self) -> bool:
        """Copy the whole work list.

        Returns:
            True if every batch completed, False if the run was aborted
        """
        for kind in BATCH_ORDER:
            assets = self.assets_of(kind)
            if not assets:
                continue

            logger.info("Copying %d %s asset(s)", len(assets), kind.value)
            if not self._run_batch(kind, assets):
                logger.info("Run aborted during the %s batch", kind.value)
                return False

            if kind is AssetKind.TERRAIN:
                self.flush_groundcover()

        self.reporter.info(COMPLETION_MESSAGE)
        return True

    def _run_batch(self, kind: AssetKind, assets: list[CopyAsset]) -> bool:
        copy_one = self._handlers[kind]
        try:
            with self.material_copier.batch():
                for asset in assets:
                    if not copy_one(asset):
                        return False
        except Exception as e:
            logger.exception("Unexpected error in the %s batch", kind.value)
            self.reporter.error(f"Copying {kind.value} assets failed. Exception: {e}")
            return False
        return True

    def copy_terrain(self, asset: CopyAsset) -> bool:
        if asset.is_replace_mode:
            return self.terrain_replacer.replace(asset)

        if not self.terrain_copier.copy(asset):
            return False

        try:
            self.groundcover_copier.collect(asset.materials)
        except (AssetCopyError, OSError) as e:
            self.reporter.error(f"Collecting groundcover for {asset.name} failed. Exception: {e}")
        return True

    def copy_road(self, asset: CopyAsset) -> bool:
        return self.material_copier.copy(asset)

    def copy_decal(self, asset: CopyAsset) -> bool:
        if not self.material_copier.copy(asset):
            return False
        return self.decal_copier.copy(asset)

    def flush_groundcover(self) -> None:
        """Write queued groundcover changes; failures are reported, not fatal."""
        for flush in (self.groundcover_copier.flush, self.groundcover_replacer.flush):
            try:
                flush()
            except (AssetCopyError, OSError) as e:
                self.reporter.error(f"Writing groundcover changes failed. Exception: {e}")

"""Copying of managed decal definitions."""

import logging

from ..core import jsontree
from ..core.aggregate import AggregateStore
from ..core.context import CopyContext
from ..core.notify import NoticeReporter
from ..core.types import CopyAsset
from ..errors import AggregateParseError

logger = logging.getLogger(__name__)


class ManagedDecalCopier(NoticeReporter):
    """Merges a decal's catalog entry into the target ``managedDecalData.json``."""

    def __init__(self, context: CopyContext, store: AggregateStore | None = None):
        super().__init__(context.notifier)
        self.context = context
        self.store = store or AggregateStore()

    def copy(self, asset: CopyAsset) -> bool:
        """Add the decal payload under its name.

        Returns:
            False if the target catalog cannot be parsed
        """
        if not asset.decal_data or asset.target_dir is None:
            return True

        name = jsontree.get_str(asset.decal_data, "name") or asset.name
        if not name:
            self.warning("Decal data without a name, skipping.")
            return True

        target_file = asset.target_dir / self.context.settings.managed_decal_file
        try:
            document = self.store.load(target_file)
        except AggregateParseError as e:
            self.error(f"Target {target_file} can't be parsed. Exception: {e.reason}")
            return False

        if name in document:
            self.warning(f"Decal {name} already exists in {target_file.name}, skipping.")
            return True

        document[name] = jsontree.clone(asset.decal_data)
        self.store.save(target_file, document)
        logger.debug("Added managed decal %s to %s", name, target_file)
        return True

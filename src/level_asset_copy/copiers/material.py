"""Copying of material records and the textures they reference.

A material record is copied as a generic JSON tree: the record is found
by name in its source aggregate file, cloned, given a new persistent id,
its texture references are redirected into the target namespace, and it
is merged into the aggregate file of the same name in the target folder.
"""

import logging
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import cast

from ..core import jsontree
from ..core.aggregate import AggregateStore, find_record, has_display_name
from ..core.context import CopyContext
from ..core.jsontree import JsonObject
from ..core.notify import NoticeReporter
from ..core.types import CopyAsset, MaterialRecord
from ..errors import AggregateParseError, FileRetrievalError
from ..files import FileCopyHandler
from ..paths import PathConverter, match_style

logger = logging.getLogger(__name__)


def new_persistent_id() -> str:
    return str(uuid.uuid4())


def _cache_path(path: Path) -> str:
    return str(path).replace("\\", "/").lower()


class MaterialCopier(NoticeReporter):
    """Copies material records and their texture files.

    Texture files are copied at most once per copier instance; every record
    referencing the same source texture is pointed at the same target file.
    """

    def __init__(
        self,
        context: CopyContext,
        path_converter: PathConverter,
        file_copier: FileCopyHandler,
        store: AggregateStore | None = None,
    ):
        super().__init__(context.notifier)
        self.context = context
        self.path_converter = path_converter
        self.file_copier = file_copier
        self.store = store or AggregateStore()
        self._copied: dict[tuple[str, str], Path] = {}

    def begin_batch(self) -> None:
        self.store.begin_batch()

    def end_batch(self) -> None:
        self.store.end_batch()

    @contextmanager
    def batch(self) -> Iterator["MaterialCopier"]:
        with self.store.batch():
            yield self

    def copy(self, asset: CopyAsset, new_name: str | None = None) -> bool:
        """Copy every material of ``asset`` into its target directory.

        Args:
            asset: The asset whose materials should be copied
            new_name: Optional new name (and key) for the copied record

        Returns:
            False if a source or target aggregate file could not be parsed
        """
        if asset.target_dir is None:
            return True

        asset.target_dir.mkdir(parents=True, exist_ok=True)

        for material in asset.materials:
            if not self._copy_material(material, asset.target_dir, new_name):
                return False

        return True

    def _copy_material(self, material: MaterialRecord, target_dir: Path, new_name: str | None) -> bool:
        try:
            source_document = jsontree.load_object_file(material.source_file)
        except (AggregateParseError, FileNotFoundError) as e:
            self.error(f"materials.json {material.source_file} can't be parsed. Exception: {e}")
            return False

        fields = self.context.match_policy.fields_for(material.record_class)
        found = find_record(source_document, material.name, fields) or find_record(
            source_document, material.internal_name, (*fields, "internalName")
        )
        if found is None:
            self.warning(
                f"Material {material.name or material.internal_name} not found in {material.source_file}, skipping."
            )
            return True

        source_key, record = found
        tree = cast(JsonObject, jsontree.clone(record))

        tree["persistentId"] = new_persistent_id()
        key = new_name or material.name or source_key
        if new_name:
            tree["name"] = new_name

        self.redirect_textures(material, tree)

        target_file = target_dir / material.source_file.name
        return self.merge(target_file, key, tree)

    def redirect_textures(self, material: MaterialRecord, tree: JsonObject) -> dict[str, str]:
        """Copy the material's textures and point the tree at the copies.

        Returns:
            Original path -> rewritten path, as applied to the tree
        """
        replacements: dict[str, str] = {}

        for texture in material.textures:
            original = texture.original_path or self.path_converter.virtual_path(texture.path)
            if not original:
                continue

            written = self.copy_file_once(texture.path, self.path_converter.target_path(texture.path), material.name)
            new_virtual = self.path_converter.virtual_path(written, strip_ext=False)
            if new_virtual is None:
                continue

            replacements[original] = match_style(original, new_virtual)

        rewritten = jsontree.replace_strings(tree, replacements)
        logger.debug("Rewrote %d texture reference(s) in %s", rewritten, material.name)
        return replacements

    def copy_file_once(self, source: Path, target: Path, owner: str) -> Path:
        """Copy ``source`` to ``target`` unless this copier already did.

        A missing file is reported and skipped; the target path is still
        returned so the record stays consistent with other copies.
        """
        cache_key = (_cache_path(source), _cache_path(target))
        if cache_key in self._copied:
            return self._copied[cache_key]

        try:
            written = self.file_copier.copy(source, target)
        except FileRetrievalError as e:
            self.warning(f"Filepath error for material {owner}. Exception: {e}")
            written = target

        self._copied[cache_key] = written
        return written

    def merge(self, target_file: Path, key: str, tree: JsonObject) -> bool:
        """Add ``tree`` under ``key`` unless its key or display name exists.

        Returns:
            False if the target aggregate file cannot be parsed
        """
        try:
            document = self.store.load(target_file)
        except AggregateParseError as e:
            self.error(f"Target {target_file} can't be parsed. Exception: {e.reason}")
            return False

        name = jsontree.get_str(tree, "name") or key
        if key in document or has_display_name(document, name):
            self.warning(f"Material {name} already exists in {target_file.name}, skipping.")
            return True

        document[key] = tree
        self.store.save(target_file, document)
        return True

"""Run configuration and the request object shared by every copier.

A ``CopyContext`` is built once per run from the scanner's output and the
user's choices, then handed to each copier's constructor. Nothing in this
package keeps state between runs.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

from ..sources.archive import ZipArchiveReader
from ..sources.base import ArchiveReader
from .notify import LoggingNotifier, Notifier
from .types import TERRAIN_MATERIAL_CLASS, MaterialRecord

DEFAULT_TEXTURE_SIZE = 2048


@dataclass(frozen=True)
class CopySettings:
    """Tunable constants of a copy run.

    Attributes:
        prefix: Prefix of the collision-avoidance folder (``MT_<source>``)
        default_texture_size: Terrain texture size when none can be discovered
        level_archive_dir: Folder holding ``<level>.zip`` archives
        content_dir: Root of the bundled content archives
        terrain_materials_file: File name of the terrain aggregate
        managed_decal_file: File name of the managed-decal catalog
        groundcover_dir: Folder (relative to the target level) for groundcover assets
        terrains_dir: Folder (relative to the target level) for surface textures
    """

    prefix: str = "MT_"
    default_texture_size: int = DEFAULT_TEXTURE_SIZE
    level_archive_dir: Path | None = None
    content_dir: Path | None = None
    terrain_materials_file: str = "main.materials.json"
    managed_decal_file: str = "managedDecalData.json"
    groundcover_dir: str = "art/shapes/groundcover"
    terrains_dir: str = "art/terrains"


@dataclass(frozen=True)
class MatchPolicy:
    """Which record fields identify a material, per record class.

    Terrain surfaces are referenced by either their display name or their
    internal name; other materials only by display name. Classes missing
    from ``fields_by_class`` use ``default_fields``.
    """

    fields_by_class: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: MappingProxyType({TERRAIN_MATERIAL_CLASS: ("name", "internalName")})
    )
    default_fields: tuple[str, ...] = ("name",)

    def fields_for(self, record_class: str | None) -> tuple[str, ...]:
        for cls, fields in self.fields_by_class.items():
            if record_class and cls.lower() == record_class.lower():
                return fields
        return self.default_fields


@dataclass
class ScanSnapshot:
    """Read-only results of the (external) scanning phase.

    Attributes:
        materials: Every material record found in the source level
        placement_lines: Raw groundcover JSON lines from the source level
        mesh_materials: Mesh path (lowercase, forward slashes) -> its materials
    """

    materials: Sequence[MaterialRecord] = ()
    placement_lines: Sequence[str] = ()
    mesh_materials: Mapping[str, Sequence[MaterialRecord]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.materials = tuple(self.materials)
        self.placement_lines = tuple(self.placement_lines)
        self.mesh_materials = MappingProxyType(
            {mesh_key(k): tuple(v) for k, v in dict(self.mesh_materials).items()}
        )

    def materials_for_mesh(self, mesh_path: str) -> list[MaterialRecord]:
        return list(self.mesh_materials.get(mesh_key(mesh_path), ()))


def mesh_key(mesh_path: str) -> str:
    """Normalize a mesh path for lookups."""
    return mesh_path.replace("\\", "/").lstrip("/").lower()


PathResolver = Callable[[Path, str], Path]


@dataclass
class CopyContext:
    """Everything a copy run needs, constructed once and passed down.

    Attributes:
        source_level_name: Folder name of the level copied from
        source_level_root: Filesystem path of ``.../levels/<source>``
        target_level_root: Filesystem path of ``.../levels/<target>``
        snapshot: Scanner output
        settings: Tunable constants
        match_policy: Name matching rules per record class
        notifier: Receiver of user-facing notices
        resolve_path: Converts a virtual path plus a level root into a filesystem path
        archive_reader: Reads single entries from content/level archives
    """

    source_level_name: str
    source_level_root: Path
    target_level_root: Path
    snapshot: ScanSnapshot = field(default_factory=ScanSnapshot)
    settings: CopySettings = field(default_factory=CopySettings)
    match_policy: MatchPolicy = field(default_factory=MatchPolicy)
    notifier: Notifier = field(default_factory=LoggingNotifier)
    resolve_path: PathResolver | None = None
    archive_reader: ArchiveReader = field(default_factory=ZipArchiveReader)

    def __post_init__(self) -> None:
        self.source_level_root = Path(self.source_level_root)
        self.target_level_root = Path(self.target_level_root)
        if self.resolve_path is None:
            # Imported here to avoid a cycle: paths depends on core
            from ..paths import resolve_virtual_path

            self.resolve_path = resolve_virtual_path

    @property
    def target_level_name(self) -> str:
        return self.target_level_root.name

    @property
    def namespace_token(self) -> str:
        """Collision-avoidance folder name, e.g. ``MT_italy``."""
        return f"{self.settings.prefix}{self.source_level_name}"

    @property
    def suffix(self) -> str:
        """Suffix appended to renamed keys, e.g. ``_italy``."""
        return f"_{self.source_level_name}"

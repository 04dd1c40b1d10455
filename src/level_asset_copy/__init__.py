"""Level Asset Copy.

This package copies terrain surfaces, road and decal materials, meshes
and the groundcover placements that depend on them from one level into
another, remapping every path into the target level's namespace.
"""

# Core library interface
from .pipeline import AssetCopy
from .core import CopyAsset, CopyContext, CopySettings, MatchPolicy, ScanSnapshot
from .core import AssetKind, MaterialRecord, RoughnessPreset, TextureReference
from .core import LoggingNotifier, Notifier, Severity

# Components
from .copiers import DaeCopier, ManagedDecalCopier, MaterialCopier
from .files import FileCopyHandler
from .groundcover import GroundCoverCopier, GroundCoverDependencyHelper, GroundCoverReplacer
from .paths import PathConverter
from .terrain import TerrainMaterialCopier, TerrainMaterialReplacer

# Errors
from .errors import AggregateParseError, AssetCopyError, FileRetrievalError, WorkListValidationError

__version__ = "0.1.0"

__all__ = [
    # Primary library interface
    "AssetCopy",
    "CopyAsset",
    "CopyContext",
    "CopySettings",
    "MatchPolicy",
    "ScanSnapshot",
    "AssetKind",
    "MaterialRecord",
    "RoughnessPreset",
    "TextureReference",
    "LoggingNotifier",
    "Notifier",
    "Severity",
    # Components
    "PathConverter",
    "FileCopyHandler",
    "MaterialCopier",
    "DaeCopier",
    "ManagedDecalCopier",
    "TerrainMaterialCopier",
    "TerrainMaterialReplacer",
    "GroundCoverDependencyHelper",
    "GroundCoverCopier",
    "GroundCoverReplacer",
    # Errors
    "AssetCopyError",
    "AggregateParseError",
    "FileRetrievalError",
    "WorkListValidationError",
]

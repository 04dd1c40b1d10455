"""Core building blocks of the copy engine.

This package contains the work-list types, the generic JSON tree helpers,
aggregate file access, run configuration, notices and schema validation
shared by every copier.
"""

from .aggregate import AggregateStore, find_record, has_display_name
from .context import CopyContext, CopySettings, MatchPolicy, ScanSnapshot
from .notify import LoggingNotifier, Notifier, Severity
from .types import (
    AssetKind,
    CopyAsset,
    MaterialRecord,
    RoughnessPreset,
    TextureReference,
    Variant,
    VegetationPlacement,
)
from .validator import validate_placement_with_error_details, validate_worklist_with_error_details

__all__ = [
    "AggregateStore",
    "AssetKind",
    "CopyAsset",
    "CopyContext",
    "CopySettings",
    "LoggingNotifier",
    "MatchPolicy",
    "MaterialRecord",
    "Notifier",
    "RoughnessPreset",
    "ScanSnapshot",
    "Severity",
    "TextureReference",
    "Variant",
    "VegetationPlacement",
    "find_record",
    "has_display_name",
    "validate_placement_with_error_details",
    "validate_worklist_with_error_details",
]

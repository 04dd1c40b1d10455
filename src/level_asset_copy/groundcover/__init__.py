"""Groundcover placements coupled to terrain surfaces."""

from .copier import GroundCoverCopier
from .dependencies import GroundCoverDependencyHelper
from .placements import PlacementLine, VegetationFile, find_vegetation_file, resolve_vegetation_file
from .replacer import GroundCoverReplacer

__all__ = [
    "GroundCoverCopier",
    "GroundCoverDependencyHelper",
    "GroundCoverReplacer",
    "PlacementLine",
    "VegetationFile",
    "find_vegetation_file",
    "resolve_vegetation_file",
]

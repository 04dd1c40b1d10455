"""Copiers for plain materials, meshes and decals."""

from .decal import ManagedDecalCopier
from .material import MaterialCopier, new_persistent_id
from .mesh import DaeCopier

__all__ = ["MaterialCopier", "DaeCopier", "ManagedDecalCopier", "new_persistent_id"]

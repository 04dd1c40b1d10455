"""Terrain surface add and replace."""

from .copier import TerrainMaterialCopier, added_layer_name, base_name
from .replacer import TerrainMaterialReplacer
from .textures import PlaceholderTextureGenerator, TerrainTextureCopier, load_base_texture_size

__all__ = [
    "TerrainMaterialCopier",
    "TerrainMaterialReplacer",
    "TerrainTextureCopier",
    "PlaceholderTextureGenerator",
    "load_base_texture_size",
    "added_layer_name",
    "base_name",
]

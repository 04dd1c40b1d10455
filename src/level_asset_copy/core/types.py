"""Type definitions for the asset copy work list.

These dataclasses are the typed projection of what the scanner hands over
to the copy phase. Material records themselves stay generic JSON trees
(see ``core.jsontree``); only the handful of fields the engine needs to
reason about are lifted into typed form here.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

TERRAIN_MATERIAL_CLASS = "TerrainMaterial"
TEXTURE_SET_CLASS = "TerrainMaterialTextureSet"
GROUNDCOVER_CLASS = "GroundCover"


class AssetKind(str, Enum):
    """Kind of asset a CopyAsset represents."""

    ROAD = "road"
    DECAL = "decal"
    MESH = "mesh"
    TERRAIN = "terrain"


class RoughnessPreset(str, Enum):
    """Roughness presets for generated terrain roughness textures."""

    CUSTOM = "custom"
    WET_ASPHALT = "wet_asphalt"
    ASPHALT = "asphalt"
    CONCRETE = "concrete"
    DIRT_ROAD = "dirt_road"
    GRASS = "grass"
    MUD = "mud"
    FOREST = "forest"
    WET_SURFACE = "wet_surface"
    ROCK = "rock"


# 0 is shiny (black), 255 is rough (white)
ROUGHNESS_VALUES: dict[RoughnessPreset, int] = {
    RoughnessPreset.WET_ASPHALT: 20,
    RoughnessPreset.ASPHALT: 140,
    RoughnessPreset.WET_SURFACE: 40,
    RoughnessPreset.CONCRETE: 170,
    RoughnessPreset.ROCK: 140,
    RoughnessPreset.DIRT_ROAD: 200,
    RoughnessPreset.GRASS: 220,
    RoughnessPreset.MUD: 100,
    RoughnessPreset.FOREST: 230,
}

# Checked in order, first hit wins
_ROUGHNESS_KEYWORDS: list[tuple[RoughnessPreset, tuple[str, ...]]] = [
    (RoughnessPreset.WET_ASPHALT, ("wetasphalt", "asphaltw")),
    (RoughnessPreset.ASPHALT, ("asphalt", "tarmac")),
    (RoughnessPreset.WET_SURFACE, ("wet", "rain", "water", "ice", "snow")),
    (RoughnessPreset.CONCRETE, ("concrete", "cement", "pavement")),
    (RoughnessPreset.ROCK, ("rock", "stone", "boulder", "cliff")),
    (RoughnessPreset.GRASS, ("grass", "lawn", "field")),
    (RoughnessPreset.FOREST, ("forest", "wood", "tree")),
    (RoughnessPreset.MUD, ("mud", "clay", "swamp")),
    (RoughnessPreset.DIRT_ROAD, ("dirt", "soil", "ground", "sand")),
]


def detect_roughness_preset(material_name: str | None) -> RoughnessPreset:
    """Guess a roughness preset from a terrain material name.

    Example:
        "Asphalt_Wet-02" -> RoughnessPreset.WET_ASPHALT

    Args:
        material_name: Display or internal name of the material

    Returns:
        The first preset whose keywords appear in the normalized name,
        RoughnessPreset.DIRT_ROAD when nothing matches.
    """
    if not material_name:
        return RoughnessPreset.DIRT_ROAD

    normalized = material_name.lower().replace("-", "").replace("_", "").replace(" ", "")

    for preset, keywords in _ROUGHNESS_KEYWORDS:
        if any(keyword in normalized for keyword in keywords):
            return preset

    return RoughnessPreset.DIRT_ROAD


@dataclass(frozen=True)
class TextureReference:
    """One concrete texture referenced by a material record.

    Attributes:
        path: Resolved filesystem location of the texture
        property_name: JSON property the reference was found under
        original_path: The virtual path string exactly as it appears in the JSON
    """

    path: Path
    property_name: str
    original_path: str


@dataclass
class MaterialRecord:
    """Parsed view of one material record inside an aggregate JSON file."""

    name: str
    source_file: Path
    internal_name: str = ""
    record_class: str = ""
    key: str | None = None
    textures: list[TextureReference] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.name and not self.internal_name:
            raise ValueError("A material record needs a name or an internal name")

    @property
    def is_terrain(self) -> bool:
        return self.record_class.lower() == TERRAIN_MATERIAL_CLASS.lower()

    @property
    def layer_name(self) -> str:
        """Name used by groundcover Variants to reference this surface."""
        return self.internal_name or self.name


@dataclass(frozen=True)
class Variant:
    """One layer-to-mesh mapping inside a vegetation placement."""

    layer: str
    shape_filename: str


@dataclass(frozen=True)
class VegetationPlacement:
    """Minimal typed projection of a groundcover record."""

    name: str
    material: str = ""
    variants: tuple[Variant, ...] = ()

    @property
    def layers(self) -> set[str]:
        return {variant.layer for variant in self.variants if variant.layer}


@dataclass
class CopyAsset:
    """One unit of work produced by the scanner.

    Attributes:
        kind: Asset kind; decides which copier handles the asset
        materials: Material records associated with the asset
        target_dir: Directory the asset's aggregate files are written to
        name: Human-readable name used in notices
        mesh_path: Mesh file (filesystem or virtual path) for MESH assets
        decal_data: Managed-decal record for DECAL assets
        replace_targets: Existing target surfaces to overwrite (TERRAIN only);
            empty means Add mode
        base_color_hex: Colour of the generated base colour placeholder
        roughness_preset: Preset used for the generated roughness placeholder
        roughness_value: Roughness used when the preset is CUSTOM
    """

    kind: AssetKind
    materials: list[MaterialRecord] = field(default_factory=list)
    target_dir: Path | None = None
    name: str = ""
    mesh_path: str | None = None
    decal_data: dict[str, Any] | None = None
    replace_targets: list[str] = field(default_factory=list)
    base_color_hex: str = "#808080"
    roughness_preset: RoughnessPreset = RoughnessPreset.DIRT_ROAD
    roughness_value: int = 128

    def __post_init__(self) -> None:
        self.kind = AssetKind(self.kind)
        if self.replace_targets and self.kind is not AssetKind.TERRAIN:
            raise ValueError("Only terrain surfaces can be copied in replace mode")
        if not self.materials and self.kind not in (AssetKind.MESH, AssetKind.DECAL):
            raise ValueError(f"{self.kind.value} assets need at least one material")

    @property
    def is_replace_mode(self) -> bool:
        return bool(self.replace_targets)

    @property
    def roughness(self) -> int:
        if self.roughness_preset is RoughnessPreset.CUSTOM:
            return self.roughness_value
        return ROUGHNESS_VALUES.get(self.roughness_preset, 128)

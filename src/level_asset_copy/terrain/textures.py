"""Terrain surface textures.

Base textures of a terrain surface are sized to the target terrain, so
copying them from another level rarely works. Instead a uniform
placeholder is generated for every base slot at the target's size, and
only the detail/macro textures are copied. Those all go into one flat
``art/terrains`` folder, suffixed with the source level name.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from PIL import Image

from ..copiers.material import MaterialCopier
from ..core import jsontree
from ..core.context import CopyContext
from ..core.jsontree import JsonObject
from ..core.types import TEXTURE_SET_CLASS, CopyAsset, MaterialRecord
from ..errors import AggregateParseError
from ..paths import PathConverter, match_style, strip_link_extension

logger = logging.getLogger(__name__)

DEFAULT_BASE_COLOR = (128, 128, 128)


@dataclass(frozen=True)
class PlaceholderSlot:
    """How the placeholder of one base texture slot is generated."""

    label: str
    mode: str
    fixed: int | tuple[int, int, int] | None = None


BASE_SLOTS: dict[str, PlaceholderSlot] = {
    "baseColorBaseTex": PlaceholderSlot("base_color", "RGB"),
    "aoBaseTex": PlaceholderSlot("ao", "L", 255),
    "heightBaseTex": PlaceholderSlot("height", "L", 0),
    "normalBaseTex": PlaceholderSlot("normal", "RGB", (128, 128, 255)),
    "roughnessBaseTex": PlaceholderSlot("roughness", "L"),
}


def parse_hex_color(value: str | None) -> tuple[int, int, int]:
    """Parse ``#rrggbb`` (leading ``#`` optional).

    Returns:
        RGB tuple, mid grey if ``value`` is not a valid colour
    """
    if not value:
        return DEFAULT_BASE_COLOR
    digits = value.strip().lstrip("#")
    if len(digits) != 6:
        return DEFAULT_BASE_COLOR
    try:
        return (int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))
    except ValueError:
        return DEFAULT_BASE_COLOR


def _color_code(color: int | tuple[int, int, int]) -> str:
    if isinstance(color, int):
        return f"{color:02x}"
    return "".join(f"{channel:02x}" for channel in color)


class PlaceholderTextureGenerator:
    """Writes uniform PNGs named after their content.

    Example:
        >>> generator = PlaceholderTextureGenerator(Path("levels/target/art/terrains"))
        >>> generator.generate("aoBaseTex", 1024)
        PosixPath('levels/target/art/terrains/ao_ff_1024.png')
    """

    def __init__(self, output_dir: Path):
        self.output_dir = Path(output_dir)

    def generate(
        self,
        slot: str,
        size: int,
        base_color: tuple[int, int, int] = DEFAULT_BASE_COLOR,
        roughness: int = 128,
    ) -> Path:
        """Write (or reuse) the placeholder for ``slot``.

        Args:
            slot: Base texture property name, e.g. ``"normalBaseTex"``
            size: Edge length in pixels
            base_color: Colour used for ``baseColorBaseTex``
            roughness: Grey level used for ``roughnessBaseTex``

        Returns:
            Path of the PNG

        Raises:
            KeyError: If ``slot`` is not a base texture slot
        """
        spec = BASE_SLOTS[slot]
        if spec.fixed is not None:
            color = spec.fixed
        elif spec.mode == "RGB":
            color = base_color
        else:
            color = max(0, min(255, int(roughness)))

        path = self.output_dir / f"{spec.label}_{_color_code(color)}_{size}.png"
        if path.is_file():
            return path

        self.output_dir.mkdir(parents=True, exist_ok=True)
        Image.new(spec.mode, (size, size), color).save(path, "PNG")
        logger.debug("Generated placeholder %s", path)
        return path


def load_base_texture_size(level_root: Path, terrains_dir: str = "art/terrains") -> int | None:
    """Discover the terrain base texture size used by a level.

    Looks at ``TerrainMaterialTextureSet.baseTexSize`` in the level's
    terrain material files first, then at ``size`` in ``*.terrain.json``.

    Returns:
        The size, or None when the level does not state one
    """
    materials_dir = Path(level_root) / terrains_dir
    if materials_dir.is_dir():
        for path in sorted(materials_dir.glob("*.materials.json")):
            try:
                document = jsontree.load_object_file(path)
            except AggregateParseError as e:
                logger.debug("Skipping %s: %s", path, e.reason)
                continue
            for record in document.values():
                if not isinstance(record, dict) or record.get("class") != TEXTURE_SET_CLASS:
                    continue
                sizes = record.get("baseTexSize")
                if isinstance(sizes, list) and sizes and isinstance(sizes[0], (int, float)):
                    return int(sizes[0])

    if Path(level_root).is_dir():
        for path in sorted(Path(level_root).glob("*.terrain.json")):
            try:
                document = jsontree.load_object_file(path)
            except AggregateParseError as e:
                logger.debug("Skipping %s: %s", path, e.reason)
                continue
            size = document.get("size")
            if isinstance(size, (int, float)) and size > 0:
                return int(size)

    return None


def suffixed_file_name(file_name: str, suffix: str) -> str:
    """Insert ``suffix`` before the extension, keeping a ``.link`` ending.

    Example:
        ("grass_nm.png.link", "_italy") -> "grass_nm_italy.png.link"
    """
    link = file_name[len(strip_link_extension(file_name)):]
    base = file_name[: len(file_name) - len(link)]
    stem, dot, extension = base.rpartition(".")
    if not dot:
        return f"{base}{suffix}{link}"
    return f"{stem}{suffix}.{extension}{link}"


class TerrainTextureCopier:
    """Shared texture step of terrain add and replace."""

    def __init__(self, context: CopyContext, path_converter: PathConverter, material_copier: MaterialCopier):
        self.context = context
        self.path_converter = path_converter
        self.material_copier = material_copier
        self.generator = PlaceholderTextureGenerator(
            context.target_level_root / context.settings.terrains_dir
        )
        self._size: int | None = None

    @property
    def texture_size(self) -> int:
        """Target size, then source size, then the configured default."""
        if self._size is None:
            terrains_dir = self.context.settings.terrains_dir
            self._size = (
                load_base_texture_size(self.context.target_level_root, terrains_dir)
                or load_base_texture_size(self.context.source_level_root, terrains_dir)
                or self.context.settings.default_texture_size
            )
        return self._size

    def process(self, material: MaterialRecord, tree: JsonObject, asset: CopyAsset) -> None:
        """Point ``tree`` at placeholders and copied detail textures."""
        self.apply_placeholders(tree, asset)

        replacements: dict[str, str] = {}
        for texture in material.textures:
            if texture.property_name in BASE_SLOTS:
                continue
            original = texture.original_path or self.path_converter.virtual_path(texture.path)
            if not original:
                continue

            target = self.path_converter.terrain_target_path(texture.path)
            target = target.with_name(suffixed_file_name(target.name, self.context.suffix))
            written = self.material_copier.copy_file_once(texture.path, target, material.name)

            new_virtual = self.path_converter.virtual_path(written, strip_ext=False)
            if new_virtual is not None:
                replacements[original] = match_style(original, new_virtual)

        jsontree.replace_strings(tree, replacements)

    def apply_placeholders(self, tree: JsonObject, asset: CopyAsset) -> None:
        size = self.texture_size
        base_color = parse_hex_color(asset.base_color_hex)

        for slot in BASE_SLOTS:
            if slot not in tree:
                continue

            path = self.generator.generate(slot, size, base_color=base_color, roughness=asset.roughness)
            new_virtual = self.path_converter.virtual_path(path, strip_ext=False)
            if new_virtual is None:
                continue

            current = tree[slot]
            tree[slot] = match_style(current, new_virtual) if isinstance(current, str) and current else "/" + new_virtual

            size_field = f"{slot}Size"
            if size_field in tree:
                tree[size_field] = size

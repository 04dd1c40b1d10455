"""Command-line interface for the asset copy engine.

This module provides the CLI entry point for running a copy from a JSON
work list: the scanner's output plus the user's selections.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

from .core import jsontree
from .core.context import CopyContext, CopySettings, ScanSnapshot
from .core.types import AssetKind, CopyAsset, MaterialRecord, RoughnessPreset, TextureReference, detect_roughness_preset
from .core.validator import validate_worklist_with_error_details
from .errors import AggregateParseError, WorkListValidationError
from .pipeline import AssetCopy

AUTO_ROUGHNESS = "auto"
_PATH_SETTINGS = ("level_archive_dir", "content_dir")


def _path(value: str, base_dir: Path) -> Path:
    path = Path(value)
    return path if path.is_absolute() else base_dir / path


def parse_material(data: dict[str, Any], base_dir: Path) -> MaterialRecord:
    return MaterialRecord(
        name=data.get("name", ""),
        internal_name=data.get("internal_name", ""),
        record_class=data.get("class", ""),
        key=data.get("key"),
        source_file=_path(data["source_file"], base_dir),
        textures=[
            TextureReference(
                path=_path(texture["path"], base_dir),
                property_name=texture.get("property", ""),
                original_path=texture.get("original_path", ""),
            )
            for texture in data.get("textures", [])
        ],
    )


def parse_asset(data: dict[str, Any], base_dir: Path) -> CopyAsset:
    """Build a CopyAsset from its work-list entry.

    A roughness preset of ``"auto"`` is detected from the asset name.
    """
    materials = [parse_material(material, base_dir) for material in data.get("materials", [])]
    name = data.get("name", "")

    preset_name = data.get("roughness_preset", RoughnessPreset.DIRT_ROAD.value)
    if preset_name == AUTO_ROUGHNESS:
        preset = detect_roughness_preset(name or (materials[0].layer_name if materials else ""))
    else:
        preset = RoughnessPreset(preset_name)

    target_dir = data.get("target_dir")
    return CopyAsset(
        kind=AssetKind(data["kind"]),
        materials=materials,
        target_dir=_path(target_dir, base_dir) if target_dir else None,
        name=name,
        mesh_path=data.get("mesh_path"),
        decal_data=data.get("decal_data"),
        replace_targets=list(data.get("replace_targets", [])),
        base_color_hex=data.get("base_color_hex", "#808080"),
        roughness_preset=preset,
        roughness_value=data.get("roughness_value", 128),
    )


def load_work_list(path: Path) -> tuple[CopyContext, list[CopyAsset]]:
    """Read a work list file and build the run's context and assets.

    Relative paths inside the file are resolved against its folder.

    Args:
        path: Path to the work list JSON file

    Returns:
        (context, assets)

    Raises:
        AggregateParseError: If the file is not valid JSON
        WorkListValidationError: If the document does not match the schema
            or describes an impossible asset
    """
    document = jsontree.load_object_file(path)

    is_valid, error_msg = validate_worklist_with_error_details(document)
    if not is_valid:
        raise WorkListValidationError(error_msg)

    base_dir = path.parent
    settings_data = dict(document.get("settings", {}))
    for key in _PATH_SETTINGS:
        if settings_data.get(key):
            settings_data[key] = _path(settings_data[key], base_dir)

    snapshot = ScanSnapshot(
        materials=[parse_material(material, base_dir) for material in document.get("materials", [])],
        placement_lines=document.get("placement_lines", []),
        mesh_materials={
            mesh: [parse_material(material, base_dir) for material in materials]
            for mesh, materials in document.get("mesh_materials", {}).items()
        },
    )

    context = CopyContext(
        source_level_name=document["source_level_name"],
        source_level_root=_path(document["source_level_root"], base_dir),
        target_level_root=_path(document["target_level_root"], base_dir),
        snapshot=snapshot,
        settings=CopySettings(**settings_data),
    )

    try:
        assets = [parse_asset(asset, base_dir) for asset in document["assets"]]
    except ValueError as e:
        raise WorkListValidationError(str(e)) from e

    return context, assets


def main() -> None:
    """Main entry point for the copy script."""
    parser = argparse.ArgumentParser(
        description="Copy assets from one level into another",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run a work list produced by the scanner
  level-asset-copy --work-list plan.json

  # Show every file operation
  level-asset-copy --work-list plan.json --verbose
        """,
    )

    parser.add_argument("--work-list", required=True, help="JSON work list to run")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log debug output")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    path = Path(args.work_list)
    if not path.is_file():
        print(f"Error: Work list does not exist: {path}", file=sys.stderr)
        sys.exit(1)

    try:
        context, assets = load_work_list(path)
    except (AggregateParseError, WorkListValidationError) as e:
        print(f"Error: Invalid work list: {e}", file=sys.stderr)
        sys.exit(1)

    print(
        f"Copying {len(assets)} asset(s) from {context.source_level_name} to {context.target_level_name}",
        file=sys.stderr,
    )

    if not AssetCopy(context, assets).run():
        print("Error: Copy aborted", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()

"""Tests for schema validation, work-list loading and the CLI."""

import json
import sys
from pathlib import Path

import pytest

from level_asset_copy import cli
from level_asset_copy.cli import load_work_list
from level_asset_copy.core.types import AssetKind, RoughnessPreset
from level_asset_copy.core.validator import (
    validate_placement_with_error_details,
    validate_worklist_with_error_details,
)
from level_asset_copy.errors import WorkListValidationError


@pytest.fixture
def work_list_data() -> dict:
    """A minimal valid work list with relative paths."""
    return {
        "source_level_name": "italy",
        "source_level_root": "levels/italy",
        "target_level_root": "levels/mine",
        "settings": {"level_archive_dir": "archives", "default_texture_size": 1024},
        "materials": [
            {"name": "gc_mat", "class": "Material", "source_file": "levels/italy/art/main.materials.json"}
        ],
        "placement_lines": ['{"class":"GroundCover","name":"g"}'],
        "mesh_materials": {
            "/levels/italy/art/bush.dae": [
                {"name": "bush_mat", "source_file": "levels/italy/art/main.materials.json"}
            ]
        },
        "assets": [
            {
                "kind": "terrain",
                "name": "Asphalt_Wet",
                "roughness_preset": "auto",
                "base_color_hex": "#8a7f55",
                "materials": [
                    {
                        "name": "Asphalt_Wet",
                        "internal_name": "asphalt_wet",
                        "class": "TerrainMaterial",
                        "source_file": "levels/italy/art/terrains/main.materials.json",
                        "textures": [
                            {
                                "path": "levels/italy/art/terrains/a_d.png",
                                "property": "baseColorDetailTex",
                                "original_path": "/levels/italy/art/terrains/a_d.png",
                            }
                        ],
                    }
                ],
            },
            {"kind": "mesh", "mesh_path": "/levels/italy/art/bush.dae"},
        ],
    }


def write_work_list(tmp_path: Path, data: dict) -> Path:
    path = tmp_path / "plan.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


# ============================================================================
# Validation
# ============================================================================


class TestValidation:
    """Test the bundled JSON Schemas."""

    def test_valid_placement(self) -> None:
        is_valid, error = validate_placement_with_error_details(
            {"class": "GroundCover", "name": "g", "Types": [{"layer": "Grass", "extra": 1}], "radius": 2}
        )
        assert is_valid
        assert error is None

    def test_placement_needs_name(self) -> None:
        is_valid, error = validate_placement_with_error_details({"class": "GroundCover", "Types": []})
        assert not is_valid
        assert "name" in error

    def test_placement_layer_must_be_string(self) -> None:
        is_valid, error = validate_placement_with_error_details({"name": "g", "Types": [{"layer": 5}]})
        assert not is_valid
        assert "Types -> 0 -> layer" in error

    def test_valid_work_list(self, work_list_data: dict) -> None:
        assert validate_worklist_with_error_details(work_list_data) == (True, None)

    def test_unknown_kind_is_rejected(self, work_list_data: dict) -> None:
        work_list_data["assets"][1]["kind"] = "vehicle"
        is_valid, error = validate_worklist_with_error_details(work_list_data)
        assert not is_valid
        assert "assets -> 1 -> kind" in error

    def test_unknown_setting_is_rejected(self, work_list_data: dict) -> None:
        work_list_data["settings"]["colour"] = "red"
        assert validate_worklist_with_error_details(work_list_data)[0] is False

    def test_material_needs_a_name(self, work_list_data: dict) -> None:
        del work_list_data["materials"][0]["name"]
        assert validate_worklist_with_error_details(work_list_data)[0] is False


# ============================================================================
# Work list loading
# ============================================================================


class TestLoadWorkList:
    """Test conversion of a work list into context and assets."""

    def test_resolves_relative_paths(self, tmp_path: Path, work_list_data: dict) -> None:
        """Test that relative paths are resolved against the file's folder."""
        context, assets = load_work_list(write_work_list(tmp_path, work_list_data))

        assert context.source_level_root == tmp_path / "levels" / "italy"
        assert context.target_level_name == "mine"
        assert context.settings.level_archive_dir == tmp_path / "archives"
        assert context.settings.default_texture_size == 1024
        material = assets[0].materials[0]
        assert material.source_file == tmp_path / "levels/italy/art/terrains/main.materials.json"
        assert material.textures[0].path == tmp_path / "levels/italy/art/terrains/a_d.png"
        assert material.is_terrain

    def test_builds_snapshot(self, tmp_path: Path, work_list_data: dict) -> None:
        context, _ = load_work_list(write_work_list(tmp_path, work_list_data))

        assert [m.name for m in context.snapshot.materials] == ["gc_mat"]
        assert context.snapshot.placement_lines == ('{"class":"GroundCover","name":"g"}',)
        assert [m.name for m in context.snapshot.materials_for_mesh("levels/Italy/art/bush.dae")] == ["bush_mat"]

    def test_auto_roughness_is_detected(self, tmp_path: Path, work_list_data: dict) -> None:
        _, assets = load_work_list(write_work_list(tmp_path, work_list_data))

        assert assets[0].kind is AssetKind.TERRAIN
        assert assets[0].roughness_preset is RoughnessPreset.WET_ASPHALT
        assert assets[1].kind is AssetKind.MESH

    def test_schema_error_raises(self, tmp_path: Path, work_list_data: dict) -> None:
        del work_list_data["assets"]
        with pytest.raises(WorkListValidationError, match="assets"):
            load_work_list(write_work_list(tmp_path, work_list_data))

    def test_impossible_asset_raises(self, tmp_path: Path, work_list_data: dict) -> None:
        """Test that replace mode on a road is rejected."""
        work_list_data["assets"].append({"kind": "road", "replace_targets": ["x"], "materials": []})
        with pytest.raises(WorkListValidationError, match="replace mode"):
            load_work_list(write_work_list(tmp_path, work_list_data))


# ============================================================================
# CLI
# ============================================================================


class TestMain:
    """Test the command-line entry point."""

    def test_missing_file_exits(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(sys, "argv", ["level-asset-copy", "--work-list", str(tmp_path / "none.json")])

        with pytest.raises(SystemExit) as exc_info:
            cli.main()
        assert exc_info.value.code == 1

    def test_invalid_work_list_exits(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        path = write_work_list(tmp_path, {"assets": []})
        monkeypatch.setattr(sys, "argv", ["level-asset-copy", "--work-list", str(path)])

        with pytest.raises(SystemExit) as exc_info:
            cli.main()

        assert exc_info.value.code == 1
        assert "Invalid work list" in capsys.readouterr().err

    def test_runs_empty_work_list(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Test a successful run end to end."""
        path = write_work_list(
            tmp_path,
            {"source_level_name": "italy", "source_level_root": "levels/italy", "target_level_root": "levels/mine", "assets": []},
        )
        monkeypatch.setattr(sys, "argv", ["level-asset-copy", "--work-list", str(path)])

        cli.main()

        assert "Copying 0 asset(s) from italy to mine" in capsys.readouterr().err

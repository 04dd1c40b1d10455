"""Tests for the material, mesh and decal copiers."""

from pathlib import Path
from unittest.mock import Mock

import pytest

from level_asset_copy.copiers import DaeCopier, ManagedDecalCopier, MaterialCopier
from level_asset_copy.core import jsontree
from level_asset_copy.core.context import CopyContext
from level_asset_copy.core.notify import LoggingNotifier
from level_asset_copy.core.types import AssetKind, CopyAsset, MaterialRecord, TextureReference
from level_asset_copy.files import FileCopyHandler
from level_asset_copy.paths import PathConverter
from level_asset_copy.sources import DirectCopyStrategy

ROCK_TEXTURE = "/levels/italy/art/shapes/rock/rock_d.png"


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def rock_materials_file(source_root: Path) -> Path:
    """Source aggregate with two materials sharing one texture."""
    rock_dir = source_root / "art" / "shapes" / "rock"
    rock_dir.mkdir(parents=True)
    (rock_dir / "rock_d.png").write_bytes(b"rock")

    path = rock_dir / "main.materials.json"
    jsontree.write_file(
        path,
        {
            "rock_mat": {
                "name": "rock_mat",
                "class": "Material",
                "persistentId": "old-id",
                "Stages": [{"colorMap": ROCK_TEXTURE, "unknownField": {"deep": [1, 2]}}],
                "customThing": "keep",
            },
            "moss_mat": {
                "name": "moss_mat",
                "class": "Material",
                "Stages": [{"colorMap": ROCK_TEXTURE}, {}],
            },
        },
    )
    return path


def material(name: str, source_file: Path, texture_path: Path) -> MaterialRecord:
    return MaterialRecord(
        name=name,
        source_file=source_file,
        record_class="Material",
        textures=[TextureReference(texture_path, "colorMap", ROCK_TEXTURE)],
    )


@pytest.fixture
def rock(rock_materials_file: Path) -> MaterialRecord:
    return material("rock_mat", rock_materials_file, rock_materials_file.parent / "rock_d.png")


@pytest.fixture
def moss(rock_materials_file: Path) -> MaterialRecord:
    return material("moss_mat", rock_materials_file, rock_materials_file.parent / "rock_d.png")


@pytest.fixture
def target_dir(target_root: Path) -> Path:
    return target_root / "art" / "MT_italy" / "shapes" / "rock"


@pytest.fixture
def file_copier() -> Mock:
    return Mock(wraps=FileCopyHandler([DirectCopyStrategy()]))


@pytest.fixture
def copier(context: CopyContext, file_copier: Mock) -> MaterialCopier:
    return MaterialCopier(context, PathConverter.from_context(context), file_copier)


# ============================================================================
# MaterialCopier
# ============================================================================


class TestMaterialCopier:
    """Test copying of material records."""

    def test_copies_record_and_texture(
        self, copier: MaterialCopier, rock: MaterialRecord, target_dir: Path, target_root: Path
    ) -> None:
        """Test that the record is rewritten and its texture copied."""
        asset = CopyAsset(kind=AssetKind.ROAD, materials=[rock], target_dir=target_dir)

        assert copier.copy(asset) is True

        record = jsontree.load_object_file(target_dir / "main.materials.json")["rock_mat"]
        assert record["Stages"][0]["colorMap"] == "/levels/mine/art/MT_italy/shapes/rock/rock_d.png"
        assert record["persistentId"] != "old-id"
        assert (target_root / "art" / "MT_italy" / "shapes" / "rock" / "rock_d.png").read_bytes() == b"rock"

    def test_preserves_unknown_fields(self, copier: MaterialCopier, rock: MaterialRecord, target_dir: Path) -> None:
        """Test that fields the copier does not know survive the copy."""
        copier.copy(CopyAsset(kind=AssetKind.ROAD, materials=[rock], target_dir=target_dir))

        record = jsontree.load_object_file(target_dir / "main.materials.json")["rock_mat"]
        assert record["customThing"] == "keep"
        assert record["Stages"][0]["unknownField"] == {"deep": [1, 2]}

    def test_found_by_internal_name(
        self, copier: MaterialCopier, source_root: Path, target_dir: Path, notifier: LoggingNotifier
    ) -> None:
        """Test that a material known only by its internal name is copied under its source key."""
        source_file = source_root / "art" / "shapes" / "cliff" / "main.materials.json"
        jsontree.write_file(
            source_file, {"cliff_key": {"class": "Material", "internalName": "cliff_int", "Stages": [{}]}}
        )
        cliff = MaterialRecord(name="", internal_name="cliff_int", source_file=source_file, record_class="Material")

        assert copier.copy(CopyAsset(kind=AssetKind.ROAD, materials=[cliff], target_dir=target_dir)) is True

        document = jsontree.load_object_file(target_dir / "main.materials.json")
        assert document["cliff_key"]["internalName"] == "cliff_int"
        assert not notifier.warnings

    def test_shared_texture_copied_once(
        self, copier: MaterialCopier, file_copier: Mock, rock: MaterialRecord, moss: MaterialRecord, target_dir: Path
    ) -> None:
        """Test that a texture used by two records is copied exactly once."""
        asset = CopyAsset(kind=AssetKind.ROAD, materials=[rock, moss], target_dir=target_dir)

        assert copier.copy(asset) is True

        assert file_copier.copy.call_count == 1
        document = jsontree.load_object_file(target_dir / "main.materials.json")
        assert document["rock_mat"]["Stages"][0]["colorMap"] == document["moss_mat"]["Stages"][0]["colorMap"]

    def test_existing_key_is_skipped(
        self, copier: MaterialCopier, rock: MaterialRecord, target_dir: Path, notifier: LoggingNotifier
    ) -> None:
        """Test that a second copy never overwrites the first."""
        asset = CopyAsset(kind=AssetKind.ROAD, materials=[rock], target_dir=target_dir)
        copier.copy(asset)
        first_id = jsontree.load_object_file(target_dir / "main.materials.json")["rock_mat"]["persistentId"]

        assert copier.copy(asset) is True

        document = jsontree.load_object_file(target_dir / "main.materials.json")
        assert list(document) == ["rock_mat"]
        assert document["rock_mat"]["persistentId"] == first_id
        assert any("already exists" in message for message in notifier.warnings)

    def test_new_name_renames_key_and_name(self, copier: MaterialCopier, rock: MaterialRecord, target_dir: Path) -> None:
        """Test copying under a new name."""
        copier.copy(CopyAsset(kind=AssetKind.ROAD, materials=[rock], target_dir=target_dir), "rock_mat_italy")

        document = jsontree.load_object_file(target_dir / "main.materials.json")
        assert document["rock_mat_italy"]["name"] == "rock_mat_italy"

    def test_missing_record_is_skipped(
        self, copier: MaterialCopier, rock_materials_file: Path, target_dir: Path, notifier: LoggingNotifier
    ) -> None:
        """Test that a record absent from its file is a skip, not a failure."""
        missing = MaterialRecord(name="nope", source_file=rock_materials_file)

        assert copier.copy(CopyAsset(kind=AssetKind.ROAD, materials=[missing], target_dir=target_dir)) is True
        assert notifier.warnings

    def test_unparseable_source_fails(
        self, copier: MaterialCopier, tmp_path: Path, target_dir: Path, notifier: LoggingNotifier
    ) -> None:
        """Test that a broken source aggregate fails the copy."""
        broken = tmp_path / "broken.materials.json"
        broken.write_text("{ not json", encoding="utf-8")
        asset = CopyAsset(kind=AssetKind.ROAD, materials=[MaterialRecord("a", broken)], target_dir=target_dir)

        assert copier.copy(asset) is False
        assert notifier.errors

    def test_missing_texture_still_rewrites(
        self, copier: MaterialCopier, rock_materials_file: Path, target_dir: Path, notifier: LoggingNotifier
    ) -> None:
        """Test that a missing texture is reported and the reference still moved."""
        ghost = material("rock_mat", rock_materials_file, rock_materials_file.parent / "ghost.png")

        assert copier.copy(CopyAsset(kind=AssetKind.ROAD, materials=[ghost], target_dir=target_dir)) is True

        record = jsontree.load_object_file(target_dir / "main.materials.json")["rock_mat"]
        assert record["Stages"][0]["colorMap"] == "/levels/mine/art/MT_italy/shapes/rock/ghost.png"
        assert any("Filepath error" in message for message in notifier.warnings)

    def test_batch_defers_writes(self, copier: MaterialCopier, rock: MaterialRecord, target_dir: Path) -> None:
        """Test that target files are written when the batch ends."""
        target_file = target_dir / "main.materials.json"

        with copier.batch():
            copier.copy(CopyAsset(kind=AssetKind.ROAD, materials=[rock], target_dir=target_dir))
            assert not target_file.exists()

        assert "rock_mat" in jsontree.load_object_file(target_file)


# ============================================================================
# DaeCopier / ManagedDecalCopier
# ============================================================================


class TestDaeCopier:
    """Test copying of mesh files."""

    @pytest.fixture
    def dae_copier(self, context: CopyContext, copier: MaterialCopier) -> DaeCopier:
        return DaeCopier(context, copier.path_converter, copier.file_copier, copier)

    def test_copies_mesh_and_compiled_sibling(
        self, dae_copier: DaeCopier, source_root: Path, target_root: Path
    ) -> None:
        """Test that the .dae and its .cdae end up under the token folder."""
        bush_dir = source_root / "art" / "shapes" / "bush"
        bush_dir.mkdir(parents=True)
        (bush_dir / "bush.dae").write_text("<COLLADA/>", encoding="utf-8")
        (bush_dir / "bush.cdae").write_bytes(b"cdae")

        asset = CopyAsset(kind=AssetKind.MESH, mesh_path="/levels/italy/art/shapes/bush/bush.dae")

        assert dae_copier.copy(asset) is True

        copied = target_root / "art" / "MT_italy" / "shapes" / "bush"
        assert (copied / "bush.dae").read_text(encoding="utf-8") == "<COLLADA/>"
        assert (copied / "bush.cdae").read_bytes() == b"cdae"

    def test_missing_mesh_is_reported(self, dae_copier: DaeCopier, notifier: LoggingNotifier) -> None:
        """Test that a missing mesh is an error notice, not a failure."""
        asset = CopyAsset(kind=AssetKind.MESH, mesh_path="/levels/italy/art/shapes/none.dae")

        assert dae_copier.copy(asset) is True
        assert len(notifier.errors) == 1

    def test_virtual_target(self, dae_copier: DaeCopier) -> None:
        """Test the rewritten reference for a mesh path."""
        assert dae_copier.virtual_target("/levels/italy/art/shapes/bush/bush.dae") == (
            "/levels/mine/art/MT_italy/shapes/bush/bush.dae"
        )


class TestManagedDecalCopier:
    """Test merging of managed decal entries."""

    def test_adds_decal_once(self, context: CopyContext, target_root: Path, notifier: LoggingNotifier) -> None:
        """Test that a decal is added under its name and never duplicated."""
        decal_copier = ManagedDecalCopier(context)
        asset = CopyAsset(
            kind=AssetKind.DECAL,
            name="crack",
            decal_data={"name": "crack", "class": "DecalData", "Material": "crack_mat", "size": 2},
            target_dir=target_root / "art" / "decals",
        )

        assert decal_copier.copy(asset) is True
        assert decal_copier.copy(asset) is True

        document = jsontree.load_object_file(target_root / "art" / "decals" / "managedDecalData.json")
        assert document == {"crack": {"name": "crack", "class": "DecalData", "Material": "crack_mat", "size": 2}}
        assert len(notifier.warnings) == 1

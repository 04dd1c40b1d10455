"""Tests for path conversion between level namespaces."""

from pathlib import Path

import pytest

from level_asset_copy.core.notify import LoggingNotifier
from level_asset_copy.paths import PathConverter, is_virtual_path, match_style, resolve_virtual_path

TARGET = Path("/game/levels/mine")


@pytest.fixture
def converter(notifier: LoggingNotifier) -> PathConverter:
    return PathConverter(TARGET, "italy", notifier=notifier)


class TestTargetPath:
    """Test mapping of source files into the target namespace."""

    def test_inserts_token_after_art(self, converter: PathConverter) -> None:
        """Test that the collision token goes right after the art folder."""
        result = converter.target_path("/game/levels/italy/art/shapes/rock/rock_d.png")
        assert result == TARGET / "art" / "MT_italy" / "shapes" / "rock" / "rock_d.png"

    def test_inserts_token_at_front_without_art(self, converter: PathConverter) -> None:
        """Test that files outside art get the token as first folder."""
        result = converter.target_path("/game/levels/italy/main/props/crate.dae")
        assert result == TARGET / "MT_italy" / "main" / "props" / "crate.dae"

    def test_level_match_is_case_insensitive(self, converter: PathConverter) -> None:
        """Test that the source level folder is found regardless of case."""
        result = converter.target_path("C:\\Game\\Levels\\Italy\\art\\a.png")
        assert result == TARGET / "art" / "MT_italy" / "a.png"

    def test_is_idempotent(self, converter: PathConverter) -> None:
        """Test that the same source always maps to the same target."""
        source = "/game/levels/italy/art/shapes/rock/rock_d.png"
        assert converter.target_path(source) == converter.target_path(source)

    def test_foreign_level_falls_back_with_warning(
        self, converter: PathConverter, notifier: LoggingNotifier
    ) -> None:
        """Test that a file of another level keeps its relative path."""
        result = converter.target_path("/game/levels/other/art/a.png")

        assert result == TARGET / "art" / "MT_italy" / "a.png"
        assert len(notifier.warnings) == 1

    def test_no_levels_folder_keeps_file_name(self, converter: PathConverter, notifier: LoggingNotifier) -> None:
        """Test that a path without levels folder lands under the token folder."""
        result = converter.target_path("/tmp/loose/a.png")

        assert result == TARGET / "MT_italy" / "a.png"
        assert len(notifier.warnings) == 1

    def test_terrain_textures_go_to_one_folder(self, converter: PathConverter) -> None:
        """Test that terrain textures are flattened into art/terrains."""
        result = converter.terrain_target_path("/game/levels/italy/art/terrains/sub/grass_nm.png")
        assert result == TARGET / "art" / "terrains" / "grass_nm.png"


class TestVirtualPath:
    """Test conversion of filesystem paths into virtual paths."""

    def test_strips_extension_by_default(self, converter: PathConverter) -> None:
        """Test the default extensionless resource id."""
        result = converter.virtual_path("/game/levels/mine/art/MT_italy/a.png")
        assert result == "levels/mine/art/MT_italy/a"

    def test_keeps_extension_on_request(self, converter: PathConverter) -> None:
        """Test that the extension can be kept."""
        result = converter.virtual_path("/game/levels/mine/art/a.dds", strip_ext=False)
        assert result == "levels/mine/art/a.dds"

    def test_drops_link_extension(self, converter: PathConverter) -> None:
        """Test that .link files map to the file they stand for."""
        result = converter.virtual_path("/game/levels/mine/art/a.png.link", strip_ext=False)
        assert result == "levels/mine/art/a.png"

    def test_no_levels_folder_is_an_error(self, converter: PathConverter, notifier: LoggingNotifier) -> None:
        """Test that a path outside any level yields None and an error notice."""
        assert converter.virtual_path("/tmp/a.png") is None
        assert len(notifier.errors) == 1


class TestHelpers:
    """Test the module-level path helpers."""

    def test_match_style_keeps_leading_slash_and_drops_extension(self) -> None:
        """Test that the replacement is formatted like the original."""
        assert match_style("/levels/italy/art/a", "levels/mine/art/MT_italy/a.png") == "/levels/mine/art/MT_italy/a"

    def test_match_style_keeps_extension(self) -> None:
        """Test that an original with extension keeps the new extension."""
        assert match_style("levels/italy/art/a.png", "levels/mine/art/a.dds") == "levels/mine/art/a.dds"

    def test_is_virtual_path(self) -> None:
        """Test detection of virtual paths."""
        assert is_virtual_path("/levels/italy/art/a.dae")
        assert is_virtual_path("levels/italy/art/a.dae")
        assert not is_virtual_path("/game/levels/italy/art/a.dae")

    def test_resolve_virtual_path(self) -> None:
        """Test that virtual paths resolve beside the level root."""
        level_root = Path("/game/levels/italy")
        assert resolve_virtual_path(level_root, "/levels/italy/art/a.dae") == level_root / "art" / "a.dae"
        assert resolve_virtual_path(level_root, "art/b.dae") == level_root / "art" / "b.dae"

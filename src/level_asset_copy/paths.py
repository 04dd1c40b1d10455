"""Path conversion between the source and target level namespaces.

Two kinds of paths are involved in a copy:

* filesystem paths, e.g. ``/game/levels/italy/art/shapes/rock/rock_d.png``
* virtual paths as stored inside JSON records, e.g.
  ``levels/italy/art/shapes/rock/rock_d`` (often without extension)

Copied files land under a ``MT_<sourceLevel>`` folder inserted right after
the top-level ``art`` segment so that assets from several source levels
never overwrite each other in one target.
"""

import logging
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING

from .core.notify import Notifier, Severity
from .sources.base import LINK_EXTENSION, split_after_levels

if TYPE_CHECKING:
    from .core.context import CopyContext

logger = logging.getLogger(__name__)


def _normalize(path: Path | str) -> str:
    return str(path).replace("\\", "/")


def strip_link_extension(path: str) -> str:
    if path.lower().endswith(LINK_EXTENSION):
        return path[: -len(LINK_EXTENSION)]
    return path


def strip_extension(path: str) -> str:
    head, sep, tail = path.rpartition("/")
    if "." in tail:
        tail = tail.rsplit(".", 1)[0]
    return f"{head}{sep}{tail}"


def has_extension(path: str) -> bool:
    return "." in path.rpartition("/")[2]


def match_style(original: str, new: str) -> str:
    """Format ``new`` the way ``original`` was written.

    A leading slash and the presence of a file extension are carried over,
    so a record that stored ``/levels/a/art/x`` gets ``/levels/b/art/MT_a/x``.
    """
    styled = new.lstrip("/")
    if not has_extension(strip_link_extension(original)):
        styled = strip_extension(styled)
    if original.startswith("/"):
        styled = "/" + styled
    return styled


def is_virtual_path(path: str) -> bool:
    """Check whether ``path`` is a ``levels/...`` path rather than a filesystem one."""
    return _normalize(path).lstrip("/").lower().startswith("levels/")


def resolve_virtual_path(level_root: Path, virtual: str) -> Path:
    """Default path resolver: virtual path + level root -> filesystem path.

    Example:
        (Path("/game/levels/italy"), "/levels/italy/art/a.dae")
        -> Path("/game/levels/italy/art/a.dae")

    Args:
        level_root: Filesystem path of ``.../levels/<level>``
        virtual: Virtual path, with or without leading slash

    Returns:
        Filesystem path. Paths that are not under ``levels/`` are taken as
        relative to the level root.
    """
    relative = _normalize(virtual).lstrip("/")
    if relative.lower().startswith("levels/"):
        return level_root.parent.parent.joinpath(*PurePosixPath(relative).parts)
    return level_root.joinpath(*PurePosixPath(relative).parts)


class PathConverter:
    """Maps source files into the target level's namespace.

    Example:
        >>> converter = PathConverter(Path("/game/levels/target"), "italy")
        >>> converter.target_path("/game/levels/italy/art/shapes/rock.png")
        PosixPath('/game/levels/target/art/MT_italy/shapes/rock.png')
    """

    def __init__(
        self,
        target_level_root: Path,
        source_level_name: str,
        prefix: str = "MT_",
        terrains_dir: str = "art/terrains",
        notifier: Notifier | None = None,
    ):
        """Initialize the converter.

        Args:
            target_level_root: Filesystem path of ``.../levels/<target>``
            source_level_name: Folder name of the source level
            prefix: Prefix of the collision-avoidance folder
            terrains_dir: Shared folder for every terrain surface texture
            notifier: Receiver of structural warnings
        """
        self.target_level_root = Path(target_level_root)
        self.source_level_name = source_level_name
        self.token = f"{prefix}{source_level_name}"
        self.terrains_dir = terrains_dir
        self.notifier = notifier

    @classmethod
    def from_context(cls, context: "CopyContext") -> "PathConverter":
        return cls(
            context.target_level_root,
            context.source_level_name,
            prefix=context.settings.prefix,
            terrains_dir=context.settings.terrains_dir,
            notifier=context.notifier,
        )

    def _report(self, severity: Severity, message: str) -> None:
        if self.notifier is not None:
            self.notifier.notify(severity, message)
        else:
            logger.warning(message)

    def target_path(self, source: Path | str) -> Path:
        """Target filesystem path for a source file.

        Args:
            source: Filesystem path of a file inside the source level

        Returns:
            ``<targetRoot>/art/MT_<source>/<rest>/<file>``, or
            ``<targetRoot>/MT_<source>/<rest>/<file>`` when the file does
            not live under ``art``
        """
        normalized = _normalize(source)
        directory, _, file_name = normalized.rpartition("/")
        directory += "/"

        marker = f"/levels/{self.source_level_name}/".lower()
        index = directory.lower().rfind(marker)
        if index >= 0:
            relative = directory[index + len(marker):]
        else:
            relative = self._fallback_relative(directory, normalized)

        segments = [segment for segment in relative.split("/") if segment]
        if segments and segments[0].lower() == "art":
            segments = [segments[0], self.token, *segments[1:]]
        else:
            segments = [self.token, *segments]

        return self.target_level_root.joinpath(*segments, file_name)

    def _fallback_relative(self, directory: str, source: str) -> str:
        after_levels = split_after_levels(directory)
        if after_levels is None:
            self._report(Severity.WARNING, f"Filepath error in {source}: no levels folder in path.")
            return ""

        self._report(
            Severity.WARNING,
            f"Filepath {source} is not inside level '{self.source_level_name}', using its own level folder.",
        )
        # Drop the foreign level name segment
        return after_levels.partition("/")[2]

    def terrain_target_path(self, source: Path | str) -> Path:
        """Target path for a terrain surface texture (one flat folder)."""
        file_name = _normalize(source).rpartition("/")[2]
        return self.target_level_root.joinpath(*PurePosixPath(self.terrains_dir).parts, file_name)

    def virtual_path(self, fs_path: Path | str, strip_ext: bool = True) -> str | None:
        """Virtual ``levels/<level>/<relative>`` path for a filesystem path.

        Args:
            fs_path: Filesystem path containing a ``levels`` segment
            strip_ext: Drop the file extension, for fields that store
                extensionless resource ids

        Returns:
            The virtual path, or None if the path has no ``levels`` segment
        """
        normalized = strip_link_extension(_normalize(fs_path))
        relative = split_after_levels(normalized)
        if relative is None:
            self._report(Severity.ERROR, f"Filepath error in {fs_path}: no levels folder in path.")
            return None

        virtual = f"levels/{relative}"
        return strip_extension(virtual) if strip_ext else virtual

"""Shared fixtures: a source and a target level side by side under ``levels/``."""

from pathlib import Path

import pytest

from level_asset_copy.core.context import CopyContext, ScanSnapshot
from level_asset_copy.core.notify import LoggingNotifier


@pytest.fixture
def source_root(tmp_path: Path) -> Path:
    root = tmp_path / "levels" / "italy"
    root.mkdir(parents=True)
    return root


@pytest.fixture
def target_root(tmp_path: Path) -> Path:
    root = tmp_path / "levels" / "mine"
    root.mkdir(parents=True)
    return root


@pytest.fixture
def notifier() -> LoggingNotifier:
    return LoggingNotifier()


@pytest.fixture
def make_context(source_root: Path, target_root: Path, notifier: LoggingNotifier):
    """Build a CopyContext for italy -> mine, optionally with a scan snapshot."""

    def _make(snapshot: ScanSnapshot | None = None, **kwargs) -> CopyContext:
        return CopyContext(
            source_level_name="italy",
            source_level_root=source_root,
            target_level_root=target_root,
            snapshot=snapshot or ScanSnapshot(),
            notifier=notifier,
            **kwargs,
        )

    return _make


@pytest.fixture
def context(make_context) -> CopyContext:
    return make_context()

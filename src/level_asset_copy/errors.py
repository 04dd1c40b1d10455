"""Exception types raised by the asset copy engine.

Only a handful of conditions are raised as exceptions. Everything that is
expected to go wrong during a copy (a missing texture, a name collision,
a malformed groundcover line) is reported through the notifier and
signalled with a boolean return value instead.
"""

from pathlib import Path


class AssetCopyError(Exception):
    """Base class for all asset copy errors."""


class FileRetrievalError(AssetCopyError, FileNotFoundError):
    """Raised when a file could not be found on disk or in any archive."""

    def __init__(self, source: Path | str, attempts: list[str] | None = None):
        self.source = str(source)
        self.attempts = attempts or []
        message = f"Could not copy file: {self.source}"
        if self.attempts:
            message += f" (tried: {', '.join(self.attempts)})"
        super().__init__(message)


class AggregateParseError(AssetCopyError, ValueError):
    """Raised when an aggregate JSON file cannot be parsed."""

    def __init__(self, path: Path | str, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"{self.path} can't be parsed: {reason}")


class WorkListValidationError(AssetCopyError, ValueError):
    """Raised when a work-list document does not match its schema."""


class PlacementValidationError(AssetCopyError, ValueError):
    """Raised when a groundcover line is not a usable placement record."""

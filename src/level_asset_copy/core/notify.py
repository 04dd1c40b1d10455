"""Severity-tagged user notices.

Copiers never decide anything based on message text; they return a
success flag and report what happened through a ``Notifier``. The default
implementation forwards every notice to the standard ``logging`` module
and keeps the history so callers (and tests) can inspect it afterwards.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Protocol, runtime_checkable


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


_LOG_LEVELS = {
    Severity.INFO: logging.INFO,
    Severity.WARNING: logging.WARNING,
    Severity.ERROR: logging.ERROR,
}


@dataclass(frozen=True)
class Notice:
    severity: Severity
    message: str


@runtime_checkable
class Notifier(Protocol):
    """Receives human-readable notices from the copy engine."""

    def notify(self, severity: Severity, message: str) -> None:
        ...


class LoggingNotifier:
    """Notifier that logs each notice and remembers it.

    Example:
        >>> notifier = LoggingNotifier()
        >>> notifier.warning("Texture missing")
        >>> notifier.warnings
        ['Texture missing']
    """

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or logging.getLogger("level_asset_copy")
        self.messages: list[Notice] = []

    def notify(self, severity: Severity, message: str) -> None:
        self.messages.append(Notice(severity, message))
        self.logger.log(_LOG_LEVELS[severity], message)

    def info(self, message: str) -> None:
        self.notify(Severity.INFO, message)

    def warning(self, message: str) -> None:
        self.notify(Severity.WARNING, message)

    def error(self, message: str) -> None:
        self.notify(Severity.ERROR, message)

    @property
    def warnings(self) -> list[str]:
        return [n.message for n in self.messages if n.severity is Severity.WARNING]

    @property
    def errors(self) -> list[str]:
        return [n.message for n in self.messages if n.severity is Severity.ERROR]


class NoticeReporter:
    """Small mixin-style wrapper giving copiers info/warning/error shortcuts."""

    def __init__(self, notifier: Notifier):
        self._notifier = notifier

    def info(self, message: str) -> None:
        self._notifier.notify(Severity.INFO, message)

    def warning(self, message: str) -> None:
        self._notifier.notify(Severity.WARNING, message)

    def error(self, message: str) -> None:
        self._notifier.notify(Severity.ERROR, message)

"""Per-path audit trail for the prober.

A status check can stop at any of its stages, and the exception only
says how.  The prober therefore also appends one entry per stage it
reaches, tagged with the path being inspected, so a caller (the CLI's
``-v`` flag, the web API's ``/api/log``) can replay what happened to
each file.  A successful check ends with an INFO entry and a failing
stage ends with a WARNING naming the stage.
"""

from dataclasses import dataclass
from enum import IntEnum


class LogLevel(IntEnum):
    """How serious an entry is; higher values are worse."""

    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3


@dataclass(frozen=True)
class LogEntry:
    """One stage event.

    Attributes:
        level: The severity of this event.
        message: What the stage did or why it failed.
        source: The component that wrote the entry (e.g. "probe").
        path: The file the event is about, or "" for general events.

    """

    level: LogLevel
    message: str
    source: str
    path: str = ""

    def __str__(self) -> str:
        """Format as ``[LEVEL] source: path: message``."""
        if self.path:
            return f"[{self.level.name}] {self.source}: {self.path}: {self.message}"
        return f"[{self.level.name}] {self.source}: {self.message}"

    def to_dict(self) -> dict[str, str]:
        """Return the entry as a JSON-ready mapping."""
        return {
            "level": self.level.name,
            "message": self.message,
            "source": self.source,
            "path": self.path,
        }


class Logger:
    """In-memory list of ``LogEntry`` records, oldest first."""

    def __init__(self) -> None:
        """Create an empty logger."""
        self._entries: list[LogEntry] = []

    @property
    def entries(self) -> list[LogEntry]:
        """Return a copy of every entry."""
        return list(self._entries)

    def log(
        self,
        level: LogLevel,
        message: str,
        *,
        source: str,
        path: str = "",
    ) -> None:
        """Record one event about *path*."""
        self._entries.append(LogEntry(level=level, message=message, source=source, path=path))

    def filter(
        self,
        *,
        min_level: LogLevel | None = None,
        source: str | None = None,
        path: str | None = None,
    ) -> list[LogEntry]:
        """Select entries; every criterion given must match.

        Args:
            min_level: Keep entries at or above this level.
            source: Keep entries written by this component.
            path: Keep entries about this file.

        Returns:
            The matching entries, oldest first.

        """
        return [
            e
            for e in self._entries
            if (min_level is None or e.level >= min_level)
            and (source is None or e.source == source)
            and (path is None or e.path == path)
        ]

    def clear(self) -> None:
        """Forget every entry."""
        self._entries.clear()

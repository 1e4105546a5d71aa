from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

from .db import Database
from .models import EntryKind, LogEntry
from .tracker import utc_now


class ConsoleLike(Protocol):
    def print(self, *objects, **kwargs): ...


def format_entry(entry: LogEntry) -> str:
    stamp = entry.created_at_utc.astimezone().strftime("%H:%M:%S")
    if entry.message:
        return f"[{stamp}] {entry.kind.value}: {entry.message}"
    return f"[{stamp}] {entry.kind.value}"


class TimeLog:
    """Append-only record of session events.

    Every entry is kept in memory, persisted to the time_log table, echoed to
    the console (when one is attached) and appended as plain text to the log
    target file (when one is set).
    """

    def __init__(
        self,
        db: Database,
        console: ConsoleLike | None = None,
        target: Path | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.db = db
        self.console = console
        self.target = target
        self.logger = logger or logging.getLogger(__name__)
        self.entries: list[LogEntry] = []

    def add_entry(self, kind: EntryKind, message: str | None = None, color: str | None = None) -> LogEntry:
        entry = LogEntry(kind=kind, message=message or "", created_at_utc=utc_now(), color=color)
        self.entries.append(entry)
        self.db.add_log_entry(entry)
        self.logger.debug("Time log entry: kind=%s message=%r", kind.value, entry.message)

        line = format_entry(entry)
        if self.console is not None:
            self.console.print(line, style=color, markup=False, highlight=False)
        if self.target is not None:
            _append_line(self.target, line)
        return entry

    def set_target(self, target: Path) -> None:
        target = target.expanduser()
        target.parent.mkdir(parents=True, exist_ok=True)
        self.target = target
        self.logger.info("Time log target set to %s", target)

    def of_kind(self, kind: EntryKind) -> list[LogEntry]:
        return [entry for entry in self.entries if entry.kind is kind]

    def print_history(self) -> int:
        """Render every persisted entry to the console; return how many were shown."""
        history = self.db.list_log_entries()
        if self.console is None:
            return 0
        for entry in history:
            self.console.print(format_entry(entry), style=entry.color, markup=False, highlight=False)
        return len(history)


def _append_line(target: Path, line: str) -> None:
    with target.open("a", encoding="utf-8") as handle:
        handle.write(line + "\n")

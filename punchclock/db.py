from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from pathlib import Path

from .errors import AccessDeniedError, NamespaceMissingError
from .models import AccessRule, EntryKind, LogEntry

READ = "read"
WRITE = "write"
DELETE = "delete"
FULL_RIGHTS = frozenset({READ, WRITE, DELETE})


class Database:
    """Thin SQLite access layer for alias namespaces and the time log."""

    def __init__(self, db_path: str | Path) -> None:
        self._conn = sqlite3.connect(str(db_path))
        self._conn.row_factory = sqlite3.Row
        self._closed = False

    def close(self) -> None:
        if self._closed:
            return
        self._conn.close()
        self._closed = True

    def initialize(self) -> None:
        # namespaces: key-value containers addressed by a slash-separated path.
        # namespace_acl: per-account rights on a namespace.
        # namespace_values: name -> value pairs, enumerated in insertion order.
        # time_log: append-only session entries.
        self._conn.executescript(
            """
            CREATE TABLE IF NOT EXISTS namespaces (
              path TEXT PRIMARY KEY,
              created_at_utc TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS namespace_acl (
              path TEXT NOT NULL,
              account TEXT NOT NULL,
              rights TEXT NOT NULL,
              PRIMARY KEY (path, account)
            );

            CREATE TABLE IF NOT EXISTS namespace_values (
              path TEXT NOT NULL,
              name TEXT NOT NULL,
              value TEXT NOT NULL,
              PRIMARY KEY (path, name)
            );

            CREATE TABLE IF NOT EXISTS time_log (
              id INTEGER PRIMARY KEY AUTOINCREMENT,
              created_at_utc TEXT NOT NULL,
              kind TEXT NOT NULL,
              message TEXT NOT NULL,
              color TEXT
            );
            """
        )
        self._conn.commit()

    def namespace_exists(self, path: str) -> bool:
        row = self._conn.execute("SELECT 1 FROM namespaces WHERE path = ?", (path,)).fetchone()
        return row is not None

    def create_namespace(self, path: str, rules: list[AccessRule]) -> bool:
        """Create ``path`` with ``rules``; return False when it already exists."""
        if self.namespace_exists(path):
            return False

        now = datetime.now(timezone.utc).isoformat()
        self._conn.execute(
            "INSERT INTO namespaces (path, created_at_utc) VALUES (?, ?)",
            (path, now),
        )
        for rule in rules:
            self._conn.execute(
                """
                INSERT INTO namespace_acl (path, account, rights)
                VALUES (?, ?, ?)
                ON CONFLICT(path, account)
                DO UPDATE SET rights=excluded.rights
                """,
                (path, rule.account, ",".join(sorted(rule.rights))),
            )
        self._conn.commit()
        return True

    def get_access_rules(self, path: str) -> list[AccessRule]:
        rows = self._conn.execute(
            "SELECT account, rights FROM namespace_acl WHERE path = ? ORDER BY account",
            (path,),
        ).fetchall()
        return [
            AccessRule(account=row["account"], rights=frozenset(filter(None, row["rights"].split(","))))
            for row in rows
        ]

    def open_namespace(self, path: str, account: str, *, writable: bool = False) -> Namespace:
        if not self.namespace_exists(path):
            raise NamespaceMissingError(path)

        rules = [rule for rule in self.get_access_rules(path) if rule.account == account]
        needed = [READ, WRITE] if writable else [READ]
        for right in needed:
            if not any(rule.allows(right) for rule in rules):
                raise AccessDeniedError(path, account, right)

        return Namespace(self, path, writable=writable)

    def _set_value(self, path: str, name: str, value: str) -> None:
        # Upsert keeps the original rowid so enumeration order stays stable.
        self._conn.execute(
            """
            INSERT INTO namespace_values (path, name, value)
            VALUES (?, ?, ?)
            ON CONFLICT(path, name)
            DO UPDATE SET value=excluded.value
            """,
            (path, name, value),
        )
        self._conn.commit()

    def _get_value(self, path: str, name: str) -> str | None:
        row = self._conn.execute(
            "SELECT value FROM namespace_values WHERE path = ? AND name = ?",
            (path, name),
        ).fetchone()
        if row is None:
            return None
        return str(row["value"])

    def _value_names(self, path: str) -> list[str]:
        rows = self._conn.execute(
            "SELECT name FROM namespace_values WHERE path = ? ORDER BY rowid",
            (path,),
        ).fetchall()
        return [row["name"] for row in rows]

    def add_log_entry(self, entry: LogEntry) -> None:
        self._conn.execute(
            "INSERT INTO time_log (created_at_utc, kind, message, color) VALUES (?, ?, ?, ?)",
            (_to_utc(entry.created_at_utc).isoformat(), entry.kind.value, entry.message, entry.color),
        )
        self._conn.commit()

    def list_log_entries(self) -> list[LogEntry]:
        rows = self._conn.execute(
            "SELECT created_at_utc, kind, message, color FROM time_log ORDER BY id"
        ).fetchall()
        return [
            LogEntry(
                kind=EntryKind(row["kind"]),
                message=row["message"],
                created_at_utc=datetime.fromisoformat(row["created_at_utc"]),
                color=row["color"],
            )
            for row in rows
        ]


class Namespace:
    """Open handle on one key-value namespace."""

    def __init__(self, db: Database, path: str, *, writable: bool) -> None:
        self._db = db
        self.path = path
        self.writable = writable
        self._closed = False

    def __enter__(self) -> Namespace:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _check_open(self) -> None:
        if self._closed:
            raise ValueError(f"Namespace {self.path} is closed")

    def set_value(self, name: str, value: str) -> None:
        self._check_open()
        if not self.writable:
            raise AccessDeniedError(self.path, "<read-only handle>", WRITE)
        self._db._set_value(self.path, name, value)

    def get_value(self, name: str) -> str | None:
        self._check_open()
        return self._db._get_value(self.path, name)

    def value_names(self) -> list[str]:
        self._check_open()
        return self._db._value_names(self.path)

    def close(self) -> None:
        self._closed = True


def _to_utc(value: datetime) -> datetime:
    """Normalize a timezone-aware datetime to UTC for storage."""
    if value.tzinfo is None:
        raise ValueError("Datetime must be timezone-aware")
    return value.astimezone(timezone.utc)

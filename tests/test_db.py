from datetime import datetime, timezone

import pytest

from punchclock.db import READ, Database
from punchclock.errors import AccessDeniedError, NamespaceMissingError
from punchclock.models import AccessRule, EntryKind, LogEntry


def test_open_missing_namespace(db: Database) -> None:
    with pytest.raises(NamespaceMissingError):
        db.open_namespace("Software/Nothing", "tester")


def test_read_only_rule_blocks_writes(db: Database) -> None:
    db.create_namespace("ns", [AccessRule(account="reader", rights=frozenset({READ}))])

    with db.open_namespace("ns", "reader") as namespace:
        assert namespace.value_names() == []
        with pytest.raises(AccessDeniedError):
            namespace.set_value("a", "b")

    with pytest.raises(AccessDeniedError):
        db.open_namespace("ns", "reader", writable=True)


def test_values_keep_insertion_order_on_overwrite(db: Database) -> None:
    db.create_namespace("ns", [AccessRule(account="me", rights=frozenset({"read", "write", "delete"}))])

    with db.open_namespace("ns", "me", writable=True) as namespace:
        namespace.set_value("first", "1")
        namespace.set_value("second", "2")
        namespace.set_value("first", "3")

        assert namespace.value_names() == ["first", "second"]
        assert namespace.get_value("first") == "3"
        assert namespace.get_value("third") is None


def test_closed_namespace_rejects_access(db: Database) -> None:
    db.create_namespace("ns", [AccessRule(account="me", rights=frozenset({"read"}))])
    namespace = db.open_namespace("ns", "me")
    namespace.close()

    with pytest.raises(ValueError):
        namespace.value_names()


def test_log_entries_round_trip(db: Database) -> None:
    created = datetime(2026, 2, 1, 12, 0, 0, tzinfo=timezone.utc)
    db.add_log_entry(LogEntry(kind=EntryKind.POST, message="hello", created_at_utc=created))
    db.add_log_entry(LogEntry(kind=EntryKind.SYSTEM_ERROR, message="bad", created_at_utc=created, color="red"))

    entries = db.list_log_entries()

    assert [(entry.kind, entry.message, entry.color) for entry in entries] == [
        (EntryKind.POST, "hello", None),
        (EntryKind.SYSTEM_ERROR, "bad", "red"),
    ]
    assert entries[0].created_at_utc == created


def test_naive_datetimes_rejected(db: Database) -> None:
    with pytest.raises(ValueError):
        db.add_log_entry(LogEntry(kind=EntryKind.POST, message="x", created_at_utc=datetime(2026, 2, 1)))

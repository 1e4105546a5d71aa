import pytest

from punchclock.aliases import AliasStore, split_targets
from punchclock.db import FULL_RIGHTS
from punchclock.errors import AccessDeniedError, NamespaceMissingError
from punchclock.models import AccessRule, EntryKind
from punchclock.processes import TrackedProcesses
from punchclock.timelog import TimeLog

NAMESPACE = "Software/TLCS/Alias"


def _store(db, process_control, *, account: str = "tester", match: str = "substring") -> AliasStore:
    return AliasStore(
        db,
        TimeLog(db),
        TrackedProcesses(process_control),
        namespace=NAMESPACE,
        account=account,
        match=match,
    )


def test_split_targets_drops_blank_segments() -> None:
    assert split_targets("a| b ||c") == ["a", "b", "c"]
    assert split_targets("notepad") == ["notepad"]


def test_resolve_without_namespace_is_empty(db, process_control) -> None:
    store = _store(db, process_control)

    assert store.resolve("db") == ""


def test_resolve_first_substring_match(db, process_control) -> None:
    store = _store(db, process_control)
    assert store.ensure_namespace() is True
    store.put("mydb2", "pgadmin")
    store.put("db", "sqlite3")

    assert store.resolve("db") == "pgadmin"
    assert store.resolve("my") == "pgadmin"
    assert store.resolve("missing") == ""
    assert store.resolve("") == ""


def test_exact_match_policy(db, process_control) -> None:
    store = _store(db, process_control, match="exact")
    store.ensure_namespace()
    store.put("mydb2", "pgadmin")
    store.put("db", "sqlite3")

    assert store.resolve("db") == "sqlite3"
    assert store.resolve("my") == ""


def test_put_requires_namespace(db, process_control) -> None:
    store = _store(db, process_control)

    with pytest.raises(NamespaceMissingError):
        store.put("work", "code")


def test_put_requires_write_access(db, process_control) -> None:
    db.create_namespace(NAMESPACE, [AccessRule(account="owner", rights=FULL_RIGHTS)])
    store = _store(db, process_control, account="guest")

    with pytest.raises(AccessDeniedError):
        store.put("work", "code")


def test_ensure_namespace_is_idempotent(db, process_control) -> None:
    store = _store(db, process_control)

    assert store.ensure_namespace() is True
    assert store.ensure_namespace() is False
    assert db.get_access_rules(NAMESPACE) == [AccessRule(account="tester", rights=FULL_RIGHTS)]


def test_launch_failures_do_not_stop_siblings(db, process_control) -> None:
    process_control.failures = {"b"}
    store = _store(db, process_control)

    handles = store.resolve_and_launch("a|b|c")

    assert len(handles) == 2
    assert process_control.started == ["a", "c"]
    successes = store.log.of_kind(EntryKind.SYSTEM_POST)
    errors = store.log.of_kind(EntryKind.SYSTEM_ERROR)
    assert [entry.message for entry in successes] == [
        "Process a started successfully!",
        "Process c started successfully!",
    ]
    assert len(errors) == 1
    assert errors[0].message.startswith("Failed to execute process b...")


def test_alias_targets_replace_input(db, process_control) -> None:
    store = _store(db, process_control)
    store.ensure_namespace()
    store.put("work", "code|term")

    store.resolve_and_launch("work")

    assert process_control.started == ["code", "term"]
    assert [info.name for info in store.processes.snapshot] == ["code", "term"]


def test_missing_store_launches_input_once(db, process_control) -> None:
    store = _store(db, process_control)

    store.resolve_and_launch("notepad")

    assert process_control.started == ["notepad"]


def test_unreadable_store_launches_nothing(db, process_control) -> None:
    db.create_namespace(NAMESPACE, [AccessRule(account="owner", rights=FULL_RIGHTS)])
    store = _store(db, process_control, account="guest")

    assert store.resolve_and_launch("notepad") == []
    assert process_control.started == []
    assert len(store.log.of_kind(EntryKind.SYSTEM_ERROR)) == 1

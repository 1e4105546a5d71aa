from __future__ import annotations

import logging

from .db import FULL_RIGHTS, Database
from .errors import AccessDeniedError, InvalidArgumentError, LaunchError, NamespaceMissingError
from .models import AccessRule, EntryKind
from .processes import ProcessControl, TrackedProcesses
from .timelog import TimeLog

MULTI_ALIAS_DELIMITER = "|"
MATCH_SUBSTRING = "substring"
MATCH_EXACT = "exact"


def split_targets(value: str) -> list[str]:
    return [part.strip() for part in value.split(MULTI_ALIAS_DELIMITER) if part.strip()]


class AliasStore:
    """Alias name -> launch target(s), persisted in a key-value namespace."""

    def __init__(
        self,
        db: Database,
        log: TimeLog,
        processes: TrackedProcesses,
        *,
        namespace: str,
        account: str,
        match: str = MATCH_SUBSTRING,
        logger: logging.Logger | None = None,
    ) -> None:
        if match not in (MATCH_SUBSTRING, MATCH_EXACT):
            raise ValueError(f"Unknown alias match policy: {match}")
        self.db = db
        self.log = log
        self.processes = processes
        self.namespace = namespace
        self.account = account
        self.match = match
        self.logger = logger or logging.getLogger(__name__)

    @property
    def control(self) -> ProcessControl:
        return self.processes.control

    def _matches(self, stored_name: str, name: str) -> bool:
        if self.match == MATCH_EXACT:
            return stored_name == name
        return name in stored_name

    def resolve(self, name: str) -> str:
        """Return the target of the first alias matching ``name``, or ''."""
        if not name:
            return ""

        try:
            namespace = self.db.open_namespace(self.namespace, self.account)
        except NamespaceMissingError:
            self.logger.debug("Alias namespace %s missing; resolving %r to nothing", self.namespace, name)
            return ""

        with namespace:
            for stored_name in namespace.value_names():
                if self._matches(stored_name, name):
                    return namespace.get_value(stored_name) or ""
        return ""

    def put(self, name: str, target: str) -> None:
        if not name:
            raise InvalidArgumentError("Alias name must not be empty")
        if not split_targets(target):
            raise InvalidArgumentError(f"Alias {name} needs at least one process")

        with self.db.open_namespace(self.namespace, self.account, writable=True) as namespace:
            namespace.set_value(name, target)
        self.logger.info("Alias %s -> %s stored", name, target)

    def ensure_namespace(self) -> bool:
        rule = AccessRule(account=self.account, rights=FULL_RIGHTS)
        created = self.db.create_namespace(self.namespace, [rule])
        if created:
            self.logger.info("Created alias namespace %s for %s", self.namespace, self.account)
        return created

    def resolve_and_launch(self, text: str) -> list:
        try:
            resolved = self.resolve(text)
        except AccessDeniedError as exc:
            self.log.add_entry(
                EntryKind.SYSTEM_ERROR,
                f"Failed to execute process {text}... REASON: {exc}",
                "red",
            )
            return []

        targets = split_targets(resolved or text)
        if not targets:
            self.log.add_entry(EntryKind.SYSTEM_ERROR, "Failed to execute process... REASON: Empty launch target", "red")
            return []

        # Each target launches independently; one failure does not stop the rest.
        handles = []
        for target in targets:
            try:
                handle = self.control.start(target)
            except LaunchError as exc:
                self.log.add_entry(
                    EntryKind.SYSTEM_ERROR,
                    f"Failed to execute process {target}... REASON: {exc.reason}",
                    "red",
                )
                continue

            handles.append(handle)
            self.processes.refresh()
            self.log.add_entry(EntryKind.SYSTEM_POST, f"Process {target} started successfully!", "yellow")
        return handles

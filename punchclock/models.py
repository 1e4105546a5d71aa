from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class SessionStatus(Enum):
    INACTIVE = "inactive"
    ACTIVE = "active"
    ONREST = "onrest"


class EntryKind(Enum):
    PUNCHIN = "PUNCHIN"
    PUNCHOUT = "PUNCHOUT"
    POST = "POST"
    PROCESS_START_REQUEST = "PROCESS_START_REQUEST"
    SYSTEM_POST = "SYSTEM_POST"
    SYSTEM_ERROR = "SYSTEM_ERROR"
    NULL = "NULL"


class TimerKind(Enum):
    SEGMENT = "segment"
    CUMULATIVE = "cumulative"


@dataclass(frozen=True, slots=True)
class Elapsed:
    # Each field is the whole duration in that unit, not a component of it.
    hours: float
    minutes: float
    seconds: float


@dataclass(frozen=True, slots=True)
class LogEntry:
    kind: EntryKind
    message: str
    created_at_utc: datetime
    color: str | None = None


@dataclass(frozen=True, slots=True)
class AccessRule:
    account: str
    rights: frozenset[str]

    def allows(self, right: str) -> bool:
        return right in self.rights


@dataclass(frozen=True, slots=True)
class ProcessInfo:
    name: str
    pid: int

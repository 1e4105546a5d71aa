from __future__ import annotations

import logging
from datetime import datetime

from .models import EntryKind, SessionStatus, TimerKind
from .reporter import runtime_summary
from .timelog import TimeLog
from .tracker import DurationTracker, utc_now

SESSION_COLOR = "green"


class SessionStateMachine:
    """Session status plus the two timers it drives.

    Transitions are unconditional: punch_in/resume -> ACTIVE, rest -> ONREST,
    punch_out/end -> INACTIVE.
    """

    def __init__(self, log: TimeLog, tracker: DurationTracker, logger: logging.Logger | None = None) -> None:
        self.log = log
        self.tracker = tracker
        self.logger = logger or logging.getLogger(__name__)
        self.status = SessionStatus.INACTIVE
        self.last_punch_in: datetime | None = None
        self.last_punch_out: datetime | None = None
        self.finished = False

    def _set_status(self, status: SessionStatus) -> None:
        self.logger.debug("Session status %s -> %s", self.status.name, status.name)
        self.status = status

    def summary(self) -> str:
        return runtime_summary(self.tracker)

    def punch_in(self) -> None:
        if self.finished:
            # Re-entry after END opens a fresh session.
            self.tracker.reset()
            self.finished = False

        self.last_punch_in = utc_now()
        self.tracker.begin_segment()
        self._set_status(SessionStatus.ACTIVE)
        self.log.add_entry(EntryKind.PUNCHIN, color=SESSION_COLOR)

    def rest(self) -> None:
        self.log.add_entry(EntryKind.PUNCHOUT, self.summary(), SESSION_COLOR)
        self.tracker.pause()
        self.last_punch_out = utc_now()
        self._set_status(SessionStatus.ONREST)

    def resume(self) -> None:
        self.log.add_entry(EntryKind.PUNCHIN, self.summary(), SESSION_COLOR)
        self.tracker.begin_segment()
        self.last_punch_in = utc_now()
        self._set_status(SessionStatus.ACTIVE)

    def punch_out(self) -> None:
        self.log.add_entry(EntryKind.PUNCHOUT, self.summary(), SESSION_COLOR)
        self.tracker.pause()
        self.last_punch_out = utc_now()
        self._set_status(SessionStatus.INACTIVE)

    def end(self) -> None:
        self.tracker.pause()
        self.finished = True
        self._set_status(SessionStatus.INACTIVE)
        self.log.add_entry(EntryKind.PUNCHOUT, "End of Time Logging Session!", SESSION_COLOR)

    def elapsed_value(self, which: TimerKind, unit: str) -> float:
        return getattr(self.tracker.elapsed(which), unit)

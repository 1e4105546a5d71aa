from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Callable

from .models import Elapsed, TimerKind

Clock = Callable[[], float]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_elapsed(total_seconds: float) -> str:
    """Render a duration as HH:MM:SS.cc (hundredths of a second)."""
    safe_hundredths = max(0, int(round(total_seconds * 100)))
    whole_seconds, hundredths = divmod(safe_hundredths, 100)
    hours, remainder = divmod(whole_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours:02}:{minutes:02}:{seconds:02}.{hundredths:02}"


class Stopwatch:
    """Pausable elapsed-time counter sampled from a monotonic clock on demand."""

    def __init__(self, clock: Clock = time.monotonic) -> None:
        self._clock = clock
        self._accumulated = 0.0
        self._started_at: float | None = None

    @property
    def is_running(self) -> bool:
        return self._started_at is not None

    def start(self) -> None:
        if self._started_at is None:
            self._started_at = self._clock()

    def stop(self) -> None:
        if self._started_at is None:
            return
        self._accumulated += self._clock() - self._started_at
        self._started_at = None

    def reset(self) -> None:
        self._accumulated = 0.0
        self._started_at = None

    def restart(self) -> None:
        self.reset()
        self.start()

    def elapsed_seconds(self) -> float:
        if self._started_at is None:
            return self._accumulated
        return self._accumulated + (self._clock() - self._started_at)


class DurationTracker:
    def __init__(self, clock: Clock = time.monotonic) -> None:
        self.segment = Stopwatch(clock)
        self.cumulative = Stopwatch(clock)

    def _timer(self, which: TimerKind) -> Stopwatch:
        return self.segment if which is TimerKind.SEGMENT else self.cumulative

    def begin_segment(self) -> None:
        # Segment always starts from zero; cumulative continues where it paused.
        self.segment.restart()
        self.cumulative.start()

    def pause(self) -> None:
        self.segment.stop()
        self.cumulative.stop()

    def reset(self) -> None:
        self.segment.reset()
        self.cumulative.reset()

    def elapsed(self, which: TimerKind) -> Elapsed:
        seconds = self._timer(which).elapsed_seconds()
        return Elapsed(hours=seconds / 3600, minutes=seconds / 60, seconds=seconds)

    def formatted(self, which: TimerKind) -> str:
        return format_elapsed(self._timer(which).elapsed_seconds())

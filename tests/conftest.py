from pathlib import Path

import pytest

from punchclock.config import Config
from punchclock.db import Database
from punchclock.errors import LaunchError, ProcessControlError
from punchclock.main import PunchClockApp
from punchclock.models import ProcessInfo


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeProcessControl:
    def __init__(self, failures: set[str] | None = None) -> None:
        self.failures = failures or set()
        self.started: list[str] = []
        self.stopped: list[int] = []
        self.running: list[ProcessInfo] = []
        self.stop_failures: set[int] = set()
        self._next_pid = 100

    def start(self, target: str) -> int:
        if target in self.failures:
            raise LaunchError(target, f"cannot find {target}")
        self._next_pid += 1
        self.started.append(target)
        self.running.append(ProcessInfo(name=target, pid=self._next_pid))
        return self._next_pid

    def list_running(self) -> list[ProcessInfo]:
        return list(self.running)

    def stop(self, pid: int) -> None:
        if pid in self.stop_failures:
            raise ProcessControlError(f"Access denied stopping process {pid}")
        self.stopped.append(pid)
        self.running = [info for info in self.running if info.pid != pid]


def make_config(**overrides) -> Config:
    values = {
        "db_path": Path(":memory:"),
        "alias_namespace": "Software/TLCS/Alias",
        "account": "tester",
        "system_events_enabled": False,
        "log_target": None,
        "alias_match": "substring",
    }
    values.update(overrides)
    return Config(**values)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def db():
    database = Database(":memory:")
    database.initialize()
    yield database
    database.close()


@pytest.fixture
def process_control() -> FakeProcessControl:
    return FakeProcessControl()


@pytest.fixture
def make_app(db, clock, process_control):
    def factory(**overrides) -> PunchClockApp:
        return PunchClockApp(
            make_config(**overrides),
            db,
            process_control=process_control,
            clock=clock,
        )

    return factory

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from pathlib import PurePath
from typing import Protocol

import psutil

from .errors import LaunchError, ProcessControlError
from .models import ProcessInfo


class ProcessControl(Protocol):
    def start(self, target: str): ...

    def list_running(self) -> list[ProcessInfo]: ...

    def stop(self, pid: int) -> None: ...


def process_name_matches(process_name: str, wanted: str) -> bool:
    """Match either the full executable name or its name without extension."""
    if not wanted:
        return False
    candidate = process_name.lower()
    wanted = wanted.lower()
    return candidate == wanted or PurePath(candidate).stem == wanted


class ProcessController:
    """Starts targets with subprocess and inspects/stops processes with psutil."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger(__name__)

    def start(self, target: str) -> subprocess.Popen | None:
        """Launch ``target`` verbatim as one program; spaces and quotes belong to the path."""
        target = target.strip()
        if not target:
            raise LaunchError(target, "Empty launch target")

        if os.name == "nt":
            # Shell association, like double-clicking the path.
            try:
                os.startfile(target)
            except OSError as exc:
                raise LaunchError(target, exc.strerror or str(exc)) from exc
            self.logger.debug("Started %s via shell association", target)
            return None

        program = shutil.which(target) or target
        try:
            proc = subprocess.Popen([program], shell=False)
        except OSError as exc:
            raise LaunchError(target, exc.strerror or str(exc)) from exc

        self.logger.debug("Started %s (pid=%s)", target, proc.pid)
        return proc

    def list_running(self) -> list[ProcessInfo]:
        running: list[ProcessInfo] = []
        for proc in psutil.process_iter(["pid", "name"]):
            name = proc.info.get("name")
            if not name:
                continue
            running.append(ProcessInfo(name=name, pid=proc.info["pid"]))
        return running

    def stop(self, pid: int) -> None:
        try:
            psutil.Process(pid).terminate()
        except psutil.NoSuchProcess:
            self.logger.debug("Process %s already exited", pid)
        except psutil.AccessDenied as exc:
            raise ProcessControlError(f"Access denied stopping process {pid}") from exc


class TrackedProcesses:
    """Snapshot of running processes used to find close targets by name."""

    def __init__(self, control: ProcessControl) -> None:
        self.control = control
        self._snapshot: list[ProcessInfo] | None = None

    @property
    def snapshot(self) -> list[ProcessInfo]:
        if self._snapshot is None:
            self.refresh()
        return list(self._snapshot or [])

    def refresh(self) -> None:
        self._snapshot = self.control.list_running()

    def find(self, name: str) -> list[ProcessInfo]:
        return [info for info in self.snapshot if process_name_matches(info.name, name)]

    def close(self, name: str) -> int:
        """Stop every tracked process named ``name``; return how many were stopped.

        A pid that cannot be stopped does not keep the others running; the
        failures are raised together once the snapshot has been pruned.
        """
        stopped: set[int] = set()
        failures: list[str] = []
        for info in self.find(name):
            try:
                self.control.stop(info.pid)
            except ProcessControlError as exc:
                failures.append(str(exc))
                continue
            stopped.add(info.pid)

        if stopped:
            self._snapshot = [info for info in self.snapshot if info.pid not in stopped]
        if failures:
            raise ProcessControlError(
                f"Stopped {len(stopped)} {name} process(es); failed: {'; '.join(failures)}"
            )
        return len(stopped)

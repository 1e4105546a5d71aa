from __future__ import annotations


class PunchClockError(Exception):
    """Recoverable condition reported as a single time-log entry."""


class AccessDeniedError(PunchClockError):
    def __init__(self, path: str, account: str, right: str) -> None:
        super().__init__(f"Account {account} lacks {right} access on {path}")
        self.path = path
        self.account = account
        self.right = right


class NamespaceMissingError(PunchClockError):
    def __init__(self, path: str) -> None:
        super().__init__(f"Namespace {path} does not exist")
        self.path = path


class LaunchError(PunchClockError):
    def __init__(self, target: str, reason: str) -> None:
        super().__init__(reason)
        self.target = target
        self.reason = reason


class ProcessControlError(PunchClockError):
    pass


class InvalidArgumentError(PunchClockError):
    pass

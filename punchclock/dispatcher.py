from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from .errors import InvalidArgumentError, PunchClockError
from .models import EntryKind
from .timelog import TimeLog


class CommandKeyword(Enum):
    # Definition order is dispatch order.
    POST = "POST"
    IN = "IN"
    REST = "REST"
    RESUME = "RESUME"
    OUT = "OUT"
    OPEN = "OPEN"
    CLOSE = "CLOSE"
    HOTKEY = "HOTKEY"
    SYSLIS = "SYSLIS"
    LOGTAR = "LOGTAR"
    SESTIM = "SESTIM"
    PRINT = "PRINT"
    NEWALI = "NEWALI"
    GENALIKEY = "GENALIKEY"
    GETHRS = "GETHRS"
    GETMINS = "GETMINS"
    GETSECS = "GETSECS"
    HELP = "HELP"
    END = "END"


_QUOTED = re.compile(r'"([^"]*)(?:"|$)')


def quoted_tokens(raw: str) -> list[str]:
    """Return the double-quoted strings of ``raw`` in order of appearance.

    An unterminated quote runs to the end of the string.
    """
    return [match.group(1) for match in _QUOTED.finditer(raw)]


@dataclass(frozen=True, slots=True)
class Invocation:
    token: str
    args: tuple[str, ...]
    quoted: tuple[str, ...]

    @classmethod
    def parse(cls, args: Sequence[str], raw: str | None = None) -> Invocation:
        if raw is None:
            raw = " ".join(args)
        return cls(token=args[0], args=tuple(args[1:]), quoted=tuple(quoted_tokens(raw)))

    def arg(self, index: int, default: str | None = None) -> str | None:
        """Positional argument ``index`` with any surrounding double quotes removed."""
        if index < len(self.args):
            return self.args[index].strip('"')
        return default

    def payload(self, index: int, *, rest: bool = False) -> str:
        """First quoted token is the primary payload, second the secondary one.

        Without any quotes on the line the positional arguments are used
        instead; ``rest`` joins every argument from ``index`` onward so that
        single-payload commands keep multi-word input.
        """
        if self.quoted:
            if index < len(self.quoted):
                return self.quoted[index]
        elif index < len(self.args):
            if rest:
                return " ".join(self.args[index:])
            return self.args[index]

        position = "primary" if index == 0 else "secondary"
        raise InvalidArgumentError(f"Missing {position} payload for {self.token}")

    def payloads(self, count: int) -> tuple[str, ...]:
        """Exactly ``count`` payloads; unquoted extra words are rejected, not dropped."""
        if not self.quoted and len(self.args) > count:
            raise InvalidArgumentError(
                f"{self.token} takes {count} payloads; quote values that contain spaces"
            )
        return tuple(self.payload(index) for index in range(count))


Handler = Callable[[Invocation], None]


@dataclass(frozen=True, slots=True)
class Command:
    keyword: CommandKeyword
    handler: Handler


class CommandRegistry:
    """Closed keyword set -> exactly one handler each."""

    def __init__(self) -> None:
        self._handlers: dict[CommandKeyword, Handler] = {}

    def command(self, keyword: CommandKeyword) -> Callable[[Handler], Handler]:
        def decorator(func: Handler) -> Handler:
            if keyword in self._handlers:
                raise ValueError(f"Duplicate handler for {keyword.name}")
            self._handlers[keyword] = func
            return func

        return decorator

    def validate(self) -> None:
        missing = [keyword.name for keyword in CommandKeyword if keyword not in self._handlers]
        if missing:
            raise ValueError(f"Commands without a handler: {', '.join(missing)}")

    @property
    def commands(self) -> list[Command]:
        return [Command(keyword, self._handlers[keyword]) for keyword in CommandKeyword if keyword in self._handlers]

    def matching(self, token: str) -> list[Command]:
        # Every keyword contained in the token fires, not just the first.
        upper = token.upper()
        return [command for command in self.commands if command.keyword.value in upper]


class CommandDispatcher:
    def __init__(self, registry: CommandRegistry, log: TimeLog, logger: logging.Logger | None = None) -> None:
        registry.validate()
        self.registry = registry
        self.log = log
        self.logger = logger or logging.getLogger(__name__)

    def dispatch(self, args: Sequence[str], raw: str | None = None) -> list[CommandKeyword]:
        if not args:
            return []

        invocation = Invocation.parse(args, raw)
        fired: list[CommandKeyword] = []
        for command in self.registry.matching(invocation.token):
            fired.append(command.keyword)
            try:
                command.handler(invocation)
            except PunchClockError as exc:
                self.logger.warning("%s failed: %s", command.keyword.name, exc)
                self.log.add_entry(EntryKind.SYSTEM_ERROR, f"{command.keyword.name} failed. REASON: {exc}", "red")

        if not fired:
            self.logger.debug("No command matched %r", invocation.token)
        return fired

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum

from .models import TimerKind
from .tracker import DurationTracker

# Keyword -> one-line usage, rendered by HELP.
COMMAND_USAGE = {
    "POST": 'post "<note>"  record a note',
    "IN": "in  punch in",
    "REST": "rest  start a break",
    "RESUME": "resume  end a break",
    "OUT": "out  punch out",
    "OPEN": 'open "<path|alias>"  launch a process or alias',
    "CLOSE": 'close "<name>"  stop tracked processes with that name',
    "HOTKEY": "hotkey <key> <command number>  bind ALT+key to a command",
    "SYSLIS": "syslisten <true|false>  enable or disable system events",
    "LOGTAR": 'logtarget "<file>"  also write the time log to a file',
    "SESTIM": "sestime  show session and cumulative runtime",
    "PRINT": "print  show the full time log",
    "NEWALI": 'newalias "<process[|process...]>" "<alias>"  store an alias',
    "GENALIKEY": "genalikey  create the alias store",
    "GETHRS": "gethrs [1]  runtime in hours (1 = current segment)",
    "GETMINS": "getmins [1]  runtime in minutes (1 = current segment)",
    "GETSECS": "getsecs [1]  runtime in seconds (1 = current segment)",
    "HELP": "help  list commands",
    "END": "end  end the time logging session",
}


def runtime_summary(tracker: DurationTracker) -> str:
    return (
        f"SESSION RUNTIME: {tracker.formatted(TimerKind.SEGMENT)} | "
        f"CUMULATIVE SESSION RUNTIME: {tracker.formatted(TimerKind.CUMULATIVE)}"
    )


def build_help_text(keywords: Iterable[Enum]) -> str:
    lines = ["Commands (matched anywhere in the first word, case-insensitive):"]
    for number, keyword in enumerate(keywords, start=1):
        usage = COMMAND_USAGE.get(keyword.name, keyword.name.lower())
        lines.append(f"{number:>2}. {keyword.name:<10} {usage}")
    return "\n".join(lines)

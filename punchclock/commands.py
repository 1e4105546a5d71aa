from __future__ import annotations

from pathlib import Path

from .dispatcher import CommandKeyword, CommandRegistry, Invocation
from .errors import AccessDeniedError, InvalidArgumentError, NamespaceMissingError, PunchClockError
from .models import EntryKind, TimerKind
from .reporter import build_help_text

SYSTEM_COLOR = "yellow"
ERROR_COLOR = "red"
SEGMENT_SELECTOR = 1

_TRUE_VALUES = {"true", "1", "yes", "on"}
_FALSE_VALUES = {"false", "0", "no", "off"}


def parse_timer_selector(value: str | None) -> TimerKind:
    """``1`` selects the segment timer; anything else falls back to cumulative."""
    try:
        selector = int(value) if value is not None else None
    except ValueError:
        selector = None
    return TimerKind.SEGMENT if selector == SEGMENT_SELECTOR else TimerKind.CUMULATIVE


def parse_flag(value: str | None) -> bool:
    normalized = (value or "").strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise InvalidArgumentError(f"Expected true or false, got {value!r}")


def register_commands(app) -> CommandRegistry:
    """Register every command handler on a fresh registry. Called once during setup."""
    registry = CommandRegistry()
    log = app.log
    session = app.session

    def system_events_enabled(keyword: CommandKeyword) -> bool:
        if not app.system_events_enabled:
            app.logger.debug("Ignoring %s while system events are disabled", keyword.name)
            return False
        return True

    @registry.command(CommandKeyword.POST)
    def post(invocation: Invocation) -> None:
        log.add_entry(EntryKind.POST, invocation.payload(0, rest=True))

    @registry.command(CommandKeyword.IN)
    def punch_in(invocation: Invocation) -> None:
        session.punch_in()

    @registry.command(CommandKeyword.REST)
    def rest(invocation: Invocation) -> None:
        session.rest()

    @registry.command(CommandKeyword.RESUME)
    def resume(invocation: Invocation) -> None:
        session.resume()

    @registry.command(CommandKeyword.OUT)
    def punch_out(invocation: Invocation) -> None:
        session.punch_out()

    @registry.command(CommandKeyword.OPEN)
    def open_process(invocation: Invocation) -> None:
        if not system_events_enabled(CommandKeyword.OPEN):
            return

        target = invocation.payload(0, rest=True)
        log.add_entry(EntryKind.PROCESS_START_REQUEST, f"Opening {target}...", SYSTEM_COLOR)
        app.aliases.resolve_and_launch(target)

    @registry.command(CommandKeyword.CLOSE)
    def close_process(invocation: Invocation) -> None:
        if not system_events_enabled(CommandKeyword.CLOSE):
            return

        name = invocation.payload(0, rest=True)
        log.add_entry(EntryKind.SYSTEM_POST, f"Closing {name}...", SYSTEM_COLOR)
        stopped = app.processes.close(name)
        if stopped == 0:
            log.add_entry(EntryKind.SYSTEM_POST, f"No tracked process named {name}.", SYSTEM_COLOR)

    @registry.command(CommandKeyword.HOTKEY)
    def hotkey(invocation: Invocation) -> None:
        if not system_events_enabled(CommandKeyword.HOTKEY):
            return

        key = invocation.arg(0)
        number = invocation.arg(1)
        if not key or len(key) != 1:
            raise InvalidArgumentError(f"Hotkey must be a single character, got {key!r}")

        keywords = list(CommandKeyword)
        try:
            index = int(number or "")
        except ValueError as exc:
            raise InvalidArgumentError(f"Command number must be an integer, got {number!r}") from exc
        if not 1 <= index <= len(keywords):
            raise InvalidArgumentError(f"Command number must be between 1 and {len(keywords)}")

        target = keywords[index - 1]
        app.hotkeys[key.upper()] = target
        log.add_entry(
            EntryKind.SYSTEM_POST,
            f"Key {key} set to {target.name} command.\nHold ALT then the hotkey you've registered.",
            SYSTEM_COLOR,
        )

    @registry.command(CommandKeyword.SYSLIS)
    def system_listen(invocation: Invocation) -> None:
        app.system_events_enabled = parse_flag(invocation.arg(0))
        message = (
            "System Now Listening. System Events will now be logged."
            if app.system_events_enabled
            else "System Has Stopped Listening. System Events will not be logged."
        )
        log.add_entry(EntryKind.SYSTEM_POST, message, SYSTEM_COLOR)

    @registry.command(CommandKeyword.LOGTAR)
    def log_target(invocation: Invocation) -> None:
        target = Path(invocation.payload(0, rest=True))
        try:
            log.set_target(target)
        except OSError as exc:
            raise InvalidArgumentError(f"Cannot use {target} as log target: {exc}") from exc
        log.add_entry(EntryKind.SYSTEM_POST, f"Time log now also written to {log.target}", SYSTEM_COLOR)

    @registry.command(CommandKeyword.SESTIM)
    def session_time(invocation: Invocation) -> None:
        log.add_entry(EntryKind.NULL, session.summary())

    @registry.command(CommandKeyword.PRINT)
    def print_log(invocation: Invocation) -> None:
        shown = log.print_history()
        app.logger.debug("Printed %d time log entries", shown)

    @registry.command(CommandKeyword.NEWALI)
    def new_alias(invocation: Invocation) -> None:
        if not system_events_enabled(CommandKeyword.NEWALI):
            return

        target, name = invocation.payloads(2)
        try:
            app.aliases.put(name, target)
        except AccessDeniedError as exc:
            log.add_entry(
                EntryKind.SYSTEM_ERROR,
                f"Failed to add new alias {name}.\nREASON CODE: {exc}",
                ERROR_COLOR,
            )
            return
        except NamespaceMissingError as exc:
            log.add_entry(
                EntryKind.SYSTEM_ERROR,
                f"Failed to add new alias {name}.\nREASON CODE: {exc}\n"
                'Does the alias store exist?\nIf not, use command "genalikey"',
                ERROR_COLOR,
            )
            return

        log.add_entry(
            EntryKind.SYSTEM_POST,
            f"Alias {name} added successfully!\nProcess(s): {target}",
            SYSTEM_COLOR,
        )

    @registry.command(CommandKeyword.GENALIKEY)
    def generate_alias_store(invocation: Invocation) -> None:
        if not system_events_enabled(CommandKeyword.GENALIKEY):
            return

        try:
            created = app.aliases.ensure_namespace()
        except PunchClockError as exc:
            log.add_entry(EntryKind.SYSTEM_ERROR, f"Failed to generate alias store.\nREASON CODE: {exc}", ERROR_COLOR)
            return

        if created:
            log.add_entry(EntryKind.SYSTEM_POST, "Alias store has been generated...", SYSTEM_COLOR)
        else:
            log.add_entry(EntryKind.SYSTEM_POST, "Alias store has already been generated.", SYSTEM_COLOR)

    def report_runtime(invocation: Invocation, unit: str) -> None:
        which = parse_timer_selector(invocation.arg(0))
        value = session.elapsed_value(which, unit)
        log.add_entry(EntryKind.NULL, f"Session Runtime in {unit.capitalize()}: {value}")

    @registry.command(CommandKeyword.GETHRS)
    def get_hours(invocation: Invocation) -> None:
        report_runtime(invocation, "hours")

    @registry.command(CommandKeyword.GETMINS)
    def get_minutes(invocation: Invocation) -> None:
        report_runtime(invocation, "minutes")

    @registry.command(CommandKeyword.GETSECS)
    def get_seconds(invocation: Invocation) -> None:
        report_runtime(invocation, "seconds")

    @registry.command(CommandKeyword.HELP)
    def show_help(invocation: Invocation) -> None:
        log.add_entry(EntryKind.NULL, build_help_text(CommandKeyword))

    @registry.command(CommandKeyword.END)
    def end(invocation: Invocation) -> None:
        session.end()

    registry.validate()
    return registry

from __future__ import annotations

import logging
import sys
import time
from collections.abc import Sequence

from dotenv import load_dotenv
from rich.console import Console

from .aliases import AliasStore
from .commands import register_commands
from .config import Config, load_config
from .db import Database
from .dispatcher import CommandDispatcher, CommandKeyword
from .processes import ProcessControl, ProcessController, TrackedProcesses
from .session import SessionStateMachine
from .timelog import ConsoleLike, TimeLog
from .tracker import Clock, DurationTracker

PROMPT = "> "


class PunchClockApp:
    """Owns one time-logging session: its log, timers, aliases and command table."""

    def __init__(
        self,
        config: Config,
        db: Database,
        *,
        console: ConsoleLike | None = None,
        process_control: ProcessControl | None = None,
        clock: Clock = time.monotonic,
    ) -> None:
        self.config = config
        self.db = db
        self.logger = logging.getLogger("punchclock")

        self.log = TimeLog(db, console=console)
        if config.log_target is not None:
            self.log.set_target(config.log_target)

        self.session = SessionStateMachine(self.log, DurationTracker(clock))
        self.processes = TrackedProcesses(process_control or ProcessController())
        self.aliases = AliasStore(
            db,
            self.log,
            self.processes,
            namespace=config.alias_namespace,
            account=config.account,
            match=config.alias_match,
        )

        # Gates every command that touches processes or the alias store.
        self.system_events_enabled = config.system_events_enabled
        self.hotkeys: dict[str, CommandKeyword] = {}

        self.registry = register_commands(self)
        self.dispatcher = CommandDispatcher(self.registry, self.log)

    def dispatch(self, args: Sequence[str], raw: str | None = None) -> list[CommandKeyword]:
        return self.dispatcher.dispatch(args, raw)

    def handle_line(self, line: str) -> list[CommandKeyword]:
        args = line.split()
        if not args:
            return []
        return self.dispatch(args, raw=line)

    def run(self, lines) -> None:
        for line in lines:
            self.handle_line(line.rstrip("\n"))
            if self.session.finished:
                return

    def close(self) -> None:
        self.db.close()


def configure_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )


def _prompted_lines(console: Console):
    while True:
        try:
            yield console.input(PROMPT)
        except EOFError:
            return


def main(argv: Sequence[str] | None = None) -> None:
    load_dotenv()
    configure_logging()

    config = load_config()
    db = Database(config.db_path)
    db.initialize()

    console = Console(highlight=False)
    app = PunchClockApp(config=config, db=db, console=console)
    app.logger.info("Session started for %s (db=%s)", config.account, config.db_path)

    argv = list(sys.argv[1:] if argv is None else argv)
    try:
        if argv:
            app.dispatch(argv)
        if not app.session.finished:
            app.run(_prompted_lines(console))
    except KeyboardInterrupt:
        app.logger.info("Interrupted")
    finally:
        app.close()


if __name__ == "__main__":
    main()

"""Command-line entry point.

    taskerie list
    taskerie run build -p env=prod
"""

import argparse
import sys
from pathlib import Path
from typing import TextIO

import structlog

from .config import get_settings
from .errors import TaskerieError
from .events import (
    CommandFailed,
    CommandOutput,
    CommandStarted,
    CommandSucceeded,
    MissingRequiredParameter,
    ProgressEvent,
    WorkingDirectoryNotFound,
)
from .log import configure_logging
from .runner import TaskRunner
from .tasks.models import ExitOutcome

logger = structlog.get_logger("cli")

EXIT_CODES = {
    ExitOutcome.SUCCEEDED: 0,
    ExitOutcome.FAILED: 1,
    ExitOutcome.UNDETERMINED: 2,
}


def format_event(event: ProgressEvent) -> str:
    """Human-readable line for a progress event."""
    if isinstance(event, CommandStarted):
        return f"> {event.command}  [{event.working_directory}]"
    if isinstance(event, CommandOutput):
        return event.line
    if isinstance(event, CommandSucceeded):
        return f"✓ {event.command}"
    if isinstance(event, CommandFailed):
        return f"✗ {event.command} (exit code {event.exit_code})"
    if isinstance(event, MissingRequiredParameter):
        return f"! task '{event.task}' requires parameter '{event.parameter}'"
    if isinstance(event, WorkingDirectoryNotFound):
        return f"! task '{event.task}': working directory {event.path} does not exist"
    raise TypeError(f"Unknown event {event!r}")


def parse_param(raw: str) -> tuple[str, str]:
    name, sep, value = raw.partition("=")
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"expected KEY=VALUE, got '{raw}'")
    return name, value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="taskerie", description="Run tasks from a task file.")
    parser.add_argument("-c", "--config", type=Path, help="task file (default: taskerie.yaml)")

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("list", help="list tasks that need no parameters")

    run = sub.add_parser("run", help="run a task")
    run.add_argument("task")
    run.add_argument(
        "-p",
        "--param",
        dest="params",
        action="append",
        type=parse_param,
        default=[],
        metavar="KEY=VALUE",
        help="parameter value, may be repeated",
    )
    return parser


def main(argv: list[str] | None = None, out: TextIO = sys.stdout) -> int:
    """Entry point for the taskerie command."""
    args = build_parser().parse_args(argv)

    settings = get_settings()
    configure_logging(settings)

    try:
        runner = TaskRunner.from_file(args.config, settings=settings)

        if args.command == "list":
            for name in runner.list_runnable_task_names():
                print(name, file=out)
            return 0

        run = runner.run_task(args.task, dict(args.params))
        for event in run:
            print(format_event(event), file=out, flush=True)
        outcome = run.result()
    except TaskerieError as e:
        logger.error("run_error", error=str(e))
        print(f"error: {e}", file=sys.stderr)
        return 2

    return EXIT_CODES[outcome]


if __name__ == "__main__":
    sys.exit(main())

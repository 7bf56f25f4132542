"""Subprocess executor - runs rendered command lines through the shell."""

import subprocess
from pathlib import Path

from ..errors import ProcessSpawnError
from ..events import CommandFailed, CommandOutput, CommandStarted, CommandSucceeded, EventSink
from ..tasks.models import ExitOutcome
from .base import BaseExecutor


class SubprocessExecutor(BaseExecutor):
    """Spawn one shell process per command and stream its output."""

    def execute(self, command: str, working_directory: Path, sink: EventSink) -> ExitOutcome:
        directory = str(working_directory)
        sink.send(CommandStarted(command=command, working_directory=directory))

        try:
            proc = subprocess.Popen(
                command,
                shell=True,
                executable=self.settings.shell,
                cwd=directory,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                encoding=self.settings.output_encoding,
                errors="replace",
                bufsize=1,  # line-buffered
            )
        except OSError as e:
            raise ProcessSpawnError(command, str(e)) from e

        with proc:
            for line in proc.stdout:
                sink.send(CommandOutput(line=line.rstrip("\r\n")))
            exit_code = proc.wait()

        if exit_code == 0:
            sink.send(CommandSucceeded(command=command, working_directory=directory))
            return ExitOutcome.SUCCEEDED

        sink.send(CommandFailed(command=command, working_directory=directory, exit_code=exit_code))
        return ExitOutcome.FAILED

"""Base executor interface."""

import time
from abc import ABC, abstractmethod
from pathlib import Path

import structlog

from ..config import Settings
from ..events import EventSink
from ..tasks.models import ExitOutcome

logger = structlog.get_logger("executor")


class BaseExecutor(ABC):
    """Base class for command executors."""

    def __init__(self, settings: Settings):
        self.settings = settings

    @abstractmethod
    def execute(self, command: str, working_directory: Path, sink: EventSink) -> ExitOutcome:
        """Run a rendered command line, reporting progress to ``sink``."""

    def run_with_timing(
        self, command: str, working_directory: Path, sink: EventSink
    ) -> ExitOutcome:
        """Execute with timing measurement."""
        start = time.perf_counter()
        outcome = self.execute(command, working_directory, sink)
        elapsed_ms = int((time.perf_counter() - start) * 1000)
        logger.debug(
            "command_finished",
            command=command,
            outcome=outcome.value,
            duration_ms=elapsed_ms,
        )
        return outcome

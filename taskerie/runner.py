"""Task runner - runs tasks on a background thread and streams their events.

The caller iterates a TaskRun to receive progress events; the iteration
ends when the execution thread closes the channel, after which result()
returns the outcome (or re-raises the error that aborted the run).
"""

import threading
from collections.abc import Iterator, Mapping
from pathlib import Path

import structlog

from .config import Settings, get_settings
from .engine import Engine
from .errors import UnknownTaskError
from .events import EventChannel, ProgressEvent
from .executors.base import BaseExecutor
from .executors.subprocess_executor import SubprocessExecutor
from .grammar.render import ParameterContext
from .loader import load
from .tasks.models import ExitOutcome
from .tasks.registry import RegistryHandle, TaskRegistry

logger = structlog.get_logger("runner")


class TaskRun:
    """One top-level run executing on its own thread."""

    def __init__(self, engine: Engine, name: str, context: ParameterContext):
        self.name = name
        self._engine = engine
        self._context = context
        self._channel = EventChannel()
        self._outcome: ExitOutcome | None = None
        self._error: Exception | None = None
        self._thread = threading.Thread(target=self._execute, name=f"taskerie-{name}", daemon=True)

    def start(self) -> "TaskRun":
        self._thread.start()
        return self

    def _execute(self) -> None:
        try:
            self._outcome = self._engine.run(self.name, self._context, self._channel)
        except Exception as e:
            logger.error("run_aborted", task=self.name, error=str(e))
            self._error = e
        finally:
            self._channel.close()

    @property
    def done(self) -> bool:
        """True once the run has finished and sent its last event."""
        return self._channel.closed

    def __iter__(self) -> Iterator[ProgressEvent]:
        return iter(self._channel)

    def result(self) -> ExitOutcome:
        """Wait for the run to finish and return its outcome.

        Remaining events are drained and discarded. Raises the hard error
        that aborted the run, if any.
        """
        for _ in self._channel:
            pass
        self._thread.join()
        if self._error is not None:
            raise self._error
        return self._outcome


class TaskRunner:
    """Front-end facing entry point: list, run and reload tasks."""

    def __init__(
        self,
        registry: TaskRegistry,
        settings: Settings | None = None,
        executor: BaseExecutor | None = None,
    ):
        self.settings = settings or get_settings()
        self.executor = executor or SubprocessExecutor(self.settings)
        self.handle = RegistryHandle(registry)
        self.config_path: Path | None = None

    @classmethod
    def from_file(
        cls,
        path: str | Path | None = None,
        settings: Settings | None = None,
        executor: BaseExecutor | None = None,
    ) -> "TaskRunner":
        settings = settings or get_settings()
        path = Path(path) if path is not None else settings.config_path
        runner = cls(load(path), settings=settings, executor=executor)
        runner.config_path = path
        return runner

    @property
    def registry(self) -> TaskRegistry:
        return self.handle.current

    def list_runnable_task_names(self) -> list[str]:
        """Names of standalone tasks, in file order."""
        return self.registry.runnable_task_names()

    def run_task(self, name: str, initial_context: Mapping[str, str] | None = None) -> TaskRun:
        """Start ``name`` on a new thread and return the run to consume."""
        registry = self.registry
        if name not in registry:
            raise UnknownTaskError(name)

        logger.info("run_started", task=name)
        engine = Engine(registry, self.executor)
        return TaskRun(engine, name, ParameterContext(initial_context)).start()

    def reload(self, path: str | Path | None = None) -> TaskRegistry:
        """Load the task file again and make it current for new runs.

        Runs already in flight keep the snapshot they started with.
        """
        path = Path(path) if path is not None else self.config_path or self.settings.config_path
        registry = load(path)
        self.handle.swap(registry)
        self.config_path = path
        logger.info("registry_reloaded", path=str(path), tasks=len(registry))
        return registry

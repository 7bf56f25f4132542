"""Execution engine - runs one task, its nested task calls and its hooks."""

from collections.abc import Sequence
from pathlib import Path

import structlog

from .errors import CyclicInvocationError, UnknownTaskError
from .events import EventSink, MissingRequiredParameter, WorkingDirectoryNotFound
from .executors.base import BaseExecutor
from .grammar.render import ParameterContext, render, render_command
from .tasks.models import Action, Command, ExitOutcome, Task, TaskCall
from .tasks.registry import TaskRegistry

logger = structlog.get_logger("engine")


class Engine:
    """Runs tasks from one registry snapshot.

    All work happens on the calling thread: nested calls and hooks run
    sequentially, and every event is sent to the sink in production order.
    """

    def __init__(self, registry: TaskRegistry, executor: BaseExecutor):
        self.registry = registry
        self.executor = executor

    def run(self, name: str, context: ParameterContext, sink: EventSink) -> ExitOutcome:
        """Look up ``name`` and run it."""
        return self.run_task(self._lookup(name), context, sink, name=name)

    def run_task(
        self,
        task: Task,
        context: ParameterContext,
        sink: EventSink,
        name: str = "<task>",
        _chain: tuple[str, ...] = (),
    ) -> ExitOutcome:
        """Run ``task`` with ``context`` and return its outcome.

        ``context`` is modified in place: missing parameters receive their
        defaults.
        """
        chain = _chain + (name,)
        log = logger.bind(task=name, depth=len(_chain))

        for param_name, param in task.params.items():
            if param_name in context:
                continue
            if param.is_required:
                log.warning("missing_required_parameter", parameter=param_name)
                sink.send(MissingRequiredParameter(task=name, parameter=param_name))
                return ExitOutcome.UNDETERMINED
            context.set(param_name, param.default)

        working_directory = self._resolve_working_directory(task, context)
        if not working_directory.is_dir():
            log.warning("working_directory_not_found", path=str(working_directory))
            sink.send(WorkingDirectoryNotFound(task=name, path=str(working_directory)))
            return ExitOutcome.UNDETERMINED

        log.info("task_started", actions=len(task.actions))

        outcome = ExitOutcome.SUCCEEDED
        for action in task.actions:
            outcome = self._run_action(action, context, working_directory, sink, chain)
            if not outcome.is_success:
                break

        if outcome.is_success:
            self._run_hooks("on_success", task.on_success, context, working_directory, sink, chain)
            log.info("task_succeeded")
        else:
            log.warning("task_failed", outcome=outcome.value)
            self._run_hooks("on_failure", task.on_failure, context, working_directory, sink, chain)

        return outcome

    def _lookup(self, name: str) -> Task:
        task = self.registry.get(name)
        if task is None:
            raise UnknownTaskError(name)
        return task

    def _resolve_working_directory(self, task: Task, context: ParameterContext) -> Path:
        base = self.registry.base_directory
        if task.working_directory is None:
            return base
        return base / Path(render(task.working_directory, context)).expanduser()

    def _run_action(
        self,
        action: Action,
        context: ParameterContext,
        working_directory: Path,
        sink: EventSink,
        chain: tuple[str, ...],
    ) -> ExitOutcome:
        if isinstance(action, Command):
            command = render_command(action, context)
            return self.executor.run_with_timing(command, working_directory, sink)

        return self._call_task(action, context, sink, chain)

    def _call_task(
        self,
        call: TaskCall,
        context: ParameterContext,
        sink: EventSink,
        chain: tuple[str, ...],
    ) -> ExitOutcome:
        if call.name in chain:
            raise CyclicInvocationError(list(chain) + [call.name])

        target = self._lookup(call.name)

        # Bindings are rendered against the caller; the callee sees nothing else
        callee_context = ParameterContext()
        for param_name, value in call.params.items():
            callee_context.set(param_name, render(value, context))

        return self.run_task(target, callee_context, sink, name=call.name, _chain=chain)

    def _run_hooks(
        self,
        hook: str,
        actions: Sequence[Action],
        context: ParameterContext,
        working_directory: Path,
        sink: EventSink,
        chain: tuple[str, ...],
    ) -> None:
        for index, action in enumerate(actions):
            outcome = self._run_action(action, context, working_directory, sink, chain)
            if not outcome.is_success:
                logger.warning(
                    "hook_failed",
                    task=chain[-1],
                    hook=hook,
                    index=index,
                    outcome=outcome.value,
                )

# tests/test_runner.py

from __future__ import annotations

from pathlib import Path

import pytest

from taskerie.errors import UnboundVariableError, UnknownTaskError
from taskerie.events import CommandOutput, CommandStarted, CommandSucceeded, MissingRequiredParameter
from taskerie.runner import TaskRunner
from taskerie.tasks.models import ExitOutcome

from .fakes import FakeExecutor

TASKS = """
tasks:
  greet:
    params:
      name: world
    actions:
      - echo hello ${name}
  needs:
    params:
      value: {}
    actions:
      - echo ${value}
  broken:
    actions:
      - echo ${undefined}
"""


@pytest.fixture()
def task_file(tmp_path: Path) -> Path:
    path = tmp_path / "taskerie.yaml"
    path.write_text(TASKS, encoding="utf-8")
    return path


def test_run_streams_events_then_outcome(task_file: Path, settings) -> None:
    runner = TaskRunner.from_file(task_file, settings=settings)

    run = runner.run_task("greet")
    events = list(run)

    assert run.result() is ExitOutcome.SUCCEEDED
    assert run.done
    assert [type(e) for e in events] == [CommandStarted, CommandOutput, CommandSucceeded]
    assert events[1] == CommandOutput(line="hello world")


def test_initial_context_is_passed_to_the_task(task_file: Path, settings) -> None:
    executor = FakeExecutor()
    runner = TaskRunner.from_file(task_file, settings=settings, executor=executor)

    assert runner.run_task("needs", {"value": "42"}).result() is ExitOutcome.SUCCEEDED
    assert executor.commands == ["echo 42"]


def test_initial_context_is_not_modified(task_file: Path, settings) -> None:
    runner = TaskRunner.from_file(task_file, settings=settings, executor=FakeExecutor())
    initial: dict[str, str] = {}

    runner.run_task("greet", initial).result()

    assert initial == {}


def test_missing_parameter_is_reported_as_event(task_file: Path, settings) -> None:
    runner = TaskRunner.from_file(task_file, settings=settings, executor=FakeExecutor())

    run = runner.run_task("needs")
    events = list(run)

    assert events == [MissingRequiredParameter(task="needs", parameter="value")]
    assert run.result() is ExitOutcome.UNDETERMINED


def test_hard_error_is_raised_from_result(task_file: Path, settings) -> None:
    runner = TaskRunner.from_file(task_file, settings=settings, executor=FakeExecutor())

    run = runner.run_task("broken")

    assert list(run) == []
    with pytest.raises(UnboundVariableError):
        run.result()


def test_unknown_task_fails_before_starting(task_file: Path, settings) -> None:
    runner = TaskRunner.from_file(task_file, settings=settings)

    with pytest.raises(UnknownTaskError):
        runner.run_task("nope")


def test_list_runnable_task_names(task_file: Path, settings) -> None:
    runner = TaskRunner.from_file(task_file, settings=settings)

    assert runner.list_runnable_task_names() == ["greet", "broken"]


def test_reload_swaps_registry_for_new_runs(task_file: Path, settings) -> None:
    executor = FakeExecutor()
    runner = TaskRunner.from_file(task_file, settings=settings, executor=executor)
    old = runner.registry

    task_file.write_text(
        """
tasks:
  fresh:
    actions:
      - echo new
""",
        encoding="utf-8",
    )
    new = runner.reload()

    assert runner.registry is new
    assert new is not old
    assert runner.list_runnable_task_names() == ["fresh"]
    # The old snapshot is untouched
    assert "greet" in old
    assert runner.run_task("fresh").result() is ExitOutcome.SUCCEEDED
    assert executor.commands == ["echo new"]


def test_from_file_uses_settings_path(task_file: Path, settings) -> None:
    settings.config_path = task_file

    runner = TaskRunner.from_file(settings=settings)

    assert runner.config_path == task_file
    assert "greet" in runner.registry

# tests/test_loader.py

from __future__ import annotations

from pathlib import Path

import pytest

from taskerie.errors import ActionSyntaxError, ConfigError
from taskerie.loader import load, loads
from taskerie.tasks.models import Command, Literal, Parameter, TaskCall, Variable

EXAMPLE = """
tasks:
  build:
    working_directory: ${root}/app
    params:
      root: .
      profile: {default: debug}
      jobs: 4
    actions:
      - cargo build --profile ${profile} -j ${jobs}
    on_success:
      - _notify --message "built ${profile}"
    on_failure:
      - _notify --message failed
  notify:
    params:
      message: {}
    actions:
      - echo ${message}
  clean:
    actions:
      - cargo clean
"""


def test_load_builds_tasks_in_file_order(tmp_path: Path) -> None:
    path = tmp_path / "taskerie.yaml"
    path.write_text(EXAMPLE, encoding="utf-8")

    registry = load(path)

    assert registry.names() == ["build", "notify", "clean"]
    assert registry.base_directory == tmp_path.resolve()


def test_actions_are_parsed_at_load_time() -> None:
    build = loads(EXAMPLE).get("build")

    assert build.actions == (
        Command(
            name="cargo",
            arguments=(
                (Literal("build"),),
                (Literal("--profile"),),
                (Variable("profile"),),
                (Literal("-j"),),
                (Variable("jobs"),),
            ),
        ),
    )
    assert build.on_success == (
        TaskCall(name="notify", params={"message": (Literal("built "), Variable("profile"))}),
    )
    assert build.working_directory == (Variable("root"), Literal("/app"))


def test_parameter_declarations() -> None:
    registry = loads(EXAMPLE)

    assert dict(registry.get("build").params) == {
        "root": Parameter(default="."),
        "profile": Parameter(default="debug"),
        "jobs": Parameter(default="4"),
    }
    assert registry.get("notify").params["message"].is_required


def test_null_parameter_is_required() -> None:
    registry = loads(
        """
tasks:
  greet:
    params:
      name:
    actions:
      - echo ${name}
"""
    )

    assert registry.get("greet").required_params == ["name"]


def test_runnable_names_exclude_tasks_with_required_params() -> None:
    assert loads(EXAMPLE).runnable_task_names() == ["build", "clean"]


def test_empty_document_gives_empty_registry() -> None:
    assert len(loads("")) == 0


def test_syntax_error_aborts_loading() -> None:
    text = """
tasks:
  ok:
    actions:
      - echo fine
  broken:
    actions:
      - echo fine
      - echo "unterminated
"""

    with pytest.raises(ConfigError) as exc:
        loads(text, source="tasks.yaml")

    message = str(exc.value)
    assert "broken" in message
    assert "actions[1]" in message
    assert isinstance(exc.value.__cause__, ActionSyntaxError)
    assert exc.value.__cause__.offset == len('echo "unterminated')


def test_syntax_error_in_hook_is_reported() -> None:
    text = """
tasks:
  t:
    actions: []
    on_failure:
      - _
"""

    with pytest.raises(ConfigError, match="on_failure"):
        loads(text)


def test_bad_working_directory_template() -> None:
    text = """
tasks:
  t:
    working_directory: ${oops
    actions: []
"""

    with pytest.raises(ConfigError, match="working_directory"):
        loads(text)


def test_unknown_keys_are_rejected() -> None:
    text = """
tasks:
  t:
    action: [echo typo]
"""

    with pytest.raises(ConfigError):
        loads(text)


def test_invalid_yaml() -> None:
    with pytest.raises(ConfigError, match="invalid YAML"):
        loads("tasks: [unclosed")


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="Cannot read"):
        load(tmp_path / "nope.yaml")


def test_unknown_call_target_loads() -> None:
    registry = loads(
        """
tasks:
  main:
    actions:
      - _ghost
"""
    )

    assert registry.get("main").actions == (TaskCall(name="ghost", params={}),)


@pytest.mark.parametrize("raw", ["1.10", "0755", "true", "no", "2024-01-01", "1e3"])
def test_defaults_keep_their_text(raw: str) -> None:
    registry = loads(f"tasks:\n  t:\n    params:\n      v: {raw}\n    actions:\n      - echo ${{v}}\n")

    assert registry.get("t").params["v"].default == raw


def test_explicit_default_keeps_its_text() -> None:
    registry = loads(
        """
tasks:
  t:
    params:
      version: {default: 1.10}
    working_directory: 2024-01-01
    actions:
      - echo ${version}
"""
    )

    task = registry.get("t")
    assert task.params["version"].default == "1.10"
    assert task.working_directory == (Literal("2024-01-01"),)


def test_null_still_means_required() -> None:
    registry = loads("tasks:\n  t:\n    params:\n      a: ~\n      b: null\n    actions: []\n")

    assert registry.get("t").required_params == ["a", "b"]

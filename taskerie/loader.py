"""Task file loader - YAML document to TaskRegistry.

Every action line is parsed here, so a registry that loads successfully
can only fail at run time on rendering or on the structure of task calls.
"""

from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ActionSyntaxError, ConfigError
from .grammar.parser import parse_action, parse_template
from .tasks.models import Action, Parameter, Task, TaskCall
from .tasks.registry import TaskRegistry

logger = structlog.get_logger("loader")

# Numbers, booleans and dates are read as text, exactly as written
_TEXT_ONLY_TAGS = {
    "tag:yaml.org,2002:bool",
    "tag:yaml.org,2002:float",
    "tag:yaml.org,2002:int",
    "tag:yaml.org,2002:timestamp",
}


class TaskFileLoader(yaml.SafeLoader):
    """SafeLoader that keeps scalars as text, e.g. ``1.10``, ``0755`` or ``true``."""


TaskFileLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag not in _TEXT_ONLY_TAGS]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


class ParamConfig(BaseModel):
    """A parameter declaration; no default means the parameter is required."""

    model_config = ConfigDict(extra="forbid")

    default: str | None = Field(default=None)


class TaskConfig(BaseModel):
    """One task as written in the task file."""

    model_config = ConfigDict(extra="forbid")

    working_directory: str | None = Field(default=None)
    params: dict[str, ParamConfig] = Field(default_factory=dict)
    actions: list[str] = Field(default_factory=list)
    on_success: list[str] = Field(default_factory=list)
    on_failure: list[str] = Field(default_factory=list)

    @field_validator("params", mode="before")
    @classmethod
    def expand_shorthand(cls, value: Any) -> Any:
        """Accept ``name: value`` as shorthand for ``name: {default: value}``."""
        if value is None:
            return {}
        if not isinstance(value, dict):
            return value
        expanded = {}
        for name, declared in value.items():
            if declared is None:
                declared = {}
            elif not isinstance(declared, dict):
                declared = {"default": declared}
            expanded[name] = declared
        return expanded


class RootConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    tasks: dict[str, TaskConfig] = Field(default_factory=dict)


def load(path: str | Path) -> TaskRegistry:
    """Load a task file into a new registry.

    Raises ConfigError on I/O, YAML, schema or action syntax problems.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read task file {path}: {e}") from e

    registry = loads(text, base_directory=path.resolve().parent, source=str(path))
    logger.info("registry_loaded", path=str(path), tasks=registry.names())
    return registry


def loads(
    text: str,
    base_directory: Path | None = None,
    source: str = "<string>",
) -> TaskRegistry:
    """Build a registry from task file text."""
    try:
        document = yaml.load(text, Loader=TaskFileLoader)
    except yaml.YAMLError as e:
        raise ConfigError(f"{source}: invalid YAML: {e}") from e

    try:
        root = RootConfig.model_validate(document or {})
    except ValidationError as e:
        raise ConfigError(f"{source}: invalid task file:\n{e}") from e

    tasks = {name: build_task(name, config, source) for name, config in root.tasks.items()}
    _warn_unknown_targets(tasks, source)
    return TaskRegistry(tasks, base_directory=base_directory)


def build_task(name: str, config: TaskConfig, source: str = "<string>") -> Task:
    """Parse every action line of one task."""

    def parse_section(section: str, lines: list[str]) -> tuple[Action, ...]:
        actions = []
        for index, line in enumerate(lines):
            try:
                actions.append(parse_action(line))
            except ActionSyntaxError as e:
                raise ConfigError(
                    f"{source}: task '{name}', {section}[{index}]: {e}\n  {line}\n  {' ' * e.offset}^"
                ) from e
        return tuple(actions)

    working_directory = None
    if config.working_directory is not None:
        try:
            working_directory = parse_template(config.working_directory)
        except ActionSyntaxError as e:
            raise ConfigError(f"{source}: task '{name}', working_directory: {e}") from e

    return Task(
        actions=parse_section("actions", config.actions),
        on_success=parse_section("on_success", config.on_success),
        on_failure=parse_section("on_failure", config.on_failure),
        params={
            param_name: Parameter(default=param.default)
            for param_name, param in config.params.items()
        },
        working_directory=working_directory,
    )


def _warn_unknown_targets(tasks: dict[str, Task], source: str) -> None:
    for name, task in tasks.items():
        for action in (*task.actions, *task.on_success, *task.on_failure):
            if isinstance(action, TaskCall) and action.name not in tasks:
                logger.warning("unknown_task_reference", source=source, task=name, target=action.name)

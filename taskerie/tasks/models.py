"""Task models - the parsed, immutable form of the task file."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType


class ExitOutcome(str, Enum):
    """Outcome of a command or task run."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"

    # No process ran: a required parameter or the working directory was missing
    UNDETERMINED = "undetermined"

    @property
    def is_success(self) -> bool:
        return self is ExitOutcome.SUCCEEDED


@dataclass(frozen=True)
class Literal:
    """Literal text inside an argument."""

    text: str


@dataclass(frozen=True)
class Variable:
    """Reference to a parameter, filled in at render time."""

    name: str


Component = Literal | Variable

# One argument: components concatenated in order at render time
Argument = tuple[Component, ...]


@dataclass(frozen=True)
class Command:
    """Run an external program through the shell."""

    name: str
    arguments: tuple[Argument, ...] = ()


@dataclass(frozen=True)
class TaskCall:
    """Invoke another task with explicit parameter bindings."""

    name: str
    params: Mapping[str, Argument] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "params", MappingProxyType(dict(self.params)))


Action = Command | TaskCall


@dataclass(frozen=True)
class Parameter:
    """A declared task parameter."""

    default: str | None = None

    @property
    def is_required(self) -> bool:
        return self.default is None


@dataclass(frozen=True)
class Task:
    """A named sequence of actions with success/failure hooks."""

    actions: tuple[Action, ...] = ()
    on_success: tuple[Action, ...] = ()
    on_failure: tuple[Action, ...] = ()
    params: Mapping[str, Parameter] = field(default_factory=dict)
    working_directory: tuple[Component, ...] | None = None

    def __post_init__(self):
        # Freeze the mapping so a registry snapshot cannot be altered
        object.__setattr__(self, "params", MappingProxyType(dict(self.params)))

    @property
    def required_params(self) -> list[str]:
        return [name for name, param in self.params.items() if param.is_required]

    @property
    def is_standalone(self) -> bool:
        """True when the task can run without caller-supplied parameters."""
        return not self.required_params

"""Local task automation: declarative tasks, parsed actions, streamed progress."""

from .engine import Engine
from .errors import (
    ActionSyntaxError,
    ConfigError,
    CyclicInvocationError,
    ProcessSpawnError,
    TaskerieError,
    UnboundVariableError,
    UnknownTaskError,
)
from .loader import load, loads
from .runner import TaskRun, TaskRunner
from .tasks.models import ExitOutcome

__version__ = "0.1.0"

__all__ = [
    "Engine",
    "ActionSyntaxError",
    "ConfigError",
    "CyclicInvocationError",
    "ProcessSpawnError",
    "TaskerieError",
    "UnboundVariableError",
    "UnknownTaskError",
    "load",
    "loads",
    "TaskRun",
    "TaskRunner",
    "ExitOutcome",
]

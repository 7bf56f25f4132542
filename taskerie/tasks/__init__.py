"""Task definitions and the registry that holds them."""

from .models import (
    Action,
    Argument,
    Command,
    Component,
    ExitOutcome,
    Literal,
    Parameter,
    Task,
    TaskCall,
    Variable,
)
from .registry import RegistryHandle, TaskRegistry

__all__ = [
    "Action",
    "Argument",
    "Command",
    "Component",
    "ExitOutcome",
    "Literal",
    "Parameter",
    "Task",
    "TaskCall",
    "Variable",
    "RegistryHandle",
    "TaskRegistry",
]

"""Exception hierarchy for taskerie."""


class TaskerieError(Exception):
    """Base class for every error raised by taskerie."""


class ConfigError(TaskerieError):
    """The task file could not be read, decoded or validated."""


class ActionSyntaxError(TaskerieError):
    """An action line does not follow the action grammar."""

    def __init__(self, message: str, offset: int):
        super().__init__(f"{message} (at column {offset})")
        self.message = message
        self.offset = offset


class UnboundVariableError(TaskerieError):
    """A variable was referenced but has no value in the parameter context."""

    def __init__(self, name: str):
        super().__init__(f"Variable '{name}' is not bound")
        self.name = name


class UnknownTaskError(TaskerieError):
    """A task name does not exist in the registry."""

    def __init__(self, name: str):
        super().__init__(f"Task '{name}' is not defined")
        self.name = name


class CyclicInvocationError(TaskerieError):
    """A task invokes itself, directly or through other tasks."""

    def __init__(self, chain: list[str]):
        super().__init__("Cyclic task invocation: " + " -> ".join(chain))
        self.chain = chain


class ProcessSpawnError(TaskerieError):
    """The shell process for a command could not be started."""

    def __init__(self, command: str, reason: str):
        super().__init__(f"Could not start '{command}': {reason}")
        self.command = command
        self.reason = reason


class ChannelClosedError(TaskerieError):
    """An event was sent on a channel that was already closed."""

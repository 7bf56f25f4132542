"""Progress events and the channel that carries them to a consumer."""

import queue
from collections.abc import Iterator
from dataclasses import dataclass
from typing import ClassVar, Protocol

from .errors import ChannelClosedError


@dataclass(frozen=True)
class MissingRequiredParameter:
    """A required parameter had no value; the task did not run."""

    kind: ClassVar[str] = "missing_required_parameter"

    task: str
    parameter: str


@dataclass(frozen=True)
class WorkingDirectoryNotFound:
    """The task's working directory does not exist; the task did not run."""

    kind: ClassVar[str] = "working_directory_not_found"

    task: str
    path: str


@dataclass(frozen=True)
class CommandStarted:
    """A command is about to be spawned."""

    kind: ClassVar[str] = "command_started"

    command: str
    working_directory: str


@dataclass(frozen=True)
class CommandOutput:
    """One line of combined stdout/stderr, without its line ending."""

    kind: ClassVar[str] = "command_output"

    line: str


@dataclass(frozen=True)
class CommandSucceeded:
    kind: ClassVar[str] = "command_succeeded"

    command: str
    working_directory: str


@dataclass(frozen=True)
class CommandFailed:
    kind: ClassVar[str] = "command_failed"

    command: str
    working_directory: str
    exit_code: int


ProgressEvent = (
    MissingRequiredParameter
    | WorkingDirectoryNotFound
    | CommandStarted
    | CommandOutput
    | CommandSucceeded
    | CommandFailed
)


class EventSink(Protocol):
    """Anything that accepts progress events in production order."""

    def send(self, event: ProgressEvent) -> None: ...


_CLOSED = object()


class EventChannel:
    """Ordered single-producer/single-consumer event channel.

    The producer calls send() and finally close(); the consumer iterates,
    blocking until the next event, and the iteration ends once the channel
    is closed and drained.
    """

    def __init__(self):
        self._queue: queue.SimpleQueue = queue.SimpleQueue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, event: ProgressEvent) -> None:
        if self._closed:
            raise ChannelClosedError(f"Cannot send {event.kind} on a closed channel")
        self._queue.put(event)

    def close(self) -> None:
        """Signal the consumer that no more events will arrive."""
        if not self._closed:
            self._closed = True
            self._queue.put(_CLOSED)

    def __iter__(self) -> Iterator[ProgressEvent]:
        while True:
            item = self._queue.get()
            if item is _CLOSED:
                # Leave the marker for any later iteration
                self._queue.put(_CLOSED)
                return
            yield item

"""Task registry - the read-only set of tasks loaded from one task file."""

import threading
from collections.abc import Iterator, Mapping
from pathlib import Path
from types import MappingProxyType

from .models import Task


class TaskRegistry:
    """Ordered, name-keyed, read-only collection of tasks.

    A registry is never modified after construction; reloading builds a new
    one and swaps it into a RegistryHandle.
    """

    def __init__(self, tasks: Mapping[str, Task], base_directory: Path | None = None):
        self._tasks = MappingProxyType(dict(tasks))
        self.base_directory = Path(base_directory) if base_directory is not None else Path.cwd()

    def __contains__(self, name: object) -> bool:
        return name in self._tasks

    def __iter__(self) -> Iterator[str]:
        return iter(self._tasks)

    def __len__(self) -> int:
        return len(self._tasks)

    def get(self, name: str) -> Task | None:
        """Get a task by name."""
        return self._tasks.get(name)

    def names(self) -> list[str]:
        return list(self._tasks)

    def runnable_task_names(self) -> list[str]:
        """Names of tasks that can run without caller-supplied parameters."""
        return [name for name, task in self._tasks.items() if task.is_standalone]


class RegistryHandle:
    """Shared pointer to the current registry snapshot."""

    def __init__(self, registry: TaskRegistry):
        self._registry = registry
        self._lock = threading.Lock()

    @property
    def current(self) -> TaskRegistry:
        with self._lock:
            return self._registry

    def swap(self, registry: TaskRegistry) -> TaskRegistry:
        """Replace the snapshot and return the previous one."""
        with self._lock:
            previous, self._registry = self._registry, registry
        return previous

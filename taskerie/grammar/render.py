"""Interpolation renderer and the per-invocation parameter scope."""

import shlex
from collections.abc import Iterable, Iterator, Mapping

from ..errors import UnboundVariableError
from ..tasks.models import Command, Component, Literal


class ParameterContext(Mapping[str, str]):
    """Name -> value bindings visible to one task invocation.

    Insertion ordered. A nested task call gets a new, empty context; values
    only cross the boundary by being rendered into it.
    """

    def __init__(self, values: Mapping[str, str] | None = None):
        self._values: dict[str, str] = dict(values or {})

    def __getitem__(self, name: str) -> str:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"ParameterContext({self._values!r})"

    def set(self, name: str, value: str) -> None:
        self._values[name] = value


def render(components: Iterable[Component], context: Mapping[str, str]) -> str:
    """Concatenate components, substituting variables from ``context``."""
    parts = []
    for component in components:
        if isinstance(component, Literal):
            parts.append(component.text)
        elif component.name in context:
            parts.append(context[component.name])
        else:
            raise UnboundVariableError(component.name)
    return "".join(parts)


def render_command(command: Command, context: Mapping[str, str]) -> str:
    """Build the shell command line for ``command``.

    Literal text is passed through untouched so pipes, redirections and
    shell variables written in the task file keep working. Parameter values
    are always shell-quoted, so a value like ``x;id`` stays one word. An
    argument that renders empty or whose literal text contains whitespace
    (a quoted group) is quoted as a whole.
    """
    words = [command.name]
    for argument in command.arguments:
        text = render(argument, context)
        if not text or any(
            isinstance(component, Literal) and _has_whitespace(component.text)
            for component in argument
        ):
            words.append(shlex.quote(text))
            continue
        words.append(
            "".join(
                component.text
                if isinstance(component, Literal)
                else shlex.quote(context[component.name])
                for component in argument
            )
        )
    return " ".join(words)


def _has_whitespace(text: str) -> bool:
    return any(char.isspace() for char in text)

"""Action grammar parser.

One action per line::

    program arg "quoted arg" pre${var}post
    _task --param value --other "${var} with spaces"

A leading ``_`` turns the line into a call to another task, whose
arguments are ``--name value`` bindings. ``${name}`` spans are replaced
by parameter values at render time.

The scanner is a finite-state machine fed one character at a time with
one character of lookahead. Buffered text is flushed into a component
whenever the state changes, so literal and variable components may
alternate freely inside one argument.
"""

from dataclasses import dataclass, field
from enum import Enum, auto

from ..errors import ActionSyntaxError
from ..tasks.models import Action, Argument, Command, Component, Literal, TaskCall, Variable

TASK_MARKER = "_"
QUOTE = '"'
INTERPOLATION_MARKER = "$"
INTERPOLATION_OPEN = "{"
INTERPOLATION_CLOSE = "}"
BINDING_PREFIX = "--"


class State(Enum):
    """Scanner states."""

    START = auto()
    NAME = auto()
    # Whitespace after the name or between two arguments
    BETWEEN = auto()
    LITERAL = auto()
    QUOTED = auto()
    INTERPOLATED = auto()
    INTERPOLATED_IN_QUOTE = auto()
    DONE = auto()


@dataclass
class RawArgument:
    """An argument as scanned, before it is attached to a Command or TaskCall."""

    offset: int
    components: list[Component] = field(default_factory=list)
    quoted: bool = False


class ActionScanner:
    """Splits one action line into a name and raw arguments."""

    def __init__(self, line: str):
        self.line = line
        self.state = State.START
        self.is_task_call = False
        self.name = ""
        self.arguments: list[RawArgument] = []

        self._buffer: list[str] = []
        self._current: RawArgument | None = None
        self._quote_offset = 0
        self._interpolation_offset = 0
        # Set when "${" was recognised on "$"; the "{" is consumed silently
        self._open_pending = False

    def scan(self) -> "ActionScanner":
        line = self.line
        for offset, char in enumerate(line):
            lookahead = line[offset + 1] if offset + 1 < len(line) else None
            self._step(offset, char, lookahead)
        self._finish(len(line))
        return self

    def _step(self, offset: int, char: str, lookahead: str | None) -> None:
        if self._open_pending:
            self._open_pending = False
            return

        state = self.state

        if state is State.START:
            if char.isspace():
                return
            self.state = state = State.NAME
            if char == TASK_MARKER:
                self.is_task_call = True
                return

        if state is State.NAME:
            if char.isspace():
                self._end_name(offset)
            elif char == QUOTE:
                raise ActionSyntaxError("Quotes are not allowed in an action name", offset)
            elif char == INTERPOLATION_MARKER:
                self._check_marker(offset, lookahead)
                raise ActionSyntaxError("An action name cannot be interpolated", offset)
            else:
                self._buffer.append(char)
            return

        if state is State.BETWEEN:
            if char.isspace():
                return
            self._current = RawArgument(offset=offset)
            self.state = state = State.LITERAL

        if state is State.LITERAL:
            if char.isspace():
                self._end_argument()
                self.state = State.BETWEEN
            elif char == QUOTE:
                self._flush_literal()
                self._current.quoted = True
                self._quote_offset = offset
                self.state = State.QUOTED
            elif char == INTERPOLATION_MARKER:
                self._open_interpolation(offset, lookahead, State.INTERPOLATED)
            else:
                self._buffer.append(char)
            return

        if state is State.QUOTED:
            if char == QUOTE and (lookahead is None or lookahead.isspace()):
                self._end_argument()
                self.state = State.BETWEEN
            elif char == INTERPOLATION_MARKER:
                self._open_interpolation(offset, lookahead, State.INTERPOLATED_IN_QUOTE)
            else:
                self._buffer.append(char)
            return

        if state in (State.INTERPOLATED, State.INTERPOLATED_IN_QUOTE):
            if char == INTERPOLATION_CLOSE:
                self._current.components.append(Variable("".join(self._buffer)))
                self._buffer.clear()
                self.state = State.LITERAL if state is State.INTERPOLATED else State.QUOTED
            elif char.isspace():
                raise ActionSyntaxError(
                    f"Unterminated interpolation opened at column {self._interpolation_offset}",
                    offset,
                )
            else:
                self._buffer.append(char)
            return

        raise AssertionError(f"Unexpected scanner state {state}")

    def _finish(self, offset: int) -> None:
        state = self.state

        if state in (State.START, State.NAME):
            self._end_name(offset)
        elif state is State.LITERAL:
            self._end_argument()
        elif state is State.QUOTED:
            raise ActionSyntaxError(
                f"Unterminated quote opened at column {self._quote_offset}", offset
            )
        elif state in (State.INTERPOLATED, State.INTERPOLATED_IN_QUOTE):
            raise ActionSyntaxError(
                f"Unterminated interpolation opened at column {self._interpolation_offset}",
                offset,
            )

        self.state = State.DONE
        assert not self._buffer and self._current is None, "scanner finished with buffered input"

    def _check_marker(self, offset: int, lookahead: str | None) -> None:
        if lookahead != INTERPOLATION_OPEN:
            raise ActionSyntaxError(
                f"'{INTERPOLATION_MARKER}' must be followed by '{INTERPOLATION_OPEN}'", offset
            )

    def _open_interpolation(self, offset: int, lookahead: str | None, target: State) -> None:
        self._check_marker(offset, lookahead)
        self._flush_literal()
        self._interpolation_offset = offset
        self._open_pending = True
        self.state = target

    def _end_name(self, offset: int) -> None:
        if not self._buffer:
            raise ActionSyntaxError("Expected a command or task name", offset)
        self.name = "".join(self._buffer)
        self._buffer.clear()
        self.state = State.BETWEEN

    def _flush_literal(self) -> None:
        if self._buffer:
            self._current.components.append(Literal("".join(self._buffer)))
            self._buffer.clear()

    def _end_argument(self) -> None:
        self._flush_literal()
        self.arguments.append(self._current)
        self._current = None


def parse_action(line: str) -> Action:
    """Parse one action line into a Command or a TaskCall.

    Raises ActionSyntaxError with the column where the problem was found.
    """
    scanner = ActionScanner(line).scan()

    if not scanner.is_task_call:
        return Command(
            name=scanner.name,
            arguments=tuple(tuple(arg.components) for arg in scanner.arguments),
        )

    return TaskCall(name=scanner.name, params=_bind_parameters(scanner.arguments, len(line)))


def _bind_parameters(arguments: list[RawArgument], end: int) -> dict[str, Argument]:
    params: dict[str, Argument] = {}
    pending: str | None = None

    for arg in arguments:
        if pending is None:
            pending = _binding_name(arg)
            if pending in params:
                raise ActionSyntaxError(f"Parameter '{pending}' is bound twice", arg.offset)
        else:
            params[pending] = tuple(arg.components)
            pending = None

    if pending is not None:
        raise ActionSyntaxError(f"Expected a value for parameter '{pending}'", end)

    return params


def _binding_name(arg: RawArgument) -> str:
    components = arg.components
    if (
        arg.quoted
        or len(components) != 1
        or not isinstance(components[0], Literal)
        or not components[0].text.startswith(BINDING_PREFIX)
    ):
        raise ActionSyntaxError(f"Expected a parameter binding '{BINDING_PREFIX}name'", arg.offset)

    name = components[0].text[len(BINDING_PREFIX):]
    if not name:
        raise ActionSyntaxError("Parameter binding has an empty name", arg.offset)
    return name


def parse_template(text: str) -> tuple[Component, ...]:
    """Parse free text with ``${name}`` spans, e.g. a working directory.

    Whitespace and quotes are literal here; only interpolation is special.
    """
    components: list[Component] = []
    buffer: list[str] = []
    state = State.LITERAL
    opened_at = 0
    skip = False

    for offset, char in enumerate(text):
        if skip:
            skip = False
            continue

        lookahead = text[offset + 1] if offset + 1 < len(text) else None

        if state is State.LITERAL:
            if char == INTERPOLATION_MARKER:
                if lookahead != INTERPOLATION_OPEN:
                    raise ActionSyntaxError(
                        f"'{INTERPOLATION_MARKER}' must be followed by '{INTERPOLATION_OPEN}'",
                        offset,
                    )
                if buffer:
                    components.append(Literal("".join(buffer)))
                    buffer.clear()
                opened_at = offset
                skip = True
                state = State.INTERPOLATED
            else:
                buffer.append(char)
        elif char == INTERPOLATION_CLOSE:
            components.append(Variable("".join(buffer)))
            buffer.clear()
            state = State.LITERAL
        elif char.isspace():
            raise ActionSyntaxError(
                f"Unterminated interpolation opened at column {opened_at}", offset
            )
        else:
            buffer.append(char)

    if state is State.INTERPOLATED:
        raise ActionSyntaxError(
            f"Unterminated interpolation opened at column {opened_at}", len(text)
        )
    if buffer:
        components.append(Literal("".join(buffer)))

    return tuple(components)

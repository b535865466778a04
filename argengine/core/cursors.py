"""Read cursors over the two command input forms."""

import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any, TypeVar

import hikari

from .context import InvocationContext
from .errors import NoMoreInput, ParseError, Severity, TypeMismatch

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Checkpoint:
    """A saved read position of a cursor."""

    position: int


class _Cursor:
    """Shared checkpoint/rewind behaviour over a plain integer position."""

    def __init__(self) -> None:
        self.position = 0

    def checkpoint(self) -> Checkpoint:
        return Checkpoint(self.position)

    def rewind(self, checkpoint: Checkpoint) -> None:
        if checkpoint.position != self.position:
            logger.debug(f"Rewinding {type(self).__name__} from {self.position} to {checkpoint.position}")
        self.position = checkpoint.position


class TokenCursor(_Cursor):
    """Cursor over the free text body of a prefix command.

    The text itself is never mutated; only ``position`` moves, so a
    checkpoint is just a copy of that integer.
    """

    def __init__(self, text: str, context: InvocationContext | None = None):
        super().__init__()
        self.text = text
        self.context = context or InvocationContext()

    def _skip_whitespace(self) -> int:
        index = self.position
        while index < len(self.text) and self.text[index].isspace():
            index += 1
        return index

    @property
    def exhausted(self) -> bool:
        return self._skip_whitespace() >= len(self.text)

    def next_word(self) -> str:
        """Consume and return the next whitespace-delimited word."""
        start = self._skip_whitespace()
        if start >= len(self.text):
            raise NoMoreInput()

        end = start
        while end < len(self.text) and not self.text[end].isspace():
            end += 1

        self.position = end
        return self.text[start:end]

    def rest(self) -> str:
        """Consume and return all remaining text, failing if there is none."""
        start = self._skip_whitespace()
        if start >= len(self.text):
            raise NoMoreInput()

        self.position = len(self.text)
        return self.text[start:].rstrip()

    def rest_all(self) -> str:
        """Like :meth:`rest`, but returns an empty string when exhausted."""
        start = self._skip_whitespace()
        self.position = len(self.text)
        return self.text[start:].rstrip()


class OptionCursor(_Cursor):
    """Cursor over the options of a structured (slash) command invocation.

    ``position`` counts consumed options and ``consumed`` records their
    indices in consumption order, so rewinding truncates it to ``position``.
    """

    def __init__(
        self,
        options: Sequence[hikari.CommandInteractionOption] | None,
        context: InvocationContext | None = None,
    ):
        super().__init__()
        self.options = tuple(options or ())
        self.context = context or InvocationContext()
        self.expected_name: str | None = None
        self.consumed: list[int] = []

    def expect(self, name: str | None) -> None:
        """Bind the cursor to the parameter currently being parsed.

        While bound, only an unconsumed option with that name is returned,
        whatever its place in the invocation. Without one the option counts
        as missing, so an omitted optional option does not shift the others.
        """
        self.expected_name = name

    def rewind(self, checkpoint: Checkpoint) -> None:
        super().rewind(checkpoint)
        del self.consumed[checkpoint.position:]

    @property
    def exhausted(self) -> bool:
        return self.position >= len(self.options)

    def _find(self) -> int | None:
        for index, option in enumerate(self.options):
            if index in self.consumed:
                continue
            if self.expected_name is None or option.name == self.expected_name:
                return index
        return None

    def next_option(self) -> hikari.CommandInteractionOption:
        """Consume and return the bound option, or the next one in order when unbound."""
        if self.exhausted:
            raise NoMoreInput()

        index = self._find()
        if index is None:
            raise NoMoreInput(f"Missing option `{self.expected_name}`")

        self.consumed.append(index)
        self.position += 1
        return self.options[index]

    def next_typed(self, kind: hikari.OptionType, expected: str) -> Any:
        """Consume the next option and return its value if it has type ``kind``."""
        option = self.next_option()
        if option.type != kind:
            raise TypeMismatch(expected, option.value, severity=Severity.HIGH)
        return option.value


async def commit_if_ok(cursor: _Cursor, parse: Callable[[Any], Awaitable[T]]) -> T:
    """Run ``parse`` against ``cursor``, rewinding it if parsing fails."""
    checkpoint = cursor.checkpoint()
    try:
        return await parse(cursor)
    except ParseError:
        cursor.rewind(checkpoint)
        raise

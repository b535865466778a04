"""Command argument types and definitions."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

import hikari

from ..core.cursors import OptionCursor, TokenCursor, commit_if_ok
from ..core.errors import NoMoreInput, ParseError, Severity, TypeMismatch
from ..core.flags import FlagSet
from ..core.utils import parse_duration, parse_integer, parse_number

logger = logging.getLogger(__name__)


@dataclass
class OptionSchema:
    """Describes the structured option a parameter expects, using hikari option types."""

    name: str
    arg_type: hikari.OptionType
    description: str
    required: bool = True
    choices: list[Any] | None = None


class ArgumentType(ABC):
    """Base class for argument types.

    Every type can be parsed from free text and from structured options, and
    can describe the structured option it expects.
    """

    option_type: hikari.OptionType = hikari.OptionType.STRING
    description: str = "text input"

    @abstractmethod
    async def parse_from_tokens(self, cursor: TokenCursor) -> Any:
        """Parse a value from a text cursor."""

    @abstractmethod
    async def parse_from_options(self, cursor: OptionCursor) -> Any:
        """Parse a value from a structured option cursor."""

    def describe_as_option(self, name: str, description: str | None = None) -> OptionSchema:
        return OptionSchema(name, self.option_type, description or self.description)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class Integer(ArgumentType):
    option_type = hikari.OptionType.INTEGER
    description = "integer option"

    async def parse_from_tokens(self, cursor: TokenCursor) -> int:
        word = cursor.next_word()
        try:
            return parse_integer(word)
        except ValueError:
            raise TypeMismatch("integer", word, severity=Severity.LOW) from None

    async def parse_from_options(self, cursor: OptionCursor) -> int:
        return int(cursor.next_typed(hikari.OptionType.INTEGER, "integer"))


class Number(ArgumentType):
    option_type = hikari.OptionType.FLOAT
    description = "number option"

    async def parse_from_tokens(self, cursor: TokenCursor) -> float:
        word = cursor.next_word()
        try:
            return parse_number(word)
        except ValueError:
            raise TypeMismatch("number", word, severity=Severity.LOW) from None

    async def parse_from_options(self, cursor: OptionCursor) -> float:
        return float(cursor.next_typed(hikari.OptionType.FLOAT, "number"))


class Word(ArgumentType):
    """A single whitespace-delimited word."""

    description = "word input"

    async def parse_from_tokens(self, cursor: TokenCursor) -> str:
        return cursor.next_word()

    async def parse_from_options(self, cursor: OptionCursor) -> str:
        return cursor.next_typed(hikari.OptionType.STRING, "string")


class Rest(ArgumentType):
    """The rest of the message. Should be the last parameter if used."""

    async def parse_from_tokens(self, cursor: TokenCursor) -> str:
        return cursor.rest()

    async def parse_from_options(self, cursor: OptionCursor) -> str:
        # No option type holds a single word, so structured input is one string
        return cursor.next_typed(hikari.OptionType.STRING, "string (rest)")


class Duration(ArgumentType):
    """A duration such as ``1h20m30s``, parsed to milliseconds."""

    description = "time input"

    async def parse_from_tokens(self, cursor: TokenCursor) -> int:
        word = cursor.next_word()
        try:
            return parse_duration(word)
        except ValueError:
            raise TypeMismatch("duration", word, severity=Severity.LOW) from None

    async def parse_from_options(self, cursor: OptionCursor) -> int:
        value = cursor.next_typed(hikari.OptionType.STRING, "string (duration)")
        try:
            return parse_duration(value)
        except ValueError:
            raise TypeMismatch("duration", value, severity=Severity.HIGH) from None


class Optional(ArgumentType):
    """Wraps a type so that a low severity failure yields ``None``."""

    def __init__(self, inner: ArgumentType):
        self.inner = inner
        self.option_type = inner.option_type
        self.description = inner.description

    async def _attempt(self, cursor, parse) -> Any:
        try:
            return await commit_if_ok(cursor, parse)
        except ParseError as e:
            if e.is_high:
                raise
            logger.debug(f"{self.inner!r} absent: {e}")
            return None

    async def parse_from_tokens(self, cursor: TokenCursor) -> Any:
        return await self._attempt(cursor, self.inner.parse_from_tokens)

    async def parse_from_options(self, cursor: OptionCursor) -> Any:
        return await self._attempt(cursor, self.inner.parse_from_options)

    def describe_as_option(self, name: str, description: str | None = None) -> OptionSchema:
        schema = self.inner.describe_as_option(name, description)
        schema.required = False
        return schema

    def __repr__(self) -> str:
        return f"Optional({self.inner!r})"


class Repeated(ArgumentType):
    """Zero or more values of a type, collected in order."""

    def __init__(self, inner: ArgumentType):
        self.inner = inner
        self._optional = Optional(inner)

    async def parse_from_tokens(self, cursor: TokenCursor) -> list[Any]:
        items = []
        # Optional already recovers from low severity errors; anything raised is fatal
        while True:
            position = cursor.position
            value = await self._optional.parse_from_tokens(cursor)
            if value is None or cursor.position == position:
                break
            items.append(value)
        return items

    async def parse_from_options(self, cursor: OptionCursor) -> list[Any]:
        # Structured input has no repeated slots: one string, split on whitespace
        text = cursor.next_typed(hikari.OptionType.STRING, "string (list)")
        items = []
        for segment in text.split():
            try:
                items.append(await self.inner.parse_from_tokens(TokenCursor(segment, cursor.context)))
            except ParseError as e:
                e.severity = Severity.HIGH
                raise
        return items

    def __repr__(self) -> str:
        return f"Repeated({self.inner!r})"


class Flags(ArgumentType):
    """A trailing ``--flag value`` section decoded into a :class:`FlagSet`."""

    description = "flags input"

    def __init__(self, flag_set: type[FlagSet]):
        self.flag_set = flag_set

    async def parse_from_tokens(self, cursor: TokenCursor) -> FlagSet:
        return self.flag_set.from_text(cursor.rest_all())

    async def parse_from_options(self, cursor: OptionCursor) -> FlagSet:
        try:
            option = cursor.next_option()
        except NoMoreInput:
            return self.flag_set()

        if option.type != hikari.OptionType.STRING:
            raise TypeMismatch("string (flags)", option.value)
        return self.flag_set.from_text(option.value)

    def describe_as_option(self, name: str, description: str | None = None) -> OptionSchema:
        schema = super().describe_as_option(name, description)
        schema.required = False
        return schema

    def __repr__(self) -> str:
        return f"Flags({self.flag_set.__name__})"

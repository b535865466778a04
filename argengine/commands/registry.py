"""Command registration and argument dispatch."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

import hikari
import lightbulb

from ..core.collaborators import EmojiLookup, MediaDownloader, Transport
from ..core.context import InvocationContext
from ..core.cursors import OptionCursor, TokenCursor
from ..core.errors import ParseError
from .argument_types import ArgumentType, OptionSchema

logger = logging.getLogger(__name__)


@dataclass
class Parameter:
    """A declared command parameter."""

    name: str
    arg_type: ArgumentType
    description: str | None = None

    def describe(self) -> OptionSchema:
        return self.arg_type.describe_as_option(self.name, self.description)


class CommandSignature:
    """The ordered parameters of a command, parsed from either input form."""

    def __init__(self, parameters: Sequence[Parameter]):
        self.parameters = list(parameters)

    async def parse_tokens(self, cursor: TokenCursor) -> dict[str, Any]:
        return {
            parameter.name: await parameter.arg_type.parse_from_tokens(cursor)
            for parameter in self.parameters
        }

    async def parse_options(self, cursor: OptionCursor) -> dict[str, Any]:
        values = {}
        try:
            for parameter in self.parameters:
                cursor.expect(parameter.name)
                values[parameter.name] = await parameter.arg_type.parse_from_options(cursor)
        finally:
            cursor.expect(None)
        return values

    def describe(self) -> list[OptionSchema]:
        return [parameter.describe() for parameter in self.parameters]


class OptionDescriptorFactory:
    """Factory for creating lightbulb option descriptors."""

    option_mapping = {
        hikari.OptionType.STRING: lightbulb.string,
        hikari.OptionType.INTEGER: lightbulb.integer,
        hikari.OptionType.FLOAT: lightbulb.number,
        hikari.OptionType.BOOLEAN: lightbulb.boolean,
        hikari.OptionType.USER: lightbulb.user,
        hikari.OptionType.ATTACHMENT: lightbulb.attachment,
    }

    # Types that support choices
    choice_types = {
        hikari.OptionType.STRING,
        hikari.OptionType.INTEGER,
        hikari.OptionType.FLOAT,
    }

    @classmethod
    def create(cls, schema: OptionSchema) -> Any:
        """Create the appropriate lightbulb option descriptor for a schema."""
        kwargs = {}
        if not schema.required:
            # Absent optional options are resolved by the engine, not lightbulb
            kwargs["default"] = None
        if schema.choices is not None and schema.arg_type in cls.choice_types:
            kwargs["choices"] = schema.choices

        descriptor_func = cls.option_mapping.get(schema.arg_type, lightbulb.string)
        return descriptor_func(schema.name, schema.description, **kwargs)


@dataclass
class RegisteredCommand:
    name: str
    callback: Any
    signature: CommandSignature
    description: str = ""
    aliases: list[str] = field(default_factory=list)
    slash_only: bool = False
    prefix_only: bool = False


class CommandRegistry:
    """Holds commands and resolves their arguments from either input form."""

    def __init__(
        self,
        transport: Transport | None = None,
        media: MediaDownloader | None = None,
        emoji: EmojiLookup | None = None,
    ):
        self.transport = transport
        self.media = media
        self.emoji = emoji
        self.commands: dict[str, RegisteredCommand] = {}

    def make_context(
        self,
        channel_id: int | None = None,
        message: hikari.Message | None = None,
        resolved: hikari.ResolvedOptionData | None = None,
    ) -> InvocationContext:
        return InvocationContext(
            channel_id=channel_id,
            message=message,
            resolved=resolved,
            transport=self.transport,
            media=self.media,
            emoji=self.emoji,
        )

    def add_command(self, command: RegisteredCommand) -> None:
        # Lookups are case-insensitive
        self.commands[command.name.lower()] = command

        for alias in command.aliases:
            self.commands[alias.lower()] = command

        logger.debug(f"Added command: {command.name} (aliases: {command.aliases})")

    def remove_command(self, name: str) -> None:
        command = self.get(name)
        if command is None:
            return

        self.commands.pop(command.name.lower(), None)
        for alias in command.aliases:
            self.commands.pop(alias.lower(), None)

        logger.debug(f"Removed command: {name}")

    def get(self, name: str) -> RegisteredCommand | None:
        return self.commands.get(name.lower())

    def register(self, callback: Any) -> RegisteredCommand:
        """Register a callback decorated with ``@command``."""
        meta = callback._unified_command
        command = RegisteredCommand(
            name=meta["name"],
            callback=callback,
            signature=CommandSignature(meta.get("arguments", [])),
            description=meta.get("description", ""),
            aliases=meta.get("aliases", []),
            slash_only=meta.get("slash_only", False),
            prefix_only=meta.get("prefix_only", False),
        )
        self.add_command(command)
        logger.info(f"Registered command: {command.name}")
        return command

    def register_from(self, owner: Any) -> list[RegisteredCommand]:
        """Register every decorated command found on ``owner``."""
        registered = []
        for attr_name in dir(owner):
            attr = getattr(owner, attr_name)
            if hasattr(attr, "_unified_command"):
                registered.append(self.register(attr))
        return registered

    async def resolve_text(self, name: str, text: str, context: InvocationContext) -> dict[str, Any]:
        """Resolve a command's arguments from free text."""
        command = self._require(name)
        return await command.signature.parse_tokens(TokenCursor(text, context))

    async def resolve_options(
        self,
        name: str,
        options: Sequence[hikari.CommandInteractionOption] | None,
        context: InvocationContext,
    ) -> dict[str, Any]:
        """Resolve a command's arguments from structured options."""
        command = self._require(name)
        return await command.signature.parse_options(OptionCursor(options, context))

    def _require(self, name: str) -> RegisteredCommand:
        command = self.get(name)
        if command is None:
            raise KeyError(f"Unknown command: {name}")
        return command

    def build_slash_command(self, name: str) -> type:
        """Create a lightbulb slash command class advertising the command's schema."""
        command = self._require(name)
        registry = self

        async def invoke_wrapper(cmd_instance, ctx):
            interaction = ctx.interaction
            context = registry.make_context(channel_id=interaction.channel_id, resolved=interaction.resolved)
            try:
                kwargs = await command.signature.parse_options(OptionCursor(interaction.options, context))
            except ParseError as e:
                logger.info(f"Slash command {command.name} rejected arguments: {e}")
                await ctx.respond(f"❌ {e}")
                return
            return await command.callback(ctx, **kwargs)

        class_attrs = {"invoke": lightbulb.invoke(invoke_wrapper)}
        for schema in command.signature.describe():
            class_attrs[schema.name] = OptionDescriptorFactory.create(schema)

        cmd_class_name = f"{command.name.title().replace('-', '').replace('_', '')}Command"
        return type(
            cmd_class_name,
            (lightbulb.SlashCommand,),
            class_attrs,
            name=command.name,
            description=command.description or command.name,
        )

    def register_slash_commands(self, client: lightbulb.Client) -> None:
        """Register every command that is not prefix-only with a lightbulb client."""
        seen = set()
        for command in self.commands.values():
            if command.name in seen or command.prefix_only:
                continue
            seen.add(command.name)
            try:
                client.register(self.build_slash_command(command.name))
                logger.info(f"Registered slash command: {command.name}")
            except Exception as e:
                logger.error(f"Failed to register slash command {command.name}: {e}")

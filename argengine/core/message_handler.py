import logging
from typing import Any

import hikari

from config.settings import settings

from .errors import ParseError

logger = logging.getLogger(__name__)


class PrefixContext:
    def __init__(self, event: hikari.MessageCreateEvent, command_name: str, body: str):
        self.event = event
        self.command_name = command_name
        self.body = body

        # Mirror slash context properties
        self.author = event.author
        self.message = event.message
        self.channel_id = event.channel_id

    async def respond(self, content: str) -> None:
        await self.message.respond(content)


class MessageCommandHandler:
    """Dispatches prefix commands, resolving their arguments from the message text."""

    def __init__(self, registry: Any, prefix: str | None = None):
        self.registry = registry
        self.prefix = prefix or settings.bot_prefix

    def split_command(self, content: str | None) -> tuple[str, str] | None:
        """Split a message into its command name and argument body."""
        if not content or not content.startswith(self.prefix):
            return None

        content = content[len(self.prefix):].lstrip()
        if not content:
            return None

        parts = content.split(maxsplit=1)
        return parts[0].lower(), parts[1] if len(parts) > 1 else ""

    async def handle_message(self, event: hikari.MessageCreateEvent) -> bool:
        # Ignore bot messages
        if event.author.is_bot:
            return False

        split = self.split_command(event.content)
        if split is None:
            return False

        command_name, body = split
        command = self.registry.get(command_name)
        if command is None or command.slash_only:
            return False

        logger.info(f"Prefix command called: {self.prefix}{command_name} by {event.author.username}")
        ctx = PrefixContext(event, command_name, body)

        context = self.registry.make_context(channel_id=event.channel_id, message=event.message)
        try:
            kwargs = await self.registry.resolve_text(command_name, body, context)
        except ParseError as e:
            logger.info(f"Prefix command {command_name} rejected arguments ({e.severity.value}): {e}")
            await ctx.respond(f"❌ {e}")
            return True

        try:
            await command.callback(ctx, **kwargs)
        except Exception as e:
            logger.error(f"Error executing prefix command {command_name}: {e}")
            try:
                await ctx.respond(f"❌ Command failed: {str(e)}")
            except hikari.HTTPError as respond_error:
                logger.error(f"Failed to report error for {command_name}: {respond_error}")
        return True

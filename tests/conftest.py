"""Pytest configuration and shared fixtures."""

import logging
from unittest.mock import AsyncMock, MagicMock

import hikari
import pytest

from argengine.core.collaborators import MediaDownloader, Transport
from argengine.core.context import InvocationContext

# Disable logging during tests
logging.disable(logging.CRITICAL)


def make_option(name, value, option_type=hikari.OptionType.STRING):
    """Build a structured interaction option."""
    option = MagicMock(spec=hikari.CommandInteractionOption)
    # ``name`` is reserved by the MagicMock constructor
    option.name = name
    option.type = option_type
    option.value = value
    return option


def make_message(
    content="",
    attachments=(),
    embeds=(),
    stickers=(),
    referenced_message=None,
    message_id=1,
    channel_id=444444444,
):
    """Build a message carrying the given image sources."""
    message = MagicMock()
    message.id = message_id
    message.channel_id = channel_id
    message.content = content
    message.attachments = list(attachments)
    message.embeds = list(embeds)
    message.stickers = list(stickers)
    message.referenced_message = referenced_message
    message.respond = AsyncMock()
    return message


def make_attachment(url="https://cdn.example.com/file.png", attachment_id=1):
    attachment = MagicMock(spec=hikari.Attachment)
    attachment.id = attachment_id
    attachment.url = url
    return attachment


def make_embed(url=None, image=None, thumbnail=None, video=None):
    embed = MagicMock(spec=hikari.Embed)
    embed.url = url
    embed.image = MagicMock(url=image) if image else None
    embed.thumbnail = MagicMock(url=thumbnail) if thumbnail else None
    embed.video = MagicMock(url=video) if video else None
    return embed


def make_sticker(sticker_id=555, format_type=hikari.StickerFormatType.PNG):
    sticker = MagicMock(spec=hikari.PartialSticker)
    sticker.id = sticker_id
    sticker.format_type = format_type
    return sticker


@pytest.fixture
def mock_user():
    """Mock Discord user."""
    user = MagicMock(spec=hikari.User)
    user.id = 111111111
    user.username = "testuser"
    user.is_bot = False
    user.display_avatar_url = "https://cdn.example.com/avatars/111111111.png"
    user.mention = "<@111111111>"
    return user


@pytest.fixture
def mock_transport(mock_user):
    """Mock transport collaborator."""
    transport = AsyncMock(spec=Transport)
    transport.fetch_user = AsyncMock(return_value=mock_user)
    transport.fetch_recent_messages = AsyncMock(return_value=[])
    transport.fetch_text = AsyncMock(return_value="")
    transport.fetch_json = AsyncMock(
        return_value={"vendor_images": {"twitter": "https://emoji.example.com/twitter/1f44d.png"}}
    )
    return transport


@pytest.fixture
def mock_media():
    """Mock media downloader."""
    media = AsyncMock(spec=MediaDownloader)
    media.download = AsyncMock(return_value=b"\x89PNG")
    return media


@pytest.fixture
def context(mock_transport, mock_media):
    """Invocation context without a message."""
    return InvocationContext(channel_id=444444444, transport=mock_transport, media=mock_media)


@pytest.fixture
def message_context(context):
    """Factory attaching an invoking message to the context."""

    def factory(**kwargs):
        context.message = make_message(**kwargs)
        return context

    return factory


class AsyncContextManager:
    """Helper for mocking async context managers."""

    def __init__(self, return_value=None):
        self.return_value = return_value

    async def __aenter__(self):
        return self.return_value

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        pass


@pytest.fixture
def async_context_manager():
    """Factory for creating async context managers."""
    return AsyncContextManager

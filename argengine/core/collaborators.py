"""External collaborators used by resolution strategies.

The engine only talks to these interfaces. The concrete classes back them
with hikari's REST client and aiohttp.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

import aiohttp
import emoji
import hikari

from config.settings import settings

from .errors import MediaTooLarge, NoEmoji, TransportError

logger = logging.getLogger(__name__)

TRANSPORT_ERRORS = (hikari.HTTPError, aiohttp.ClientError, asyncio.TimeoutError)


class Transport(ABC):
    """Identity, history and plain HTTP lookups."""

    @abstractmethod
    async def fetch_user(self, user_id: int) -> hikari.User:
        """Resolve a user id to a user."""

    @abstractmethod
    async def fetch_recent_messages(self, channel_id: int, limit: int) -> Sequence[hikari.Message]:
        """Fetch up to ``limit`` messages of a channel, newest first."""

    @abstractmethod
    async def fetch_text(self, url: str) -> str:
        """Fetch a small HTTP resource as text."""

    @abstractmethod
    async def fetch_json(self, url: str) -> Any:
        """Fetch a small HTTP resource as decoded JSON."""


class HikariTransport(Transport):
    def __init__(self, rest: hikari.api.RESTClient, timeout: float | None = None):
        self.rest = rest
        self.timeout = aiohttp.ClientTimeout(total=timeout or settings.http_timeout)

    async def fetch_user(self, user_id: int) -> hikari.User:
        try:
            return await self.rest.fetch_user(user_id)
        except hikari.HTTPError as e:
            raise TransportError(f"Failed to fetch user {user_id}: {e}") from e

    async def fetch_recent_messages(self, channel_id: int, limit: int) -> Sequence[hikari.Message]:
        try:
            return [message async for message in self.rest.fetch_messages(channel_id).limit(limit)]
        except hikari.HTTPError as e:
            raise TransportError(f"Failed to fetch messages of channel {channel_id}: {e}") from e

    async def fetch_text(self, url: str) -> str:
        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.get(url) as response:
                    response.raise_for_status()
                    return await response.text()
        except TRANSPORT_ERRORS as e:
            raise TransportError(f"Failed to fetch {url}: {e}") from e

    async def fetch_json(self, url: str) -> Any:
        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.get(url) as response:
                    response.raise_for_status()
                    return await response.json(content_type=None)
        except TRANSPORT_ERRORS as e:
            raise TransportError(f"Failed to fetch {url}: {e}") from e


class MediaDownloader:
    """Downloads resolved media, refusing anything above a byte ceiling."""

    CHUNK_SIZE = 64 * 1024

    def __init__(self, timeout: float | None = None):
        self.timeout = aiohttp.ClientTimeout(total=timeout or settings.http_timeout)

    async def download(self, url: str, max_bytes: int) -> bytes:
        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.get(url) as response:
                    response.raise_for_status()
                    if response.content_length is not None and response.content_length > max_bytes:
                        raise MediaTooLarge(max_bytes)

                    data = bytearray()
                    async for chunk in response.content.iter_chunked(self.CHUNK_SIZE):
                        data.extend(chunk)
                        if len(data) > max_bytes:
                            raise MediaTooLarge(max_bytes)
        except TRANSPORT_ERRORS as e:
            raise TransportError(f"Failed to download {url}: {e}") from e

        logger.debug(f"Downloaded {len(data)} bytes from {url}")
        return bytes(data)


class EmojiLookup:
    """Maps a unicode emoji glyph to a vendor image url."""

    def __init__(self, transport: Transport, descriptor_url: str | None = None):
        self.transport = transport
        self.descriptor_url = descriptor_url or settings.emoji_descriptor_url

    @staticmethod
    def identifier(glyph: str) -> str | None:
        """Return the canonical codepoint identifier of a glyph, e.g. ``1f44d``."""
        if not emoji.is_emoji(glyph):
            return None
        codepoints = "-".join(f"{ord(char):x}" for char in glyph)
        return codepoints.replace("-fe0f", "")

    async def image_url(self, glyph: str) -> str:
        identifier = self.identifier(glyph)
        if identifier is None:
            raise NoEmoji()

        descriptor = await self.transport.fetch_json(self.descriptor_url.format(identifier))
        try:
            return descriptor["vendor_images"]["twitter"]
        except (KeyError, TypeError):
            raise TransportError(f"Emoji descriptor for {identifier} has no vendor image") from None

"""Per-invocation context shared by both cursor kinds."""

from dataclasses import dataclass

import hikari

from .collaborators import EmojiLookup, MediaDownloader, Transport
from .errors import TransportError


@dataclass(slots=True)
class InvocationContext:
    """What a strategy may inspect besides the cursor's own input.

    ``message`` is only set for prefix invocations and ``resolved`` only for
    structured ones.
    """

    channel_id: int | None = None
    message: hikari.Message | None = None
    resolved: hikari.ResolvedOptionData | None = None
    transport: Transport | None = None
    media: MediaDownloader | None = None
    emoji: EmojiLookup | None = None

    def require_transport(self) -> Transport:
        if self.transport is None:
            raise TransportError("No transport is available for this invocation")
        return self.transport

    def require_media(self) -> MediaDownloader:
        if self.media is None:
            raise TransportError("No media downloader is available for this invocation")
        return self.media

    def require_emoji(self) -> EmojiLookup:
        if self.emoji is None:
            self.emoji = EmojiLookup(self.require_transport())
        return self.emoji

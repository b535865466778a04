"""Resolution of resource arguments through ordered fallback strategies."""

import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any

import hikari

from config.settings import settings

from ..core.collaborators import EmojiLookup
from ..core.context import InvocationContext
from ..core.cursors import OptionCursor, TokenCursor
from ..core.errors import (
    MediaRedirectExtractionFailed,
    NoAttachment,
    NoEmbed,
    NoEmoji,
    NoImageFound,
    NoImageInHistory,
    NoMention,
    NoReply,
    NoSticker,
    NoUrl,
    ParseError,
    Severity,
    TypeMismatch,
    UnsupportedSticker,
)
from ..core.utils import extract_media_link, id_from_mention, is_url
from .argument_types import ArgumentType

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Strategy:
    """One named attempt at resolving a value from a single context signal."""

    name: str
    resolve: Callable[[Any], Awaitable[Any]]


class ResolutionChain:
    """Tries strategies in fixed priority order; the first success wins.

    The cursor is checkpointed before every attempt and rewound when it
    fails. A low severity failure moves on to the next strategy, a high one
    aborts the chain.
    """

    def __init__(self, strategies: Sequence[Strategy], exhausted: Callable[[], ParseError] = NoImageFound):
        self.strategies = tuple(strategies)
        self.exhausted = exhausted

    @property
    def names(self) -> list[str]:
        return [strategy.name for strategy in self.strategies]

    async def resolve(self, cursor: TokenCursor | OptionCursor) -> Any:
        for strategy in self.strategies:
            checkpoint = cursor.checkpoint()
            try:
                result = await strategy.resolve(cursor)
            except ParseError as e:
                cursor.rewind(checkpoint)
                if e.is_high:
                    logger.debug(f"Strategy {strategy.name} aborted the chain: {e}")
                    raise
                logger.debug(f"Strategy {strategy.name} did not apply: {e}")
                continue

            logger.debug(f"Strategy {strategy.name} resolved {result!r}")
            return result

        raise self.exhausted()


# Sources found on a message


def attachment_url(attachments: Sequence[hikari.Attachment]) -> str:
    if not attachments:
        raise NoAttachment()
    return attachments[0].url


def embed_url(embeds: Sequence[hikari.Embed]) -> str:
    if not embeds:
        raise NoEmbed()
    embed = embeds[0]

    # View pages are kept as is and normalised after resolution
    if embed.url and embed.url.startswith(settings.redirect_page_prefix):
        return embed.url
    for resource in (embed.image, embed.thumbnail, embed.video):
        if resource is not None and resource.url:
            return resource.url
    raise NoEmbed()


def sticker_url(stickers: Sequence[hikari.PartialSticker]) -> str:
    if not stickers:
        raise NoSticker()
    sticker = stickers[0]
    if sticker.format_type != hikari.StickerFormatType.PNG:
        raise UnsupportedSticker(sticker.format_type)
    return settings.sticker_cdn_url.format(sticker.id)


async def emoji_url(context: InvocationContext, glyph: str | None) -> str:
    if not glyph:
        raise NoEmoji()
    if EmojiLookup.identifier(glyph) is None:
        raise NoEmoji()
    return await context.require_emoji().image_url(glyph)


async def avatar_url(context: InvocationContext, word: str) -> str:
    user_id = id_from_mention(word)
    if not user_id:
        raise NoMention()
    user = await context.require_transport().fetch_user(user_id)
    return str(user.display_avatar_url)


async def from_channel_history(context: InvocationContext) -> str:
    """Scan recent messages newest first for an embed, sticker or attachment.

    Any error reading a message, including high severity parse errors,
    only skips that part of the message.
    """
    if context.channel_id is None:
        raise NoImageInHistory(severity=Severity.LOW)

    messages = await context.require_transport().fetch_recent_messages(
        context.channel_id, settings.history_scan_limit
    )
    for message in messages:
        for source, field_name in (
            (embed_url, "embeds"),
            (sticker_url, "stickers"),
            (attachment_url, "attachments"),
        ):
            try:
                return source(getattr(message, field_name))
            except ParseError as e:
                if e.is_high:
                    logger.warning(f"Skipping {field_name} of message {message.id} while scanning history: {e}")
            except Exception as e:
                logger.warning(f"Skipping malformed {field_name} of message {message.id}: {e}")

    raise NoImageInHistory()


async def follow_redirect(context: InvocationContext, url: str) -> str:
    """Replace a view page link with the direct media link found on the page."""
    if not url.startswith(settings.redirect_page_prefix):
        return url

    page = await context.require_transport().fetch_text(url)
    media = extract_media_link(page, settings.redirect_media_pattern)
    if media is None:
        raise MediaRedirectExtractionFailed()

    logger.debug(f"Followed redirect page {url} to {media}")
    return media


# Text strategies


async def mention_from_tokens(cursor: TokenCursor) -> str:
    return await avatar_url(cursor.context, cursor.next_word())


async def url_from_tokens(cursor: TokenCursor) -> str:
    word = cursor.next_word()
    if not is_url(word):
        raise NoUrl()
    return word


async def attachment_from_tokens(cursor: TokenCursor) -> str:
    message = cursor.context.message
    return attachment_url(message.attachments if message else ())


async def reply_from_tokens(cursor: TokenCursor) -> str:
    message = cursor.context.message
    reply = message.referenced_message if message else None
    if reply is None:
        raise NoReply()

    if reply.attachments:
        return attachment_url(reply.attachments)

    for attempt in (
        lambda: sticker_url(reply.stickers),
        lambda: embed_url(reply.embeds),
    ):
        try:
            return attempt()
        except ParseError as e:
            if e.is_high:
                raise
    try:
        return await emoji_url(cursor.context, reply.content)
    except ParseError as e:
        if e.is_high:
            raise

    raise NoReply()


async def emoji_from_tokens(cursor: TokenCursor) -> str:
    return await emoji_url(cursor.context, cursor.next_word())


async def sticker_from_tokens(cursor: TokenCursor) -> str:
    message = cursor.context.message
    return sticker_url(message.stickers if message else ())


async def history_from_tokens(cursor: TokenCursor) -> str:
    return await from_channel_history(cursor.context)


# Structured strategies


def _next_string(cursor: OptionCursor, absent: type[ParseError]) -> str:
    """Consume a string option; an attachment option is left to its own strategy."""
    option = cursor.next_option()
    if option.type == hikari.OptionType.STRING:
        return option.value
    if option.type == hikari.OptionType.ATTACHMENT:
        raise absent()
    raise TypeMismatch("string or attachment", option.value)


async def attachment_from_options(cursor: OptionCursor) -> str:
    option = cursor.next_option()
    if option.type == hikari.OptionType.STRING:
        raise NoAttachment()
    if option.type != hikari.OptionType.ATTACHMENT:
        raise TypeMismatch("attachment", option.value)

    resolved = cursor.context.resolved
    attachment = resolved.attachments.get(option.value) if resolved else None
    if attachment is None:
        raise NoAttachment(f"Attachment {option.value} was not resolved", severity=Severity.HIGH)
    return attachment.url


async def mention_from_options(cursor: OptionCursor) -> str:
    return await avatar_url(cursor.context, _next_string(cursor, NoMention))


async def url_from_options(cursor: OptionCursor) -> str:
    value = _next_string(cursor, NoUrl)
    if not is_url(value):
        raise NoUrl()
    return value


async def emoji_from_options(cursor: OptionCursor) -> str:
    return await emoji_url(cursor.context, _next_string(cursor, NoEmoji))


async def history_from_options(cursor: OptionCursor) -> str:
    return await from_channel_history(cursor.context)


TOKEN_IMAGE_CHAIN = ResolutionChain(
    [
        Strategy("mention", mention_from_tokens),
        Strategy("url", url_from_tokens),
        Strategy("attachment", attachment_from_tokens),
        Strategy("reply", reply_from_tokens),
        Strategy("emoji", emoji_from_tokens),
        Strategy("sticker", sticker_from_tokens),
        Strategy("history", history_from_tokens),
    ]
)

# Replies and stickers need conversational context structured input lacks
OPTION_IMAGE_CHAIN = ResolutionChain(
    [
        Strategy("attachment", attachment_from_options),
        Strategy("mention", mention_from_options),
        Strategy("url", url_from_options),
        Strategy("emoji", emoji_from_options),
        Strategy("history", history_from_options),
    ]
)


class ImageUrl(ArgumentType):
    """A URL to an image, resolved from whatever the invocation offers."""

    option_type = hikari.OptionType.ATTACHMENT
    description = "attachment input"

    def __init__(
        self,
        token_chain: ResolutionChain = TOKEN_IMAGE_CHAIN,
        option_chain: ResolutionChain = OPTION_IMAGE_CHAIN,
    ):
        self.token_chain = token_chain
        self.option_chain = option_chain

    async def parse_from_tokens(self, cursor: TokenCursor) -> str:
        url = await self.token_chain.resolve(cursor)
        return await follow_redirect(cursor.context, url)

    async def parse_from_options(self, cursor: OptionCursor) -> str:
        url = await self.option_chain.resolve(cursor)
        return await follow_redirect(cursor.context, url)


class Image(ImageUrl):
    """The downloaded bytes of an :class:`ImageUrl`."""

    async def _download(self, context: InvocationContext, url: str) -> bytes:
        return await context.require_media().download(url, settings.max_input_bytes)

    async def parse_from_tokens(self, cursor: TokenCursor) -> bytes:
        url = await super().parse_from_tokens(cursor)
        return await self._download(cursor.context, url)

    async def parse_from_options(self, cursor: OptionCursor) -> bytes:
        url = await super().parse_from_options(cursor)
        return await self._download(cursor.context, url)

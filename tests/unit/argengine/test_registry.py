"""Tests for command signatures and the command registry."""

from unittest.mock import AsyncMock, MagicMock, patch

import hikari
import pytest

from argengine.commands import (
    CommandRegistry,
    CommandSignature,
    Duration,
    Flags,
    ImageUrl,
    Integer,
    OptionDescriptorFactory,
    OptionSchema,
    Optional,
    Parameter,
    Rest,
    Word,
    command,
)
from argengine.core.cursors import OptionCursor, TokenCursor
from argengine.core.errors import NoMoreInput
from argengine.core.flags import DownloadFlags
from tests.conftest import make_attachment, make_option


class TestCommandSignature:
    """Test CommandSignature."""

    @pytest.mark.asyncio
    async def test_parse_tokens(self):
        signature = CommandSignature(
            [
                Parameter("count", Optional(Integer())),
                Parameter("time", Duration()),
                Parameter("text", Rest()),
            ]
        )

        result = await signature.parse_tokens(TokenCursor("1m30s remind me"))

        assert result == {"count": None, "time": 90_000, "text": "remind me"}

    @pytest.mark.asyncio
    async def test_parse_tokens_missing_required(self):
        signature = CommandSignature([Parameter("word", Word())])

        with pytest.raises(NoMoreInput):
            await signature.parse_tokens(TokenCursor(""))

    @pytest.mark.asyncio
    async def test_parse_options_skips_omitted_optional(self):
        """Test an omitted optional option does not shift later options."""
        signature = CommandSignature(
            [
                Parameter("count", Optional(Integer())),
                Parameter("word", Word()),
                Parameter("flags", Flags(DownloadFlags)),
            ]
        )
        cursor = OptionCursor([make_option("word", "hello")])

        result = await signature.parse_options(cursor)

        assert result == {"count": None, "word": "hello", "flags": DownloadFlags()}
        assert cursor.expected_name is None

    @pytest.mark.asyncio
    async def test_parse_options_all_present(self):
        signature = CommandSignature([Parameter("count", Optional(Integer())), Parameter("word", Word())])
        cursor = OptionCursor(
            [make_option("count", 3, hikari.OptionType.INTEGER), make_option("word", "hi")]
        )

        assert await signature.parse_options(cursor) == {"count": 3, "word": "hi"}

    @pytest.mark.asyncio
    async def test_parse_options_out_of_order(self):
        """Test options are matched to parameters by name, not arrival order."""
        signature = CommandSignature([Parameter("a", Optional(Word())), Parameter("b", Optional(Word()))])
        cursor = OptionCursor([make_option("b", "y"), make_option("a", "x")])

        assert await signature.parse_options(cursor) == {"a": "x", "b": "y"}

    def test_describe(self):
        signature = CommandSignature(
            [Parameter("count", Optional(Integer()), "How many"), Parameter("word", Word())]
        )

        schemas = signature.describe()

        assert schemas == [
            OptionSchema("count", hikari.OptionType.INTEGER, "How many", required=False),
            OptionSchema("word", hikari.OptionType.STRING, "word input", required=True),
        ]


class TestOptionDescriptorFactory:
    """Test OptionDescriptorFactory."""

    def test_required_option(self):
        descriptor = MagicMock(return_value="descriptor")
        schema = OptionSchema("count", hikari.OptionType.INTEGER, "How many")

        with patch.dict(OptionDescriptorFactory.option_mapping, {hikari.OptionType.INTEGER: descriptor}):
            assert OptionDescriptorFactory.create(schema) == "descriptor"

        descriptor.assert_called_once_with("count", "How many")

    def test_optional_option_with_choices(self):
        descriptor = MagicMock()
        schema = OptionSchema("mode", hikari.OptionType.STRING, "Mode", required=False, choices=["a", "b"])

        with patch.dict(OptionDescriptorFactory.option_mapping, {hikari.OptionType.STRING: descriptor}):
            OptionDescriptorFactory.create(schema)

        descriptor.assert_called_once_with("mode", "Mode", default=None, choices=["a", "b"])

    def test_attachment_drops_choices(self):
        descriptor = MagicMock()
        schema = OptionSchema("image", hikari.OptionType.ATTACHMENT, "Image", choices=["x"])

        with patch.dict(OptionDescriptorFactory.option_mapping, {hikari.OptionType.ATTACHMENT: descriptor}):
            OptionDescriptorFactory.create(schema)

        descriptor.assert_called_once_with("image", "Image")


class SampleCommands:
    @command(
        "echo",
        "Repeat text",
        aliases=["say"],
        arguments=[Parameter("times", Optional(Integer())), Parameter("text", Rest())],
    )
    async def echo(self, ctx, times, text):
        return text * (times or 1)

    @command("ping", prefix_only=True)
    async def ping(self, ctx):
        return "pong"


class TestCommandRegistry:
    """Test CommandRegistry."""

    def test_register_from(self):
        """Test decorated methods are registered with their aliases."""
        registry = CommandRegistry()

        registered = registry.register_from(SampleCommands())

        assert {c.name for c in registered} == {"echo", "ping"}
        assert registry.get("say") is registry.get("echo")
        assert registry.get("ECHO").description == "Repeat text"

    def test_remove_command(self):
        registry = CommandRegistry()
        registry.register_from(SampleCommands())

        registry.remove_command("echo")

        assert registry.get("echo") is None
        assert registry.get("say") is None

    def test_make_context(self, mock_transport, mock_media):
        registry = CommandRegistry(transport=mock_transport, media=mock_media)

        context = registry.make_context(channel_id=5)

        assert context.channel_id == 5
        assert context.transport is mock_transport
        assert context.media is mock_media

    @pytest.mark.asyncio
    async def test_resolve_text(self):
        registry = CommandRegistry()
        registry.register_from(SampleCommands())

        result = await registry.resolve_text("say", "3 hi there", registry.make_context())

        assert result == {"times": 3, "text": "hi there"}

    @pytest.mark.asyncio
    async def test_resolve_options(self):
        registry = CommandRegistry()
        registry.register_from(SampleCommands())

        result = await registry.resolve_options("echo", [make_option("text", "hi")], registry.make_context())

        assert result == {"times": None, "text": "hi"}

    @pytest.mark.asyncio
    async def test_resolve_unknown_command(self):
        registry = CommandRegistry()

        with pytest.raises(KeyError):
            await registry.resolve_text("missing", "", registry.make_context())

    def test_mixed_case_names(self):
        """Test commands registered with uppercase names are still found."""
        registry = CommandRegistry()
        registry.register(command("Echo", aliases=["SAY"])(AsyncMock()))

        assert registry.get("echo") is not None
        assert registry.get("echo") is registry.get("say")
        assert registry.get("ECHO").name == "Echo"

        registry.remove_command("echo")
        assert registry.commands == {}

    def test_register_slash_commands_skips_prefix_only(self):
        registry = CommandRegistry()
        registry.register_from(SampleCommands())
        client = MagicMock()

        with patch.object(registry, "build_slash_command", return_value="EchoCommand") as build:
            registry.register_slash_commands(client)

        build.assert_called_once_with("echo")
        client.register.assert_called_once_with("EchoCommand")


class FakeSlashCommand:
    """Stands in for lightbulb.SlashCommand, recording the class keyword arguments."""

    def __init_subclass__(cls, **kwargs):
        cls.command_meta = kwargs


@pytest.fixture
def fake_lightbulb():
    fake = MagicMock()
    fake.invoke = lambda func: func
    fake.SlashCommand = FakeSlashCommand
    descriptor = MagicMock(side_effect=lambda name, description, **kwargs: f"option:{name}")
    kinds = (hikari.OptionType.STRING, hikari.OptionType.INTEGER, hikari.OptionType.ATTACHMENT)
    mapping = {kind: descriptor for kind in kinds}

    with patch("argengine.commands.registry.lightbulb", fake):
        with patch.dict(OptionDescriptorFactory.option_mapping, mapping):
            yield fake


def make_slash_context(options, channel_id=444444444, resolved=None):
    ctx = MagicMock()
    ctx.interaction.options = options
    ctx.interaction.channel_id = channel_id
    ctx.interaction.resolved = resolved
    ctx.respond = AsyncMock()
    return ctx


class TestBuildSlashCommand:
    """Test slash command classes built from registered commands."""

    @pytest.fixture
    def callback(self):
        return AsyncMock()

    @pytest.fixture
    def registry(self, callback, mock_transport):
        registry = CommandRegistry(transport=mock_transport)
        registry.register(
            command(
                "echo",
                "Repeat text",
                arguments=[Parameter("times", Optional(Integer())), Parameter("text", Rest())],
            )(callback)
        )
        return registry

    def test_class_shape(self, registry, fake_lightbulb):
        cls = registry.build_slash_command("echo")

        assert cls.__name__ == "EchoCommand"
        assert cls.command_meta == {"name": "echo", "description": "Repeat text"}
        assert cls.times == "option:times"
        assert cls.text == "option:text"

    @pytest.mark.asyncio
    async def test_invoke_parses_options(self, registry, callback, fake_lightbulb, mock_transport):
        """Test invoking the slash command resolves options and calls the callback."""
        cls = registry.build_slash_command("echo")
        ctx = make_slash_context([make_option("text", "hi"), make_option("times", 2, hikari.OptionType.INTEGER)])

        await cls.invoke(None, ctx)

        callback.assert_awaited_once_with(ctx, times=2, text="hi")
        ctx.respond.assert_not_called()

    @pytest.mark.asyncio
    async def test_invoke_reports_parse_error(self, registry, callback, fake_lightbulb):
        """Test a parse error is answered and the callback never runs."""
        cls = registry.build_slash_command("echo")
        ctx = make_slash_context([])

        await cls.invoke(None, ctx)

        callback.assert_not_called()
        ctx.respond.assert_awaited_once_with("❌ Not enough arguments were provided")

    @pytest.mark.asyncio
    async def test_invoke_uses_interaction_context(self, fake_lightbulb, mock_transport):
        """Test strategies see the interaction's channel and resolved data."""
        callback = AsyncMock()
        registry = CommandRegistry(transport=mock_transport)
        registry.register(command("blur", arguments=[Parameter("image", ImageUrl())])(callback))
        attachment = make_attachment("https://cdn/slash.png", attachment_id=99)
        resolved = MagicMock(spec=hikari.ResolvedOptionData)
        resolved.attachments = {hikari.Snowflake(99): attachment}
        cls = registry.build_slash_command("blur")
        ctx = make_slash_context(
            [make_option("image", hikari.Snowflake(99), hikari.OptionType.ATTACHMENT)], resolved=resolved
        )

        await cls.invoke(None, ctx)

        callback.assert_awaited_once_with(ctx, image="https://cdn/slash.png")


class TestCommandDecorator:
    """Test the command decorator."""

    def test_metadata(self):
        @command("test", "Test command", arguments=[Parameter("word", Word())])
        async def callback(ctx, word):
            pass

        meta = callback._unified_command
        assert meta["name"] == "test"
        assert meta["description"] == "Test command"
        assert meta["aliases"] == []
        assert meta["slash_only"] is False
        assert meta["arguments"][0].name == "word"

    @pytest.mark.asyncio
    async def test_callback_still_callable(self):
        inner = AsyncMock(return_value="done")
        decorated = command("x")(inner)

        assert await decorated() == "done"

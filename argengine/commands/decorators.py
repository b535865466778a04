"""Command decorators for unified command creation."""

from .registry import Parameter


def command(
    name: str,
    description: str = "",
    aliases: list[str] | None = None,
    slash_only: bool = False,
    prefix_only: bool = False,
    arguments: list[Parameter] | None = None,
):
    """
    Unified command decorator declaring a command and its parameters.

    The metadata is read by :class:`CommandRegistry` which builds the
    signature used for both prefix and slash invocations.
    """

    def decorator(func):
        func._unified_command = {
            "name": name,
            "description": description,
            "aliases": aliases or [],
            "slash_only": slash_only,
            "prefix_only": prefix_only,
            "arguments": arguments or [],
        }
        return func

    return decorator

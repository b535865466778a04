"""Command system: argument types, resolution chains and registration."""

from .argument_types import (
    ArgumentType,
    Duration,
    Flags,
    Integer,
    Number,
    OptionSchema,
    Optional,
    Repeated,
    Rest,
    Word,
)
from .decorators import command
from .registry import CommandRegistry, CommandSignature, OptionDescriptorFactory, Parameter
from .resolution import Image, ImageUrl, ResolutionChain, Strategy

__all__ = [
    "ArgumentType",
    "CommandRegistry",
    "CommandSignature",
    "Duration",
    "Flags",
    "Image",
    "ImageUrl",
    "Integer",
    "Number",
    "OptionDescriptorFactory",
    "OptionSchema",
    "Optional",
    "Parameter",
    "Repeated",
    "ResolutionChain",
    "Rest",
    "Strategy",
    "Word",
    "command",
]

"""Decoder for ``--flag value`` style command suffixes."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

from .errors import FlagSyntaxError

logger = logging.getLogger(__name__)

FLAG_PREFIX = "--"


class FlagKind(Enum):
    WITH_VALUE = "with_value"
    NO_VALUE = "no_value"


def _kind_of(name: str, allowed: Mapping[str, FlagKind]) -> FlagKind:
    try:
        return allowed[name]
    except KeyError:
        raise FlagSyntaxError(f"unrecognized flag --{name}") from None


def decode_flags(text: str, allowed: Mapping[str, FlagKind]) -> dict[str, str | None]:
    """
    Decode the flags in ``text`` against an allow-list.

    Args:
        text: Whitespace separated tokens, e.g. ``--quality 480 --audio``
        allowed: Flag name to kind for every flag the command accepts

    Returns:
        Flag name to value; value-less flags map to None, absent flags are missing

    Raises:
        FlagSyntaxError: On unknown flags, missing values or unexpected values
    """
    entries: dict[str, str | None] = {}
    pending: str | None = None

    for token in text.split():
        if token.startswith(FLAG_PREFIX) and len(token) > len(FLAG_PREFIX):
            name = token[len(FLAG_PREFIX):]
            if pending is not None:
                if _kind_of(pending, allowed) is FlagKind.WITH_VALUE:
                    raise FlagSyntaxError(f"--{pending} expected a value")
                entries[pending] = None
            _kind_of(name, allowed)
            pending = name
        elif pending is not None:
            if _kind_of(pending, allowed) is FlagKind.NO_VALUE:
                raise FlagSyntaxError(f"unexpected value {token!r} for --{pending}")
            entries[pending] = token
            pending = None
        # Tokens outside any flag are ignored

    if pending is not None:
        if _kind_of(pending, allowed) is FlagKind.WITH_VALUE:
            raise FlagSyntaxError(f"--{pending} expected a value")
        entries[pending] = None

    logger.debug(f"Decoded flags {entries} from {text!r}")
    return entries


@dataclass
class FlagSet:
    """Base for a command's typed flags, declared once per command."""

    ALLOWED: ClassVar[dict[str, FlagKind]] = {}

    @classmethod
    def from_text(cls, text: str) -> "FlagSet":
        return cls.from_entries(decode_flags(text, cls.ALLOWED))

    @classmethod
    def from_entries(cls, entries: dict[str, str | None]) -> "FlagSet":
        return cls(**{name: name in entries for name in cls.ALLOWED})


@dataclass
class RustFlags(FlagSet):
    ALLOWED: ClassVar[dict[str, FlagKind]] = {
        "miri": FlagKind.NO_VALUE,
        "release": FlagKind.NO_VALUE,
        "asm": FlagKind.NO_VALUE,
        "clippy": FlagKind.NO_VALUE,
        "bench": FlagKind.NO_VALUE,
    }

    miri: bool = False
    asm: bool = False
    clippy: bool = False
    bench: bool = False
    release: bool = False


@dataclass
class LangFlags(FlagSet):
    ALLOWED: ClassVar[dict[str, FlagKind]] = {"verbose": FlagKind.NO_VALUE}

    verbose: bool = False


@dataclass
class DownloadFlags(FlagSet):
    ALLOWED: ClassVar[dict[str, FlagKind]] = {
        "quality": FlagKind.WITH_VALUE,
        "audio": FlagKind.NO_VALUE,
    }

    audio: bool = False
    quality: int = 720

    @classmethod
    def from_entries(cls, entries: dict[str, str | None]) -> "DownloadFlags":
        quality = entries.get("quality") or "720"
        try:
            parsed_quality = int(quality)
        except ValueError:
            raise FlagSyntaxError(f"provided quality {quality!r} is invalid") from None
        return cls(audio="audio" in entries, quality=parsed_quality)

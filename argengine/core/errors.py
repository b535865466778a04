"""Parse errors and their severity classification."""

from enum import Enum
from typing import Any


class Severity(Enum):
    """How a parse failure affects the rest of the resolution.

    LOW means the source did not apply and the next strategy (or "absent")
    should be tried. HIGH aborts the whole parse and reaches the dispatcher.
    """

    LOW = "low"
    HIGH = "high"


class ParseError(Exception):
    """Base class for every argument parsing failure."""

    severity: Severity = Severity.HIGH
    message: str = "Failed to parse arguments"

    def __init__(self, message: str | None = None, *, severity: Severity | None = None):
        self.message = message or self.message
        if severity is not None:
            self.severity = severity
        super().__init__(self.message)

    @property
    def is_high(self) -> bool:
        return self.severity is Severity.HIGH


class NoMoreInput(ParseError):
    severity = Severity.LOW
    message = "Not enough arguments were provided"


class TypeMismatch(ParseError):
    """The input did not match the expected type.

    Token input that merely fails a type's grammar is LOW; a structured
    option carrying the wrong payload type is HIGH.
    """

    def __init__(self, expected: str, actual: Any, *, severity: Severity = Severity.HIGH):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Expected {expected}, got {actual!r}", severity=severity)


class NoMention(ParseError):
    severity = Severity.LOW
    message = "No user mention was provided"


class NoUrl(ParseError):
    severity = Severity.LOW
    message = "No URL was provided"


class NoAttachment(ParseError):
    severity = Severity.LOW
    message = "No attachment was provided"


class NoReply(ParseError):
    severity = Severity.LOW
    message = "No usable replied-to message was found"


class NoEmbed(ParseError):
    severity = Severity.LOW
    message = "No usable embed was found"


class NoEmoji(ParseError):
    severity = Severity.LOW
    message = "No emoji was provided"


class NoSticker(ParseError):
    severity = Severity.LOW
    message = "No sticker was provided"


class UnsupportedSticker(ParseError):
    def __init__(self, format_type: Any):
        self.format_type = format_type
        super().__init__(f"Stickers of format {format_type} are not supported")


class NoImageInHistory(ParseError):
    message = "No image was found in the recent channel history"


class NoImageFound(ParseError):
    message = "No image was found: mention a user, provide a URL, attach or reply to an image"


class MediaRedirectExtractionFailed(ParseError):
    message = "The source was a redirect page and no direct content link could be extracted"


class FlagSyntaxError(ParseError):
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid flags: {reason}")


class TransportError(ParseError):
    message = "A request to an external service failed"


class MediaTooLarge(ParseError):
    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"The input media exceeds the size limit of {limit} bytes")

"""Textual grammars shared by argument types and strategies."""

import re

URL_PATTERN = re.compile(r"https?://[^\s<>]+")
MENTION_PATTERN = re.compile(r"<@!?(\d+)>", re.ASCII)
DURATION_PATTERN = re.compile(r"(\d+)([dhms])", re.ASCII)
INTEGER_PATTERN = re.compile(r"[+-]?\d+", re.ASCII)
NUMBER_PATTERN = re.compile(
    r"[+-]?(?:\d+\.?\d*|\.\d+)(?:e[+-]?\d+)?|[+-]?(?:inf|infinity|nan)",
    re.ASCII | re.IGNORECASE,
)

DURATION_UNITS_MS = {
    "d": 86_400_000,
    "h": 3_600_000,
    "m": 60_000,
    "s": 1_000,
}


def parse_duration(text: str) -> int:
    """
    Parse a duration such as ``1h20m30s`` into milliseconds.

    Args:
        text: A sequence of ``<integer><unit>`` pairs, units among d, h, m, s

    Returns:
        The summed duration in milliseconds

    Raises:
        ValueError: If the text is not entirely made of such pairs
    """
    position = 0
    total = 0
    for match in DURATION_PATTERN.finditer(text.lower()):
        if match.start() != position:
            break
        total += int(match.group(1)) * DURATION_UNITS_MS[match.group(2)]
        position = match.end()

    if not text or position != len(text):
        raise ValueError(f"Invalid duration: {text!r}")
    return total


def parse_integer(text: str) -> int:
    """Parse a plain ASCII integer, rejecting underscores, spaces and non-ASCII digits."""
    if INTEGER_PATTERN.fullmatch(text) is None:
        raise ValueError(f"Invalid integer: {text!r}")
    return int(text)


def parse_number(text: str) -> float:
    """Parse a plain ASCII decimal or exponent number."""
    if NUMBER_PATTERN.fullmatch(text) is None:
        raise ValueError(f"Invalid number: {text!r}")
    return float(text)


def id_from_mention(text: str) -> int | None:
    """Return the user id of a ``<@id>`` or ``<@!id>`` mention, if it is one."""
    match = MENTION_PATTERN.fullmatch(text)
    return int(match.group(1)) if match else None


def is_url(text: str) -> bool:
    return URL_PATTERN.fullmatch(text) is not None


def extract_media_link(page: str, pattern: str) -> str | None:
    """Return the first direct media link matching ``pattern`` in a page body."""
    match = re.search(pattern, page)
    return match.group(0) if match else None

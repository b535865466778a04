import asyncio
import logging
from typing import List, Optional

import typer

from config.settings import settings

from .commands import CommandSignature, Parameter, Repeated, Word
from .core import FlagKind, ParseError, TokenCursor, decode_flags
from .core.utils import parse_duration

app = typer.Typer(
    name="argengine",
    help="Inspect how command input is resolved into arguments",
    add_completion=False,
)


def setup_logging(level: str = "INFO") -> None:
    """Setup logging configuration."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )


@app.callback()
def main_callback(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Set log level"),
) -> None:
    setup_logging(log_level or settings.log_level)


@app.command()
def flags(
    text: str = typer.Argument(help="Flag text, e.g. '--quality 480 --audio'"),
    allow: List[str] = typer.Option(
        [], "--allow", "-a", help="Allowed flag; NAME for value-less, NAME=value for value-taking"
    ),
) -> None:
    """Decode flags against an allow-list."""
    allowed = {}
    for entry in allow:
        name, _, kind = entry.partition("=")
        allowed[name] = FlagKind.WITH_VALUE if kind else FlagKind.NO_VALUE

    try:
        decoded = decode_flags(text, allowed)
    except ParseError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(1)

    for name, value in decoded.items():
        typer.echo(f"{name}: {value if value is not None else '(set)'}")


@app.command()
def duration(text: str = typer.Argument(help="Duration, e.g. 1h20m30s")) -> None:
    """Print a duration in milliseconds."""
    try:
        typer.echo(str(parse_duration(text)))
    except ValueError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(1)


@app.command()
def words(text: str = typer.Argument(help="Text to split as a repeated word argument")) -> None:
    """Parse text as a list of words, the way a prefix command would."""
    signature = CommandSignature([Parameter("words", Repeated(Word()))])
    parsed = asyncio.run(signature.parse_tokens(TokenCursor(text)))
    for word in parsed["words"]:
        typer.echo(word)


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()

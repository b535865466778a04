from .context import InvocationContext
from .cursors import Checkpoint, OptionCursor, TokenCursor, commit_if_ok
from .errors import ParseError, Severity
from .flags import FlagKind, decode_flags

__all__ = [
    "Checkpoint",
    "FlagKind",
    "InvocationContext",
    "OptionCursor",
    "ParseError",
    "Severity",
    "TokenCursor",
    "commit_if_ok",
    "decode_flags",
]

"""Framework-agnostic helpers — logging, bot identity, command text rules.

This package must NEVER import from ``bot/`` or ``sdk/``.
"""

from core.commands import (
    COMMAND_MARKER,
    looks_like_command,
    normalize_command,
    split_first_token,
    strip_mention,
)
from core.identity import BotIdentity
from core.logger import TelerouteLogger

__all__ = [
    "BotIdentity",
    "TelerouteLogger",
    "COMMAND_MARKER",
    "looks_like_command",
    "normalize_command",
    "split_first_token",
    "strip_mention",
]

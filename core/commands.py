"""Text helpers for recognising and rewriting command messages.

Pure string functions with no knowledge of the SDK models, so the router
can stay small and these rules can be tested on their own.
"""

COMMAND_MARKER = "/"


def normalize_command(command: str) -> str:
    """Prefix *command* with the command marker if it lacks one.

    >>> normalize_command("start")
    '/start'
    >>> normalize_command("/start")
    '/start'
    """
    return command if command.startswith(COMMAND_MARKER) else f"{COMMAND_MARKER}{command}"


def split_first_token(text: str) -> tuple[str | None, str]:
    """Split *text* on whitespace into its first token and the rest.

    The rest is re-joined with single spaces.  Empty or blank text yields
    ``(None, "")``.
    """
    tokens = text.split()
    if not tokens:
        return None, ""
    return tokens[0], " ".join(tokens[1:])


def strip_mention(token: str, bot_name: str | None) -> str:
    """Drop a trailing ``@bot_name`` from *token* if it names this bot.

    Mentions of other bots are left in place, so ``/foo@otherbot`` will not
    match a ``/foo`` subscription.
    """
    if bot_name and token.endswith(bot_name):
        head, sep, _ = token.rpartition("@")
        if sep:
            return head
    return token


def looks_like_command(text: str | None) -> bool:
    """True if the first token of *text* begins with the command marker."""
    if not text:
        return False
    token, _ = split_first_token(text)
    return token is not None and token.startswith(COMMAND_MARKER)

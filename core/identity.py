from __future__ import annotations

import threading

from core.logger import TelerouteLogger

logger = TelerouteLogger.get_logger()


class BotIdentity:
    """API key plus the bot's resolved ``@username``.

    The key never changes.  The name starts as ``None`` and is filled once,
    normally from a ``getMe`` call; later attempts are ignored unless
    ``force=True`` is passed.
    """

    __slots__ = ("_key", "_name", "_lock")

    def __init__(self, key: str, name: str | None = None) -> None:
        self._key = key
        self._name = _as_mention(name) if name else None
        self._lock = threading.Lock()

    @property
    def key(self) -> str:
        return self._key

    @property
    def name(self) -> str | None:
        return self._name

    def set_name(self, name: str | None, *, force: bool = False) -> bool:
        """Store *name* as the bot mention.  Returns ``True`` if it was stored."""
        with self._lock:
            if self._name is not None and not force:
                logger.warning("Bot name already resolved, ignoring", extra={"bot_name": self._name, "candidate": name})
                return False
            self._name = _as_mention(name) if name else None
        logger.info("Bot name resolved", extra={"bot_name": self._name})
        return True

    def __repr__(self) -> str:
        # The key is a credential; never print it.
        return f"BotIdentity(name={self._name!r})"


def _as_mention(name: str) -> str:
    return name if name.startswith("@") else f"@{name}"

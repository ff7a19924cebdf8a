"""Subscription registry — which delivery queue gets which update.

Two kinds of entries:

* **keys** — a command (``/foo``, always stored with the command marker) or a
  plain first word (``hello``).  One queue per key; registering a key again
  replaces the previous queue.
* **slots** — catch-alls for unknown commands, unknown text, callback queries
  and inline queries.  One queue per slot, same replace rule.

Every operation takes an internal :class:`threading.Lock`, so handlers may be
added at runtime from other threads while the dispatch loop is reading.

Usage::

    registry = SubscriptionRegistry()
    registry.register_command("start", queue)     # stored as "/start"
    registry.register_slot(Slot.CALLBACK, callback_queue)

    registry.lookup("/start")                     # -> queue
"""

from __future__ import annotations

import dataclasses
import enum
import threading
from typing import Any

from bot.queues import DeliveryQueue
from core.commands import normalize_command
from core.logger import TelerouteLogger

logger = TelerouteLogger.get_logger()


class Slot(str, enum.Enum):
    """Named catch-all subscriptions."""

    UNKNOWN_COMMAND = "unknown_command"
    UNKNOWN_TEXT = "unknown_text"
    CALLBACK = "callback"
    INLINE = "inline"


@dataclasses.dataclass(frozen=True, slots=True)
class Subscription:
    """One registered key and the queue it feeds."""

    key: str
    queue: DeliveryQueue[Any]
    is_command: bool


class SubscriptionRegistry:
    """Lock-guarded table of key and slot subscriptions."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[str, Subscription] = {}
        self._slots: dict[Slot, DeliveryQueue[Any]] = {}

    # ── registration ─────────────────────────────────────────────────────

    def register(self, key: str, queue: DeliveryQueue[Any], *, is_command: bool = False) -> str:
        """Subscribe *queue* to messages whose first word is exactly *key*."""
        with self._lock:
            replaced = key in self._entries
            self._entries[key] = Subscription(key=key, queue=queue, is_command=is_command)
        logger.debug("Registered subscription", extra={"command": key, "replaced": replaced})
        return key

    def register_command(self, command: str, queue: DeliveryQueue[Any]) -> str:
        """Subscribe *queue* to *command*, adding the command marker if missing.

        Returns the normalized key.
        """
        return self.register(normalize_command(command), queue, is_command=True)

    def register_slot(self, slot: Slot | str, queue: DeliveryQueue[Any]) -> None:
        slot = Slot(slot)
        with self._lock:
            replaced = slot in self._slots
            self._slots[slot] = queue
        logger.debug("Registered slot", extra={"slot": slot.value, "replaced": replaced})

    # ── lookup helpers ───────────────────────────────────────────────────

    def lookup(self, key: str) -> DeliveryQueue[Any] | None:
        """Return the queue for *key*, or ``None``."""
        with self._lock:
            entry = self._entries.get(key)
        return entry.queue if entry is not None else None

    def slot(self, slot: Slot | str) -> DeliveryQueue[Any] | None:
        with self._lock:
            return self._slots.get(Slot(slot))

    def entries(self) -> dict[str, Subscription]:
        """Return a snapshot of all key subscriptions."""
        with self._lock:
            return dict(self._entries)

    def commands(self) -> list[str]:
        """Registered command keys, in registration order."""
        with self._lock:
            return [key for key, entry in self._entries.items() if entry.is_command]

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

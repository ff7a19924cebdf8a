"""Dispatch router — decides which delivery queue receives an update.

Routing order, first match wins:

1. callback query  → ``callback`` slot
2. inline query    → ``inline`` slot
3. ``message`` with text:
   a. command (``/`` prefix or a leading ``bot_command`` entity) → its
      subscription with the command stripped, else ``unknown_command``
   b. first word registered as a text key → that subscription, stripped
   c. ``unknown_text`` slot, first word stripped the same way
4. anything left is returned to the caller for forwarding.

The router never raises on a delivery failure: a closed queue is logged and
the update counts as consumed.
"""

from __future__ import annotations

from typing import Any, Optional

from bot.queues import DeliveryQueue
from bot.registry import Slot, SubscriptionRegistry
from core.commands import COMMAND_MARKER, split_first_token, strip_mention
from core.identity import BotIdentity
from core.logger import TelerouteLogger
from sdk.client import BotClient
from sdk.exceptions import ChannelClosedError
from sdk.models import Message, Update

logger = TelerouteLogger.get_logger()


class Router:
    """Routes updates against a :class:`~bot.registry.SubscriptionRegistry`."""

    def __init__(self, registry: SubscriptionRegistry, identity: BotIdentity) -> None:
        self._registry = registry
        self._identity = identity

    def route(self, client: BotClient, update: Update) -> Optional[Update]:
        """Deliver *update* to at most one queue.

        Returns ``None`` when the update was consumed, or the update itself
        when nothing claimed it.
        """
        update_id = update.update_id

        # ── Queries ──────────────────────────────────────────────────────
        if update.callback_query is not None:
            queue = self._registry.slot(Slot.CALLBACK)
            if queue is not None:
                return self._deliver(queue, client, update.callback_query, update_id, Slot.CALLBACK.value)

        if update.inline_query is not None:
            queue = self._registry.slot(Slot.INLINE)
            if queue is not None:
                return self._deliver(queue, client, update.inline_query, update_id, Slot.INLINE.value)

        # ── Messages ─────────────────────────────────────────────────────
        message = update.message
        if message is None or message.text is None:
            logger.debug("Forwarding update", extra={"update_id": update_id, "kind": update.kind})
            return update

        token, rest = split_first_token(message.text)
        if token is None:
            return self._route_text(client, update, message, None, rest)

        if token.startswith(COMMAND_MARKER) or message.has_command_entity():
            command = strip_mention(token, self._identity.name)
            queue = self._registry.lookup(command)
            if queue is not None:
                stripped = message.model_copy(update={"text": rest})
                return self._deliver(queue, client, stripped, update_id, command)

            queue = self._registry.slot(Slot.UNKNOWN_COMMAND)
            if queue is not None:
                return self._deliver(queue, client, message, update_id, Slot.UNKNOWN_COMMAND.value)

        return self._route_text(client, update, message, token, rest)

    def _route_text(
        self,
        client: BotClient,
        update: Update,
        message: Message,
        token: str | None,
        rest: str,
    ) -> Optional[Update]:
        update_id = update.update_id

        if token is not None:
            queue = self._registry.lookup(token)
            if queue is not None:
                stripped = message.model_copy(update={"text": rest})
                return self._deliver(queue, client, stripped, update_id, token)

        queue = self._registry.slot(Slot.UNKNOWN_TEXT)
        if queue is not None:
            stripped = message.model_copy(update={"text": rest})
            return self._deliver(queue, client, stripped, update_id, Slot.UNKNOWN_TEXT.value)

        logger.debug("Forwarding unmatched message", extra={"update_id": update_id})
        return update

    @staticmethod
    def _deliver(
        queue: DeliveryQueue[Any],
        client: BotClient,
        payload: Any,
        update_id: int,
        target: str,
    ) -> None:
        try:
            queue.send(client, payload)
        except ChannelClosedError as exc:
            logger.warning("Dropping update, delivery queue closed", extra={"update_id": update_id, "command": target, "error": str(exc)})
            return None
        logger.debug("Delivered update", extra={"update_id": update_id, "command": target})
        return None

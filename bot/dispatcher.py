"""Bot root and dispatch loop.

:class:`Bot` ties the pieces together: one shared :class:`~sdk.client.BotClient`,
the subscription registry, the router and an update source.  Handlers are
registered up front and receive their updates through delivery queues; the
dispatch loop only routes, so a slow handler never stalls polling::

    bot = Bot(token)
    ping = bot.new_cmd("/ping")

    async def pong() -> None:
        async for client, message in ping:
            await client.send_message(message.chat.id, "pong")

    asyncio.run(bot.run_with(pong()))

Updates that nothing claims come out of :meth:`Bot.get_stream` with their
client attached.
"""

from __future__ import annotations

import asyncio
from typing import Any, AsyncIterator, Awaitable, Optional, Tuple

import requests

from bot.queues import DeliveryQueue
from bot.registry import Slot, SubscriptionRegistry
from bot.router import Router
from bot.sources import PollSource, UpdateCursor, WebhookSource
from core.identity import BotIdentity
from core.logger import TelerouteLogger
from sdk.client import BotClient
from sdk.models import CallbackQuery, InlineQuery, Message, Update
from sdk.transport import DEFAULT_HOST, Transport

logger = TelerouteLogger.get_logger()


class Bot:
    """Root object owning the client, registry, router and cursor.

    Args:
        key: Bot API token.
        host: API host name.
        update_interval: Seconds between polls.
        timeout: Long-poll timeout in seconds.
        request_timeout: HTTP timeout for ordinary calls.
        name: Bot ``@username`` if already known; otherwise call
            :meth:`resolve_name` before routing mentions.
    """

    def __init__(
        self,
        key: str,
        *,
        host: str = DEFAULT_HOST,
        update_interval: float = 2.0,
        timeout: int = 30,
        request_timeout: float = 10,
        session: Optional[requests.Session] = None,
        name: Optional[str] = None,
    ) -> None:
        self.identity = BotIdentity(key, name)
        self.client = BotClient(Transport(key, host=host, timeout=request_timeout, session=session))
        self.registry = SubscriptionRegistry()
        self.router = Router(self.registry, self.identity)
        self.cursor = UpdateCursor()
        self.update_interval = update_interval
        self.timeout = timeout

    @property
    def name(self) -> Optional[str]:
        return self.identity.name

    # ── registration ─────────────────────────────────────────────────────

    def new_cmd(self, command: str) -> DeliveryQueue[Message]:
        """Queue for ``/command`` messages; the marker is added if missing."""
        queue: DeliveryQueue[Message] = DeliveryQueue()
        self.registry.register_command(command, queue)
        return queue

    def new_text(self, word: str) -> DeliveryQueue[Message]:
        """Queue for messages whose first word is exactly *word*."""
        queue: DeliveryQueue[Message] = DeliveryQueue()
        self.registry.register(word, queue)
        return queue

    def unknown_cmd(self) -> DeliveryQueue[Message]:
        return self._slot_queue(Slot.UNKNOWN_COMMAND)

    def unknown_text(self) -> DeliveryQueue[Message]:
        return self._slot_queue(Slot.UNKNOWN_TEXT)

    def callback(self) -> DeliveryQueue[CallbackQuery]:
        return self._slot_queue(Slot.CALLBACK)

    def inline(self) -> DeliveryQueue[InlineQuery]:
        return self._slot_queue(Slot.INLINE)

    def _slot_queue(self, slot: Slot) -> DeliveryQueue[Any]:
        queue: DeliveryQueue[Any] = DeliveryQueue()
        self.registry.register_slot(slot, queue)
        return queue

    # ── identity ─────────────────────────────────────────────────────────

    async def resolve_name(self, force: bool = False) -> Optional[str]:
        """Fetch the bot's username with ``getMe`` and store it as ``@name``.

        Raises:
            BotAPIError: If the ``getMe`` call fails.
        """
        if self.identity.name is not None and not force:
            return self.identity.name
        me = await self.client.get_me()
        self.identity.set_name(me.username, force=force)
        return self.identity.name

    # ── dispatch ─────────────────────────────────────────────────────────

    def process_update(self, client: BotClient, update: Update) -> Optional[Update]:
        """Route one update.  Returns it if unclaimed, else ``None``.  Never raises."""
        try:
            return self.router.route(client, update)
        except Exception:
            logger.exception("Failed to route update", extra={"update_id": update.update_id})
            return None

    async def _dispatch(self, source: AsyncIterator[Tuple[BotClient, Update]]) -> AsyncIterator[Tuple[BotClient, Update]]:
        async for client, update in source:
            forwarded = self.process_update(client, update)
            if forwarded is not None:
                yield client, forwarded

    def poll_source(self) -> PollSource:
        return PollSource(
            self.client,
            self.cursor,
            update_interval=self.update_interval,
            timeout=self.timeout,
        )

    def get_stream(self) -> AsyncIterator[Tuple[BotClient, Update]]:
        """Long-poll and yield every update the router did not claim.

        Raises:
            TimerError: If the update interval is not positive.
        """
        return self._dispatch(self.poll_source().updates())

    def get_push_stream(
        self,
        host: str = "0.0.0.0",
        port: int = 8443,
        path: str = "/",
        secret_token: Optional[str] = None,
    ) -> AsyncIterator[Tuple[BotClient, Update]]:
        """Like :meth:`get_stream`, fed by a webhook listener instead of polling."""
        source = WebhookSource(self.client, host=host, port=port, path=path, secret_token=secret_token)
        return self._dispatch(source.updates())

    async def run(self, push: bool = False, **push_options: Any) -> None:
        """Resolve the bot name, then dispatch until the source fails."""
        await self.resolve_name()
        stream = self.get_push_stream(**push_options) if push else self.get_stream()
        logger.info("Dispatch loop started", extra={"bot_name": self.identity.name, "mode": "push" if push else "poll"})
        async for _, update in stream:
            logger.debug("Unhandled update", extra={"update_id": update.update_id, "kind": update.kind})

    async def run_with(self, *aws: Awaitable[Any], push: bool = False, **push_options: Any) -> None:
        """Run the dispatch loop alongside application coroutines."""
        await asyncio.gather(self.run(push=push, **push_options), *aws)

    def __repr__(self) -> str:
        return f"Bot(name={self.identity.name!r}, commands={self.registry.commands()!r})"

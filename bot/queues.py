"""Delivery queues — the hand-off between the router and application code.

A :class:`DeliveryQueue` is an unbounded FIFO of ``(client, payload)`` pairs.
The router pushes with :meth:`~DeliveryQueue.send`, which never blocks;
application code pulls with ``await queue.get()`` or ``async for``::

    queue = bot.new_cmd("/ping")

    async def ping_handler() -> None:
        async for client, message in queue:
            await client.send_message(message.chat.id, "pong")

Once the consumer calls :meth:`~DeliveryQueue.close`, further sends raise
:class:`~sdk.exceptions.ChannelClosedError` and ``async for`` stops after the
backlog is drained.  Queues belong to one event loop.
"""

from __future__ import annotations

import asyncio
from typing import Generic, Tuple, TypeVar

from sdk.client import BotClient
from sdk.exceptions import ChannelClosedError

T = TypeVar("T")


class DeliveryQueue(Generic[T]):
    """Unbounded ordered channel of ``(BotClient, T)`` pairs."""

    def __init__(self) -> None:
        self._queue: asyncio.Queue[Tuple[BotClient, T]] = asyncio.Queue()
        self._closed = False
        self._closed_event = asyncio.Event()

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, client: BotClient, payload: T) -> None:
        """Enqueue without waiting.

        Raises:
            ChannelClosedError: If the consumer has closed the queue.
        """
        if self._closed:
            raise ChannelClosedError("Delivery queue consumer is closed")
        self._queue.put_nowait((client, payload))

    async def get(self) -> Tuple[BotClient, T]:
        return await self._queue.get()

    def get_nowait(self) -> Tuple[BotClient, T]:
        """Raises :class:`asyncio.QueueEmpty` when nothing is pending."""
        return self._queue.get_nowait()

    def close(self) -> None:
        """Stop accepting deliveries.

        Already queued items can still be read; ``async for`` ends once they
        are drained, including a loop that is waiting when the queue closes.
        """
        self._closed = True
        self._closed_event.set()

    def empty(self) -> bool:
        return self._queue.empty()

    def __len__(self) -> int:
        return self._queue.qsize()

    def __aiter__(self) -> "DeliveryQueue[T]":
        return self

    async def __anext__(self) -> Tuple[BotClient, T]:
        while True:
            if not self._queue.empty():
                return self._queue.get_nowait()
            if self._closed:
                raise StopAsyncIteration

            getter = asyncio.ensure_future(self._queue.get())
            closed = asyncio.ensure_future(self._closed_event.wait())
            try:
                await asyncio.wait((getter, closed), return_when=asyncio.FIRST_COMPLETED)
            finally:
                closed.cancel()
                received = getter.done()
                if not received:
                    getter.cancel()
            if received:
                return getter.result()

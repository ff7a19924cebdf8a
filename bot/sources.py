"""Update sources — long polling and push webhook.

Both sources are async iterators of ``(BotClient, Update)`` pairs, so the
dispatch loop does not care where updates come from::

    source = PollSource(client, update_interval=2.0, timeout=30)
    async for client, update in source.updates():
        ...

:class:`PollSource` calls ``getUpdates`` once per tick and advances an
:class:`UpdateCursor` past every update it has seen, so the server can drop
acknowledged updates.  :class:`WebhookSource` runs an aiohttp listener and
yields each POSTed update after acknowledging it.
"""

from __future__ import annotations

import asyncio
import hmac
import json
import threading
from typing import AsyncIterator, List, Optional, Tuple

from aiohttp import web
from pydantic import ValidationError

from core.logger import TelerouteLogger
from sdk.calls import GetUpdates
from sdk.client import BotClient
from sdk.exceptions import MalformedEnvelopeError, TimerError
from sdk.models import Update

logger = TelerouteLogger.get_logger()

SECRET_TOKEN_HEADER = "X-Telegram-Bot-Api-Secret-Token"


class UpdateCursor:
    """Offset of the next update to request.  Only ever moves forward."""

    def __init__(self, start: int = 0) -> None:
        self._value = start
        self._lock = threading.Lock()

    @property
    def value(self) -> int:
        return self._value

    def advance(self, update_id: int) -> int:
        """Move past *update_id*.  Returns the new offset."""
        with self._lock:
            self._value = max(self._value, update_id + 1)
            return self._value

    def __repr__(self) -> str:
        return f"UpdateCursor({self._value})"


# ── Long polling ─────────────────────────────────────────────────────────────


class PollSource:
    """Periodic ``getUpdates`` long polling.

    Args:
        client: Client used for the poll call and handed out with each update.
        cursor: Shared offset; a fresh one starting at 0 if omitted.
        update_interval: Seconds between the start of two polls.  A poll that
            overruns the interval is followed immediately by the next one.
        timeout: Long-poll timeout sent to the server, in seconds.

    Raises:
        TimerError: If *update_interval* is not positive.
    """

    def __init__(
        self,
        client: BotClient,
        cursor: Optional[UpdateCursor] = None,
        *,
        update_interval: float = 2.0,
        timeout: int = 30,
        limit: Optional[int] = None,
        allowed_updates: Optional[List[str]] = None,
    ) -> None:
        if update_interval <= 0:
            raise TimerError(f"update interval must be positive, got {update_interval!r}")
        self.client = client
        self.cursor = cursor if cursor is not None else UpdateCursor()
        self.update_interval = update_interval
        self.timeout = timeout
        self.limit = limit
        self.allowed_updates = allowed_updates

    async def fetch_batch(self) -> List[Update]:
        """Run one ``getUpdates`` call and advance the cursor past the batch.

        Elements that do not validate as an :class:`~sdk.models.Update` are
        logged and skipped; their ``update_id`` still moves the cursor.

        Raises:
            TransportError, Utf8DecodeError, MalformedEnvelopeError, RemoteError:
                When the poll call itself fails.
        """
        call = GetUpdates(
            offset=self.cursor.value,
            timeout=self.timeout,
            limit=self.limit,
            allowed_updates=self.allowed_updates,
        )
        result = json.loads(await self.client.acall_raw(call))
        if not isinstance(result, list):
            raise MalformedEnvelopeError("getUpdates result is not a list")

        batch: List[Update] = []
        for item in result:
            update_id = item.get("update_id") if isinstance(item, dict) else None
            if isinstance(update_id, int):
                self.cursor.advance(update_id)
            try:
                batch.append(Update.model_validate(item))
            except ValidationError as exc:
                logger.warning("Skipping unparseable update", extra={"update_id": update_id, "error": str(exc)})

        if batch:
            logger.debug("Received updates", extra={"count": len(batch), "offset": self.cursor.value})
        return batch

    async def updates(self) -> AsyncIterator[Tuple[BotClient, Update]]:
        """Yield updates forever, one poll per tick.  Poll errors propagate."""
        loop = asyncio.get_running_loop()
        next_tick = loop.time()
        while True:
            delay = next_tick - loop.time()
            if delay > 0:
                await asyncio.sleep(delay)
            next_tick = max(next_tick + self.update_interval, loop.time())

            for update in await self.fetch_batch():
                yield self.client, update


# ── Push webhook ─────────────────────────────────────────────────────────────


class WebhookSource:
    """aiohttp listener that receives updates POSTed by the server.

    Each request body is one Update.  The response is sent before the update
    is dispatched: ``200`` on success, ``500`` if the body does not parse and
    ``403`` if a secret token is configured and the header does not match.
    """

    def __init__(
        self,
        client: BotClient,
        host: str = "0.0.0.0",
        port: int = 8443,
        path: str = "/",
        secret_token: Optional[str] = None,
    ) -> None:
        self.client = client
        self.host = host
        self.port = port
        self.path = path
        self.secret_token = secret_token
        self.app: Optional[web.Application] = None
        self.runner: Optional[web.AppRunner] = None
        self.site: Optional[web.TCPSite] = None
        self._queue: asyncio.Queue[Update] = asyncio.Queue()

    def build_app(self) -> web.Application:
        app = web.Application()
        app.router.add_post(self.path, self.handle_update)
        return app

    async def handle_update(self, request: web.Request) -> web.Response:
        if self.secret_token is not None:
            supplied = request.headers.get(SECRET_TOKEN_HEADER, "")
            if not hmac.compare_digest(supplied.encode("utf-8"), self.secret_token.encode("utf-8")):
                logger.warning("Rejected webhook request with bad secret token", extra={"remote": request.remote})
                return web.Response(status=403)

        body = await request.read()
        try:
            update = Update.model_validate_json(body)
        except ValidationError as exc:
            logger.warning("Webhook body is not a valid update", extra={"error": str(exc), "size": len(body)})
            return web.Response(status=500)

        self._queue.put_nowait(update)
        logger.debug("Webhook update accepted", extra={"update_id": update.update_id})
        return web.Response(status=200)

    async def start(self) -> None:
        """Start listening on ``host:port``."""
        self.app = self.build_app()
        self.runner = web.AppRunner(self.app)
        await self.runner.setup()
        self.site = web.TCPSite(self.runner, self.host, self.port)
        await self.site.start()
        logger.info("Webhook listener started", extra={"host": self.host, "port": self.port, "path": self.path})

    async def stop(self) -> None:
        if self.runner is not None:
            await self.runner.cleanup()
            logger.info("Webhook listener stopped", extra={"host": self.host, "port": self.port})
        self.app = None
        self.runner = None
        self.site = None

    async def next_update(self) -> Update:
        return await self._queue.get()

    async def updates(self) -> AsyncIterator[Tuple[BotClient, Update]]:
        """Start the listener and yield updates in arrival order until closed."""
        await self.start()
        try:
            while True:
                update = await self._queue.get()
                yield self.client, update
        finally:
            await self.stop()


__all__ = ["PollSource", "UpdateCursor", "WebhookSource", "SECRET_TOKEN_HEADER"]

"""BotClient — application-facing façade over the transport and the decoder.

A :class:`BotClient` is the handle delivered alongside every routed update,
so handlers can answer without holding a reference to the dispatch loop::

    client, message = await queue.get()
    await client.send_message(message.chat.id, "pong")

Any :class:`~sdk.calls.ApiCall` can be sent with :meth:`BotClient.call`
(blocking) or :meth:`BotClient.acall` (async).  Failures are raised as the
typed errors of :mod:`sdk.exceptions`; nothing is retried.
"""

from __future__ import annotations

import asyncio
from typing import Any, List, Optional, Union

from core.logger import TelerouteLogger
from sdk.calls import (
    AnswerCallbackQuery,
    AnswerInlineQuery,
    DeleteWebhook,
    GetFile,
    GetMe,
    GetUpdates,
    SendDocument,
    SendMessage,
    SendPhoto,
    SetWebhook,
    Sendable,
)
from sdk.envelope import decode
from sdk.files import InputFile
from sdk.models import File, InlineQueryResult, Message, Update, User
from sdk.transport import DEFAULT_HOST, Transport

logger = TelerouteLogger.get_logger()


class BotClient:
    """Sends API calls through one shared :class:`~sdk.transport.Transport`."""

    def __init__(self, transport: Transport) -> None:
        self._transport = transport

    @classmethod
    def from_token(cls, key: str, host: str = DEFAULT_HOST, timeout: float = 10) -> "BotClient":
        return cls(Transport(key, host=host, timeout=timeout))

    @property
    def transport(self) -> Transport:
        return self._transport

    # ------------------------------------------------------------------
    #  Generic calls
    # ------------------------------------------------------------------

    def call(self, call: Sendable) -> Any:
        """Send *call* and return its typed result (blocking)."""
        raw = self._transport.send(call.to_request())
        return call.parse_response(raw)

    async def acall(self, call: Sendable) -> Any:
        """Send *call* and return its typed result."""
        raw = await self._transport.asend(call.to_request())
        return call.parse_response(raw)

    async def acall_raw(self, call: Sendable) -> str:
        """Send *call* and return the canonical ``result`` JSON string."""
        raw = await self._transport.asend(call.to_request())
        return decode(raw)

    # ------------------------------------------------------------------
    #  Convenience wrappers
    # ------------------------------------------------------------------

    async def get_me(self) -> User:
        return await self.acall(GetMe())

    async def get_updates(self, offset: Optional[int] = None, timeout: Optional[int] = None, limit: Optional[int] = None) -> List[Update]:
        return await self.acall(GetUpdates(offset=offset, timeout=timeout, limit=limit))

    async def send_message(self, chat_id: Union[int, str], text: str, **options: Any) -> Message:
        """Send a text message.  *options* are any other ``sendMessage`` fields."""
        logger.debug("Sending message", extra={"chat_id": chat_id, "endpoint": "sendMessage", "text_preview": text[:80]})
        return await self.acall(SendMessage(chat_id=chat_id, text=text, **options))

    async def send_photo(self, chat_id: Union[int, str], photo: Union[InputFile, str], **options: Any) -> Message:
        return await self.acall(SendPhoto(chat_id=chat_id, photo=photo, **options))

    async def send_document(self, chat_id: Union[int, str], document: Union[InputFile, str], **options: Any) -> Message:
        return await self.acall(SendDocument(chat_id=chat_id, document=document, **options))

    async def answer_callback_query(self, callback_query_id: str, text: Optional[str] = None, **options: Any) -> bool:
        """Acknowledge a callback query so the spinner disappears for the user."""
        return await self.acall(AnswerCallbackQuery(callback_query_id=callback_query_id, text=text, **options))

    async def answer_inline_query(self, inline_query_id: str, results: List[InlineQueryResult], **options: Any) -> bool:
        return await self.acall(AnswerInlineQuery(inline_query_id=inline_query_id, results=results, **options))

    async def set_webhook(self, url: str, **options: Any) -> bool:
        return await self.acall(SetWebhook(url=url, **options))

    async def delete_webhook(self, drop_pending_updates: Optional[bool] = None) -> bool:
        return await self.acall(DeleteWebhook(drop_pending_updates=drop_pending_updates))

    async def get_file(self, file_id: str) -> File:
        return await self.acall(GetFile(file_id=file_id))

    async def download_file(self, file_path: str, timeout: float = 30) -> bytes:
        """Download raw bytes for a ``File.file_path`` from the file CDN.

        Raises:
            TransportError: On network failure or a non-2xx status.
        """
        return await asyncio.to_thread(self._transport.download, file_path, timeout)

    def __repr__(self) -> str:
        return f"BotClient({self._transport!r})"


__all__ = ["BotClient"]

"""Tests for the poll and webhook update sources."""

import json
import sys
import os
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from aiohttp import test_utils

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from bot.sources import SECRET_TOKEN_HEADER, PollSource, UpdateCursor, WebhookSource
from sdk.calls import GetUpdates
from sdk.exceptions import MalformedEnvelopeError, TimerError, TransportError
from sdk.models import Update


def _poll_client(*results) -> MagicMock:
    """Client whose ``acall_raw`` returns each of *results* as JSON text in turn."""
    client = MagicMock()
    client.acall_raw = AsyncMock(side_effect=[r if isinstance(r, Exception) else json.dumps(r) for r in results])
    return client


MESSAGE = {"message_id": 1, "date": 0, "chat": {"id": 1, "type": "private"}, "text": "hi"}


# ── cursor ───────────────────────────────────────────────────────────────────


class TestUpdateCursor:
    def test_starts_at_zero(self) -> None:
        assert UpdateCursor().value == 0

    def test_advances_past_id(self) -> None:
        cursor = UpdateCursor()
        assert cursor.advance(5) == 6

    def test_never_moves_back(self) -> None:
        cursor = UpdateCursor(10)
        cursor.advance(3)
        assert cursor.value == 10


# ── polling ──────────────────────────────────────────────────────────────────


class TestPollSource:
    def test_non_positive_interval_is_timer_error(self) -> None:
        with pytest.raises(TimerError):
            PollSource(MagicMock(), update_interval=0)
        with pytest.raises(TimerError):
            PollSource(MagicMock(), update_interval=-1)

    @pytest.mark.asyncio
    async def test_cursor_after_batch_and_empty_batch(self) -> None:
        client = _poll_client([{"update_id": 5}, {"update_id": 7}], [])
        source = PollSource(client, update_interval=1)

        batch = await source.fetch_batch()
        assert [u.update_id for u in batch] == [5, 7]
        assert source.cursor.value == 8

        assert await source.fetch_batch() == []
        assert source.cursor.value == 8

    @pytest.mark.asyncio
    async def test_poll_call_uses_cursor_and_timeout(self) -> None:
        client = _poll_client([{"update_id": 1}], [])
        source = PollSource(client, UpdateCursor(1), update_interval=1, timeout=25)
        await source.fetch_batch()
        await source.fetch_batch()

        first, second = (c.args[0] for c in client.acall_raw.await_args_list)
        assert isinstance(first, GetUpdates)
        assert first.offset == 1
        assert first.timeout == 25
        assert first.http_timeout() == 35
        assert second.offset == 2

    @pytest.mark.asyncio
    async def test_unparseable_element_skipped_but_counted(self) -> None:
        client = _poll_client([{"update_id": 3, "message": {"bogus": True}}, {"update_id": 4, "message": MESSAGE}])
        source = PollSource(client, update_interval=1)
        batch = await source.fetch_batch()
        assert [u.update_id for u in batch] == [4]
        assert source.cursor.value == 5

    @pytest.mark.asyncio
    async def test_non_list_result_is_malformed(self) -> None:
        source = PollSource(_poll_client({"update_id": 1}), update_interval=1)
        with pytest.raises(MalformedEnvelopeError):
            await source.fetch_batch()

    @pytest.mark.asyncio
    async def test_updates_yields_in_server_order(self) -> None:
        client = _poll_client([{"update_id": 1}, {"update_id": 2}], [], [{"update_id": 3}])
        source = PollSource(client, update_interval=0.001)

        seen = []
        async for got_client, update in source.updates():
            assert got_client is client
            seen.append(update.update_id)
            if len(seen) == 3:
                break
        assert seen == [1, 2, 3]
        assert source.cursor.value == 4

    @pytest.mark.asyncio
    async def test_poll_error_ends_stream(self) -> None:
        client = _poll_client([{"update_id": 1}], TransportError("getUpdates", "offline"))
        source = PollSource(client, update_interval=0.001)

        seen = []
        with pytest.raises(TransportError):
            async for _, update in source.updates():
                seen.append(update.update_id)
        assert seen == [1]
        assert source.cursor.value == 2


# ── webhook ──────────────────────────────────────────────────────────────────


class TestWebhookSource:
    @pytest.mark.asyncio
    async def test_valid_update_acknowledged_and_queued(self) -> None:
        source = WebhookSource(MagicMock(), path="/hook")
        async with test_utils.TestClient(test_utils.TestServer(source.build_app())) as http:
            resp = await http.post("/hook", data=json.dumps({"update_id": 9, "message": MESSAGE}))
            assert resp.status == 200
            assert await resp.read() == b""

        update = await source.next_update()
        assert update.update_id == 9
        assert update.message.text == "hi"

    @pytest.mark.asyncio
    async def test_invalid_body_is_500(self) -> None:
        source = WebhookSource(MagicMock(), path="/hook")
        async with test_utils.TestClient(test_utils.TestServer(source.build_app())) as http:
            resp = await http.post("/hook", data=b"not json")
            assert resp.status == 500
            assert await resp.read() == b""
        assert source._queue.empty()

    @pytest.mark.asyncio
    async def test_secret_token_checked(self) -> None:
        source = WebhookSource(MagicMock(), path="/", secret_token="s3cret")
        body = json.dumps({"update_id": 1})
        async with test_utils.TestClient(test_utils.TestServer(source.build_app())) as http:
            denied = await http.post("/", data=body, headers={SECRET_TOKEN_HEADER: "wrong"})
            missing = await http.post("/", data=body)
            allowed = await http.post("/", data=body, headers={SECRET_TOKEN_HEADER: "s3cret"})
        assert denied.status == 403
        assert missing.status == 403
        assert allowed.status == 200
        assert source._queue.qsize() == 1

    @pytest.mark.asyncio
    async def test_arrival_order(self) -> None:
        source = WebhookSource(MagicMock())
        async with test_utils.TestClient(test_utils.TestServer(source.build_app())) as http:
            for update_id in (3, 1, 2):
                await http.post("/", data=json.dumps({"update_id": update_id}))
        assert [(await source.next_update()).update_id for _ in range(3)] == [3, 1, 2]

    @pytest.mark.asyncio
    async def test_updates_starts_and_stops_listener(self) -> None:
        client = MagicMock()
        source = WebhookSource(client)
        source._queue.put_nowait(Update(update_id=4))

        with patch.object(source, "start", AsyncMock()) as start, patch.object(source, "stop", AsyncMock()) as stop:
            stream = source.updates()
            got_client, update = await stream.__anext__()
            start.assert_awaited_once()
            stop.assert_not_awaited()
            await stream.aclose()
            stop.assert_awaited_once()

        assert got_client is client
        assert update.update_id == 4

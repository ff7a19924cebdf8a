"""Tests for the dispatch router."""

import sys
import os
from unittest.mock import MagicMock

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from bot.queues import DeliveryQueue
from bot.registry import Slot, SubscriptionRegistry
from bot.router import Router
from core.identity import BotIdentity
from sdk.models import Update


def _update(update_id: int = 1, **variant) -> Update:
    return Update.model_validate({"update_id": update_id, **variant})


def _text(text: str, update_id: int = 1, entities=None, kind: str = "message") -> Update:
    message = {"message_id": 10, "date": 0, "chat": {"id": 42, "type": "private"}, "text": text}
    if entities is not None:
        message["entities"] = entities
    return _update(update_id, **{kind: message})


def _callback(update_id: int = 1) -> Update:
    return _update(update_id, callback_query={"id": "cb", "from": {"id": 7, "first_name": "A"}, "chat_instance": "ci", "data": "go"})


def _inline(update_id: int = 1) -> Update:
    return _update(update_id, inline_query={"id": "iq", "from": {"id": 7, "first_name": "A"}, "query": "cats"})


def _router(name: str | None = "@botname") -> tuple[Router, SubscriptionRegistry]:
    registry = SubscriptionRegistry()
    return Router(registry, BotIdentity("k", name)), registry


def _drain(queue: DeliveryQueue) -> list:
    items = []
    while not queue.empty():
        items.append(queue.get_nowait())
    return items


# ── commands ─────────────────────────────────────────────────────────────────


class TestCommandRouting:
    def test_command_text_stripped(self) -> None:
        router, registry = _router()
        foo, unknown = DeliveryQueue(), DeliveryQueue()
        registry.register_command("/foo", foo)
        registry.register_slot(Slot.UNKNOWN_COMMAND, unknown)
        client = MagicMock()

        assert router.route(client, _text("/foo bar baz")) is None

        [(got_client, message)] = _drain(foo)
        assert got_client is client
        assert message.text == "bar baz"
        assert message.chat.id == 42
        assert unknown.empty()

    def test_command_without_arguments(self) -> None:
        router, registry = _router()
        foo = DeliveryQueue()
        registry.register_command("foo", foo)
        router.route(MagicMock(), _text("/foo"))
        assert _drain(foo)[0][1].text == ""

    def test_own_mention_matches(self) -> None:
        router, registry = _router("@botname")
        foo = DeliveryQueue()
        registry.register_command("/foo", foo)
        assert router.route(MagicMock(), _text("/foo@botname x")) is None
        assert _drain(foo)[0][1].text == "x"

    def test_other_bot_mention_is_unknown(self) -> None:
        router, registry = _router("@botname")
        foo, unknown = DeliveryQueue(), DeliveryQueue()
        registry.register_command("/foo", foo)
        registry.register_slot(Slot.UNKNOWN_COMMAND, unknown)
        router.route(MagicMock(), _text("/foo@otherbot"))
        assert foo.empty()
        assert len(unknown) == 1

    def test_unknown_command_gets_original_message(self) -> None:
        router, registry = _router()
        unknown = DeliveryQueue()
        registry.register_slot(Slot.UNKNOWN_COMMAND, unknown)
        update = _text("/unregistered x")

        assert router.route(MagicMock(), update) is None
        [(_, message)] = _drain(unknown)
        assert message.text == "/unregistered x"

    def test_unknown_command_without_slot_is_forwarded(self) -> None:
        router, _ = _router()
        update = _text("/nothing")
        assert router.route(MagicMock(), update) is update

    def test_unknown_command_falls_through_to_unknown_text(self) -> None:
        router, registry = _router()
        unknown_text = DeliveryQueue()
        registry.register_slot(Slot.UNKNOWN_TEXT, unknown_text)
        assert router.route(MagicMock(), _text("/nothing here")) is None
        assert _drain(unknown_text)[0][1].text == "here"

    def test_command_entity_without_slash(self) -> None:
        """A leading bot_command entity marks a command even without the marker."""
        router, registry = _router()
        unknown = DeliveryQueue()
        registry.register_slot(Slot.UNKNOWN_COMMAND, unknown)
        router.route(MagicMock(), _text("start now", entities=[{"type": "bot_command", "offset": 0, "length": 5}]))
        assert len(unknown) == 1


# ── plain text ───────────────────────────────────────────────────────────────


class TestTextRouting:
    def test_text_key_stripped(self) -> None:
        router, registry = _router()
        hello = DeliveryQueue()
        registry.register("hello", hello)
        router.route(MagicMock(), _text("hello there  world"))
        assert _drain(hello)[0][1].text == "there world"

    def test_text_key_not_normalised(self) -> None:
        router, registry = _router()
        hello = DeliveryQueue()
        registry.register("hello", hello)
        update = _text("/hello")
        assert router.route(MagicMock(), update) is update
        assert hello.empty()

    def test_unknown_text_first_word_stripped(self) -> None:
        router, registry = _router()
        unknown_text = DeliveryQueue()
        registry.register_slot(Slot.UNKNOWN_TEXT, unknown_text)
        assert router.route(MagicMock(), _text("hello big  world")) is None
        assert _drain(unknown_text)[0][1].text == "big world"

    def test_unknown_text_blank_text_becomes_empty(self) -> None:
        router, registry = _router()
        unknown_text = DeliveryQueue()
        registry.register_slot(Slot.UNKNOWN_TEXT, unknown_text)
        assert router.route(MagicMock(), _text("   ")) is None
        assert _drain(unknown_text)[0][1].text == ""

    def test_unmatched_text_forwarded(self) -> None:
        router, _ = _router()
        update = _text("nobody listens")
        assert router.route(MagicMock(), update) is update

    def test_message_without_text_forwarded(self) -> None:
        router, registry = _router()
        registry.register_slot(Slot.UNKNOWN_TEXT, DeliveryQueue())
        update = _update(message={"message_id": 1, "date": 0, "chat": {"id": 1, "type": "private"}, "photo": []})
        assert router.route(MagicMock(), update) is update

    def test_edited_message_forwarded(self) -> None:
        router, registry = _router()
        foo = DeliveryQueue()
        registry.register_command("/foo", foo)
        update = _text("/foo", kind="edited_message")
        assert router.route(MagicMock(), update) is update
        assert foo.empty()


# ── queries ──────────────────────────────────────────────────────────────────


class TestQueryRouting:
    def test_callback_only_to_callback_slot(self) -> None:
        router, registry = _router()
        callbacks, text = DeliveryQueue(), DeliveryQueue()
        registry.register_slot(Slot.CALLBACK, callbacks)
        registry.register_slot(Slot.UNKNOWN_TEXT, text)

        assert router.route(MagicMock(), _callback()) is None
        [(_, query)] = _drain(callbacks)
        assert query.data == "go"
        assert text.empty()

    def test_callback_without_slot_forwarded(self) -> None:
        router, _ = _router()
        update = _callback()
        assert router.route(MagicMock(), update) is update

    def test_inline_to_inline_slot(self) -> None:
        router, registry = _router()
        inline = DeliveryQueue()
        registry.register_slot(Slot.INLINE, inline)
        assert router.route(MagicMock(), _inline()) is None
        assert _drain(inline)[0][1].query == "cats"

    def test_update_without_variant_forwarded(self) -> None:
        router, _ = _router()
        update = _update(7)
        assert router.route(MagicMock(), update) is update


# ── delivery failures ────────────────────────────────────────────────────────


class TestClosedQueues:
    def test_closed_queue_drops_update(self) -> None:
        router, registry = _router()
        foo = DeliveryQueue()
        registry.register_command("/foo", foo)
        foo.close()
        assert router.route(MagicMock(), _text("/foo")) is None

    def test_next_update_still_routed(self) -> None:
        router, registry = _router()
        closed, open_ = DeliveryQueue(), DeliveryQueue()
        registry.register_command("/a", closed)
        registry.register_command("/b", open_)
        closed.close()
        router.route(MagicMock(), _text("/a", update_id=1))
        router.route(MagicMock(), _text("/b", update_id=2))
        assert len(open_) == 1

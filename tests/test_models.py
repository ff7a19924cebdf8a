"""Tests for the Bot API Pydantic models."""

import sys
import os
import pytest

# Ensure the project root is importable.
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from sdk.files import InputFile
from sdk.models import (
    CallbackQuery,
    Chat,
    InlineKeyboardButton,
    InlineKeyboardMarkup,
    InlineQuery,
    InlineQueryResultArticle,
    InputMediaPhoto,
    InputTextMessageContent,
    Message,
    ReplyKeyboardRemove,
    Update,
    User,
    WebhookInfo,
)
from pydantic import ValidationError


# ── User ─────────────────────────────────────────────────────────────────────


class TestUserModel:
    """Validate the User schema."""

    def test_minimal_user(self) -> None:
        u = User(id=42, is_bot=False, first_name="Ada")
        assert u.id == 42
        assert u.is_bot is False
        assert u.last_name is None
        assert u.username is None

    def test_64_bit_id(self) -> None:
        """Telegram IDs can be 64-bit integers."""
        big_id = 5_000_000_000
        u = User(id=big_id, is_bot=False, first_name="Big")
        assert u.id == big_id

    def test_missing_first_name_raises(self) -> None:
        with pytest.raises(ValidationError):
            User.model_validate({"id": 1, "is_bot": False})

    def test_unknown_fields_ignored(self) -> None:
        """Fields added by newer API versions must not break parsing."""
        u = User.model_validate({"id": 1, "first_name": "X", "is_premium": True})
        assert u.id == 1


# ── Update ───────────────────────────────────────────────────────────────────


class TestUpdateModel:
    """Validate the Update schema."""

    def test_minimal_update(self) -> None:
        up = Update(update_id=1)
        assert up.update_id == 1
        assert up.message is None
        assert up.kind is None

    def test_update_with_nested_message(self) -> None:
        """Update can contain a nested Message with a User under ``from``."""
        data = {
            "update_id": 10,
            "message": {
                "message_id": 100,
                "date": 1609459200,
                "chat": {"id": -1001234, "type": "supergroup"},
                "from": {"id": 42, "is_bot": False, "first_name": "Ada"},
                "text": "hello",
            },
        }
        up = Update.model_validate(data)
        assert up.kind == "message"
        assert up.message.message_id == 100
        assert up.message.from_field.first_name == "Ada"

    def test_callback_query_variant(self) -> None:
        data = {
            "update_id": 3,
            "callback_query": {
                "id": "cb1",
                "from": {"id": 7, "first_name": "Bo"},
                "chat_instance": "ci",
                "data": "yes",
            },
        }
        up = Update.model_validate(data)
        assert up.kind == "callback_query"
        assert isinstance(up.callback_query, CallbackQuery)
        assert up.callback_query.from_field.id == 7

    def test_inline_query_variant(self) -> None:
        data = {
            "update_id": 4,
            "inline_query": {"id": "iq", "from": {"id": 7, "first_name": "Bo"}, "query": "cats", "offset": ""},
        }
        up = Update.model_validate(data)
        assert up.kind == "inline_query"
        assert isinstance(up.inline_query, InlineQuery)

    def test_edited_message_kind(self) -> None:
        data = {
            "update_id": 5,
            "edited_message": {"message_id": 1, "date": 0, "chat": {"id": 1, "type": "private"}, "text": "x"},
        }
        assert Update.model_validate(data).kind == "edited_message"

    def test_missing_update_id_raises(self) -> None:
        with pytest.raises(ValidationError):
            Update.model_validate({"message": None})


# ── Message ──────────────────────────────────────────────────────────────────


class TestMessageModel:
    """Command-entity detection on messages."""

    def _message(self, **fields) -> Message:
        base = {"message_id": 1, "date": 0, "chat": {"id": 1, "type": "private"}}
        base.update(fields)
        return Message.model_validate(base)

    def test_leading_bot_command_entity(self) -> None:
        msg = self._message(text="/start", entities=[{"type": "bot_command", "offset": 0, "length": 6}])
        assert msg.has_command_entity() is True

    def test_no_entities(self) -> None:
        assert self._message(text="hello").has_command_entity() is False

    def test_command_entity_not_first(self) -> None:
        msg = self._message(
            text="hi /start",
            entities=[
                {"type": "bold", "offset": 0, "length": 2},
                {"type": "bot_command", "offset": 3, "length": 6},
            ],
        )
        assert msg.has_command_entity() is False

    def test_from_alias_and_field_name(self) -> None:
        by_alias = self._message(**{"from": {"id": 9, "first_name": "A"}})
        by_name = Message(message_id=1, date=0, chat=Chat(id=1, type="private"), from_field=User(id=9, first_name="A"))
        assert by_alias.from_field == by_name.from_field


# ── Outgoing objects ─────────────────────────────────────────────────────────


class TestOutgoingObjects:
    """Objects the library sends are dumped without unset options."""

    def test_keyboard_dump_omits_none(self) -> None:
        kb = InlineKeyboardMarkup(inline_keyboard=[[InlineKeyboardButton(text="Open", url="https://example.com")]])
        assert kb.model_dump(exclude_none=True) == {"inline_keyboard": [[{"text": "Open", "url": "https://example.com"}]]}

    def test_reply_keyboard_remove_default(self) -> None:
        assert ReplyKeyboardRemove().model_dump(exclude_none=True) == {"remove_keyboard": True}

    def test_article_result(self) -> None:
        article = InlineQueryResultArticle(
            id="1", title="Echo", input_message_content=InputTextMessageContent(message_text="hi")
        )
        dumped = article.model_dump(exclude_none=True)
        assert dumped["type"] == "article"
        assert dumped["input_message_content"] == {"message_text": "hi"}

    def test_webhook_info_optional_fields(self) -> None:
        info = WebhookInfo.model_validate({"url": "", "has_custom_certificate": False, "pending_update_count": 3})
        assert info.pending_update_count == 3
        assert info.last_error_message is None


class TestInputMedia:
    def test_accepts_input_file(self) -> None:
        media = InputMediaPhoto(media=InputFile.from_bytes("a.png", b"\x89PNG"))
        assert media.type == "photo"
        assert isinstance(media.media, InputFile)

    def test_accepts_file_id(self) -> None:
        assert InputMediaPhoto(media="AgACAgIAAx").media == "AgACAgIAAx"

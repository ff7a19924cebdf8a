"""Pydantic models for the Bot API objects the library reads or sends.

Only the objects needed for update routing and for the calls in
:mod:`sdk.calls` are modelled.  Unknown fields sent by the server are ignored,
so newer API versions keep parsing.  Fields named ``from`` in the wire format
are exposed as ``from_field``.
"""

from __future__ import annotations

from typing import List, Optional, Union

from pydantic import BaseModel, Field

from sdk.files import InputFile


class TelegramObject(BaseModel):
    """Base for every wire object."""

    model_config = {"populate_by_name": True}


# ── Users and chats ──────────────────────────────────────────────────────────


class User(TelegramObject):
    """A Telegram user or bot."""

    id: int
    is_bot: bool = False
    first_name: str
    last_name: Optional[str] = None
    username: Optional[str] = None
    language_code: Optional[str] = None
    can_join_groups: Optional[bool] = None
    can_read_all_group_messages: Optional[bool] = None
    supports_inline_queries: Optional[bool] = None


class Chat(TelegramObject):
    id: int
    type: str
    title: Optional[str] = None
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    description: Optional[str] = None
    invite_link: Optional[str] = None


class ChatMember(TelegramObject):
    user: User
    status: str
    custom_title: Optional[str] = None
    until_date: Optional[int] = None
    can_be_edited: Optional[bool] = None
    can_post_messages: Optional[bool] = None
    can_delete_messages: Optional[bool] = None
    can_restrict_members: Optional[bool] = None
    can_send_messages: Optional[bool] = None


# ── Message content ──────────────────────────────────────────────────────────


class MessageEntity(TelegramObject):
    """A special entity in a text message (command, mention, URL, ...)."""

    type: str
    offset: int
    length: int
    url: Optional[str] = None
    user: Optional[User] = None
    language: Optional[str] = None


class PhotoSize(TelegramObject):
    file_id: str
    file_unique_id: Optional[str] = None
    width: int
    height: int
    file_size: Optional[int] = None


class Audio(TelegramObject):
    file_id: str
    file_unique_id: Optional[str] = None
    duration: int
    performer: Optional[str] = None
    title: Optional[str] = None
    mime_type: Optional[str] = None
    file_size: Optional[int] = None


class Document(TelegramObject):
    file_id: str
    file_unique_id: Optional[str] = None
    thumb: Optional[PhotoSize] = None
    file_name: Optional[str] = None
    mime_type: Optional[str] = None
    file_size: Optional[int] = None


class Video(TelegramObject):
    file_id: str
    file_unique_id: Optional[str] = None
    width: int
    height: int
    duration: int
    thumb: Optional[PhotoSize] = None
    mime_type: Optional[str] = None
    file_size: Optional[int] = None


class Voice(TelegramObject):
    file_id: str
    file_unique_id: Optional[str] = None
    duration: int
    mime_type: Optional[str] = None
    file_size: Optional[int] = None


class Sticker(TelegramObject):
    file_id: str
    file_unique_id: Optional[str] = None
    width: int
    height: int
    is_animated: Optional[bool] = None
    emoji: Optional[str] = None
    set_name: Optional[str] = None
    file_size: Optional[int] = None


class Contact(TelegramObject):
    phone_number: str
    first_name: str
    last_name: Optional[str] = None
    user_id: Optional[int] = None
    vcard: Optional[str] = None


class Location(TelegramObject):
    longitude: float
    latitude: float
    horizontal_accuracy: Optional[float] = None


class Venue(TelegramObject):
    location: Location
    title: str
    address: str
    foursquare_id: Optional[str] = None
    foursquare_type: Optional[str] = None


class Message(TelegramObject):
    """A message.  Only the fields the library routes on or returns are typed."""

    message_id: int
    date: int
    chat: Chat
    from_field: Optional[User] = Field(None, alias="from")
    sender_chat: Optional[Chat] = None
    forward_from: Optional[User] = None
    forward_from_chat: Optional[Chat] = None
    forward_date: Optional[int] = None
    reply_to_message: Optional[Message] = None
    edit_date: Optional[int] = None
    media_group_id: Optional[str] = None
    text: Optional[str] = None
    entities: Optional[List[MessageEntity]] = None
    caption: Optional[str] = None
    audio: Optional[Audio] = None
    document: Optional[Document] = None
    photo: Optional[List[PhotoSize]] = None
    sticker: Optional[Sticker] = None
    video: Optional[Video] = None
    voice: Optional[Voice] = None
    contact: Optional[Contact] = None
    location: Optional[Location] = None
    venue: Optional[Venue] = None
    new_chat_members: Optional[List[User]] = None
    left_chat_member: Optional[User] = None

    def has_command_entity(self) -> bool:
        """True if the message starts with a ``bot_command`` entity."""
        if not self.entities:
            return False
        first = self.entities[0]
        return first.type == "bot_command" and first.offset == 0


class MessageId(TelegramObject):
    message_id: int


# ── Queries ──────────────────────────────────────────────────────────────────


class CallbackQuery(TelegramObject):
    """A press on an inline keyboard button."""

    id: str
    from_field: User = Field(..., alias="from")
    chat_instance: str
    message: Optional[Message] = None
    inline_message_id: Optional[str] = None
    data: Optional[str] = None
    game_short_name: Optional[str] = None


class InlineQuery(TelegramObject):
    id: str
    from_field: User = Field(..., alias="from")
    query: str
    offset: str = ""
    location: Optional[Location] = None


class ChosenInlineResult(TelegramObject):
    result_id: str
    from_field: User = Field(..., alias="from")
    query: str
    location: Optional[Location] = None
    inline_message_id: Optional[str] = None


# ── Updates ──────────────────────────────────────────────────────────────────


class Update(TelegramObject):
    """One incoming update.  At most one of the optional fields is set."""

    update_id: int
    message: Optional[Message] = None
    edited_message: Optional[Message] = None
    channel_post: Optional[Message] = None
    edited_channel_post: Optional[Message] = None
    inline_query: Optional[InlineQuery] = None
    chosen_inline_result: Optional[ChosenInlineResult] = None
    callback_query: Optional[CallbackQuery] = None

    @property
    def kind(self) -> Optional[str]:
        """Name of the populated variant, or ``None`` for an unknown one."""
        for name in (
            "message",
            "edited_message",
            "channel_post",
            "edited_channel_post",
            "inline_query",
            "chosen_inline_result",
            "callback_query",
        ):
            if getattr(self, name) is not None:
                return name
        return None


# ── Files, profile photos, webhooks ──────────────────────────────────────────


class File(TelegramObject):
    """A file ready for download via ``Transport.file_url(file_path)``."""

    file_id: str
    file_unique_id: Optional[str] = None
    file_size: Optional[int] = None
    file_path: Optional[str] = None


class UserProfilePhotos(TelegramObject):
    total_count: int
    photos: List[List[PhotoSize]]


class WebhookInfo(TelegramObject):
    url: str
    has_custom_certificate: bool
    pending_update_count: int
    ip_address: Optional[str] = None
    last_error_date: Optional[int] = None
    last_error_message: Optional[str] = None
    max_connections: Optional[int] = None
    allowed_updates: Optional[List[str]] = None


class BotCommand(TelegramObject):
    command: str
    description: str


# ── Outgoing markup and inline results ───────────────────────────────────────


class InlineKeyboardButton(TelegramObject):
    text: str
    url: Optional[str] = None
    callback_data: Optional[str] = None
    switch_inline_query: Optional[str] = None
    switch_inline_query_current_chat: Optional[str] = None


class InlineKeyboardMarkup(TelegramObject):
    inline_keyboard: List[List[InlineKeyboardButton]]


class KeyboardButton(TelegramObject):
    text: str
    request_contact: Optional[bool] = None
    request_location: Optional[bool] = None


class ReplyKeyboardMarkup(TelegramObject):
    keyboard: List[List[KeyboardButton]]
    resize_keyboard: Optional[bool] = None
    one_time_keyboard: Optional[bool] = None
    selective: Optional[bool] = None


class ReplyKeyboardRemove(TelegramObject):
    remove_keyboard: bool = True
    selective: Optional[bool] = None


class ForceReply(TelegramObject):
    force_reply: bool = True
    selective: Optional[bool] = None


ReplyMarkup = Union[InlineKeyboardMarkup, ReplyKeyboardMarkup, ReplyKeyboardRemove, ForceReply]


class InputTextMessageContent(TelegramObject):
    message_text: str
    parse_mode: Optional[str] = None
    disable_web_page_preview: Optional[bool] = None


class InlineQueryResultArticle(TelegramObject):
    type: str = "article"
    id: str
    title: str
    input_message_content: InputTextMessageContent
    reply_markup: Optional[InlineKeyboardMarkup] = None
    url: Optional[str] = None
    description: Optional[str] = None
    thumb_url: Optional[str] = None


class InlineQueryResultPhoto(TelegramObject):
    type: str = "photo"
    id: str
    photo_url: str
    thumb_url: str
    title: Optional[str] = None
    caption: Optional[str] = None
    reply_markup: Optional[InlineKeyboardMarkup] = None


InlineQueryResult = Union[InlineQueryResultArticle, InlineQueryResultPhoto]


class InputMedia(TelegramObject):
    """One element of a media group.

    ``media`` is a file id, a URL, or an :class:`~sdk.files.InputFile`; uploads
    are replaced by an ``attach://`` placeholder when the request is built.
    """

    model_config = {"populate_by_name": True, "arbitrary_types_allowed": True}

    type: str
    media: Union[str, InputFile]
    caption: Optional[str] = None
    parse_mode: Optional[str] = None


class InputMediaPhoto(InputMedia):
    type: str = "photo"


class InputMediaVideo(InputMedia):
    type: str = "video"
    width: Optional[int] = None
    height: Optional[int] = None
    duration: Optional[int] = None
    supports_streaming: Optional[bool] = None


class InputMediaDocument(InputMedia):
    type: str = "document"


class InputMediaAudio(InputMedia):
    type: str = "audio"
    duration: Optional[int] = None
    performer: Optional[str] = None
    title: Optional[str] = None

"""Bot API methods as data.

Each method is a pydantic model whose fields are the method's parameters and
whose class variables say where it goes and what comes back:

``endpoint``
    Remote method name, e.g. ``"sendMessage"``.
``result_type``
    Type the ``result`` of a successful envelope is validated against.
``file_fields``
    Parameters that may carry an :class:`~sdk.files.InputFile`.  When any of
    them holds an upload the call is sent as multipart, otherwise as JSON.

Usage::

    call = SendMessage(chat_id=42, text="hi")
    request = call.to_request()            # JsonRequest("sendMessage", ...)
    message = call.parse_response(raw)     # -> sdk.models.Message
"""

from __future__ import annotations

import json
from typing import Any, ClassVar, Dict, List, Optional, Protocol, Tuple, Union, runtime_checkable

from pydantic import BaseModel

from sdk.envelope import decode_as
from sdk.files import InputFile
from sdk.models import (
    BotCommand,
    Chat,
    ChatMember,
    File,
    InlineKeyboardMarkup,
    InlineQueryResult,
    InputMedia,
    Message,
    ReplyMarkup,
    Update,
    User,
    UserProfilePhotos,
    WebhookInfo,
)
from sdk.transport import ApiRequest, FormRequest, JsonRequest

ChatId = Union[int, str]
FileInput = Union[InputFile, str]

# Extra seconds on top of a long-poll timeout before the HTTP client gives up.
LONG_POLL_MARGIN = 10


@runtime_checkable
class Sendable(Protocol):
    """Anything that can be turned into a request and can parse its reply."""

    def to_request(self) -> ApiRequest: ...  # noqa: E704

    def parse_response(self, raw: bytes) -> Any: ...  # noqa: E704


class ApiCall(BaseModel):
    """Base class for every Bot API method."""

    model_config = {"populate_by_name": True, "arbitrary_types_allowed": True}

    endpoint: ClassVar[str]
    result_type: ClassVar[Any] = Any
    file_fields: ClassVar[Tuple[str, ...]] = ()

    def http_timeout(self) -> Optional[float]:
        """HTTP timeout for this call; ``None`` means the transport default."""
        return None

    def payload(self) -> Dict[str, Any]:
        """Wire fields except the file fields, with unset options dropped."""
        return self.model_dump(
            mode="json",
            by_alias=True,
            exclude_none=True,
            exclude=set(self.file_fields),
        )

    def to_request(self) -> ApiRequest:
        fields = self.payload()
        uploads: List[Tuple[str, InputFile]] = []
        for name in self.file_fields:
            value = getattr(self, name)
            if value is None:
                continue
            if isinstance(value, InputFile):
                if value.is_upload:
                    uploads.append((name, value))
                else:
                    fields[name] = value.reference
            else:
                fields[name] = value
        if uploads:
            return FormRequest(self.endpoint, fields, tuple(uploads), self.http_timeout())
        return JsonRequest(self.endpoint, json.dumps(fields, ensure_ascii=False), self.http_timeout())

    def parse_response(self, raw: bytes) -> Any:
        return decode_as(raw, self.result_type)


# ── Updates and webhooks ─────────────────────────────────────────────────────


class GetMe(ApiCall):
    endpoint: ClassVar[str] = "getMe"
    result_type: ClassVar[Any] = User


class GetUpdates(ApiCall):
    endpoint: ClassVar[str] = "getUpdates"
    result_type: ClassVar[Any] = List[Update]

    offset: Optional[int] = None
    limit: Optional[int] = None
    timeout: Optional[int] = None
    allowed_updates: Optional[List[str]] = None

    def http_timeout(self) -> Optional[float]:
        if self.timeout:
            return self.timeout + LONG_POLL_MARGIN
        return None


class SetWebhook(ApiCall):
    endpoint: ClassVar[str] = "setWebhook"
    result_type: ClassVar[Any] = bool
    file_fields: ClassVar[Tuple[str, ...]] = ("certificate",)

    url: str
    certificate: Optional[InputFile] = None
    max_connections: Optional[int] = None
    allowed_updates: Optional[List[str]] = None
    drop_pending_updates: Optional[bool] = None
    secret_token: Optional[str] = None


class DeleteWebhook(ApiCall):
    endpoint: ClassVar[str] = "deleteWebhook"
    result_type: ClassVar[Any] = bool

    drop_pending_updates: Optional[bool] = None


class GetWebhookInfo(ApiCall):
    endpoint: ClassVar[str] = "getWebhookInfo"
    result_type: ClassVar[Any] = WebhookInfo


# ── Sending messages ─────────────────────────────────────────────────────────


class _SendCall(ApiCall):
    """Parameters shared by every ``send*`` method."""

    result_type: ClassVar[Any] = Message

    chat_id: ChatId
    disable_notification: Optional[bool] = None
    reply_to_message_id: Optional[int] = None
    reply_markup: Optional[ReplyMarkup] = None


class SendMessage(_SendCall):
    endpoint: ClassVar[str] = "sendMessage"

    text: str
    parse_mode: Optional[str] = None
    disable_web_page_preview: Optional[bool] = None


class ForwardMessage(ApiCall):
    endpoint: ClassVar[str] = "forwardMessage"
    result_type: ClassVar[Any] = Message

    chat_id: ChatId
    from_chat_id: ChatId
    message_id: int
    disable_notification: Optional[bool] = None


class SendPhoto(_SendCall):
    endpoint: ClassVar[str] = "sendPhoto"
    file_fields: ClassVar[Tuple[str, ...]] = ("photo",)

    photo: FileInput
    caption: Optional[str] = None
    parse_mode: Optional[str] = None


class SendAudio(_SendCall):
    endpoint: ClassVar[str] = "sendAudio"
    file_fields: ClassVar[Tuple[str, ...]] = ("audio", "thumb")

    audio: FileInput
    caption: Optional[str] = None
    parse_mode: Optional[str] = None
    duration: Optional[int] = None
    performer: Optional[str] = None
    title: Optional[str] = None
    thumb: Optional[FileInput] = None


class SendDocument(_SendCall):
    endpoint: ClassVar[str] = "sendDocument"
    file_fields: ClassVar[Tuple[str, ...]] = ("document", "thumb")

    document: FileInput
    thumb: Optional[FileInput] = None
    caption: Optional[str] = None
    parse_mode: Optional[str] = None


class SendVideo(_SendCall):
    endpoint: ClassVar[str] = "sendVideo"
    file_fields: ClassVar[Tuple[str, ...]] = ("video", "thumb")

    video: FileInput
    duration: Optional[int] = None
    width: Optional[int] = None
    height: Optional[int] = None
    thumb: Optional[FileInput] = None
    caption: Optional[str] = None
    parse_mode: Optional[str] = None
    supports_streaming: Optional[bool] = None


class SendVoice(_SendCall):
    endpoint: ClassVar[str] = "sendVoice"
    file_fields: ClassVar[Tuple[str, ...]] = ("voice",)

    voice: FileInput
    caption: Optional[str] = None
    parse_mode: Optional[str] = None
    duration: Optional[int] = None


class SendSticker(_SendCall):
    endpoint: ClassVar[str] = "sendSticker"
    file_fields: ClassVar[Tuple[str, ...]] = ("sticker",)

    sticker: FileInput


class SendLocation(_SendCall):
    endpoint: ClassVar[str] = "sendLocation"

    latitude: float
    longitude: float
    live_period: Optional[int] = None


class SendVenue(_SendCall):
    endpoint: ClassVar[str] = "sendVenue"

    latitude: float
    longitude: float
    title: str
    address: str
    foursquare_id: Optional[str] = None


class SendContact(_SendCall):
    endpoint: ClassVar[str] = "sendContact"

    phone_number: str
    first_name: str
    last_name: Optional[str] = None
    vcard: Optional[str] = None


class SendChatAction(ApiCall):
    endpoint: ClassVar[str] = "sendChatAction"
    result_type: ClassVar[Any] = bool

    chat_id: ChatId
    action: str


class SendMediaGroup(ApiCall):
    """Send 2–10 photos/videos as an album.

    Uploaded files ride as separate parts named ``file<N>`` and are referenced
    from the JSON-encoded ``media`` field as ``attach://file<N>``.
    """

    endpoint: ClassVar[str] = "sendMediaGroup"
    result_type: ClassVar[Any] = List[Message]

    chat_id: ChatId
    media: List[InputMedia]
    disable_notification: Optional[bool] = None
    reply_to_message_id: Optional[int] = None

    def to_request(self) -> ApiRequest:
        fields = self.model_dump(mode="json", by_alias=True, exclude_none=True, exclude={"media"})
        entries: List[Dict[str, Any]] = []
        uploads: List[Tuple[str, InputFile]] = []
        for index, item in enumerate(self.media):
            entry = item.model_dump(by_alias=True, exclude_none=True, exclude={"media"})
            value = item.media
            if isinstance(value, InputFile):
                if value.is_upload:
                    part = f"file{index}"
                    entry["media"] = f"attach://{part}"
                    uploads.append((part, value))
                else:
                    entry["media"] = value.reference
            else:
                entry["media"] = value
            entries.append(entry)
        fields["media"] = entries
        if uploads:
            return FormRequest(self.endpoint, fields, tuple(uploads), self.http_timeout())
        return JsonRequest(self.endpoint, json.dumps(fields, ensure_ascii=False), self.http_timeout())


class EditMessageText(ApiCall):
    endpoint: ClassVar[str] = "editMessageText"
    # Message for chat messages, True for inline messages.
    result_type: ClassVar[Any] = Union[Message, bool]

    text: str
    chat_id: Optional[ChatId] = None
    message_id: Optional[int] = None
    inline_message_id: Optional[str] = None
    parse_mode: Optional[str] = None
    disable_web_page_preview: Optional[bool] = None
    reply_markup: Optional[InlineKeyboardMarkup] = None


class DeleteMessage(ApiCall):
    endpoint: ClassVar[str] = "deleteMessage"
    result_type: ClassVar[Any] = bool

    chat_id: ChatId
    message_id: int


# ── Users, files, chats ──────────────────────────────────────────────────────


class GetUserProfilePhotos(ApiCall):
    endpoint: ClassVar[str] = "getUserProfilePhotos"
    result_type: ClassVar[Any] = UserProfilePhotos

    user_id: int
    offset: Optional[int] = None
    limit: Optional[int] = None


class GetFile(ApiCall):
    endpoint: ClassVar[str] = "getFile"
    result_type: ClassVar[Any] = File

    file_id: str


class KickChatMember(ApiCall):
    endpoint: ClassVar[str] = "kickChatMember"
    result_type: ClassVar[Any] = bool

    chat_id: ChatId
    user_id: int
    until_date: Optional[int] = None


class UnbanChatMember(ApiCall):
    endpoint: ClassVar[str] = "unbanChatMember"
    result_type: ClassVar[Any] = bool

    chat_id: ChatId
    user_id: int


class LeaveChat(ApiCall):
    endpoint: ClassVar[str] = "leaveChat"
    result_type: ClassVar[Any] = bool

    chat_id: ChatId


class GetChat(ApiCall):
    endpoint: ClassVar[str] = "getChat"
    result_type: ClassVar[Any] = Chat

    chat_id: ChatId


class GetChatAdministrators(ApiCall):
    endpoint: ClassVar[str] = "getChatAdministrators"
    result_type: ClassVar[Any] = List[ChatMember]

    chat_id: ChatId


class GetChatMembersCount(ApiCall):
    endpoint: ClassVar[str] = "getChatMembersCount"
    result_type: ClassVar[Any] = int

    chat_id: ChatId


class GetChatMember(ApiCall):
    endpoint: ClassVar[str] = "getChatMember"
    result_type: ClassVar[Any] = ChatMember

    chat_id: ChatId
    user_id: int


# ── Queries and commands ─────────────────────────────────────────────────────


class AnswerCallbackQuery(ApiCall):
    endpoint: ClassVar[str] = "answerCallbackQuery"
    result_type: ClassVar[Any] = bool

    callback_query_id: str
    text: Optional[str] = None
    show_alert: Optional[bool] = None
    url: Optional[str] = None
    cache_time: Optional[int] = None


class AnswerInlineQuery(ApiCall):
    endpoint: ClassVar[str] = "answerInlineQuery"
    result_type: ClassVar[Any] = bool

    inline_query_id: str
    results: List[InlineQueryResult]
    cache_time: Optional[int] = None
    is_personal: Optional[bool] = None
    next_offset: Optional[str] = None
    switch_pm_text: Optional[str] = None
    switch_pm_parameter: Optional[str] = None


class SetMyCommands(ApiCall):
    endpoint: ClassVar[str] = "setMyCommands"
    result_type: ClassVar[Any] = bool

    commands: List[BotCommand]


class GetMyCommands(ApiCall):
    endpoint: ClassVar[str] = "getMyCommands"
    result_type: ClassVar[Any] = List[BotCommand]

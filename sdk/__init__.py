"""Bot API SDK — transport, envelope decoding, call models and client façade.

Usage::

    from sdk import BotClient, RemoteError
    from sdk.calls import SendMessage
    from sdk.files import InputFile

    client = BotClient.from_token(token)
    client.call(SendMessage(chat_id=42, text="hello"))
"""

from sdk.client import BotClient
from sdk.envelope import decode, decode_as
from sdk.exceptions import (
    BotAPIError,
    ChannelClosedError,
    EncodingError,
    MalformedEnvelopeError,
    RemoteError,
    TimerError,
    TransportError,
    Utf8DecodeError,
)
from sdk.files import InputFile
from sdk.transport import FormRequest, JsonRequest, Transport

__all__ = [
    "BotClient",
    "Transport",
    "JsonRequest",
    "FormRequest",
    "InputFile",
    "decode",
    "decode_as",
    "BotAPIError",
    "TransportError",
    "EncodingError",
    "Utf8DecodeError",
    "MalformedEnvelopeError",
    "RemoteError",
    "ChannelClosedError",
    "TimerError",
]

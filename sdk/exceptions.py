"""Exception hierarchy for the teleroute Bot API SDK.

Every error carries two class-level flags so the caller can decide what to
do without matching on concrete types:

``retryable``
    The failure is transient; repeating the same call may succeed.
``fatal``
    The dispatch loop cannot continue and restarting it will not help.
"""

from typing import Any, Dict, Optional


class BotAPIError(Exception):
    """Base class for all SDK errors."""

    retryable: bool = False
    fatal: bool = False


class TransportError(BotAPIError):
    """DNS, connect, TLS or response-read failure talking to the remote host."""

    retryable = True

    def __init__(self, endpoint: str, reason: str = "") -> None:
        self.endpoint = endpoint
        self.reason = reason
        super().__init__(f"Transport failure calling {endpoint}: {reason}")


class EncodingError(BotAPIError):
    """The request body could not be built (e.g. an attachment is unreadable)."""


class Utf8DecodeError(BotAPIError):
    """The response body is not valid UTF-8."""

    retryable = True


class MalformedEnvelopeError(BotAPIError):
    """The response is not a ``{ok, result, description}`` envelope."""


class RemoteError(BotAPIError):
    """The server answered ``ok: false``.

    Attributes:
        description: Human-readable failure reason from the server.
        status_code: The envelope's ``error_code`` (0 when absent).
        response_body: The decoded envelope, when available.
        retry_after: Seconds to wait, from ``parameters.retry_after``.
    """

    def __init__(self, description: Optional[str] = None, response_body: Optional[Dict[str, Any]] = None) -> None:
        self.response_body = response_body or {}
        self.description = description or "Unknown error"
        self.status_code = int(self.response_body.get("error_code") or 0)
        parameters = self.response_body.get("parameters") or {}
        self.retry_after: Optional[int] = parameters.get("retry_after") if isinstance(parameters, dict) else None
        super().__init__(self.description)


class ChannelClosedError(BotAPIError):
    """A delivery queue's consumer has gone away."""


class TimerError(BotAPIError):
    """The poll scheduler could not be set up or ticked."""

    fatal = True

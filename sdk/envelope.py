"""Envelope decoder for Bot API responses.

Every response has the same outer shape::

    {"ok": true,  "result": <any>}
    {"ok": false, "description": "...", "error_code": 400, "parameters": {...}}

:func:`decode` handles that shape once for every endpoint and hands back the
``result`` re-serialised to a canonical JSON string.  Parsing that string into
the endpoint's expected type is a second, separate step (:func:`decode_as`),
so no endpoint needs its own envelope handling.
"""

from __future__ import annotations

import json
from typing import Any, Type, TypeVar

from pydantic import TypeAdapter, ValidationError

from core.logger import TelerouteLogger
from sdk.exceptions import MalformedEnvelopeError, RemoteError, Utf8DecodeError

logger = TelerouteLogger.get_logger()

T = TypeVar("T")


def canonical_json(value: Any) -> str:
    """Compact, key-sorted JSON text for *value*."""
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"), sort_keys=True)


def decode(raw: bytes) -> str:
    """Unwrap an envelope and return the canonical ``result`` string.

    Raises:
        Utf8DecodeError: *raw* is not UTF-8.
        MalformedEnvelopeError: Not a JSON object, ``ok`` missing or not a
            boolean, or ``ok`` true without a ``result``.
        RemoteError: ``ok`` is false.
    """
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise Utf8DecodeError(f"Response is not valid UTF-8: {exc}") from exc

    try:
        envelope = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedEnvelopeError(f"Response is not JSON: {exc}") from exc

    if not isinstance(envelope, dict):
        raise MalformedEnvelopeError("Response is not a JSON object")

    ok = envelope.get("ok")
    if not isinstance(ok, bool):
        raise MalformedEnvelopeError("Response has no boolean 'ok' field")

    if ok:
        if "result" not in envelope:
            raise MalformedEnvelopeError("Response has ok=true but no 'result'")
        return canonical_json(envelope["result"])

    description = envelope.get("description")
    if not isinstance(description, str):
        description = None
    logger.debug("Remote reported failure", extra={"description": description, "error_code": envelope.get("error_code")})
    raise RemoteError(description, envelope)


def parse_result(result: str, result_type: Type[T]) -> T:
    """Validate a canonical result string against *result_type*.

    Raises:
        MalformedEnvelopeError: The result does not match the expected shape.
    """
    try:
        return TypeAdapter(result_type).validate_json(result)
    except ValidationError as exc:
        raise MalformedEnvelopeError(f"Result does not match {result_type!r}: {exc}") from exc


def decode_as(raw: bytes, result_type: Type[T]) -> T:
    """:func:`decode` followed by :func:`parse_result`."""
    return parse_result(decode(raw), result_type)

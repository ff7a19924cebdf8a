"""Transport — executes one outbound Bot API request and returns raw bytes.

Two request shapes are supported:

* :class:`JsonRequest` — a JSON text body, used whenever nothing is uploaded
  because it is the more compact encoding.
* :class:`FormRequest` — ``multipart/form-data`` with scalar fields as text
  parts and one part per uploaded file.

The transport does not interpret HTTP status codes or the response body; the
envelope decoder in :mod:`sdk.envelope` decides success or failure.  Nothing
is retried here, the caller owns retry policy.  HTTP goes through a shared
:class:`requests.Session` for keep-alive; async callers go through
:meth:`Transport.asend`, which offloads the blocking call via
:func:`asyncio.to_thread`.
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence, Tuple, Union

import requests

from core.logger import TelerouteLogger
from sdk.exceptions import TransportError
from sdk.files import InputFile

logger = TelerouteLogger.get_logger()

DEFAULT_HOST = "api.telegram.org"


@dataclass(frozen=True)
class JsonRequest:
    endpoint: str
    body: str
    timeout: Optional[float] = None


@dataclass(frozen=True)
class FormRequest:
    endpoint: str
    fields: Dict[str, Any]
    files: Tuple[Tuple[str, InputFile], ...] = field(default_factory=tuple)
    timeout: Optional[float] = None


ApiRequest = Union[JsonRequest, FormRequest]


def encode_form_value(value: Any) -> str:
    """Render a form field: strings verbatim, everything else as JSON."""
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


class Transport:
    """Immutable request handle bound to one API key and host.

    Cheap to share: the only state is the key, the host, the default timeout
    and the connection pool of the underlying session.
    """

    _DEFAULT_TIMEOUT: float = 10

    __slots__ = ("_key", "_host", "_timeout", "_session")

    def __init__(
        self,
        key: str,
        host: str = DEFAULT_HOST,
        timeout: float = _DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ) -> None:
        """Create a transport for bot *key*.

        Args:
            key: Bot API token.  Not validated locally; a bad key comes back
                as a remote ``Unauthorized`` error.
            host: API host name, without scheme.
            timeout: Default HTTP timeout in seconds.
            session: Optional pre-configured :class:`requests.Session`.
        """
        self._key = key
        self._host = host.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()

    @property
    def host(self) -> str:
        return self._host

    @property
    def timeout(self) -> float:
        return self._timeout

    def url(self, endpoint: str) -> str:
        return f"https://{self._host}/bot{self._key}/{endpoint.lstrip('/')}"

    def file_url(self, file_path: str) -> str:
        """Download URL for a ``File.file_path`` returned by ``getFile``."""
        return f"https://{self._host}/file/bot{self._key}/{file_path.lstrip('/')}"

    # ------------------------------------------------------------------
    #  Public API
    # ------------------------------------------------------------------

    def send(self, request: ApiRequest) -> bytes:
        """Execute *request* and return the raw response body.

        Raises:
            TransportError: On any network-level failure.
            EncodingError: If an attachment cannot be read.
        """
        if isinstance(request, JsonRequest):
            return self.fetch_json(request.endpoint, request.body, timeout=request.timeout)
        return self.fetch_formdata(request.endpoint, request.fields, request.files, timeout=request.timeout)

    async def asend(self, request: ApiRequest) -> bytes:
        """Async :meth:`send`; the blocking HTTP call runs in a worker thread."""
        return await asyncio.to_thread(self.send, request)

    def fetch_json(self, endpoint: str, body: Union[str, Dict[str, Any]], timeout: Optional[float] = None) -> bytes:
        """POST a JSON body to *endpoint*."""
        if not isinstance(body, str):
            body = json.dumps(body, ensure_ascii=False)
        logger.debug("Send JSON", extra={"endpoint": endpoint, "body": body[:200]})
        return self._post(
            endpoint,
            timeout,
            data=body.encode("utf-8"),
            headers={"Content-Type": "application/json"},
        )

    def fetch_formdata(
        self,
        endpoint: str,
        fields: Dict[str, Any],
        files: Sequence[Tuple[str, InputFile]] = (),
        timeout: Optional[float] = None,
    ) -> bytes:
        """POST a multipart body: one text part per field, one part per file.

        The body is multipart even when *files* is empty.

        Each file part is named by its role (``"photo"``, ``"document"``, or
        the ``attach://`` name used inside a media group).
        """
        data = {key: encode_form_value(value) for key, value in fields.items() if value is not None}
        parts = []
        for role, input_file in files:
            parts.append((role, input_file.read()))
        logger.debug(
            "Send formdata",
            extra={"endpoint": endpoint, "fields": sorted(data), "files": [role for role, _ in files]},
        )
        if parts:
            return self._post(endpoint, timeout, data=data, files=parts)
        # requests falls back to urlencoding without files; filename-less parts keep it multipart.
        return self._post(endpoint, timeout, files=[(key, (None, value)) for key, value in data.items()])

    def download(self, file_path: str, timeout: Optional[float] = None) -> bytes:
        """GET the bytes behind a ``File.file_path`` through the shared session.

        Raises:
            TransportError: On network failure or a non-2xx status.
        """
        try:
            response = self._session.get(
                self.file_url(file_path),
                timeout=timeout if timeout is not None else self._timeout,
            )
            response.raise_for_status()
            return response.content
        except requests.RequestException as exc:
            status = getattr(exc.response, "status_code", None)
            logger.error("File download failed", extra={"endpoint": "file", "file_path": file_path, "status_code": status, "error": self._redact(exc)})
            raise TransportError("file", f"download of {file_path} failed") from exc

    # ------------------------------------------------------------------
    #  Internal helpers
    # ------------------------------------------------------------------

    def _redact(self, exc: Exception) -> str:
        # requests puts the full URL, token included, into its messages.
        return str(exc).replace(self._key, "<token>") if self._key else str(exc)

    def _post(self, endpoint: str, timeout: Optional[float], **kwargs: Any) -> bytes:
        try:
            response = self._session.post(
                self.url(endpoint),
                timeout=timeout if timeout is not None else self._timeout,
                **kwargs,
            )
            return response.content
        except requests.RequestException as exc:
            reason = self._redact(exc)
            logger.error("Request failed", extra={"endpoint": endpoint, "error": reason})
            raise TransportError(endpoint, reason) from exc

    def __repr__(self) -> str:
        return f"Transport(host={self._host!r})"


__all__ = [
    "ApiRequest",
    "DEFAULT_HOST",
    "FormRequest",
    "JsonRequest",
    "Transport",
    "encode_form_value",
]

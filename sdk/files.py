"""Attachments for upload calls.

An :class:`InputFile` is either an *upload* (bytes taken from a path on disk
or from memory, read in full when the request is built) or a *reference*
(a ``file_id`` already stored by the server, or an HTTP URL the server will
fetch itself).  References travel as plain string fields; uploads force the
request into ``multipart/form-data``.
"""

from __future__ import annotations

import mimetypes
import os
from typing import IO, Optional, Union

from sdk.exceptions import EncodingError

Source = Union[bytes, bytearray, IO[bytes]]


class InputFile:
    """A file to send along with an API call."""

    __slots__ = ("_path", "_name", "_source", "_reference")

    def __init__(
        self,
        *,
        path: Optional[Union[str, os.PathLike]] = None,
        name: Optional[str] = None,
        source: Optional[Source] = None,
        reference: Optional[str] = None,
    ) -> None:
        given = sum(x is not None for x in (path, source, reference))
        if given != 1:
            raise ValueError("InputFile needs exactly one of path, source or reference")
        self._path = os.fspath(path) if path is not None else None
        self._name = name
        self._source = source
        self._reference = reference

    # ── constructors ─────────────────────────────────────────────────────

    @classmethod
    def from_path(cls, path: Union[str, os.PathLike]) -> "InputFile":
        return cls(path=path)

    @classmethod
    def from_bytes(cls, name: str, source: Source) -> "InputFile":
        """Upload *source* (bytes or a readable binary stream) as *name*."""
        return cls(name=name, source=source)

    @classmethod
    def from_file_id(cls, file_id: str) -> "InputFile":
        return cls(reference=file_id)

    @classmethod
    def from_url(cls, url: str) -> "InputFile":
        return cls(reference=url)

    # ── accessors ────────────────────────────────────────────────────────

    @property
    def is_upload(self) -> bool:
        return self._reference is None

    @property
    def reference(self) -> Optional[str]:
        return self._reference

    @property
    def filename(self) -> str:
        if self._name:
            return self._name
        if self._path:
            return os.path.basename(self._path)
        return "file"

    def read(self) -> tuple[str, bytes, str]:
        """Return ``(filename, content, content_type)`` for a multipart part.

        Raises:
            EncodingError: If the file is a reference or cannot be read.
        """
        if self._reference is not None:
            raise EncodingError(f"{self._reference!r} is a reference, not an upload")
        if self._path is not None:
            try:
                with open(self._path, "rb") as fh:
                    content = fh.read()
            except OSError as exc:
                raise EncodingError(f"Cannot read {self._path}: {exc}") from exc
        elif isinstance(self._source, (bytes, bytearray)):
            content = bytes(self._source)
        else:
            try:
                content = self._source.read()  # type: ignore[union-attr]
            except (OSError, ValueError) as exc:
                raise EncodingError(f"Cannot read stream for {self.filename}: {exc}") from exc
            if isinstance(content, str):
                content = content.encode("utf-8")
        content_type = mimetypes.guess_type(self.filename)[0] or "application/octet-stream"
        return self.filename, content, content_type

    def __repr__(self) -> str:
        if self._reference is not None:
            return f"InputFile(reference={self._reference!r})"
        return f"InputFile(filename={self.filename!r})"

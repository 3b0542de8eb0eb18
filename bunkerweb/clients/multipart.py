"""
Multipart/form-data body builder for upload endpoints.

Upload bodies are assembled in memory and encoded once, so the boundary,
`Content-Type` and length are fixed before the request is sent. Payloads are
operator configuration files and plugin archives, small enough to buffer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import httpx

from ..exceptions import ValidationError

DEFAULT_FILE_CONTENT_TYPE = "application/octet-stream"

# Placeholder target used only to drive httpx's multipart encoder.
_ENCODER_URL = "http://multipart.invalid/"


@dataclass(frozen=True, slots=True)
class UploadFile:
    """A file part: the name the control plane sees, and its bytes."""

    filename: str
    content: bytes

    @classmethod
    def from_path(cls, path: str | Path, *, filename: str | None = None) -> UploadFile:
        p = Path(path)
        return cls(filename=filename or p.name, content=p.read_bytes())

    @classmethod
    def from_text(cls, filename: str, text: str) -> UploadFile:
        return cls(filename=filename, content=text.encode("utf-8"))


@dataclass(frozen=True, slots=True)
class EncodedMultipart:
    content: bytes
    content_type: str

    @property
    def boundary(self) -> str:
        _, _, boundary = self.content_type.partition("boundary=")
        return boundary


@dataclass
class MultipartForm:
    """
    Accumulates text fields and file parts, then encodes them in one go.

    Text fields are emitted before file parts, each group in insertion order.
    Repeating a field name (e.g. `files`) produces repeated parts.
    """

    boundary: str | None = None
    _fields: dict[str, list[str]] = field(default_factory=dict, init=False, repr=False)
    _files: list[tuple[str, tuple[str, bytes, str]]] = field(
        default_factory=list, init=False, repr=False
    )

    def add_field(self, name: str, value: str) -> MultipartForm:
        self._fields.setdefault(name, []).append(value)
        return self

    def add_optional_field(self, name: str, value: str | None) -> MultipartForm:
        """Add `name` only when `value` is non-blank; the value is trimmed."""
        if value is not None and value.strip():
            self.add_field(name, value.strip())
        return self

    def add_file(
        self,
        name: str,
        upload: UploadFile,
        *,
        content_type: str = DEFAULT_FILE_CONTENT_TYPE,
    ) -> MultipartForm:
        filename = upload.filename.strip()
        if not filename:
            raise ValidationError("File name must be provided", field=name)
        self._files.append((name, (filename, upload.content, content_type)))
        return self

    @property
    def file_count(self) -> int:
        return len(self._files)

    def encode(self) -> EncodedMultipart:
        headers = {}
        if self.boundary:
            headers["Content-Type"] = f"multipart/form-data; boundary={self.boundary}"
        data = {
            key: values[0] if len(values) == 1 else values for key, values in self._fields.items()
        }
        request = httpx.Request(
            "POST",
            _ENCODER_URL,
            headers=headers,
            data=data,
            files=self._files or None,
        )
        content = request.read()
        content_type = request.headers["Content-Type"]
        if not content_type.startswith("multipart/form-data"):
            # httpx only switches to multipart when file parts are present.
            raise ValidationError("At least one file is required")
        return EncodedMultipart(content=content, content_type=content_type)

"""multipart/form-data decoding.

The whole body is held in memory as a latin-1 string, so every byte maps to
exactly one character and file contents survive the round trip unchanged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

from python_multipart.multipart import parse_options_header

from ..errors import MultipartDecodeError

if TYPE_CHECKING:
    from ..filesystem import Directory, File

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TextField:
    name: str
    value: str | None


@dataclass(frozen=True, slots=True)
class FileField:
    name: str
    filename: str
    file: "File"
    content_type: str | None = None


MultipartField = Union[TextField, FileField]


def split_parts(body: str, boundary: str | None) -> list[str]:
    """Cut a body into the raw parts between boundary delimiters."""
    if not boundary:
        raise MultipartDecodeError("missing boundary")

    delimiter = f"--{boundary}"
    trimmed = body.rstrip("\r\n")
    if not trimmed.endswith(delimiter + "--"):
        raise MultipartDecodeError("body does not end with the closing delimiter")

    # first chunk is the preamble, last one is the "--" of the closing delimiter
    chunks = trimmed.split(delimiter)[1:-1]
    parts = []
    for chunk in chunks:
        if chunk.startswith("\r\n"):
            chunk = chunk[2:]
        if chunk.endswith("\r\n"):
            chunk = chunk[:-2]
        parts.append(chunk)
    return parts


def parse_part(part: str) -> tuple[dict[str, str], str]:
    """Split one raw part into lower-cased headers and its value."""
    head, sep, value = part.partition("\r\n\r\n")
    if not sep:
        raise MultipartDecodeError("part has no header block")

    headers: dict[str, str] = {}
    for line in head.split("\r\n"):
        name, colon, header_value = line.partition(":")
        if not colon or not name.strip():
            raise MultipartDecodeError(f"malformed part header {line!r}")
        headers[name.strip().lower()] = header_value.strip()
    return headers, value


def decode_text(value: str, charset: str) -> str | None:
    raw = value.encode("latin-1")
    try:
        return raw.decode(charset, errors="replace")
    except LookupError:
        logger.debug("unknown charset %r for form field", charset)
        return None


async def decode_multipart(
    body: str,
    boundary: str | None,
    *,
    charset: str = "utf-8",
    storage: "Directory",
) -> list[MultipartField]:
    """Decode a multipart body into ordered text and file fields.

    Uploaded files are written to ``storage`` under a generated name. Any
    structural problem fails the whole body with ``MultipartDecodeError``.
    """
    fields: list[MultipartField] = []
    for part in split_parts(body, boundary):
        headers, value = parse_part(part)
        disposition, options = parse_options_header(headers.get("content-disposition"))
        if disposition.lower() != b"form-data" or not options.get(b"name"):
            raise MultipartDecodeError("part does not carry a form-data disposition")

        name = options[b"name"].decode("latin-1")
        filename = options.get(b"filename", b"").decode("latin-1")
        content_type = headers.get("content-type")
        # an empty filename is a file input left blank
        if filename:
            stored = await storage.create_file(filename, value.encode("latin-1"), track=False)
            fields.append(FileField(name, filename, stored, content_type))
        else:
            fields.append(TextField(name, decode_text(value, charset)))
    return fields

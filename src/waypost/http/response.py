"""Outgoing HTTP response.

The response is assembled in memory; the transport serializes it once the
middleware chain is done with it.
"""

from __future__ import annotations

import json as jsonlib
import logging
from typing import TYPE_CHECKING, Any

from ..errors import RangeNotSatisfiable
from .ranges import resolve_span

if TYPE_CHECKING:
    from ..filesystem import File

logger = logging.getLogger(__name__)

STATUS_TEXT: dict[int, str] = {
    200: "OK",
    204: "No Content",
    206: "Partial Content",
    301: "Moved Permanently",
    302: "Found",
    304: "Not Modified",
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    413: "Payload Too Large",
    416: "Range Not Satisfiable",
    500: "Internal Server Error",
}


def status_line(status: int) -> str:
    text = STATUS_TEXT.get(status, "Unknown")
    return f"HTTP/1.1 {status} {text}\r\n"


class Response:
    """Settable status and headers, a body sink and an explicit end signal."""

    def __init__(self) -> None:
        self.status_code = 200
        self.headers: dict[str, str] = {}
        self._body = bytearray()
        self.ended = False

    def __repr__(self) -> str:
        return f"Response({self.status_code}, {len(self._body)} bytes)"

    @property
    def body(self) -> bytes:
        return bytes(self._body)

    def status(self, code: int) -> "Response":
        self.status_code = code
        return self

    def set_header(self, name: str, value: Any) -> "Response":
        self.headers[name.lower()] = str(value)
        return self

    def get_header(self, name: str) -> str | None:
        return self.headers.get(name.lower())

    def write(self, data: str | bytes) -> None:
        if self.ended:
            raise RuntimeError("write after end")
        if isinstance(data, str):
            data = data.encode("utf-8")
        self._body.extend(data)

    def end(self, data: str | bytes | None = None) -> "Response":
        if data is not None:
            self.write(data)
        self.ended = True
        return self

    def discard(self) -> None:
        """Drop everything written so far (used when a handler fails)."""
        self._body.clear()

    def text(self, value: Any) -> "Response":
        if not value:
            return self
        self.set_header("content-type", "text/plain; charset=utf-8")
        return self.end(str(value))

    def html(self, value: Any) -> "Response":
        if not value:
            return self
        self.set_header("content-type", "text/html; charset=utf-8")
        return self.end(str(value))

    def json(self, value: Any) -> "Response":
        if value is None:
            return self.end()
        payload = value if isinstance(value, str) else jsonlib.dumps(value, separators=(",", ":"), ensure_ascii=False)
        self.set_header("content-type", "application/json; charset=utf-8")
        return self.end(payload)

    def invalid_range(self) -> "Response":
        self.status(416)
        return self.end()

    async def download(self, file: "File | None", start: int | None = None, end: int | None = None) -> "Response":
        """Send ``file`` (or the inclusive span ``start..end`` of it).

        A span covering the whole file is answered with 200, any other valid
        span with 206 and ``Content-Range``, an invalid one with 416. An empty
        file asked for without a span is a plain empty 200.
        """
        if file is None:
            return self.end()

        total_size = await file.get_size()
        if total_size == 0 and start is None and end is None:
            self.set_header("content-disposition", f'attachment; filename="{file.original_name}"')
            self.set_header("content-length", 0)
            return self.end()

        try:
            span = resolve_span(total_size, start, end)
        except RangeNotSatisfiable as e:
            logger.debug("unsatisfiable range for %s: %s", file.name, e)
            return self.invalid_range()

        if not span.is_full:
            self.status(206)
            self.set_header("content-range", span.content_range())

        self.set_header("content-disposition", f'attachment; filename="{file.original_name}"')
        self.set_header("content-length", span.length)
        await file.stream_to(self, span.start, span.end)
        return self.end()

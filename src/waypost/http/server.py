"""HTTP/1.1 listener built on AnyIO sockets.

Features:
- HTTP/1.1 request line + headers parsing
- Content-Length bodies, read lazily when a handler asks for them
- One request per connection (Connection: close)
- One task per connection, all inside the caller's TaskGroup
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable

import anyio
from anyio.abc import SocketAttribute, SocketStream, TaskStatus

from ..errors import HttpParseError
from .request import HeaderMap, Request
from .response import Response, status_line

logger = logging.getLogger(__name__)

Handler = Callable[[Request, Response], Awaitable[Any]]

_DISCONNECTS = (anyio.BrokenResourceError, anyio.ClosedResourceError, anyio.EndOfStream)


async def _read_until(stream: SocketStream, marker: bytes, max_bytes: int) -> tuple[bytes, bytes]:
    """Read up to and including ``marker``; returns (head, bytes read past it)."""
    buf = bytearray()
    while True:
        idx = buf.find(marker)
        if idx != -1:
            end = idx + len(marker)
            return bytes(buf[:end]), bytes(buf[end:])
        if len(buf) > max_bytes:
            raise HttpParseError("request header too large")
        try:
            chunk = await stream.receive(4096)
        except anyio.EndOfStream:
            return bytes(buf), b""
        if not chunk:
            return bytes(buf), b""
        buf.extend(chunk)


def _parse_headers(block: bytes) -> tuple[str, str, str, HeaderMap]:
    # block contains request line + headers ending with \r\n\r\n
    head = block.decode("iso-8859-1")

    lines = head.split("\r\n")
    if not lines or not lines[0]:
        raise HttpParseError("missing request line")

    parts = lines[0].split(" ")
    if len(parts) != 3:
        raise HttpParseError("invalid request line")
    method, target, version = parts
    if not version.startswith("HTTP/"):
        raise HttpParseError(f"invalid protocol version {version!r}")

    headers: HeaderMap = {}
    for line in lines[1:]:
        if line == "":
            break
        if ":" not in line:
            continue
        k, v = line.split(":", 1)
        headers[k.strip().lower()] = v.strip()
    return method, target, version, headers


async def _read_exact(stream: SocketStream, n: int, prefix: bytes = b"") -> bytes:
    buf = bytearray(prefix[:n])
    while len(buf) < n:
        try:
            chunk = await stream.receive(n - len(buf))
        except anyio.EndOfStream:
            break
        if not chunk:
            break
        buf.extend(chunk)
    return bytes(buf)


def _content_length(headers: HeaderMap) -> int:
    raw = headers.get("content-length", "0") or "0"
    try:
        length = int(raw)
    except ValueError as e:
        raise HttpParseError(f"invalid content-length {raw!r}") from e
    if length < 0:
        raise HttpParseError(f"invalid content-length {raw!r}")
    return length


def _serialize(response: Response, *, include_body: bool = True) -> bytes:
    headers = dict(response.headers)
    body = response.body

    headers.setdefault("content-length", str(len(body)))
    headers["connection"] = "close"

    start = status_line(response.status_code).encode("ascii")
    head = b"".join(f"{k}: {v}\r\n".encode("latin-1") for k, v in headers.items())
    return start + head + b"\r\n" + (body if include_body else b"")


def _error_response(status: int, message: str) -> Response:
    response = Response().status(status)
    response.set_header("content-type", "text/plain; charset=utf-8")
    return response.end(message)


class HttpServer:
    """TCP listener that turns each connection into one ``handler(request, response)`` call.

    Run it inside a task group with ``port = await tg.start(server.serve)``;
    the bound port is reported through the task status, so ``port=0`` works.
    """

    def __init__(
        self,
        handler: Handler,
        *,
        host: str = "127.0.0.1",
        port: int = 0,
        max_header_bytes: int = 64 * 1024,
        max_body_bytes: int | None = None,
    ):
        self._handler = handler
        self._host = host
        self._port = port
        self._max_header_bytes = max_header_bytes
        self._max_body_bytes = max_body_bytes
        self.port: int | None = None

    async def serve(self, *, task_status: TaskStatus[int] = anyio.TASK_STATUS_IGNORED) -> None:
        listener = await anyio.create_tcp_listener(local_host=self._host, local_port=self._port)
        self.port = listener.extra(SocketAttribute.local_port)
        logger.info("listening on http://%s:%s", self._host, self.port)
        task_status.started(self.port)

        async with listener:
            await listener.serve(self._handle_client)

    async def _handle_client(self, stream: SocketStream) -> None:
        async with stream:
            try:
                await self._handle_request(stream)
            except _DISCONNECTS:
                logger.debug("client went away before the response was written")
            except Exception:
                logger.exception("unexpected error while serving a connection")
                try:
                    await stream.send(_serialize(_error_response(500, "internal server error")))
                except _DISCONNECTS:
                    pass

    async def _handle_request(self, stream: SocketStream) -> None:
        try:
            header_block, leftover = await _read_until(stream, b"\r\n\r\n", self._max_header_bytes)
            if not header_block:
                return
            method, target, version, headers = _parse_headers(header_block)
            content_length = _content_length(headers)
        except HttpParseError as e:
            await stream.send(_serialize(_error_response(400, f"bad request: {e}")))
            return

        if self._max_body_bytes is not None and content_length > self._max_body_bytes:
            await stream.send(_serialize(_error_response(413, "payload too large")))
            return

        async def read_body() -> bytes:
            if not content_length:
                return b""
            return await _read_exact(stream, content_length, leftover)

        request = Request(method, target, headers, version=version, body_reader=read_body)
        response = Response()
        await self._handler(request, response)
        # drain an unread body so closing the socket does not reset the connection
        await request.read()
        await stream.send(_serialize(response, include_body=request.method != "HEAD"))

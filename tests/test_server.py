"""End-to-end tests against a real listener."""

from __future__ import annotations

import json
from contextlib import asynccontextmanager
from functools import partial

import anyio
import pytest

from waypost import Download, Router, Server

pytestmark = pytest.mark.anyio


@asynccontextmanager
async def running(server: Server):
    async with anyio.create_task_group() as tg:
        port = await tg.start(partial(server.serve, handle_signals=False))
        try:
            yield port
        finally:
            server.close()


async def fetch(port: int, method: str, target: str, headers: dict[str, str] | None = None, body: bytes = b""):
    """Send one raw HTTP/1.1 request and return (status, headers, body)."""
    lines = [f"{method} {target} HTTP/1.1", "host: 127.0.0.1"]
    for name, value in (headers or {}).items():
        lines.append(f"{name}: {value}")
    if body:
        lines.append(f"content-length: {len(body)}")
    raw = ("\r\n".join(lines) + "\r\n\r\n").encode("latin-1") + body

    with anyio.fail_after(5):
        async with await anyio.connect_tcp("127.0.0.1", port) as stream:
            await stream.send(raw)
            received = bytearray()
            while True:
                try:
                    received.extend(await stream.receive())
                except anyio.EndOfStream:
                    break

    head, _, payload = bytes(received).partition(b"\r\n\r\n")
    status_line, *header_lines = head.decode("latin-1").split("\r\n")
    parsed = {}
    for line in header_lines:
        name, _, value = line.partition(":")
        parsed[name.strip().lower()] = value.strip()
    return int(status_line.split(" ")[1]), parsed, payload


def return_test(request, response):
    return response.text("test")


async def test_all_methods_reach_handler(server):
    for method in ("get", "post", "put", "patch", "delete"):
        getattr(server, method)("/", return_test)

    async with running(server) as port:
        for method in ("GET", "POST", "PUT", "PATCH", "DELETE"):
            status, _, body = await fetch(port, method, "/")
            assert (status, body) == (200, b"test")


async def test_head_omits_body(server):
    server.head("/", return_test)
    async with running(server) as port:
        status, headers, body = await fetch(port, "HEAD", "/")
    assert status == 200
    assert headers["content-length"] == "4"
    assert body == b""


async def test_query_parameters(server):
    server.get("/", lambda req, res: res.text(f"{req.query('a')} {req.query('b')}"))
    async with running(server) as port:
        _, _, body = await fetch(port, "GET", "/?a=1&b=2")
    assert body == b"1 2"


async def test_route_parameters(server):
    server.get("/users/:id", lambda req, res: res.json(req.params))
    server.get("/:a/:b", lambda req, res: res.text(f"{req.params['a']} {req.params['b']}"))

    async with running(server) as port:
        _, _, body = await fetch(port, "GET", "/users/42")
        assert json.loads(body) == {"id": "42"}
        _, _, body = await fetch(port, "GET", "/welcome/3")
        assert body == b"welcome 3"


async def test_selects_the_right_route(server):
    for path in ("/first", "/first/second", "/first/second/third"):
        server.get(path, lambda req, res: res.text(req.pathname))

    async with running(server) as port:
        for path in ("/first", "/first/second", "/first/second/third", "/first/second/"):
            _, _, body = await fetch(port, "GET", path)
            assert body == path.encode()


async def test_not_found(server):
    server.get("/", return_test)
    async with running(server) as port:
        status, _, body = await fetch(port, "GET", "/missing")
        assert status == 404
        assert body == b"404 Page Not Found."

        status, _, _ = await fetch(port, "BREW", "/")
        assert status == 404


async def test_custom_not_found_handler(server):
    server.not_found_handler(lambda req, res: res.status(404).json({"error": "nope"}))
    async with running(server) as port:
        status, _, body = await fetch(port, "GET", "/anything")
    assert status == 404
    assert json.loads(body) == {"error": "nope"}


async def test_handler_fault_becomes_500(server):
    order = []

    async def first(request, response, call_next):
        order.append("first")
        response.write("partial")
        await call_next()

    def broken(request, response, call_next):
        order.append("broken")
        raise RuntimeError("secret details")

    def never(request, response):
        order.append("never")

    server.get("/boom", first, broken, never)
    async with running(server) as port:
        status, _, body = await fetch(port, "GET", "/boom")

    assert status == 500
    assert body == b""
    assert order == ["first", "broken"]


async def test_mounted_routers_and_middlewares(server):
    seen = []

    def tag(request, response, call_next):
        seen.append(request.pathname)
        response.set_header("x-mount", "api")
        return call_next()

    api = Router.with_prefix("/v1", lambda r: r.get("/items/:id", lambda req, res: res.json(req.params)))
    server.router("/api", api, tag)
    server.get("/", return_test)

    async with running(server) as port:
        status, headers, body = await fetch(port, "GET", "/api/v1/items/7")
        assert status == 200
        assert headers["x-mount"] == "api"
        assert json.loads(body) == {"id": "7"}

        _, headers, body = await fetch(port, "GET", "/")
        assert body == b"test"
        assert "x-mount" not in headers
    assert seen == ["/api/v1/items/7"]


async def test_general_mount_wins(server):
    server.get("/api/x", lambda req, res: res.text("root"))
    server.router("/api", Router().get("/x", lambda req, res: res.text("api")))

    async with running(server) as port:
        _, _, body = await fetch(port, "GET", "/api/x")
    assert body == b"root"


async def test_body_parsing(server):
    async def echo(request, response):
        body = request.body
        if isinstance(body, dict):
            for key, value in body.items():
                if hasattr(value, "read"):
                    body[key] = await value.read("utf-8")
            return response.json(body)
        return response.text(body or "undefined")

    server.get("/", echo).post("/", echo)
    boundary = "XyZ"
    form = (
        f"--{boundary}\r\n"
        'Content-Disposition: form-data; name="a"\r\n\r\n1\r\n'
        f"--{boundary}\r\n"
        'Content-Disposition: form-data; name="file"; filename="dummy.txt"\r\n'
        "Content-Type: text/plain\r\n\r\nhello file\r\n"
        f"--{boundary}--\r\n"
    ).encode()

    async with running(server) as port:
        _, _, body = await fetch(port, "GET", "/", body=b"text")
        assert body == b"undefined"

        _, _, body = await fetch(port, "POST", "/", body=b"text")
        assert body == b"text"

        _, _, body = await fetch(port, "POST", "/", {"content-type": "application/json"}, b'{"ok": true}')
        assert json.loads(body) == {"ok": True}

        headers = {"content-type": f"multipart/form-data; boundary={boundary}"}
        _, _, body = await fetch(port, "POST", "/", headers, form)
        assert json.loads(body) == {"a": "1", "file": "hello file"}


async def test_resumable_download(server, tmp_path):
    target = tmp_path / "video.bin"
    target.write_bytes(b"0123456789")
    server.get("/video", lambda req, res: Download(req, res).resumable_download(str(target)))

    async with running(server) as port:
        status, headers, body = await fetch(port, "GET", "/video", {"range": "bytes=2-5"})
        assert status == 206
        assert headers["content-range"] == "bytes 2-5/10"
        assert body == b"2345"

        status, _, body = await fetch(port, "GET", "/video", {"range": "bytes=0-9"})
        assert (status, body) == (200, b"0123456789")

        status, _, body = await fetch(port, "GET", "/video", {"range": "bytes=10-"})
        assert (status, body) == (416, b"")


async def test_malformed_request_line(server):
    async with running(server) as port:
        with anyio.fail_after(5):
            async with await anyio.connect_tcp("127.0.0.1", port) as stream:
                await stream.send(b"NONSENSE\r\n\r\n")
                data = await stream.receive()
    assert data.startswith(b"HTTP/1.1 400")

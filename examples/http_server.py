"""
HTTP Server Example

Runs a small waypost server with a mounted API router, a middleware that
stamps responses, file uploads through the body parser and a resumable
download.

Run:
  python examples/http_server.py

Then try:
  curl -i http://127.0.0.1:8080/
  curl -i http://127.0.0.1:8080/api/v1/users/42
  curl -i -X POST http://127.0.0.1:8080/echo -d 'hello there'
  curl -i -F note=hi -F upload=@README.md http://127.0.0.1:8080/upload
  curl -i -H 'Range: bytes=0-15' http://127.0.0.1:8080/readme
"""

from __future__ import annotations

import logging
from pathlib import Path

from waypost import Download, Router, Server, ServerConfig

README = Path(__file__).resolve().parent.parent / "README.md"


def handle_root(req, res):
    return res.text("hello from waypost\n")


def handle_echo(req, res):
    # Echo the parsed body back.
    return res.text(req.body or "")


async def handle_upload(req, res):
    if not isinstance(req.body, dict):
        return res.status(400).text("expected multipart/form-data\n")
    summary = {}
    for name, value in req.body.items():
        if hasattr(value, "get_size"):
            summary[name] = {"file": value.original_name, "size": await value.get_size()}
        else:
            summary[name] = value
    return res.json(summary)


def handle_readme(req, res):
    return Download(req, res).resumable_download(str(README))


def stamp(req, res, call_next):
    res.set_header("x-powered-by", "waypost")
    return call_next()


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    server = Server(ServerConfig(port=8080))

    server.get("/", handle_root)
    server.post("/echo", handle_echo)
    server.post("/upload", handle_upload)
    server.get("/readme", handle_readme)

    api = Router.with_prefix("/v1", lambda r: r.get("/users/:id", lambda req, res: res.json(req.params)))
    server.router("/api", api, stamp)

    print("Listening on http://127.0.0.1:8080")
    print("Press Ctrl-C to stop.")
    server.listen()


if __name__ == "__main__":
    main()

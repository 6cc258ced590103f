"""Command line entry point: ``python -m waypost`` / ``waypost``.

Serves the files of a directory at ``/files/:name`` with resumable
downloads.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from urllib.parse import unquote

from .app import Server
from .config import ServerConfig
from .download import Download
from .filesystem import File
from .http.request import Request
from .http.response import Response


def file_server(directory: str):
    root = os.path.abspath(directory)

    async def serve_file(request: Request, response: Response):
        name = unquote(request.params.get("name", ""))
        path = os.path.join(root, name)
        if os.path.dirname(os.path.abspath(path)) != root or not os.path.isfile(path):
            return response.status(404).text("404 Page Not Found.")
        return await Download(request, response).resumable_download(File.from_path(path))

    async def list_files(request: Request, response: Response):
        names = sorted(n for n in os.listdir(root) if os.path.isfile(os.path.join(root, n)))
        if request.wants_html:
            items = "".join(f'<li><a href="/files/{n}">{n}</a></li>' for n in names)
            return response.html(f"<ul>{items}</ul>")
        return response.json(names)

    return serve_file, list_files


def build_parser(config: ServerConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="waypost", description="Serve a directory over HTTP with range support.")
    parser.add_argument("--host", default=config.host, help=f"address to bind (default: {config.host})")
    parser.add_argument("--port", "-p", type=int, default=config.port, help=f"port to listen on (default: {config.port})")
    parser.add_argument("--dir", "-d", default=".", help="directory whose files are served under /files/")
    parser.add_argument(
        "--log-level",
        default=config.log_level,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    try:
        base = ServerConfig.from_env()
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    args = build_parser(base).parse_args(argv)
    if not os.path.isdir(args.dir):
        print(f"error: {args.dir!r} is not a directory", file=sys.stderr)
        return 2

    base.host, base.port, base.log_level = args.host, args.port, args.log_level
    try:
        base.validate()
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=base.log_level_number,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    serve_file, list_files = file_server(args.dir)
    server = Server(base)
    server.get("/files", list_files)
    server.get("/files/:name", serve_file)

    try:
        server.listen()
    except KeyboardInterrupt:
        pass
    return 0


if __name__ == "__main__":
    sys.exit(main())

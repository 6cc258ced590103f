"""The ``Server`` facade: route registration, dispatch and serving."""

from __future__ import annotations

import logging
import signal
from functools import partial
from typing import Any

import anyio
from anyio.abc import TaskStatus

from ._invoke import invoke
from .config import ServerConfig
from .filesystem import Directory
from .http.request import Request
from .http.response import Response
from .http.server import HttpServer
from .middleware.body_parser import body_parser
from .middleware.chain import Middleware, run_chain
from .middleware.not_found import default_not_found_handler
from .routing.dispatcher import Dispatcher
from .routing.router import Router

logger = logging.getLogger(__name__)

SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class Server:
    """Mounts routers, dispatches requests through their middleware chains.

    Routes registered directly on the server (``server.get(...)``) live on a
    default router mounted at ``/``. Other routers are mounted with
    ``server.router(root, routers, *middlewares)``.
    """

    def __init__(self, config: ServerConfig | None = None):
        self.config = config or ServerConfig()
        self.dispatcher = Dispatcher(self.config.precedence)
        self._temp = Directory(self.config.temp_dir)
        self._not_found: Middleware = default_not_found_handler
        self._body_parser = body_parser(self.config.body_parser) if self.config.use_body_parser else None
        self._http: HttpServer | None = None
        self._cancel_scope: anyio.CancelScope | None = None

    @property
    def temp(self) -> Directory:
        return self._temp

    @property
    def port(self) -> int | None:
        return self._http.port if self._http is not None else None

    def not_found_handler(self, handler: Middleware) -> "Server":
        self._not_found = handler
        return self

    def router(self, root: str, routers: Router | list[Router], *middlewares: Middleware) -> "Server":
        self.dispatcher.mount(root, routers, *middlewares)
        return self

    def add_route(self, method: str, path: str, *handlers: Middleware) -> "Server":
        self.dispatcher.default_router().add_route(method, path, *handlers)
        return self

    def get(self, path: str, *handlers: Middleware) -> "Server":
        return self.add_route("GET", path, *handlers)

    def post(self, path: str, *handlers: Middleware) -> "Server":
        return self.add_route("POST", path, *handlers)

    def put(self, path: str, *handlers: Middleware) -> "Server":
        return self.add_route("PUT", path, *handlers)

    def patch(self, path: str, *handlers: Middleware) -> "Server":
        return self.add_route("PATCH", path, *handlers)

    def delete(self, path: str, *handlers: Middleware) -> "Server":
        return self.add_route("DELETE", path, *handlers)

    def head(self, path: str, *handlers: Middleware) -> "Server":
        return self.add_route("HEAD", path, *handlers)

    def options(self, path: str, *handlers: Middleware) -> "Server":
        return self.add_route("OPTIONS", path, *handlers)

    async def handle(self, request: Request, response: Response) -> Any:
        """Route one request and run its middleware chain.

        Any exception escaping the chain is logged and turned into an empty
        500 response.
        """
        request.server = self
        resolution = self.dispatcher.resolve(request.pathname, request.method)
        if resolution is None:
            return await invoke(self._not_found, request, response)

        request.params = self.dispatcher.params_for(resolution)
        handlers = self.dispatcher.middlewares_for(resolution, self._body_parser)
        try:
            return await run_chain(request, response, handlers)
        except Exception:
            logger.exception("handler failed for %s %s", request.method, request.pathname)
            response.discard()
            response.headers.clear()
            response.status(500).end()
            return None

    async def serve(
        self,
        host: str | None = None,
        port: int | None = None,
        *,
        handle_signals: bool = True,
        task_status: TaskStatus[int] = anyio.TASK_STATUS_IGNORED,
    ) -> None:
        """Serve until cancelled, ``close()`` is called, or SIGINT/SIGTERM arrives."""
        self._http = HttpServer(
            self.handle,
            host=host or self.config.host,
            port=self.config.port if port is None else port,
            max_header_bytes=self.config.max_header_bytes,
            max_body_bytes=self.config.max_body_bytes,
        )
        try:
            async with anyio.create_task_group() as tg:
                self._cancel_scope = tg.cancel_scope
                bound_port = await tg.start(self._http.serve)
                if handle_signals:
                    tg.start_soon(self._watch_signals, tg.cancel_scope)
                task_status.started(bound_port)
        finally:
            self._cancel_scope = None
            logger.info("server stopped")

    async def _watch_signals(self, scope: anyio.CancelScope) -> None:
        with anyio.open_signal_receiver(*SHUTDOWN_SIGNALS) as signals:
            async for signum in signals:
                logger.info("received %s, shutting down", signal.Signals(signum).name)
                await self._temp.delete()
                scope.cancel()
                return

    def close(self) -> None:
        """Stop a running ``serve()``."""
        if self._cancel_scope is not None:
            self._cancel_scope.cancel()

    def listen(self, port: int | None = None, host: str | None = None) -> None:
        """Blocking entry point: serve with signal handling until stopped."""
        anyio.run(partial(self.serve, host, port))

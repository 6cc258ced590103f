"""Per-method route tables with an optional mount prefix."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable

from ..middleware.chain import Middleware
from .matcher import Params, extract_params, match_path, normalize_path, param_positions, split_segments

logger = logging.getLogger(__name__)

SUPPORTED_METHODS: tuple[str, ...] = ("GET", "POST", "PUT", "PATCH", "HEAD", "OPTIONS", "DELETE")


def is_supported_method(method: str | None) -> bool:
    return method in SUPPORTED_METHODS


@dataclass(slots=True)
class Route:
    """A (method, pattern) registration and its handlers."""

    path: str
    params: Params
    handlers: list[Middleware] = field(default_factory=list)

    @property
    def segments(self) -> list[str]:
        return split_segments(self.path)

    @property
    def has_params(self) -> bool:
        return bool(self.params)


class Router:
    """Route table keyed by HTTP method.

    Routes are tried in registration order. A router built with a prefix only
    answers paths that start with it, and matches its patterns against the
    remainder.
    """

    def __init__(self, prefix: str = ""):
        self._prefix = prefix
        self._routes: dict[str, list[Route]] = {method: [] for method in SUPPORTED_METHODS}

    @property
    def prefix(self) -> str:
        return self._prefix

    @classmethod
    def with_prefix(cls, prefix: str, configure: Callable[["Router"], object]) -> "Router":
        """Build a prefixed router and hand it to ``configure`` for registration."""
        router = cls(prefix)
        configure(router)
        return router

    def routes(self, method: str) -> list[Route]:
        return list(self._routes.get(method, []))

    def add_route(self, method: str, path: str, *handlers: Middleware) -> None:
        if not path:
            return
        if not is_supported_method(method):
            raise ValueError(f"unsupported method: {method!r}")

        path = normalize_path(path)
        params = param_positions(path)

        for route in self._routes[method]:
            if route.path == path:
                route.handlers = list(handlers)
                route.params = params
                logger.debug("replaced route %s %s%s", method, self._prefix, path)
                return

        self._routes[method].append(Route(path=path, params=params, handlers=list(handlers)))

    def find_route(self, path: str, method: str) -> Route | None:
        if not is_supported_method(method):
            return None
        if not path.startswith(self._prefix):
            return None

        path = normalize_path(path[len(self._prefix):])
        for route in self._routes[method]:
            if match_path(route.path, path):
                return route
        return None

    def get_params(self, path: str, positions: Params) -> dict[str, str]:
        """Extract parameter values from a mount-relative ``path``."""
        path = normalize_path(path[len(self._prefix):])
        return extract_params(path, positions)

    def get(self, path: str, *handlers: Middleware) -> "Router":
        self.add_route("GET", path, *handlers)
        return self

    def post(self, path: str, *handlers: Middleware) -> "Router":
        self.add_route("POST", path, *handlers)
        return self

    def put(self, path: str, *handlers: Middleware) -> "Router":
        self.add_route("PUT", path, *handlers)
        return self

    def patch(self, path: str, *handlers: Middleware) -> "Router":
        self.add_route("PATCH", path, *handlers)
        return self

    def delete(self, path: str, *handlers: Middleware) -> "Router":
        self.add_route("DELETE", path, *handlers)
        return self

    def head(self, path: str, *handlers: Middleware) -> "Router":
        self.add_route("HEAD", path, *handlers)
        return self

    def options(self, path: str, *handlers: Middleware) -> "Router":
        self.add_route("OPTIONS", path, *handlers)
        return self

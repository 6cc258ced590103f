"""Resolve a request path across several mounted routers.

Routers are mounted under literal root strings. For a path like
``/api/users/1`` the candidate (root, remainder) pairs are::

    ("/", "/api/users/1"), ("/api", "/users/1"),
    ("/api/users", "/1"), ("/api/users/1", "/")

By default candidates are tried from the least specific root to the most
specific one, and the first router that matches wins, so a route on ``/``
shadows one on ``/api`` for the same request.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Iterator

from ..middleware.chain import Middleware
from .router import Route, Router, is_supported_method

logger = logging.getLogger(__name__)


class MountPrecedence(Enum):
    """Order in which mount roots are tried."""
    GENERAL_FIRST = auto()   # "/" before "/api" before "/api/v1"
    SPECIFIC_FIRST = auto()  # the reverse


@dataclass(slots=True)
class MountEntry:
    root: str
    routers: list[Router] = field(default_factory=list)
    middlewares: list[Middleware] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class Resolution:
    path: str
    mount: MountEntry
    router: Router
    route: Route


def candidate_roots(pathname: str) -> Iterator[tuple[str, str]]:
    """Yield (root, remainder) pairs from the least to the most specific root."""
    segments = pathname.split("/")
    seen: set[str] = set()
    for i in range(len(segments)):
        root = "/".join(segments[: i + 1]) or "/"
        if root in seen:
            continue
        seen.add(root)
        yield root, "/" + "/".join(segments[i + 1:])


class Dispatcher:
    def __init__(self, precedence: MountPrecedence = MountPrecedence.GENERAL_FIRST):
        self.precedence = precedence
        self._mounts: dict[str, MountEntry] = {}

    def mount(self, root: str, routers: Router | list[Router], *middlewares: Middleware) -> MountEntry | None:
        """Register ``routers`` under ``root``, replacing any previous mount there."""
        if not root:
            return None
        if isinstance(routers, Router):
            routers = [routers]
        entry = MountEntry(root, list(routers), list(middlewares))
        self._mounts[root] = entry
        return entry

    def get_mount(self, root: str) -> MountEntry | None:
        return self._mounts.get(root)

    def default_router(self) -> Router:
        """The router behind the ``/`` mount, created on first use."""
        entry = self._mounts.get("/")
        if entry is None or not entry.routers:
            entry = self.mount("/", Router())
        return entry.routers[0]

    def candidates(self, pathname: str) -> list[tuple[str, str]]:
        found = [(root, rest) for root, rest in candidate_roots(pathname) if root in self._mounts]
        if self.precedence is MountPrecedence.SPECIFIC_FIRST:
            found.reverse()
        return found

    def resolve(self, pathname: str, method: str) -> Resolution | None:
        if not is_supported_method(method):
            return None

        for root, remainder in self.candidates(pathname):
            entry = self._mounts[root]
            for router in entry.routers:
                route = router.find_route(remainder, method)
                if route is not None:
                    return Resolution(remainder, entry, router, route)

        logger.debug("no route for %s %s", method, pathname)
        return None

    def params_for(self, resolution: Resolution) -> dict[str, str]:
        if not resolution.route.has_params:
            return {}
        return resolution.router.get_params(resolution.path, resolution.route.params)

    def middlewares_for(self, resolution: Resolution, body_parser: Middleware | None = None) -> list[Middleware]:
        """Ordered handlers: body parser, mount middlewares, route handlers."""
        handlers: list[Middleware] = []
        if body_parser is not None:
            handlers.append(body_parser)
        handlers.extend(resolution.mount.middlewares)
        handlers.extend(resolution.route.handlers)
        return handlers

"""Sequential middleware execution with explicit continuations.

A middleware is ``handler(request, response, next)``; ``next`` is an async
callable that runs the rest of the chain. A handler that does not call it
ends the chain. Handlers may be plain functions or coroutines.

A chain of a single handler calls it as ``handler(request, response)``.
"""

from __future__ import annotations

import inspect
from typing import Any, Awaitable, Callable

from .._invoke import invoke

Middleware = Callable[..., Any]
Next = Callable[[], Awaitable[Any]]


def _accepts_next(handler: Middleware) -> bool:
    try:
        signature = inspect.signature(handler)
    except (TypeError, ValueError):
        return True

    positional = 0
    for param in signature.parameters.values():
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            return True
        if param.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD):
            positional += 1
    return positional >= 3


def _continuation(request: Any, response: Any, handlers: list[Middleware], index: int) -> Next:
    async def call_next() -> Any:
        following = index + 1
        if following >= len(handlers):
            return None
        return await _call(handlers[following], request, response,
                           _continuation(request, response, handlers, following))

    return call_next


async def _call(handler: Middleware, request: Any, response: Any, call_next: Next) -> Any:
    # terminal handlers are commonly written as (request, response)
    if _accepts_next(handler):
        return await invoke(handler, request, response, call_next)
    return await invoke(handler, request, response)


async def run_chain(request: Any, response: Any, handlers: list[Middleware]) -> Any:
    """Run ``handlers`` in order against one request/response pair.

    Exceptions raised by any handler propagate to the caller; the remaining
    handlers are not run.
    """
    if not handlers:
        return None
    if len(handlers) == 1:
        return await invoke(handlers[0], request, response)
    return await _call(handlers[0], request, response, _continuation(request, response, handlers, 0))

"""Call sync or async callables uniformly."""

from __future__ import annotations

import inspect
from typing import Any, Callable


async def invoke(handler: Callable[..., Any], *args: Any) -> Any:
    """Call ``handler`` and await its result if it returned an awaitable."""
    result = handler(*args)
    if inspect.isawaitable(result):
        result = await result
    return result

"""Fallback handler for requests no route answers."""

from __future__ import annotations

from ..http.request import Request
from ..http.response import Response


def default_not_found_handler(request: Request, response: Response) -> Response:
    return response.status(404).text("404 Page Not Found.")

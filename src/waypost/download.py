"""File download helpers that honour the request's Range header."""

from __future__ import annotations

import logging
import os

from .errors import RangeNotSatisfiable
from .filesystem import File
from .http.ranges import resolve_range
from .http.request import Request
from .http.response import Response

logger = logging.getLogger(__name__)


def _as_file(file: File | str | os.PathLike[str]) -> File:
    return file if isinstance(file, File) else File.from_path(file)


class Download:
    """Send files for one request/response pair."""

    def __init__(self, request: Request, response: Response):
        self._request = request
        self._response = response

    async def download(self, file: File | str | os.PathLike[str]) -> Response:
        """Send the whole file, ignoring any Range header."""
        return await self._response.download(_as_file(file))

    async def resumable_download(self, file: File | str | os.PathLike[str]) -> Response:
        """Send the part of the file the Range header asks for.

        No header means the whole file; a malformed or unsatisfiable header
        is answered with 416.
        """
        file = _as_file(file)
        spec = self._request.range
        if spec is None:
            return await self._response.download(file)

        total_size = await file.get_size()
        try:
            span = resolve_range(spec, total_size)
        except RangeNotSatisfiable as e:
            logger.debug("rejecting range %r: %s", self._request.headers.get("range"), e)
            return self._response.invalid_range()

        return await self._response.download(file, span.start, span.end)

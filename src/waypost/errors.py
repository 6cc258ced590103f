"""Exception types shared across waypost."""

from __future__ import annotations


class WaypostError(Exception):
    """Base class for waypost errors."""


class HttpParseError(WaypostError, ValueError):
    """The raw request bytes could not be parsed (answered with 400)."""


class RangeNotSatisfiable(WaypostError):
    """A Range header is malformed or falls outside the resource (answered with 416)."""

    def __init__(self, reason: str, total_size: int | None = None):
        super().__init__(reason)
        self.total_size = total_size


class MultipartDecodeError(WaypostError):
    """A multipart/form-data body could not be decoded."""

"""HTTP primitives: request/response objects, the socket listener, Range and multipart handling."""

from .multipart import FileField, MultipartField, TextField, decode_multipart
from .ranges import ByteSpan, ExplicitRange, RangeSpec, parse_range_header, resolve_range, resolve_span
from .request import Request
from .response import Response
from .server import HttpServer

__all__ = [
    "ByteSpan",
    "ExplicitRange",
    "FileField",
    "HttpServer",
    "MultipartField",
    "RangeSpec",
    "Request",
    "Response",
    "TextField",
    "decode_multipart",
    "parse_range_header",
    "resolve_range",
    "resolve_span",
]

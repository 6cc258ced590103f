"""Request body parsing middleware.

Reads the whole body of POST, PUT and PATCH requests and stores the decoded
value on ``request.body``. A body that fails to decode is kept as text.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any
from urllib.parse import parse_qsl

from ..errors import MultipartDecodeError
from ..http.multipart import FileField, decode_multipart
from ..http.request import Request
from ..http.response import Response
from .chain import Next

logger = logging.getLogger(__name__)

class ContentType:
    JSON = "application/json"
    URLENCODED = "application/x-www-form-urlencoded"
    FORM_DATA = "multipart/form-data"

BODY_METHODS = ("POST", "PUT", "PATCH")


@dataclass(frozen=True, slots=True)
class BodyParserOptions:
    parse_json: bool = True
    parse_urlencoded: bool = True
    parse_form_data: bool = True

    def enabled(self, content_type: str | None) -> bool:
        match content_type:
            case ContentType.JSON:
                return self.parse_json
            case ContentType.URLENCODED:
                return self.parse_urlencoded
            case ContentType.FORM_DATA:
                return self.parse_form_data
            case _:
                return True


async def _parse_form_data(request: Request, text: str) -> dict[str, Any]:
    if request.server is None:
        raise MultipartDecodeError("no temporary storage available for uploads")
    fields = await decode_multipart(
        text,
        request.boundary,
        charset=request.charset,
        storage=request.server.temp,
    )
    return {
        f.name: f.file if isinstance(f, FileField) else f.value
        for f in fields
    }


async def parse_body(request: Request, raw: bytes, options: BodyParserOptions | None = None) -> Any:
    """Decode ``raw`` according to the request content type.

    Content types switched off in ``options`` are returned as text.
    """
    options = options or BodyParserOptions()
    content_type = request.content_type
    # latin-1 keeps multipart bytes intact
    encoding = "latin-1" if content_type == ContentType.FORM_DATA else request.charset
    try:
        text = raw.decode(encoding)
    except (LookupError, UnicodeDecodeError):
        text = raw.decode("latin-1")

    if not options.enabled(content_type):
        return text

    try:
        match content_type:
            case ContentType.JSON:
                return json.loads(text)
            case ContentType.URLENCODED:
                return dict(parse_qsl(text, keep_blank_values=True))
            case ContentType.FORM_DATA:
                return await _parse_form_data(request, text)
            case _:
                return text
    except (ValueError, MultipartDecodeError) as e:
        logger.debug("could not decode %s body, keeping it as text: %s", content_type, e)
        return text


def body_parser(options: BodyParserOptions | None = None):
    options = options or BodyParserOptions()

    async def parse_request_body(request: Request, response: Response, call_next: Next | None = None) -> Any:
        if request.method in BODY_METHODS:
            request.body = await parse_body(request, await request.read(), options)
        if call_next is not None:
            return await call_next()
        return None

    return parse_request_body

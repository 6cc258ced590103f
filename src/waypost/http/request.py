"""Incoming HTTP request with lazily computed header views."""

from __future__ import annotations

from functools import cached_property
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Mapping
from urllib.parse import parse_qsl, unquote, urlsplit

from python_multipart.multipart import parse_options_header

from .ranges import RangeSpec, parse_range_header

if TYPE_CHECKING:
    from ..app import Server

HeaderMap = dict[str, str]
BodyReader = Callable[[], Awaitable[bytes]]

DEFAULT_CHARSET = "utf-8"


class Request:
    """A parsed request line and header block plus a lazily read body.

    Header names are lower-cased. Derived views (``accept``, ``cookies``,
    ``charset``, ``range``...) are computed on first access and cached for
    the lifetime of the request.
    """

    def __init__(
        self,
        method: str,
        target: str,
        headers: Mapping[str, str] | None = None,
        *,
        version: str = "HTTP/1.1",
        content: bytes | None = None,
        body_reader: BodyReader | None = None,
    ):
        self.method = method.upper()
        self.target = target
        self.version = version
        self.headers: HeaderMap = {k.lower(): v for k, v in (headers or {}).items()}
        self.params: dict[str, str] = {}
        # set by the body parser; None means "not parsed"
        self.body: Any = None
        self.server: Server | None = None
        self._content = content
        self._body_reader = body_reader

    def __repr__(self) -> str:
        return f"Request({self.method} {self.target})"

    async def read(self) -> bytes:
        """Return the raw body, reading it from the connection on first call."""
        if self._content is None:
            self._content = await self._body_reader() if self._body_reader is not None else b""
        return self._content

    @cached_property
    def _url(self):
        return urlsplit(self.target)

    @property
    def pathname(self) -> str:
        return self._url.path or "/"

    @property
    def full_url(self) -> str:
        return f"http://{self.headers.get('host', '')}{self.target}"

    @cached_property
    def _query(self) -> dict[str, str]:
        return dict(parse_qsl(self._url.query, keep_blank_values=True))

    def query(self, key: str | None = None) -> str | dict[str, str] | None:
        if key is None:
            return dict(self._query)
        return self._query.get(key)

    @cached_property
    def accept(self) -> list[str]:
        value = self.headers.get("accept")
        return [item.strip() for item in value.split(",")] if value else []

    @property
    def wants_json(self) -> bool:
        return "application/json" in self.accept

    @property
    def wants_xml(self) -> bool:
        return "application/xml" in self.accept

    @property
    def wants_html(self) -> bool:
        return "text/html" in self.accept or "application/xhtml+xml" in self.accept

    @property
    def wants_any(self) -> bool:
        return "*/*" in self.accept

    @cached_property
    def _content_type(self) -> tuple[str, dict[str, str]]:
        ctype, options = parse_options_header(self.headers.get("content-type"))
        return (
            ctype.decode("latin-1").lower(),
            {k.decode("latin-1").lower(): v.decode("latin-1") for k, v in options.items()},
        )

    @property
    def content_type(self) -> str | None:
        return self._content_type[0] or None

    @property
    def charset(self) -> str:
        return self._content_type[1].get("charset") or DEFAULT_CHARSET

    @property
    def boundary(self) -> str | None:
        return self._content_type[1].get("boundary") or None

    @cached_property
    def cookies(self) -> dict[str, str]:
        header = self.headers.get("cookie")
        if not header:
            return {}
        cookies: dict[str, str] = {}
        for pair in header.split(";"):
            name, sep, value = pair.partition("=")
            if not sep:
                continue
            cookies[unquote(name.strip())] = unquote(value.strip())
        return cookies

    @cached_property
    def range(self) -> RangeSpec | None:
        return parse_range_header(self.headers.get("range"))

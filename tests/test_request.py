"""Tests for Request header views."""

import pytest

from waypost.http import Request


def test_method_and_header_names_normalized():
    request = Request("get", "/", {"Content-Type": "text/plain"})
    assert request.method == "GET"
    assert request.headers == {"content-type": "text/plain"}


def test_pathname_and_query():
    request = Request("GET", "/search?q=cats&page=2&q=dogs", {"host": "example.com"})
    assert request.pathname == "/search"
    assert request.query("page") == "2"
    assert request.query("q") == "dogs"
    assert request.query("missing") is None
    assert request.query() == {"q": "dogs", "page": "2"}
    assert request.full_url == "http://example.com/search?q=cats&page=2&q=dogs"


def test_accept_helpers():
    request = Request("GET", "/", {"accept": "text/html, application/json, */*"})
    assert request.accept == ["text/html", "application/json", "*/*"]
    assert request.wants_html
    assert request.wants_json
    assert request.wants_any
    assert not request.wants_xml

    assert Request("GET", "/").accept == []


def test_content_type_charset_and_boundary():
    request = Request("POST", "/", {"content-type": "multipart/form-data; boundary=abc123"})
    assert request.content_type == "multipart/form-data"
    assert request.boundary == "abc123"
    assert request.charset == "utf-8"

    request = Request("POST", "/", {"content-type": "text/plain; charset=latin-1"})
    assert request.charset == "latin-1"
    assert request.boundary is None

    request = Request("POST", "/")
    assert request.content_type is None
    assert request.boundary is None


def test_cookies():
    request = Request("GET", "/", {"cookie": "session=abc; theme=dark%20mode; flag"})
    assert request.cookies == {"session": "abc", "theme": "dark mode"}
    assert Request("GET", "/").cookies == {}


def test_range_is_parsed_once():
    request = Request("GET", "/", {"range": "bytes=0-1"})
    assert request.range is request.range
    assert request.range.unit == "bytes"
    assert Request("GET", "/").range is None


@pytest.mark.anyio
async def test_body_read_once():
    calls = []

    async def reader():
        calls.append(1)
        return b"payload"

    request = Request("POST", "/", body_reader=reader)
    assert await request.read() == b"payload"
    assert await request.read() == b"payload"
    assert calls == [1]

    assert await Request("GET", "/").read() == b""

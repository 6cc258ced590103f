"""Tests for the Download helper."""

import pytest

from waypost import Download
from waypost.filesystem import Directory
from waypost.http import Request, Response

pytestmark = pytest.mark.anyio


@pytest.fixture
async def ten_bytes(tmp_path):
    return await Directory(tmp_path).create_file("digits.bin", b"0123456789")


async def resumable(file, range_header=None):
    headers = {"range": range_header} if range_header is not None else {}
    response = Response()
    await Download(Request("GET", "/", headers), response).resumable_download(file)
    return response


async def test_no_range_header_sends_everything(ten_bytes):
    response = await resumable(ten_bytes)
    assert response.status_code == 200
    assert response.body == b"0123456789"


@pytest.mark.parametrize(
    ("header", "status", "body", "content_range"),
    [
        ("bytes=0-9", 200, b"0123456789", None),
        ("bytes=2-5", 206, b"2345", "bytes 2-5/10"),
        ("bytes=7-", 206, b"789", "bytes 7-9/10"),
        ("bytes=-3", 206, b"789", "bytes 7-9/10"),
        ("bytes=-10", 200, b"0123456789", None),
        ("bytes=10-", 416, b"", None),
        ("bytes=-20", 416, b"", None),
        ("bytes=4-2", 416, b"", None),
        ("pages=0-1", 416, b"", None),
        ("bytes=oops", 416, b"", None),
    ],
)
async def test_range_negotiation(ten_bytes, header, status, body, content_range):
    response = await resumable(ten_bytes, header)
    assert response.status_code == status
    assert response.body == body
    assert response.get_header("content-range") == content_range


async def test_plain_download_ignores_range(ten_bytes):
    response = Response()
    request = Request("GET", "/", {"range": "bytes=2-5"})
    await Download(request, response).download(ten_bytes)
    assert response.status_code == 200
    assert response.body == b"0123456789"


async def test_accepts_a_path(tmp_path):
    path = tmp_path / "raw.txt"
    path.write_bytes(b"abcdef")
    response = await resumable(str(path), "bytes=1-2")
    assert response.status_code == 206
    assert response.body == b"bc"
    assert response.get_header("content-disposition") == 'attachment; filename="raw.txt"'


class TestEmptyFile:
    """A zero-byte file has no satisfiable span but can still be sent whole."""

    @pytest.fixture
    async def empty(self, tmp_path):
        return await Directory(tmp_path).create_file("empty.bin", b"")

    async def test_no_range_header_is_ok(self, empty):
        """Without a Range header the empty body is sent with 200."""
        response = await resumable(empty)
        assert response.status_code == 200
        assert response.ended
        assert response.body == b""
        assert response.get_header("content-length") == "0"
        assert response.get_header("content-range") is None

    async def test_plain_download_is_ok(self, empty):
        """``download`` ignores ranges, so an empty file is a plain 200."""
        response = Response()
        await Download(Request("GET", "/"), response).download(empty)
        assert response.status_code == 200
        assert response.get_header("content-disposition") == 'attachment; filename="empty.bin"'

    @pytest.mark.parametrize("header", ["bytes=0-", "bytes=0-0", "bytes=-1"])
    async def test_explicit_range_is_rejected(self, empty, header):
        """Any byte range on an empty file is unsatisfiable."""
        response = await resumable(empty, header)
        assert response.status_code == 416

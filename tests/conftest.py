"""Shared pytest fixtures."""

from __future__ import annotations

import pytest

from waypost import Server, ServerConfig


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def config(tmp_path) -> ServerConfig:
    return ServerConfig(host="127.0.0.1", port=0, temp_dir=str(tmp_path / "temp"))


@pytest.fixture
def server(config) -> Server:
    return Server(config)

"""Async file and directory handles used for uploads and downloads."""

from __future__ import annotations

import logging
import os
import re
import shutil
import time
from typing import Any

import anyio
import anyio.to_thread

from ._invoke import invoke

logger = logging.getLogger(__name__)

_UNSAFE = re.compile(r"[^a-z0-9]+", re.IGNORECASE)

CHUNK_SIZE = 64 * 1024


class Directory:
    """A directory on disk plus the files and subdirectories created through it."""

    def __init__(self, path: str | os.PathLike[str] | None = None):
        self.path = anyio.Path(path if path is not None else os.getcwd())
        self.name = self.path.name
        self._files: list[File] = []
        self._directories: list[Directory] = []

    def __repr__(self) -> str:
        return f"Directory({str(self.path)!r})"

    @property
    def files(self) -> list["File"]:
        return list(self._files)

    def get_file(self, name: str) -> "File | None":
        return next((f for f in self._files if f.name == name), None)

    def get_directory(self, name: str) -> "Directory | None":
        return next((d for d in self._directories if d.name == name), None)

    def add_file(self, file: "File | str") -> "File":
        if isinstance(file, str):
            file = File(self, File.generate_filename(file), original_name=file)
        existing = self.get_file(file.name)
        if existing is not None:
            return existing
        self._files.append(file)
        return file

    async def create_file(self, original_name: str, content: bytes, *, track: bool = True) -> "File":
        """Write ``content`` under a generated name derived from ``original_name``.

        With ``track=False`` the file is written but not listed in ``files``;
        it still goes away with the directory.
        """
        name = File.generate_filename(original_name)
        await self.path.mkdir(parents=True, exist_ok=True)
        await (self.path / name).write_bytes(content)
        logger.debug("stored upload %r as %s", original_name, name)
        file = File(self, name, original_name=original_name)
        return self.add_file(file) if track else file

    async def create_directory(self, name: str) -> "Directory":
        directory = Directory(self.path / name)
        await directory.path.mkdir(parents=True, exist_ok=True)
        self._directories.append(directory)
        return directory

    async def delete(self) -> None:
        """Remove the directory tree; failures are logged, not raised."""
        try:
            await anyio.to_thread.run_sync(shutil.rmtree, str(self.path))
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.error("failed to delete directory %s: %s", self.path, e)
            return
        self._files = []
        self._directories = []


class File:
    """A file inside a ``Directory``.

    ``name`` is the on-disk name; ``original_name`` is what the client called
    it and is used for display (e.g. in ``Content-Disposition``).
    """

    def __init__(self, directory: Directory | str, name: str, original_name: str | None = None):
        if not isinstance(directory, Directory):
            directory = Directory(directory)
        self.directory = directory
        self.name = name
        self.original_name = original_name or name
        self._size: int | None = None

    @classmethod
    def from_path(cls, path: str | os.PathLike[str]) -> "File":
        head, tail = os.path.split(os.fspath(path))
        return cls(Directory(head or os.getcwd()), tail)

    def __repr__(self) -> str:
        return f"File({str(self.path)!r}, original_name={self.original_name!r})"

    @property
    def path(self) -> anyio.Path:
        return self.directory.path / self.name

    @property
    def extension(self) -> str:
        return os.path.splitext(self.name)[1][1:]

    @property
    def basename(self) -> str:
        return os.path.splitext(self.name)[0]

    async def exists(self) -> bool:
        return await self.path.exists()

    async def read(self, encoding: str | None = None) -> str | bytes:
        if encoding is None:
            return await self.path.read_bytes()
        return await self.path.read_text(encoding=encoding)

    async def get_size(self, start: int | None = None, end: int | None = None) -> int:
        """Total size, or the size of the inclusive span ``start..end``."""
        if self._size is None:
            stat = await self.path.stat()
            self._size = stat.st_size

        match (start, end):
            case (None, None):
                return self._size
            case (_, None):
                return self._size - start
            case (None, _):
                return end + 1
            case _:
                return end - start + 1

    async def stream_to(self, sink: Any, start: int = 0, end: int | None = None) -> int:
        """Copy the inclusive byte span ``start..end`` into ``sink.write``."""
        if end is None:
            end = await self.get_size() - 1
        remaining = end - start + 1
        written = 0
        async with await anyio.open_file(self.path, "rb") as f:
            await f.seek(start)
            while remaining > 0:
                chunk = await f.read(min(CHUNK_SIZE, remaining))
                if not chunk:
                    break
                await invoke(sink.write, chunk)
                remaining -= len(chunk)
                written += len(chunk)
        return written

    @staticmethod
    def generate_filename(filename: str) -> str:
        """Build a collision-resistant on-disk name from a client file name."""
        stem, ext = os.path.splitext(os.path.basename(filename))
        ext = _UNSAFE.sub("", ext)
        stem = _UNSAFE.sub("-", stem) + "-" + str(time.time_ns())
        return f"{stem}.{ext}" if ext else stem

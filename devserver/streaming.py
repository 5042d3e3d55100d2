"""Streaming of file contents, with the live-reload script appended to HTML."""

from __future__ import annotations

import asyncio
import errno
import logging
import os
import stat
from pathlib import Path
from typing import AsyncIterator, BinaryIO

from fastapi.responses import StreamingResponse

from .config import Config
from .mime import mime_for
from .pages import render_livereload_script

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


def is_html(path: Path) -> bool:
    return path.suffix[1:].lower() == "html"


async def open_regular_file(path: Path) -> tuple[BinaryIO, int]:
    """Open ``path`` for reading and return the handle with its size.

    Only regular files qualify; anything else raises an ``OSError`` before the
    file is opened, so FIFOs and devices can never block a worker thread.
    """

    info = await asyncio.to_thread(os.stat, path)
    if stat.S_ISDIR(info.st_mode):
        raise IsADirectoryError(errno.EISDIR, os.strerror(errno.EISDIR), str(path))
    if not stat.S_ISREG(info.st_mode):
        raise OSError(errno.EINVAL, "not a regular file", str(path))

    handle = await asyncio.to_thread(open, path, "rb")
    try:
        size = (await asyncio.to_thread(os.fstat, handle.fileno())).st_size
    except BaseException:
        handle.close()
        raise
    return handle, size


async def iter_file(
    handle: BinaryIO,
    size: int,
    trailer: bytes = b"",
    chunk_size: int = CHUNK_SIZE,
) -> AsyncIterator[bytes]:
    """Yield at most ``size`` bytes of the file in order, then ``trailer``.

    Bytes appended after the size was taken are not sent, so the body never
    outgrows its Content-Length. The handle is always closed.
    """

    remaining = size
    try:
        while remaining > 0:
            chunk = await asyncio.to_thread(handle.read, min(chunk_size, remaining))
            if not chunk:
                break
            remaining -= len(chunk)
            yield chunk
        if trailer:
            yield trailer
    finally:
        handle.close()


async def stream_file(path: Path, config: Config) -> StreamingResponse:
    media_type = mime_for(path)
    handle, size = await open_regular_file(path)
    length = size
    try:
        trailer = b""
        if is_html(path):
            trailer = render_livereload_script(config.ws_port).encode("utf-8")
            length += len(trailer)
    except BaseException:
        handle.close()
        raise

    logger.debug("streaming %s (%d bytes, %s)", path, length, media_type)
    headers = {
        "content-length": str(length),
        "content-type": media_type,
    }
    return StreamingResponse(iter_file(handle, size, trailer), status_code=200, headers=headers)


__all__ = ["CHUNK_SIZE", "is_html", "iter_file", "open_regular_file", "stream_file"]

"""Mapping of request targets onto files below the root directory."""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from urllib.parse import unquote_to_bytes

from .errors import PathOutsideRoot, UriNotAbsolute, UriNotUtf8

logger = logging.getLogger(__name__)

INDEX_FILE = "index.html"


def resolve_request_path(uri: str, root_dir: str | Path) -> Path:
    """Map a raw (percent-encoded) request path to a path under ``root_dir``.

    Any query component is dropped, the path is decoded as UTF-8 and joined
    onto the root. The result is normalized lexically and must stay inside
    the root; symlinks are not followed here.
    """

    logger.debug("raw URI: %s", uri)
    request_path = uri.split("?", 1)[0]
    try:
        decoded = unquote_to_bytes(request_path).decode("utf-8")
    except UnicodeDecodeError as exc:
        logger.error("non utf-8 URL: %s", request_path)
        raise UriNotUtf8() from exc

    if not decoded.startswith("/"):
        logger.warning("found non-absolute path %s", decoded)
        raise UriNotAbsolute()

    root = os.path.abspath(root_dir)
    candidate = os.path.normpath(os.path.join(root, decoded[1:]))
    if candidate != root and not candidate.startswith(root.rstrip(os.sep) + os.sep):
        logger.warning("rejecting %s: outside of %s", decoded, root)
        raise PathOutsideRoot()

    path = Path(candidate)
    logger.debug("URL -> path: %s -> %s", uri, path)
    return path


async def resolve_with_index(uri: str, root_dir: str | Path) -> Path:
    """Like :func:`resolve_request_path`, but directories map to their index file."""

    path = resolve_request_path(uri, root_dir)
    if await asyncio.to_thread(path.is_dir):
        path = path / INDEX_FILE
        logger.debug("trying %s for directory URL", path)
    else:
        logger.debug("trying path as from URL")
    return path


__all__ = ["INDEX_FILE", "resolve_request_path", "resolve_with_index"]

"""Trailing-slash redirects for directory URLs.

Browsers only treat a URL as a directory when it ends in ``/``. Serving
``docs/index.html`` at ``/docs`` would resolve every relative link in it
against ``/`` instead of ``/docs/``, so such requests are redirected first.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from fastapi.responses import Response

from .paths import resolve_request_path

logger = logging.getLogger(__name__)


async def maybe_redirect(
    path: str,
    query: str,
    root_dir: str | Path,
) -> Response | None:
    """Return a 302 to ``path + "/"`` when ``path`` names a directory."""

    if path.endswith("/"):
        return None
    logger.debug("path does not end with /")
    local = resolve_request_path(path, root_dir)
    if not await asyncio.to_thread(local.is_dir):
        return None

    location = f"{path}/"
    if query:
        location = f"{location}?{query}"
    logger.info("redirecting %s to %s", f"{path}?{query}" if query else path, location)
    # Location is sent byte for byte as the client spelled the path and query.
    return Response(status_code=302, headers={"location": location})


__all__ = ["maybe_redirect"]

"""Content-type lookup by file extension."""

from __future__ import annotations

import mimetypes
from pathlib import Path

OCTET_STREAM = "application/octet-stream"

# Web types that platform mime tables are known to miss or get wrong.
_OVERRIDES = {
    ".js": "text/javascript",
    ".mjs": "text/javascript",
    ".wasm": "application/wasm",
    ".webmanifest": "application/manifest+json",
    ".webp": "image/webp",
    ".avif": "image/avif",
    ".woff": "font/woff",
    ".woff2": "font/woff2",
}

_COMPRESSED = {
    "gzip": "application/gzip",
    "bzip2": "application/x-bzip2",
    "xz": "application/x-xz",
    "br": "application/x-brotli",
    "compress": "application/x-compress",
}


def mime_for(path: str | Path) -> str:
    """Return the content type for ``path``, or ``application/octet-stream``."""

    name = Path(path).name
    suffix = Path(name).suffix.lower()
    if suffix in _OVERRIDES:
        return _OVERRIDES[suffix]
    media_type, encoding = mimetypes.guess_type(name, strict=False)
    if encoding is not None:
        return _COMPRESSED.get(encoding, OCTET_STREAM)
    return media_type or OCTET_STREAM


__all__ = ["mime_for", "OCTET_STREAM"]

"""Error types raised while resolving and serving requests.

Two kinds of failures flow through the server. *Semantic* errors are the
subclasses of :class:`DevServerError` below; they describe something specific
to this application (a malformed request target, a template that would not
render). Infrastructure failures, most importantly filesystem errors, are left
as the built-in :class:`OSError` family and are wrapped with ``raise ... from``
only where extra meaning is added.

The request handler classifies errors by their top-level type alone: an
``OSError`` becomes a 404, everything else a 500.
"""

from __future__ import annotations

import logging
from typing import Iterator

logger = logging.getLogger(__name__)


class DevServerError(Exception):
    """Base class for the server's semantic errors."""

    message = "dev server error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)


class UriNotAbsolute(DevServerError):
    message = "requested URI is not an absolute path"


class UriNotUtf8(DevServerError):
    message = "requested URI is not UTF-8"


class PathOutsideRoot(DevServerError):
    message = "requested path escapes the root directory"


class TemplateRenderError(DevServerError):
    message = "failed to render template"


class AddrParseError(DevServerError):
    message = "failed to parse IP address"


def error_chain(exc: BaseException) -> Iterator[BaseException]:
    """Yield ``exc`` followed by every exception it wraps."""

    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        if current.__cause__ is not None:
            current = current.__cause__
        elif not current.__suppress_context__:
            current = current.__context__
        else:
            current = None


def log_error_chain(exc: BaseException) -> None:
    chain = error_chain(exc)
    logger.error("error: %s", next(chain))
    for cause in chain:
        logger.error("caused by: %s", cause)


__all__ = [
    "DevServerError",
    "UriNotAbsolute",
    "UriNotUtf8",
    "PathOutsideRoot",
    "TemplateRenderError",
    "AddrParseError",
    "error_chain",
    "log_error_chain",
]

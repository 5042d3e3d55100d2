from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse, Response
from starlette.types import Receive, Scope, Send

from . import __version__
from .config import Config
from .errors import log_error_chain
from .pages import render_error
from .paths import resolve_with_index
from .redirects import maybe_redirect
from .streaming import stream_file

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Unsupported:
    status_code: int
    headers: dict[str, str]


def unsupported_request(request: Request) -> Unsupported | None:
    # https://tools.ietf.org/html/rfc7231#section-6.5.5
    if request.method != "GET":
        return Unsupported(status_code=405, headers={"Allow": "GET"})
    return None


def request_target(request: Request) -> tuple[str, str]:
    """Return the raw, still percent-encoded path and query of ``request``."""

    raw_path = request.scope.get("raw_path")
    if raw_path:
        path = raw_path.split(b"?", 1)[0].decode("latin-1")
    else:
        path = request.url.path
    query = request.scope.get("query_string", b"").decode("latin-1")
    return path, query


async def serve(request: Request) -> Response:
    """Answer one request. Errors become error pages and never propagate."""

    config: Config = request.app.state.config
    try:
        return await serve_or_error(request, config)
    except Exception as exc:
        return transform_error(exc)


async def serve_or_error(request: Request, config: Config) -> Response:
    unsupported = unsupported_request(request)
    if unsupported is not None:
        return render_error(unsupported.status_code, unsupported.headers)
    return await serve_file(request, config)


async def serve_file(request: Request, config: Config) -> Response:
    path, query = request_target(request)
    redirect = await maybe_redirect(path, query, config.root_dir)
    if redirect is not None:
        return redirect
    local = await resolve_with_index(path, config.root_dir)
    return await stream_file(local, config)


def transform_error(exc: Exception) -> Response:
    try:
        if isinstance(exc, OSError):
            logger.debug("%s", exc)
            status = 404
        else:
            log_error_chain(exc)
            status = 500
        return render_error(status)
    except Exception as fallback:
        logger.error("unexpected internal error: %s", fallback)
        return PlainTextResponse(f"unexpected internal error: {fallback}", status_code=500)


class ServeEndpoint:
    """ASGI wrapper around :func:`serve` accepting every HTTP method."""

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        response = await serve(Request(scope, receive))
        await response(scope, receive, send)


def create_app(config: Config) -> FastAPI:
    app = FastAPI(
        title="devserver",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.config = config
    # An ASGI endpoint gets no method filter from the router; serve answers 405.
    app.add_route("/{path:path}", ServeEndpoint(), include_in_schema=False)
    return app


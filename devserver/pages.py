"""HTML rendering: error pages and the live-reload client script."""

from __future__ import annotations

from functools import lru_cache
from http import HTTPStatus
from pathlib import Path
from typing import Mapping

from fastapi.responses import Response
from jinja2 import Environment, FileSystemLoader, TemplateError, select_autoescape

from .errors import TemplateRenderError

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
ERROR_TEMPLATE = "error.html"
LIVERELOAD_TEMPLATE = "livereload.html"


@lru_cache(maxsize=1)
def template_env() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=select_autoescape(["html", "xml"]),
        keep_trailing_newline=True,
    )


def render_html(name: str, **context: object) -> str:
    try:
        return template_env().get_template(name).render(**context)
    except TemplateError as exc:
        raise TemplateRenderError() from exc


def status_title(status: int) -> str:
    try:
        return f"{status} {HTTPStatus(status).phrase}"
    except ValueError:
        return str(status)


def render_error_html(status: int) -> str:
    return render_html(ERROR_TEMPLATE, title=status_title(status), body="")


def render_livereload_script(port: int) -> str:
    return render_html(LIVERELOAD_TEMPLATE, port=port)


def render_error(status: int, headers: Mapping[str, str] | None = None) -> Response:
    """Build an HTML error response, merging ``headers`` into the defaults."""

    body = render_error_html(status).encode("utf-8")
    merged = {key.lower(): value for key, value in (headers or {}).items()}
    merged["content-length"] = str(len(body))
    merged["content-type"] = "text/html"
    return Response(body, status_code=status, headers=merged)


__all__ = [
    "render_error",
    "render_error_html",
    "render_html",
    "render_livereload_script",
    "status_title",
    "template_env",
]

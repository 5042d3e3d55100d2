"""A static file server for local development, with live reload."""

__version__ = "0.1.0"

from .config import Config  # noqa: E402

__all__ = ["Config", "__version__"]

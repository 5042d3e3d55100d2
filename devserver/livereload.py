"""The live-reload channel: a WebSocket endpoint plus a root-directory watcher.

Browsers load a small script (see ``templates/livereload.html``) that keeps a
socket open to this endpoint and reloads the page on a ``reload`` message.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from watchfiles import awatch

from . import __version__

logger = logging.getLogger(__name__)

HELLO = "hello"
RELOAD = "reload"


class ReloadHub:
    """Tracks connected browsers."""

    def __init__(self) -> None:
        self._clients: set[WebSocket] = set()

    def __len__(self) -> int:
        return len(self._clients)

    def add(self, websocket: WebSocket) -> None:
        self._clients.add(websocket)

    def discard(self, websocket: WebSocket) -> None:
        self._clients.discard(websocket)

    async def broadcast(self, message: str = RELOAD) -> int:
        delivered = 0
        for websocket in list(self._clients):
            try:
                await websocket.send_text(message)
            except Exception as exc:
                logger.debug("dropping live-reload client: %s", exc)
                self.discard(websocket)
            else:
                delivered += 1
        return delivered


def create_livereload_app(hub: ReloadHub) -> FastAPI:
    app = FastAPI(
        title="devserver live-reload",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.hub = hub

    @app.websocket("/")
    async def livereload(websocket: WebSocket) -> None:
        await websocket.accept()
        hub.add(websocket)
        logger.debug("live-reload client connected (%d total)", len(hub))
        try:
            await websocket.send_text(HELLO)
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    break
        except WebSocketDisconnect:
            pass
        finally:
            hub.discard(websocket)
            logger.debug("live-reload client disconnected (%d left)", len(hub))

    return app


async def watch_root(
    root: Path,
    hub: ReloadHub,
    stop_event: asyncio.Event | None = None,
) -> None:
    """Broadcast ``reload`` whenever something under ``root`` changes."""

    logger.debug("watching %s for changes", root)
    async for changes in awatch(root, stop_event=stop_event):
        logger.info("%d change(s) detected, reloading browsers", len(changes))
        for change, path in sorted(changes, key=lambda item: item[1]):
            logger.debug("%s %s", change.name, path)
        reached = await hub.broadcast(RELOAD)
        logger.debug("reload sent to %d client(s)", reached)


__all__ = ["HELLO", "RELOAD", "ReloadHub", "create_livereload_app", "watch_root"]

"""WebSocket-based live reload for development mode.

Monitors the TOC file for changes and notifies connected clients via
WebSocket so they can fetch the updated navigation.
"""

import asyncio
import json
import logging
import weakref
from pathlib import Path

from aiohttp import WSMsgType, web
from watchfiles import Change, awatch

from guidenav.core.source import TocLoader

logger = logging.getLogger(__name__)


class LiveReloadManager:
    """Manages WebSocket connections and TOC file watching.

    Invalidates the loader's cached tree on each change before notifying
    clients, so the next navigation request reads the new content.
    """

    def __init__(self, loader: TocLoader) -> None:
        self._loader = loader
        self._toc_file = loader.toc_file.resolve()
        self._connections: weakref.WeakSet[web.WebSocketResponse] = weakref.WeakSet()
        self._watch_task: asyncio.Task[None] | None = None

    async def start(self) -> None:
        """Start the file watcher."""
        if self._watch_task is not None:
            return
        self._watch_task = asyncio.create_task(self._watch_files())

    async def stop(self) -> None:
        """Stop the file watcher and close all connections."""
        if self._watch_task is not None:
            self._watch_task.cancel()
            try:
                await self._watch_task
            except asyncio.CancelledError:
                pass
            self._watch_task = None

        for ws in list(self._connections):
            await ws.close()

    async def handle_websocket(self, request: web.Request) -> web.WebSocketResponse:
        """Handle WebSocket connection for live reload."""
        ws = web.WebSocketResponse()
        await ws.prepare(request)

        self._connections.add(ws)

        try:
            async for msg in ws:
                if msg.type == WSMsgType.ERROR:
                    break
        finally:
            self._connections.discard(ws)

        return ws

    async def _watch_files(self) -> None:
        """Watch the TOC file's directory and broadcast reload events."""
        async for changes in awatch(self._toc_file.parent):
            if any(self.is_toc_change(change, path) for change, path in changes):
                logger.info(f"Navigation source changed: {self._toc_file}")
                self._loader.invalidate()
                await self._broadcast_reload()

    def is_toc_change(self, change: Change, path_str: str) -> bool:
        """Whether a watcher event concerns the TOC file."""
        if change == Change.deleted:
            return False
        return Path(path_str).resolve() == self._toc_file

    async def _broadcast_reload(self) -> None:
        """Broadcast reload event to all connected clients."""
        if not self._connections:
            return

        message = json.dumps({"type": "reload", "path": str(self._loader.toc_file)})

        for ws in list(self._connections):
            if ws.closed:
                continue
            try:
                await ws.send_str(message)
            except ConnectionResetError:
                # Client disconnected mid-send, will be cleaned up by WeakSet
                pass


def create_live_reload_routes(manager: LiveReloadManager) -> list[web.RouteDef]:
    return [web.get("/ws/live-reload", manager.handle_websocket)]

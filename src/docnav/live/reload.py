"""WebSocket-based live reload for development mode.

Monitors the manifest files for changes, rebuilds the site snapshot and
notifies connected clients via WebSocket.
"""

import asyncio
import json
import logging
import weakref
from pathlib import Path

from aiohttp import WSMsgType, web
from watchfiles import Change, awatch

from docnav.core.errors import DocnavError
from docnav.core.site import SiteLoader

logger = logging.getLogger(__name__)


class LiveReloadManager:
    """Manages WebSocket connections and file watching for live reload.

    Each detected change triggers a full rebuild. A successful rebuild
    replaces the loader's snapshot; a failed one leaves the previous
    snapshot in service and reports the error to clients.
    """

    def __init__(self, loader: SiteLoader) -> None:
        """Initialize the live reload manager.

        Args:
            loader: SiteLoader whose manifest files are watched
        """
        self._loader = loader
        self._watch_paths = [path.resolve() for path in loader.watch_paths]
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
        """Handle WebSocket connection for live reload.

        Args:
            request: aiohttp request

        Returns:
            WebSocket response
        """
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
        """Watch manifest directories and rebuild on relevant changes."""
        directories = {path.parent for path in self._watch_paths}
        async for changes in awatch(*directories):
            if any(self._is_relevant(change, path) for change, path in changes):
                await self.rebuild()

    def _is_relevant(self, change: Change, path_str: str) -> bool:
        if change == Change.deleted:
            return False
        return Path(path_str).resolve() in self._watch_paths

    async def rebuild(self) -> bool:
        """Rebuild the site and broadcast the outcome.

        Returns:
            True if the new snapshot is in service
        """
        try:
            site = self._loader.reload()
        except DocnavError as e:
            logger.error(f"Site rebuild failed, keeping previous snapshot: {e}")
            await self._broadcast({"type": "error", "message": str(e)})
            return False

        logger.info(f"Site rebuilt with {len(site.registry)} documents")
        await self._broadcast({"type": "reload"})
        return True

    async def _broadcast(self, payload: dict[str, str]) -> None:
        """Broadcast an event to all connected clients."""
        if not self._connections:
            return

        message = json.dumps(payload)

        for ws in list(self._connections):
            if ws.closed:
                continue
            try:
                await ws.send_str(message)
            except ConnectionResetError:
                # Client disconnected mid-send, will be cleaned up by WeakSet
                pass


def create_live_reload_routes(manager: LiveReloadManager) -> list[web.RouteDef]:
    """Create routes for live reload WebSocket.

    Args:
        manager: LiveReloadManager instance

    Returns:
        List of route definitions
    """
    return [web.get("/ws/live-reload", manager.handle_websocket)]

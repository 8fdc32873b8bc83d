"""
Real-time broadcast to connected clients.

``ConnectionHub`` keeps the set of open WebSocket connections and pushes
each event to all of them. ``publish`` is synchronous so it can be called
from request worker threads; delivery is scheduled on the server event
loop and never awaited by the caller.
"""

import asyncio
import json
from datetime import datetime, timezone
from typing import Any, Optional, Protocol

from fastapi import WebSocket

from stockapp.logging import get_logger

logger = get_logger("notifications.broadcaster")


class Broadcaster(Protocol):
    def publish(self, event_name: str, payload: Any) -> None: ...


class NullBroadcaster:
    """Broadcaster with no subscribers."""

    def publish(self, event_name: str, payload: Any) -> None:
        logger.debug("broadcast_skipped", event_name=event_name)


def encode_event(event_name: str, payload: Any) -> str:
    return json.dumps(
        {
            "event": event_name,
            "payload": payload,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
        default=str,
    )


class ConnectionHub:
    """Manages WebSocket connections and event broadcasting."""

    def __init__(self) -> None:
        self._connections: set[WebSocket] = set()
        self._lock = asyncio.Lock()
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def bind_loop(self, loop: asyncio.AbstractEventLoop) -> None:
        """Remember the event loop that owns the connections."""
        self._loop = loop

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        async with self._lock:
            self._connections.add(websocket)
        logger.info("hub_client_connected", connections=len(self._connections))

    async def disconnect(self, websocket: WebSocket) -> None:
        async with self._lock:
            self._connections.discard(websocket)
        logger.info("hub_client_disconnected", connections=len(self._connections))

    async def broadcast(self, event_name: str, payload: Any) -> int:
        """Send one event to every connection; returns how many sends succeeded."""
        message = encode_event(event_name, payload)
        async with self._lock:
            connections = list(self._connections)

        delivered = 0
        for websocket in connections:
            try:
                await websocket.send_text(message)
                delivered += 1
            except Exception as e:
                logger.debug("hub_send_failed", event_name=event_name, error=str(e))
                await self.disconnect(websocket)
        return delivered

    def publish(self, event_name: str, payload: Any) -> None:
        """Schedule a broadcast from any thread without waiting for it."""
        loop = self._loop
        if loop is None or loop.is_closed():
            logger.debug("broadcast_no_loop", event_name=event_name)
            return

        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is loop:
            loop.create_task(self.broadcast(event_name, payload))
        else:
            asyncio.run_coroutine_threadsafe(self.broadcast(event_name, payload), loop)
        logger.debug("broadcast_scheduled", event_name=event_name)

    @property
    def connection_count(self) -> int:
        return len(self._connections)


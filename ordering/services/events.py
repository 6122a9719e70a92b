"""Admin event fan-out: newOrder, orderStatusUpdate, orderCompleted."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from fastapi import WebSocket

logger = logging.getLogger(__name__)

NEW_ORDER: str = "newOrder"
ORDER_STATUS_UPDATE: str = "orderStatusUpdate"
ORDER_COMPLETED: str = "orderCompleted"

EventListener = Callable[[str, dict[str, Any]], None]


class EventBroadcaster:
    """Observer list. A failing listener never affects the caller or other listeners."""

    def __init__(self) -> None:
        self._listeners: list[EventListener] = []

    def subscribe(self, listener: EventListener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: EventListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def publish(self, event: str, payload: dict[str, Any]) -> None:
        for listener in list(self._listeners):
            try:
                listener(event, payload)
            except Exception:
                logger.exception("[EVENTS] Listener failed for %s", event)


class AdminSocketHub:
    """Pushes events to connected admin websockets.

    Publishing happens from worker threads, so messages are handed to the
    event loop captured with :meth:`bind_loop`.
    """

    def __init__(self) -> None:
        self.active_sockets: set[WebSocket] = set()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._pending: set[asyncio.Task] = set()

    def bind_loop(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self.active_sockets.add(websocket)
        logger.info("[EVENTS] Admin socket connected (%s open)", len(self.active_sockets))

    def disconnect(self, websocket: WebSocket) -> None:
        self.active_sockets.discard(websocket)

    async def broadcast(self, message: dict[str, Any]) -> None:
        for websocket in list(self.active_sockets):
            try:
                await websocket.send_json(message)
            except Exception:
                logger.warning("[EVENTS] Dropping admin socket after failed send")
                self.active_sockets.discard(websocket)

    def __call__(self, event: str, payload: dict[str, Any]) -> None:
        if not self.active_sockets:
            return
        if self._loop is None or self._loop.is_closed():
            logger.warning("[EVENTS] No event loop bound; %s not pushed", event)
            return
        message = {"event": event, "data": payload}
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is self._loop:
            task = self._loop.create_task(self.broadcast(message))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)
        else:
            asyncio.run_coroutine_threadsafe(self.broadcast(message), self._loop)

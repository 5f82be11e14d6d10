# notifications.py
import asyncio
import json
import logging
from typing import Any, Dict

from starlette.websockets import WebSocketState

logger = logging.getLogger(__name__)

MAX_PENDING_EVENTS = 100

class AdminBroadcaster:
    """Live admin dashboard sockets and fire-and-forget fan-out to them.

    Connections are tracked by identity, so two dashboards opened by the same
    admin are two independent members. Each connection gets its own outbound
    queue drained by a sender task: ``broadcast`` only enqueues, so a stalled
    dashboard delays nobody but itself. A socket that is not open when an event
    goes out simply misses it, and a socket whose queue is full drops the event.
    """

    def __init__(self, max_pending: int = MAX_PENDING_EVENTS):
        self.max_pending = max_pending
        self._queues: Dict[Any, asyncio.Queue] = {}
        self._senders: Dict[Any, asyncio.Task] = {}

    def register(self, connection):
        """Must be called from a running event loop; starts the connection's sender task."""
        if connection in self._queues:
            return
        queue = asyncio.Queue(maxsize=self.max_pending)
        self._queues[connection] = queue
        self._senders[connection] = asyncio.get_running_loop().create_task(self._send_loop(connection, queue))
        logger.info("🔌 Admin connected (%d live)", len(self._queues))

    def unregister(self, connection):
        self._queues.pop(connection, None)
        sender = self._senders.pop(connection, None)
        if sender is not None:
            sender.cancel()
        logger.info("🔌 Admin disconnected (%d live)", len(self._queues))

    def __len__(self):
        return len(self._queues)

    def __contains__(self, connection):
        return connection in self._queues

    @staticmethod
    def _is_open(connection) -> bool:
        return (
            connection.client_state == WebSocketState.CONNECTED
            and connection.application_state == WebSocketState.CONNECTED
        )

    async def broadcast(self, event: Dict[str, Any]) -> int:
        """Queue one event for every open connection; returns how many accepted it."""
        message = json.dumps(event, default=str)
        queued = 0

        for connection, queue in list(self._queues.items()):
            if not self._is_open(connection):
                continue
            try:
                queue.put_nowait(message)
                queued += 1
            except asyncio.QueueFull:
                logger.warning("⚠️ Admin socket is %d events behind, dropping %s", queue.qsize(), event.get("type"))

        logger.info("📣 Broadcast %s to %d/%d admin sockets", event.get("type"), queued, len(self._queues))
        return queued

    async def _send_loop(self, connection, queue: asyncio.Queue):
        while True:
            message = await queue.get()
            try:
                if self._is_open(connection):
                    await connection.send_text(message)
            except Exception as e:
                # the socket's own close/error handler unregisters it
                logger.warning("⚠️ Dropped event for one admin socket: %s", e)
            finally:
                queue.task_done()

    async def drain(self, *connections):
        """Wait until queued events have been handed to the given sockets, or to all of them."""
        queues = [self._queues[c] for c in connections if c in self._queues] if connections else list(self._queues.values())
        await asyncio.gather(*(queue.join() for queue in queues))

    async def close(self):
        senders = list(self._senders.values())
        self._queues.clear()
        self._senders.clear()
        for sender in senders:
            sender.cancel()
        await asyncio.gather(*senders, return_exceptions=True)

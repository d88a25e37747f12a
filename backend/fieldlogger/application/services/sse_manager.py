"""SSE Manager — in-process broadcaster of merged-view updates to local clients."""

import asyncio
import json
import logging
from collections.abc import AsyncGenerator
from datetime import datetime, timezone
from typing import Any

logger = logging.getLogger(__name__)

HEARTBEAT_FRAME = ":heartbeat\n\n"


class SSEManager:
    """Fans merged-view snapshots out to connected EventSource clients.

    Messages follow the same shape as the remote stream: ``type``
    (``initial`` for the first frame a client receives, ``update`` after
    that) plus the snapshot payload and a ``timestamp``. Idle connections
    get a ``:heartbeat`` comment every ``heartbeat_seconds``.
    """

    def __init__(self, heartbeat_seconds: float = 15.0, max_queue_size: int = 100) -> None:
        self._heartbeat = heartbeat_seconds
        self._max_queue_size = max_queue_size
        self._queues: list[asyncio.Queue[str | None]] = []

    @staticmethod
    def format_message(message_type: str, data: dict[str, Any]) -> str:
        payload = {
            "type": message_type,
            **data,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        return f"data: {json.dumps(payload)}\n\n"

    async def subscribe(self, initial: dict[str, Any] | None = None) -> AsyncGenerator[str, None]:
        """Yield SSE frames until shutdown; unsubscribes when the client goes away."""
        queue: asyncio.Queue[str | None] = asyncio.Queue(maxsize=self._max_queue_size)
        self._queues.append(queue)
        try:
            if initial is not None:
                yield self.format_message("initial", initial)
            while True:
                try:
                    event = await asyncio.wait_for(queue.get(), timeout=self._heartbeat)
                except asyncio.TimeoutError:
                    yield HEARTBEAT_FRAME
                    continue
                if event is None:
                    break
                yield event
        finally:
            if queue in self._queues:
                self._queues.remove(queue)

    async def broadcast(self, data: dict[str, Any], message_type: str = "update") -> None:
        """Push one message to every connected client; drop clients that fell behind."""
        message = self.format_message(message_type, data)
        dead_queues: list[asyncio.Queue[str | None]] = []

        for queue in self._queues:
            try:
                queue.put_nowait(message)
            except asyncio.QueueFull:
                dead_queues.append(queue)
                logger.warning("SSE client queue full — disconnecting")

        for queue in dead_queues:
            self._queues.remove(queue)
            # Make room for the sentinel so the client's generator ends
            while not queue.empty():
                queue.get_nowait()
            queue.put_nowait(None)

    async def shutdown(self) -> None:
        """Disconnect all connected clients."""
        for queue in self._queues:
            while queue.full():
                queue.get_nowait()
            queue.put_nowait(None)
        self._queues.clear()

    @property
    def client_count(self) -> int:
        return len(self._queues)

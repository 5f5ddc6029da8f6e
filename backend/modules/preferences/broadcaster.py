"""
In-process pub/sub for feature-flag changes.

Each subscriber gets its own bounded queue. The SSE stream endpoint is the
main subscriber; it relays changes to other tabs and subdomains.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from .models import FlagChange

logger = logging.getLogger(__name__)


class FlagBroadcaster:
    def __init__(self, max_queue_size: int = 100) -> None:
        self._subscribers: set[asyncio.Queue] = set()
        self._max_queue_size = max_queue_size

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def publish(self, change: FlagChange) -> None:
        for queue in list(self._subscribers):
            try:
                queue.put_nowait(change)
            except asyncio.QueueFull:
                logger.warning(f"Dropping flag change {change.key} for a slow subscriber")

    @asynccontextmanager
    async def subscribe(self) -> AsyncIterator[asyncio.Queue]:
        """
        Register a queue for the duration of the context.

        Usage:
            async with broadcaster.subscribe() as queue:
                change = await queue.get()
        """
        queue: asyncio.Queue = asyncio.Queue(maxsize=self._max_queue_size)
        self._subscribers.add(queue)
        try:
            yield queue
        finally:
            self._subscribers.discard(queue)

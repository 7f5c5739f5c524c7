"""
Transfer Queue - unbounded FIFO hand-off of detected paths.

Bridges the watchdog observer thread to the single consumer task on the
event loop. Producers on other threads must use `put_threadsafe`, which
schedules the enqueue on the loop and returns immediately.

Capacity is unbounded: no event is dropped, at the cost of unbounded
memory growth under a sustained flood of files.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class TransferQueue:
    """Multi-producer, single-consumer queue of file paths."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._queue: "asyncio.Queue[str]" = asyncio.Queue()
        self._loop = loop

        self.stats: Dict[str, Any] = {
            'enqueued': 0,
            'dequeued': 0,
            'last_activity': None
        }

    def bind(self, loop: asyncio.AbstractEventLoop) -> None:
        """Attach the event loop that consumes this queue."""
        self._loop = loop

    def put_threadsafe(self, path: str) -> None:
        """Enqueue from any thread without blocking."""
        if self._loop is None:
            raise RuntimeError("TransferQueue is not bound to an event loop")
        self._loop.call_soon_threadsafe(self.put_nowait, path)

    def put_nowait(self, path: str) -> None:
        """Enqueue from the consuming loop's own thread."""
        self._queue.put_nowait(path)
        self.stats['enqueued'] += 1
        self.stats['last_activity'] = datetime.now()

    async def get(self) -> str:
        """Wait for and remove the next path."""
        path = await self._queue.get()
        self.stats['dequeued'] += 1
        self.stats['last_activity'] = datetime.now()
        return path

    def task_done(self) -> None:
        self._queue.task_done()

    async def join(self) -> None:
        """Wait until every enqueued path has been fully processed."""
        await self._queue.join()

    def qsize(self) -> int:
        return self._queue.qsize()

    def empty(self) -> bool:
        return self._queue.empty()

    def pending(self) -> List[str]:
        """Snapshot of paths not yet consumed, oldest first."""
        return list(self._queue._queue)

"""Per-source subscription over a bounded output queue."""
from __future__ import annotations

import asyncio


class Subscription:
    """The single consumer handle for one output source.

    ``next()`` waits for the following line; ``poll()`` returns it
    without waiting (``None`` when nothing is queued). Only the event
    loop's router should hold a subscription.
    """

    def __init__(self, source: str, queue: asyncio.Queue[str]) -> None:
        self._source = source
        self._queue = queue

    @property
    def source(self) -> str:
        return self._source

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    async def next(self) -> str:
        return await self._queue.get()

    def poll(self) -> str | None:
        try:
            return self._queue.get_nowait()
        except asyncio.QueueEmpty:
            return None

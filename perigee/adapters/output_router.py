"""Routes queued output lines from every source to the TUI.

Each source (one per interpreter session, one for the OSC listener)
has at most one outstanding wait for its next line. When a line
arrives it is wrapped into a typed event, handed to the sink on the
event loop, and the same source is waited on again. Per-source order
is preserved; nothing is promised across sources.
"""
from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable

from perigee.adapters.events import SESSION_SOURCE, SourceEvent, make_event
from perigee.engine.subscription import Subscription

logger = logging.getLogger(__name__)

# Signature: def sink(event) -> None, or an async equivalent.
EventSink = Callable[[SourceEvent], Awaitable[None] | None]


class OutputRouter:
    """One draining task per armed source, feeding a single sink."""

    def __init__(self, sink: EventSink) -> None:
        self._sink = sink
        self._sources: dict[str, tuple[Subscription, str]] = {}
        self._tasks: dict[str, asyncio.Task] = {}
        self.delivered: dict[str, int] = {}

    @property
    def sources(self) -> list[str]:
        return list(self._sources)

    def add_source(self, subscription: Subscription, kind: str = SESSION_SOURCE) -> None:
        """Register a source. It is not drained until :meth:`arm`."""
        source = subscription.source
        if source in self._sources:
            logger.warning("Output source already registered: %s", source)
            return
        self._sources[source] = (subscription, kind)
        self.delivered[source] = 0

    def is_armed(self, source: str) -> bool:
        task = self._tasks.get(source)
        return task is not None and not task.done()

    def arm(self, source: str) -> bool:
        """Start waiting on *source*. Returns False if it already is."""
        if source not in self._sources:
            raise KeyError(f"Unknown output source: {source}")
        if self.is_armed(source):
            return False
        self._tasks[source] = asyncio.create_task(
            self._drain(source), name=f"route-{source}"
        )
        logger.debug("Armed output source %s", source)
        return True

    def arm_all(self, kind: str | None = None) -> None:
        for source, (_, source_kind) in self._sources.items():
            if kind is None or kind == source_kind:
                self.arm(source)

    async def _drain(self, source: str) -> None:
        subscription, kind = self._sources[source]
        while True:
            line = await subscription.next()
            event = make_event(kind, source, line)
            try:
                result = self._sink(event)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                # A failing consumer must not stop the source from draining.
                logger.exception("Event sink failed for %s", source)
            self.delivered[source] += 1

    async def close(self) -> None:
        """Cancel every outstanding wait."""
        tasks = [t for t in self._tasks.values() if not t.done()]
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()

"""OSC network listener.

Receives Open Sound Control packets over UDP with python-osc and queues
a text rendering of every message sent to a handled address. The
listener favours UI liveness over completeness: when its bounded queue
is full the newest message is dropped and counted.

Messages are rendered as ``<address> ,<typetags> <args...>``, for
example ``/play ,ssfi kalimba a 0.5 1``.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any

from pythonosc.dispatcher import Dispatcher
from pythonosc.osc_server import AsyncIOOSCUDPServer

from .config import DEFAULT_QUEUE_CAPACITY, OSC_CONSOLE
from .subscription import Subscription

logger = logging.getLogger(__name__)

PLAY_ADDRESS = "/play"

# Largest value python-osc sends as a 32-bit "i" argument.
_INT32_MAX = 2**31 - 1


def typetag(value: Any) -> str:
    """OSC type tag for an argument as decoded by python-osc.

    Doubles decode to plain floats and chars to one-letter strings, so
    they are tagged ``f`` and ``s``.
    """
    if value is True:
        return "T"
    if value is False:
        return "F"
    if value is None:
        return "N"
    if isinstance(value, int):
        return "i" if -_INT32_MAX - 1 <= value <= _INT32_MAX else "h"
    if isinstance(value, float):
        return "f"
    if isinstance(value, str):
        return "s"
    if isinstance(value, bytes):
        return "b"
    if isinstance(value, list):
        return "[" + "".join(typetag(v) for v in value) + "]"
    if isinstance(value, tuple) and len(value) == 4:
        return "m"
    return "t"


def _format_arg(value: Any) -> str:
    if isinstance(value, bytes):
        return f"<blob {len(value)}>"
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return format(value, "g")
    if isinstance(value, list):
        return "[" + " ".join(_format_arg(v) for v in value) + "]"
    if isinstance(value, tuple):
        return "(" + " ".join(_format_arg(v) for v in value) + ")"
    return str(value)


def format_message(address: str, args: tuple[Any, ...] | list[Any]) -> str:
    """Render one decoded message as ``<address> ,<tags> <args...>``."""
    parts = [address, "," + "".join(typetag(a) for a in args)]
    parts.extend(_format_arg(a) for a in args)
    return " ".join(parts)


def parse_instrument(text: str) -> str | None:
    """Return the instrument name of a ``/play`` message rendering.

    Example: "/play ,ssffii kalimba a 0.5 1 1 0" -> "kalimba"
    """
    if PLAY_ADDRESS not in text:
        return None
    parts = text.split()
    if len(parts) < 3:
        return None
    return parts[2]


class OscServer:
    """UDP OSC listener feeding a bounded, drop-on-full queue."""

    def __init__(
        self,
        host: str = "127.0.0.1",
        port: int = 9191,
        *,
        addresses: list[str] | None = None,
        capacity: int = DEFAULT_QUEUE_CAPACITY,
        source: str = OSC_CONSOLE,
    ) -> None:
        self.host = host
        self.port = port
        self._queue: asyncio.Queue[str] = asyncio.Queue(maxsize=capacity)
        self._source = source
        self._dispatcher = Dispatcher()
        for address in addresses or [PLAY_ADDRESS]:
            self._dispatcher.map(address, self._on_message)
        self._transport: asyncio.BaseTransport | None = None
        self.dropped = 0
        self.received = 0

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"

    @property
    def listening(self) -> bool:
        return self._transport is not None

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def subscription(self) -> Subscription:
        return Subscription(self._source, self._queue)

    async def start(self) -> None:
        """Bind the UDP socket. OSError propagates (e.g. port in use)."""
        if self._transport is not None:
            return
        logger.info("Starting OSC server on %s", self.address)
        server = AsyncIOOSCUDPServer(
            (self.host, self.port), self._dispatcher, asyncio.get_running_loop()
        )
        transport, _ = await server.create_serve_endpoint()
        self._transport = transport
        if self.port == 0:
            self.port = transport.get_extra_info("sockname")[1]

    def close(self) -> None:
        if self._transport is not None:
            self._transport.close()
            self._transport = None
            logger.info("OSC server on %s closed", self.address)

    def handle_datagram(self, data: bytes) -> None:
        """Dispatch one raw packet; unparsable packets are ignored."""
        self._dispatcher.call_handlers_for_packet(data, (self.host, self.port))

    def _on_message(self, address: str, *args: Any) -> None:
        self.offer(format_message(address, args))

    def offer(self, text: str) -> bool:
        """Queue *text* without waiting; drop it when the queue is full."""
        try:
            self._queue.put_nowait(text)
        except asyncio.QueueFull:
            self.dropped += 1
            logger.warning(
                "dropped osc message (queue full, %d dropped so far): %s",
                self.dropped, text[:120],
            )
            return False
        self.received += 1
        return True

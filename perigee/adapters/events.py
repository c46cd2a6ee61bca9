"""Event types delivered from output sources to the TUI.

Every line read from a session queue or the OSC queue is wrapped in a
typed dataclass tagged with its source for safe consumption by the TUI.
"""
from __future__ import annotations

from dataclasses import dataclass

from perigee.engine.osc_server import parse_instrument

SESSION_SOURCE = "session"
NETWORK_SOURCE = "network"


@dataclass
class SourceEvent:
    """Base event: one line from one source."""
    event_type: str = ""
    source: str = ""
    line: str = ""


@dataclass
class SessionOutput(SourceEvent):
    event_type: str = "session_output"


@dataclass
class NetworkMessage(SourceEvent):
    event_type: str = "network_message"
    instrument: str | None = None


def make_event(kind: str, source: str, line: str) -> SourceEvent:
    """Wrap *line* from *source* into the event type for its source kind."""
    if kind == NETWORK_SOURCE:
        return NetworkMessage(
            source=source, line=line, instrument=parse_instrument(line)
        )
    if kind == SESSION_SOURCE:
        return SessionOutput(source=source, line=line)
    raise ValueError(f"Unknown source kind: {kind}")

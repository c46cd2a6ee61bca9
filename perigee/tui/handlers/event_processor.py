"""Event processor extracted from MainScreen.

Receives every event the output router delivers and updates the TUI:
the owning console and, for network events, the visuals overlay.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from perigee.adapters.events import NetworkMessage, SourceEvent

if TYPE_CHECKING:
    from perigee.tui.screens.main import MainScreen

logger = logging.getLogger(__name__)


class EventProcessor:
    """Processes source events on behalf of *MainScreen*.

    Keeps a back-reference to the screen so it can look up consoles and
    the overlay without owning them.
    """

    def __init__(self, screen: MainScreen) -> None:
        self._screen = screen
        self.unrouted = 0

    def handle(self, event: SourceEvent) -> None:
        s = self._screen
        console = s.consoles.get(event.source)
        if console is None:
            self.unrouted += 1
            logger.debug("No console for %s, dropping line", event.source)
        else:
            console.add_line(event.line)

        if isinstance(event, NetworkMessage) and s.controller.visuals_overlay:
            s.visuals.update_event(event)

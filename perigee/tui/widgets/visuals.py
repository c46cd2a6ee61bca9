"""Visuals overlay — network events rendered by a selectable visual.

Visuals are plain objects with no Textual dependency; ``VisualsView``
hosts the selected one, ticks it while the overlay is shown and renders
it as Rich text.
"""

from __future__ import annotations

import logging
import time
import zlib
from collections import deque
from dataclasses import dataclass

from rich.text import Text
from textual.timer import Timer
from textual.widget import Widget

from perigee.adapters.events import NetworkMessage

logger = logging.getLogger(__name__)

FRAME_SECONDS = 1 / 30

_PALETTE = ["magenta", "cyan", "green", "yellow", "red", "blue", "bright_magenta", "bright_cyan"]


class Visual:
    """Base visual: size, active flag and no-op hooks."""

    name = "visual"

    def __init__(self) -> None:
        self.width = 0
        self.height = 0
        self.active = False

    def set_size(self, width: int, height: int) -> None:
        self.width = max(width, 0)
        self.height = max(height, 0)

    def set_active(self, active: bool) -> None:
        self.active = active

    def reset(self) -> None:
        pass

    def update(self, event: NetworkMessage) -> None:
        pass

    def tick(self, now: float) -> None:
        pass

    def render(self) -> Text:
        return Text("")


@dataclass
class Pulse:
    instrument: str
    row: int
    col: int
    color: str
    created_at: float


class PulsesVisual(Visual):
    """One fading mark per instrument hit, placed by instrument name."""

    name = "pulses"
    lifetime = 1.0

    def __init__(self, clock=time.monotonic) -> None:
        super().__init__()
        self._clock = clock
        self.pulses: dict[str, Pulse] = {}

    def reset(self) -> None:
        self.pulses.clear()

    def update(self, event: NetworkMessage) -> None:
        if not self.active or not event.instrument:
            return
        instrument = event.instrument
        digest = zlib.crc32(instrument.encode("utf-8"))
        self.pulses[instrument] = Pulse(
            instrument=instrument,
            row=digest % max(self.height, 1),
            col=(digest >> 8) % max(self.width - len(instrument), 1),
            color=_PALETTE[digest % len(_PALETTE)],
            created_at=self._clock(),
        )

    def tick(self, now: float) -> None:
        expired = [
            name for name, pulse in self.pulses.items()
            if now - pulse.created_at > self.lifetime
        ]
        for name in expired:
            del self.pulses[name]

    def render(self) -> Text:
        now = self._clock()
        rows: list[list[tuple[int, Pulse]]] = [[] for _ in range(self.height)]
        for pulse in self.pulses.values():
            if pulse.row < self.height:
                rows[pulse.row].append((pulse.col, pulse))

        out = Text()
        for i, row in enumerate(rows):
            cursor = 0
            for col, pulse in sorted(row, key=lambda item: item[0]):
                if col < cursor:
                    continue
                out.append(" " * (col - cursor))
                age = now - pulse.created_at
                style = f"bold {pulse.color}" if age < self.lifetime / 2 else f"dim {pulse.color}"
                label = f"● {pulse.instrument}"[: max(self.width - col, 0)]
                out.append(label, style=style)
                cursor = col + len(label)
            if i < len(rows) - 1:
                out.append("\n")
        return out


class MessageLogVisual(Visual):
    """The most recent raw network messages, newest last."""

    name = "log"

    def __init__(self, limit: int = 200) -> None:
        super().__init__()
        self.messages: deque[str] = deque(maxlen=limit)

    def reset(self) -> None:
        self.messages.clear()

    def update(self, event: NetworkMessage) -> None:
        if self.active:
            self.messages.append(event.line)

    def render(self) -> Text:
        visible = list(self.messages)[-self.height:] if self.height else []
        return Text("\n".join(line[: self.width] for line in visible), style="green")


class VisualRegistry:
    """Named visuals with a single selected one."""

    def __init__(self, visuals: list[Visual] | None = None) -> None:
        self._visuals: dict[str, Visual] = {}
        self._selected: Visual | None = None
        for visual in visuals or []:
            self.register(visual)

    @classmethod
    def default(cls) -> VisualRegistry:
        return cls([PulsesVisual(), MessageLogVisual()])

    @property
    def names(self) -> list[str]:
        return list(self._visuals)

    @property
    def selected(self) -> Visual | None:
        return self._selected

    def register(self, visual: Visual) -> None:
        self._visuals[visual.name] = visual

    def select(self, name: str) -> Visual:
        """Make *name* the selected visual. Raises KeyError if unknown."""
        visual = self._visuals[name]
        if self._selected is not None and self._selected is not visual:
            self._selected.set_active(False)
        self._selected = visual
        visual.set_active(True)
        visual.reset()
        return visual

    def set_size(self, width: int, height: int) -> None:
        for visual in self._visuals.values():
            visual.set_size(width, height)


class VisualsView(Widget):
    """Overlay panel hosting the selected visual."""

    def __init__(self, registry: VisualRegistry, visual: str = PulsesVisual.name, **kwargs) -> None:
        super().__init__(**kwargs)
        self.registry = registry
        try:
            registry.select(visual)
        except KeyError:
            logger.warning("Unknown visual %r, using %s", visual, registry.names[0])
            registry.select(registry.names[0])
        self.border_title = "visuals"
        self._timer: Timer | None = None

    @property
    def visual(self) -> Visual | None:
        return self.registry.selected

    def reset(self) -> None:
        if self.visual is not None:
            self.visual.reset()
        self.refresh()

    def update_event(self, event: NetworkMessage) -> None:
        if self.visual is not None:
            self.visual.update(event)

    def set_running(self, running: bool) -> None:
        """Tick at frame rate while shown; stop when hidden."""
        if running and self._timer is None:
            self._timer = self.set_interval(FRAME_SECONDS, self._tick)
        elif not running and self._timer is not None:
            self._timer.stop()
            self._timer = None

    def _tick(self) -> None:
        if self.visual is not None:
            self.visual.tick(time.monotonic())
        self.refresh()

    def on_resize(self) -> None:
        self.registry.set_size(self.content_size.width, self.content_size.height)

    def render(self) -> Text:
        if self.visual is None:
            return Text("No active visuals", style="dim")
        return self.visual.render()

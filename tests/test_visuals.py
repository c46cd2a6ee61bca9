"""Tests for the visual registry and built-in visuals."""

from __future__ import annotations

import pytest

from perigee.adapters.events import NetworkMessage
from perigee.tui.widgets.visuals import (
    MessageLogVisual,
    PulsesVisual,
    VisualRegistry,
)


class _Clock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


def _play(instrument: str) -> NetworkMessage:
    return NetworkMessage(
        source="osc", line=f"/play ,s {instrument}", instrument=instrument
    )


def test_registry_selects_one_visual():
    registry = VisualRegistry.default()
    assert registry.names == ["pulses", "log"]

    pulses = registry.select("pulses")
    assert registry.selected is pulses and pulses.active

    log = registry.select("log")
    assert registry.selected is log
    assert log.active and not pulses.active

    with pytest.raises(KeyError):
        registry.select("fireworks")


def test_pulses_fade_after_lifetime():
    clock = _Clock()
    visual = PulsesVisual(clock=clock)
    visual.set_size(40, 10)
    visual.set_active(True)

    visual.update(_play("kalimba"))
    visual.update(_play("bd"))
    assert set(visual.pulses) == {"kalimba", "bd"}
    assert "kalimba" in visual.render().plain

    clock.now += 0.5
    visual.tick(clock.now)
    assert len(visual.pulses) == 2

    clock.now += 0.6
    visual.tick(clock.now)
    assert visual.pulses == {}


def test_inactive_visual_ignores_events():
    visual = PulsesVisual()
    visual.set_size(20, 5)
    visual.update(_play("bd"))
    assert visual.pulses == {}


def test_pulse_positions_stay_inside_the_panel():
    visual = PulsesVisual()
    visual.set_size(12, 3)
    visual.set_active(True)
    for name in ("bd", "sn", "hh", "superpiano", "kalimba"):
        visual.update(_play(name))
    for pulse in visual.pulses.values():
        assert 0 <= pulse.row < 3
        assert 0 <= pulse.col < 12
    assert len(visual.render().plain.split("\n")) == 3


def test_reset_clears_state():
    visual = PulsesVisual()
    visual.set_size(20, 5)
    visual.set_active(True)
    visual.update(_play("bd"))
    visual.reset()
    assert visual.pulses == {}


def test_message_log_keeps_recent_lines():
    visual = MessageLogVisual(limit=3)
    visual.set_size(80, 2)
    visual.set_active(True)
    for name in ("a", "b", "c", "d"):
        visual.update(_play(name))

    assert list(visual.messages) == ["/play ,s b", "/play ,s c", "/play ,s d"]
    assert visual.render().plain == "/play ,s c\n/play ,s d"

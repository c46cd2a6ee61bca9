"""Tests for the focus state machine."""

from __future__ import annotations

import pytest

from perigee.engine.config import KeyMap
from perigee.shared.models.focus import Focus, FocusKind
from perigee.tui.handlers.focus_controller import FocusController

CONSOLES = ["tidal", "sclang", "osc"]


@pytest.fixture
def controller() -> FocusController:
    return FocusController(KeyMap(), CONSOLES)


def _assert_single_focus(c: FocusController) -> None:
    focus = c.focus
    assert isinstance(focus.kind, FocusKind)
    assert (focus.kind is FocusKind.CONSOLE) == (focus.console is not None)
    if focus.kind is FocusKind.CONSOLE:
        assert focus.console == c.active_console


def test_starts_in_editor_with_nothing_visible(controller):
    assert controller.focus == Focus.editor()
    assert controller.active_console is None
    assert not controller.visuals_overlay
    assert not controller.sample_browser_visible


def test_console_toggle_twice_returns_to_editor(controller):
    outcome = controller.handle_key("ctrl+t", editor_editing=False)
    assert outcome.handled and outcome.relayout
    assert controller.focus == Focus.of_console("tidal")
    assert controller.active_console == "tidal"

    controller.handle_key("ctrl+t", editor_editing=False)
    assert controller.focus == Focus.editor()
    assert controller.active_console is None


def test_showing_a_console_hides_the_other(controller):
    controller.handle_key("ctrl+t", editor_editing=False)
    controller.handle_key("ctrl+l", editor_editing=False)

    assert controller.active_console == "sclang"
    assert controller.focus == Focus.of_console("sclang")


def test_guard_routes_every_key_to_editing_editor(controller):
    for key in ("ctrl+t", "ctrl+p", "ctrl+c", "2", "escape"):
        outcome = controller.handle_key(key, editor_editing=True)
        assert not outcome.handled
        assert not outcome.quit
    assert controller.focus == Focus.editor()
    assert controller.active_console is None


def test_guard_only_applies_to_editor_focus(controller):
    controller.handle_key("ctrl+t", editor_editing=False)
    outcome = controller.handle_key("escape", editor_editing=True)
    assert outcome.handled
    assert controller.focus == Focus.editor()


def test_quit_keys(controller):
    assert controller.handle_key("ctrl+c", editor_editing=False).quit
    assert controller.handle_key("ctrl+q", editor_editing=False).quit


def test_unbound_key_is_not_handled(controller):
    outcome = controller.handle_key("z", editor_editing=False)
    assert not outcome.handled


def test_focus_console_without_open_console_reports_status(controller):
    outcome = controller.handle_key("2", editor_editing=False)
    assert outcome.handled
    assert outcome.status == "no console open"
    assert controller.focus == Focus.editor()


def test_focus_console_returns_to_shown_console(controller):
    controller.handle_key("ctrl+t", editor_editing=False)
    controller.handle_key("escape", editor_editing=False)
    assert controller.active_console == "tidal"
    assert controller.focus == Focus.editor()

    controller.handle_key("2", editor_editing=False)
    assert controller.focus == Focus.of_console("tidal")


def test_unknown_console_leaves_focus_unchanged(controller):
    outcome = controller.select_console("supernova")
    assert outcome.handled
    assert "supernova" in outcome.status
    assert controller.focus == Focus.editor()


def test_network_console_requests_draining(controller):
    outcome = controller.handle_key("ctrl+o", editor_editing=False)
    assert outcome.drain_network
    assert controller.network_console_visible()

    outcome = controller.handle_key("ctrl+t", editor_editing=False)
    assert not outcome.drain_network
    assert not controller.network_console_visible()


def test_visuals_toggle_keeps_focus_and_resets_once(controller):
    controller.handle_key("ctrl+t", editor_editing=False)

    first = controller.handle_key("ctrl+p", editor_editing=False)
    assert controller.visuals_overlay
    assert first.reset_visuals and first.drain_network
    assert controller.focus == Focus.of_console("tidal")

    off = controller.handle_key("ctrl+p", editor_editing=False)
    assert not controller.visuals_overlay
    assert not off.reset_visuals
    assert controller.focus == Focus.of_console("tidal")

    second = controller.handle_key("ctrl+p", editor_editing=False)
    assert controller.visuals_overlay
    assert not second.reset_visuals


def test_sample_browser_toggle(controller):
    controller.handle_key("ctrl+w", editor_editing=False)
    assert controller.sample_browser_visible
    assert controller.focus.kind is FocusKind.SAMPLE_BROWSER

    controller.handle_key("ctrl+w", editor_editing=False)
    assert not controller.sample_browser_visible
    assert controller.focus == Focus.editor()


def test_quick_select_shows_chosen_console(controller):
    outcome = controller.handle_key("ctrl+g", editor_editing=False)
    assert outcome.open is FocusKind.QUICK_SELECT
    assert controller.focus.kind is FocusKind.QUICK_SELECT

    controller.quick_select_done("sclang")
    assert controller.active_console == "sclang"
    assert controller.focus == Focus.of_console("sclang")

    # Choosing the shown console keeps it shown.
    controller.focus_quick_select()
    controller.quick_select_done("sclang")
    assert controller.active_console == "sclang"


def test_quick_select_cancel_returns_to_editor(controller):
    controller.focus_quick_select()
    controller.quick_select_done(None)
    assert controller.focus == Focus.editor()


def test_file_browser_round_trip(controller):
    outcome = controller.handle_key("ctrl+f", editor_editing=False)
    assert outcome.open is FocusKind.FILE_BROWSER
    assert controller.focus.kind is FocusKind.FILE_BROWSER

    controller.file_browser_done()
    assert controller.focus == Focus.editor()


def test_exactly_one_focus_after_every_transition(controller):
    keys = [
        "ctrl+t", "ctrl+l", "ctrl+o", "2", "ctrl+p", "ctrl+w", "ctrl+w",
        "ctrl+g", "escape", "ctrl+f", "ctrl+o", "ctrl+o", "ctrl+p", "escape",
    ]
    for key in keys:
        controller.handle_key(key, editor_editing=False)
        _assert_single_focus(controller)


def test_console_focus_requires_a_name():
    with pytest.raises(ValueError):
        Focus(FocusKind.CONSOLE)
    with pytest.raises(ValueError):
        Focus(FocusKind.EDITOR, "tidal")

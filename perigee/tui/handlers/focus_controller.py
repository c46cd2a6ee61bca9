"""Focus controller — the input-focus state machine of the main screen.

Decides which view receives a key, which console is visible, and
whether the visuals overlay and sample browser are shown. Transitions
return a :class:`FocusOutcome` describing what the screen has to do
(re-layout, push a modal, reset visuals, start draining the network
source); views never change focus themselves.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from perigee.engine.config import OSC_CONSOLE, KeyMap
from perigee.shared.models.focus import Focus, FocusKind, Panels

logger = logging.getLogger(__name__)


@dataclass
class FocusOutcome:
    """Result of one key or transition.

    ``handled`` is False when the key must go on to the focused view.
    """
    handled: bool = False
    quit: bool = False
    relayout: bool = False
    status: str | None = None
    reset_visuals: bool = False
    drain_network: bool = False
    open: FocusKind | None = None


class FocusController:
    """Owns the focus state, console visibility and overlay flags."""

    def __init__(
        self,
        keys: KeyMap,
        consoles: list[str],
        *,
        network_console: str = OSC_CONSOLE,
    ) -> None:
        self._keys = keys
        self._consoles = list(consoles)
        self._network_console = network_console
        self._focus = Focus.editor()
        self._active_console: str | None = None
        self._visuals = False
        self._visuals_seen = False
        self._sample_browser = False

    # ── state ────────────────────────────────────────────────────────

    @property
    def focus(self) -> Focus:
        return self._focus

    @property
    def active_console(self) -> str | None:
        return self._active_console

    @property
    def consoles(self) -> list[str]:
        return list(self._consoles)

    @property
    def visuals_overlay(self) -> bool:
        return self._visuals

    @property
    def sample_browser_visible(self) -> bool:
        return self._sample_browser

    @property
    def panels(self) -> Panels:
        return Panels(
            console=self._active_console is not None,
            visuals=self._visuals,
            sample_browser=self._sample_browser,
        )

    def network_console_visible(self) -> bool:
        return self._active_console == self._network_console

    # ── key dispatch ─────────────────────────────────────────────────

    def handle_key(self, key: str, *, editor_editing: bool) -> FocusOutcome:
        """Run the transition bound to *key*, if any.

        While the editor holds focus in its editing sub-mode no
        transition runs: every key belongs to the editor.
        """
        if self._focus.kind is FocusKind.EDITOR and editor_editing:
            return FocusOutcome()
        binding = self._keys.focus_action(key)
        if binding is None:
            return FocusOutcome()
        action, console = binding
        logger.debug("Key %s -> %s (focus=%s)", key, action, self._focus.label)
        if action == "toggle_console":
            return self.select_console(console)
        return getattr(self, action)()

    # ── transitions ──────────────────────────────────────────────────

    def quit(self) -> FocusOutcome:
        return FocusOutcome(handled=True, quit=True)

    def focus_editor(self) -> FocusOutcome:
        self._focus = Focus.editor()
        return FocusOutcome(handled=True, relayout=True, status="")

    def focus_console(self) -> FocusOutcome:
        if self._active_console is None:
            return FocusOutcome(handled=True, status="no console open")
        self._focus = Focus.of_console(self._active_console)
        return FocusOutcome(handled=True, status="console")

    def select_console(self, name: str) -> FocusOutcome:
        """Toggle console *name*: hide it if visible, else show and focus it.

        Showing a console hides any other, so at most one is visible.
        """
        if name not in self._consoles:
            logger.warning("Unknown console %r", name)
            return FocusOutcome(handled=True, status=f"no console named {name}")
        if name == self._active_console:
            self._active_console = None
            self._focus = Focus.editor()
            return FocusOutcome(handled=True, relayout=True, status="")
        return self.show_console(name)

    def show_console(self, name: str) -> FocusOutcome:
        self._active_console = name
        self._focus = Focus.of_console(name)
        return FocusOutcome(
            handled=True,
            relayout=True,
            status=name,
            drain_network=name == self._network_console,
        )

    def focus_quick_select(self) -> FocusOutcome:
        self._focus = Focus(FocusKind.QUICK_SELECT)
        return FocusOutcome(handled=True, open=FocusKind.QUICK_SELECT)

    def quick_select_done(self, name: str | None) -> FocusOutcome:
        """Close the console picker; a chosen console is shown and focused."""
        if name is None or name not in self._consoles:
            return self.focus_editor()
        return self.show_console(name)

    def focus_file_browser(self) -> FocusOutcome:
        self._focus = Focus(FocusKind.FILE_BROWSER)
        return FocusOutcome(
            handled=True,
            open=FocusKind.FILE_BROWSER,
            status="file browser focused",
        )

    def file_browser_done(self) -> FocusOutcome:
        return self.focus_editor()

    def toggle_sample_browser(self) -> FocusOutcome:
        self._sample_browser = not self._sample_browser
        if self._sample_browser:
            self._focus = Focus(FocusKind.SAMPLE_BROWSER)
            return FocusOutcome(handled=True, relayout=True, status="audio browser")
        self._focus = Focus.editor()
        return FocusOutcome(handled=True, relayout=True)

    def toggle_visuals(self) -> FocusOutcome:
        """Flip the overlay; input focus stays where it is."""
        self._visuals = not self._visuals
        if not self._visuals:
            return FocusOutcome(handled=True, relayout=True)
        first = not self._visuals_seen
        self._visuals_seen = True
        return FocusOutcome(
            handled=True,
            relayout=True,
            status="visuals enabled",
            reset_visuals=first,
            drain_network=True,
        )

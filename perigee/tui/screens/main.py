"""Main screen — editor workspace with consoles, visuals and sample panel."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from textual import events, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import Screen

from perigee.adapters.events import NETWORK_SOURCE, SESSION_SOURCE
from perigee.adapters.output_router import OutputRouter
from perigee.engine.config import OSC_CONSOLE, PerigeeConfig
from perigee.engine.errors import SpawnError, WriteError
from perigee.engine.osc_server import OscServer
from perigee.engine.process_session import ProcessSession
from perigee.shared.models.focus import FocusKind
from perigee.shared.services.playback import play_audio
from perigee.tui.handlers.event_processor import EventProcessor
from perigee.tui.handlers.focus_controller import FocusController, FocusOutcome
from perigee.tui.handlers.layout import compute_layout
from perigee.tui.screens.file_browser import FileBrowserScreen
from perigee.tui.screens.quick_select import QuickSelectScreen
from perigee.tui.widgets.console import Console
from perigee.tui.widgets.editor import CodeEditor
from perigee.tui.widgets.sample_browser import SampleBrowser
from perigee.tui.widgets.status_bar import StatusBar
from perigee.tui.widgets.visuals import VisualRegistry, VisualsView

logger = logging.getLogger(__name__)

# Seconds between session state refreshes in the status bar.
STATE_POLL_SECONDS = 1.0


class MainScreen(Screen):
    """Owns every view, the sessions, the OSC listener and the focus state."""

    def __init__(
        self,
        config: PerigeeConfig,
        initial_file: Path | None = None,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.config = config
        self._initial_file = initial_file
        self.controller = FocusController(config.keys, config.console_names)

        self.sessions: dict[str, ProcessSession] = {
            name: ProcessSession(session_config, capacity=config.queue_capacity)
            for name, session_config in config.sessions.items()
            if session_config.enabled
        }
        self.osc: OscServer | None = None
        if config.osc_enabled:
            self.osc = OscServer(
                config.osc_host,
                config.osc_port,
                addresses=config.osc_addresses,
                capacity=config.queue_capacity,
            )

        self.event_processor = EventProcessor(self)
        self.router = OutputRouter(self.event_processor.handle)
        self._send_lock = asyncio.Lock()
        self._shut_down = False

        self.editor = CodeEditor(
            config.keys, comment_prefix=config.comment_prefix, id="editor"
        )
        self.visuals = VisualsView(VisualRegistry.default(), config.visual, id="visuals")
        self.sample_browser = SampleBrowser(
            config.samples_dir, on_select=self._play_sample, id="sample-browser"
        )
        self.consoles: dict[str, Console] = {
            name: Console(name, classes="console") for name in config.console_names
        }

    def compose(self) -> ComposeResult:
        with Horizontal(id="workspace"):
            yield self.editor
            yield self.visuals
            yield self.sample_browser
        with Vertical(id="consoles"):
            yield from self.consoles.values()
        yield StatusBar(id="status-bar")

    def on_mount(self) -> None:
        sb = self.query_one("#status-bar", StatusBar)
        for name in self.sessions:
            sb.set_session_state(name, "not_started")

        path = self._initial_file or Path(self.config.editor_file)
        if self.editor.load_file(path.expanduser()):
            sb.file_name = path.name

        for session in self.sessions.values():
            self.router.add_source(session.subscription(), SESSION_SOURCE)
        self.router.arm_all(SESSION_SOURCE)
        if self.osc is not None:
            self.router.add_source(self.osc.subscription(), NETWORK_SOURCE)

        self._sync_views()
        self._relayout()
        self.set_interval(STATE_POLL_SECONDS, self._sync_session_states)
        self._start_sources()

    # ── sources ──────────────────────────────────────────────────────

    @work(name="start-sources")
    async def _start_sources(self) -> None:
        sb = self.query_one("#status-bar", StatusBar)
        for name, session in self.sessions.items():
            console = self.consoles[name]
            try:
                await session.start()
            except SpawnError as exc:
                console.add_line(f"[{name} failed to start: {exc.reason}]")
                sb.show_message(str(exc), error=True)
                continue
            if session.boot_file is not None:
                console.add_line(f"[{name} started with {session.boot_file}, pid {session.pid}]")
            else:
                console.add_line(f"[{name} started, pid {session.pid}]")
        self._sync_session_states()

        if self.osc is None:
            return
        try:
            await self.osc.start()
        except OSError as exc:
            logger.warning("OSC server failed to bind %s: %s", self.osc.address, exc)
            self.consoles[OSC_CONSOLE].add_line(
                f"[osc listener unavailable on {self.osc.address}: {exc.strerror or exc}]"
            )
            sb.show_message(f"osc listener unavailable: {exc.strerror or exc}", error=True)
            return
        self.consoles[OSC_CONSOLE].add_line(f"[listening for osc on {self.osc.address}]")

    def _sync_session_states(self) -> None:
        sb = self.query_one("#status-bar", StatusBar)
        for name, session in self.sessions.items():
            state = session.state.value
            if state == "running" and not session.running:
                state = "stopped"
            if sb.sessions.get(name) != state:
                sb.set_session_state(name, state)

    async def shutdown(self) -> None:
        """Stop routing, close the listener and stop every session."""
        if self._shut_down:
            return
        self._shut_down = True
        logger.info("Shutting down %d sessions", len(self.sessions))
        await self.router.close()
        if self.osc is not None:
            self.osc.close()
        for session in self.sessions.values():
            await session.stop()

    # ── focus ────────────────────────────────────────────────────────

    def on_key(self, event: events.Key) -> None:
        outcome = self.controller.handle_key(event.key, editor_editing=self.editor.editing)
        if not outcome.handled:
            return
        event.stop()
        event.prevent_default()
        self.apply_outcome(outcome)

    def on_descendant_focus(self, event: events.DescendantFocus) -> None:
        # A click into the editor is a focus transition too.
        if event.widget is self.editor and self.controller.focus.kind is not FocusKind.EDITOR:
            self.apply_outcome(self.controller.focus_editor())

    def apply_outcome(self, outcome: FocusOutcome) -> None:
        if outcome.quit:
            self._quit()
            return
        if outcome.reset_visuals:
            self.visuals.reset()
        if outcome.drain_network and self.osc is not None:
            self.router.arm(OSC_CONSOLE)

        if outcome.open is FocusKind.QUICK_SELECT:
            self.app.push_screen(
                QuickSelectScreen(self.controller.consoles, self.controller.active_console),
                self._on_quick_select,
            )
        elif outcome.open is FocusKind.FILE_BROWSER:
            self.app.push_screen(
                FileBrowserScreen(start_dir=Path(self.config.files_dir)),
                self._on_file_chosen,
            )

        self._sync_views()
        if outcome.relayout:
            self._relayout()
        if outcome.status is not None:
            self.query_one("#status-bar", StatusBar).show_message(outcome.status)

    def _on_quick_select(self, name: str | None) -> None:
        self.apply_outcome(self.controller.quick_select_done(name))

    def _on_file_chosen(self, path: Path | None) -> None:
        if path is not None and self.editor.load_file(path):
            self.query_one("#status-bar", StatusBar).file_name = path.name
        outcome = self.controller.file_browser_done()
        outcome.status = None
        self.apply_outcome(outcome)

    @work(name="quit")
    async def _quit(self) -> None:
        await self.shutdown()
        self.app.exit()

    def _sync_views(self) -> None:
        """Show the visible panels and move Textual focus to match."""
        c = self.controller
        active = c.active_console
        for name, console in self.consoles.items():
            console.display = name == active
        self.query_one("#consoles").display = active is not None
        self.visuals.display = c.visuals_overlay
        self.visuals.set_running(c.visuals_overlay)
        self.sample_browser.display = c.sample_browser_visible

        focus = c.focus
        if focus.kind is FocusKind.EDITOR:
            self.editor.focus()
        elif focus.kind is FocusKind.CONSOLE:
            self.consoles[focus.console].focus()
        elif focus.kind is FocusKind.SAMPLE_BROWSER:
            self.sample_browser.focus_table()
        self.query_one("#status-bar", StatusBar).focus_label = focus.label

    def _relayout(self) -> None:
        layout = compute_layout(self.size.width, self.size.height, self.controller.panels)
        self.query_one("#workspace").styles.height = layout.editor_height
        self.editor.styles.width = layout.editor_width
        self.visuals.styles.width = layout.visuals_width
        self.visuals.styles.height = layout.side_height
        self.sample_browser.styles.width = layout.sample_width
        self.sample_browser.styles.height = layout.side_height
        self.query_one("#consoles").styles.height = layout.console_height

    def on_resize(self, event: events.Resize) -> None:
        self._relayout()

    # ── editor ───────────────────────────────────────────────────────

    def on_code_editor_evaluate(self, event: CodeEditor.Evaluate) -> None:
        self._send(event.text)

    def on_code_editor_hush(self, event: CodeEditor.Hush) -> None:
        self._send(self.config.hush_command)

    def on_code_editor_mode_changed(self, event: CodeEditor.ModeChanged) -> None:
        self.query_one("#status-bar", StatusBar).mode = event.mode

    def on_code_editor_status_message(self, event: CodeEditor.StatusMessage) -> None:
        self.query_one("#status-bar", StatusBar).show_message(event.text, error=event.error)

    @work(group="send")
    async def _send(self, text: str) -> None:
        target = self.config.editor_target
        session = self.sessions.get(target)
        sb = self.query_one("#status-bar", StatusBar)
        if session is None:
            sb.show_message(f"no session named {target}", error=True)
            return
        # Sends reach the interpreter in the order they were requested.
        async with self._send_lock:
            try:
                await session.send(text)
            except WriteError as exc:
                sb.show_message(str(exc), error=True)

    # ── samples ──────────────────────────────────────────────────────

    def _play_sample(self, path: Path) -> None:
        self.query_one("#status-bar", StatusBar).show_message(f"playing {path.name}")
        self._play(path)

    @work(group="playback")
    async def _play(self, path: Path) -> None:
        if not await play_audio(path, self.config.audio_player):
            self.query_one("#status-bar", StatusBar).show_message(
                f"cannot play {path.name}", error=True
            )

"""Perigee TUI — Textual application class."""

from __future__ import annotations

from pathlib import Path

from textual.app import App

from perigee.engine.config import PerigeeConfig
from perigee.tui.screens.main import MainScreen


class PerigeeApp(App):
    """Terminal front-end for live-coding interpreters."""

    TITLE = "Perigee"
    SUB_TITLE = "Live Coding"
    CSS_PATH = Path("styles/app.tcss")

    BINDINGS = [
        ("ctrl+q", "quit", "Quit"),
        ("f1", "open_help", "Help"),
    ]

    def __init__(
        self,
        config: PerigeeConfig | None = None,
        initial_file: Path | None = None,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.config = config or PerigeeConfig()
        self.initial_file = initial_file
        self.main_screen: MainScreen | None = None

    def on_mount(self) -> None:
        self.main_screen = MainScreen(self.config, self.initial_file)
        self.push_screen(self.main_screen)

    async def action_quit(self) -> None:
        """Stop every session before quitting."""
        if self.main_screen is not None:
            await self.main_screen.shutdown()
        await super().action_quit()

    async def action_help_quit(self) -> None:
        # ctrl+c quits from any screen, modals included.
        await self.action_quit()

    def action_open_help(self) -> None:
        from perigee.tui.screens.help import HelpScreen

        self.push_screen(HelpScreen(self.config.keys))

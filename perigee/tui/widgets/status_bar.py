"""Status bar — bottom line with editor mode, focus and session state."""

from __future__ import annotations

from textual.reactive import reactive
from textual.timer import Timer
from textual.widget import Widget
from rich.text import Text

# Seconds a transient message stays visible.
MESSAGE_SECONDS = 4.0


class StatusBar(Widget):
    """Single-line status bar."""

    mode: reactive[str] = reactive("command")
    focus_label: reactive[str] = reactive("editor")
    file_name: reactive[str] = reactive("")
    message: reactive[str] = reactive("")
    error: reactive[bool] = reactive(False)

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self.sessions: dict[str, str] = {}
        self._clear_timer: Timer | None = None

    def set_session_state(self, name: str, state: str) -> None:
        self.sessions[name] = state
        self.refresh()

    def show_message(self, text: str, *, error: bool = False) -> None:
        """Show *text* until the next message or for a few seconds."""
        self.message = text
        self.error = error
        if self._clear_timer is not None:
            self._clear_timer.stop()
            self._clear_timer = None
        if text:
            self._clear_timer = self.set_timer(MESSAGE_SECONDS, self._clear_message)

    def _clear_message(self) -> None:
        self._clear_timer = None
        self.message = ""
        self.error = False

    def render(self) -> Text:
        state_colors = {
            "running": "green",
            "not_started": "dim",
            "stopped": "red",
        }

        bar = Text()
        mode_style = "bold black on yellow" if self.mode == "insert" else "bold black on cyan"
        bar.append(f" {self.mode.upper()} ", style=mode_style)
        bar.append(" │ ", style="dim")
        bar.append(self.focus_label, style="bold")
        if self.file_name:
            bar.append(" │ ", style="dim")
            bar.append(self.file_name, style="cyan")
        for name, state in self.sessions.items():
            bar.append(" │ ", style="dim")
            bar.append(f"● {name}", style=state_colors.get(state, "white"))
        if self.message:
            bar.append("  ")
            bar.append(self.message, style="red bold" if self.error else "italic")
        return bar

"""Help modal listing the configured key bindings."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Static

from perigee.engine.config import KeyMap

_EDITOR_HELP = (
    "[bold]Editor (command mode)[/bold]\n"
    "- `h j k l`, `0 $`, `w b`, `g G`: move\n"
    "- `x`: delete character, `dd`: delete line\n"
    "- `i a A I o O`: insert mode, `Esc`: back to command mode"
)


def describe_keys(keys: KeyMap) -> str:
    lines = ["[bold]Key bindings[/bold]"]
    for bound, action in keys.describe():
        label = action.replace("toggle_console:", "toggle console ").replace("_", " ")
        lines.append(f"- `{bound}`: {label}")
    return "\n".join(lines)


class HelpScreen(ModalScreen[None]):
    """Display the key map and editor commands."""

    CSS_PATH = "../styles/modal.tcss"
    BINDINGS = [
        ("escape", "close", "Close"),
        ("f1", "close", "Close"),
    ]

    def __init__(self, keys: KeyMap, **kwargs) -> None:
        super().__init__(**kwargs)
        self._keys = keys

    def compose(self) -> ComposeResult:
        with Vertical(id="help-dialog"):
            yield Static(
                "[bold $primary]Perigee Help[/bold $primary]",
                id="help-title",
                markup=True,
            )
            yield Static(
                describe_keys(self._keys) + "\n\n" + _EDITOR_HELP,
                id="help-body",
                markup=True,
            )
            yield Button("Close", id="help-close", variant="primary")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "help-close":
            self.dismiss(None)

    def action_close(self) -> None:
        self.dismiss(None)

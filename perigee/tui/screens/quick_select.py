"""Quick select — pick a console to show."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import OptionList, Static
from textual.widgets.option_list import Option


class QuickSelectScreen(ModalScreen[str | None]):
    """Returns the chosen console name, or None when cancelled."""

    CSS_PATH = "../styles/modal.tcss"
    BINDINGS = [
        ("escape", "cancel", "Cancel"),
    ]

    def __init__(self, consoles: list[str], active: str | None = None, **kwargs) -> None:
        super().__init__(**kwargs)
        self._consoles = consoles
        self._active = active

    def compose(self) -> ComposeResult:
        with Vertical(id="quick-select-dialog"):
            yield Static(
                "[bold $primary]Consoles[/bold $primary]",
                id="quick-select-title",
                markup=True,
            )
            yield OptionList(
                *[
                    Option(f"{name} (shown)" if name == self._active else name, id=name)
                    for name in self._consoles
                ],
                id="quick-select-list",
            )

    def on_mount(self) -> None:
        options = self.query_one("#quick-select-list", OptionList)
        options.focus()
        if self._active in self._consoles:
            options.highlighted = self._consoles.index(self._active)

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        self.dismiss(event.option.id)

    def action_cancel(self) -> None:
        self.dismiss(None)

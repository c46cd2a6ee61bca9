"""File browser modal — navigate the filesystem and open a pattern file."""

from __future__ import annotations

import logging
from pathlib import Path

from rich.markup import escape
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Static

from perigee.shared.services.pattern_files import PATTERN_EXTENSIONS, is_pattern_file
from perigee.shared.services.samples import format_size

logger = logging.getLogger(__name__)


def list_directory(directory: Path) -> tuple[list[Path], list[Path]]:
    """Return ``(subdirectories, pattern_files)`` of *directory*, sorted.

    Hidden entries are skipped. OSError propagates.
    """
    dirs: list[Path] = []
    files: list[Path] = []
    for entry in sorted(directory.iterdir(), key=lambda p: p.name.lower()):
        if entry.name.startswith("."):
            continue
        if entry.is_dir():
            dirs.append(entry)
        elif is_pattern_file(entry):
            files.append(entry)
    return dirs, files


class FileBrowserScreen(ModalScreen[Path | None]):
    """Modal file browser returning the chosen pattern file, or None."""

    CSS_PATH = "../styles/modal.tcss"
    BINDINGS = [
        ("escape", "cancel", "Cancel"),
    ]

    def __init__(
        self,
        start_dir: Path | None = None,
        title: str = "Open Pattern File",
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self._current_dir = (start_dir or Path.cwd()).expanduser().resolve()
        self._title = title
        self._entries: list[Path] = []

    def compose(self) -> ComposeResult:
        extensions = ", ".join(sorted(PATTERN_EXTENSIONS))
        with Vertical(id="file-browser-dialog"):
            yield Static(
                f"[bold $primary]{self._title}[/bold $primary]",
                id="file-browser-title",
                markup=True,
            )
            yield Static(f"[dim]Showing {extensions} files.[/dim]", markup=True)
            with Horizontal(id="file-browser-path-row"):
                yield Input(
                    value=str(self._current_dir),
                    placeholder="Enter path...",
                    id="file-browser-path-input",
                )
                yield Button("Go", variant="primary", id="btn-file-browser-go")
            yield VerticalScroll(id="file-browser-list")
            yield Static("", id="file-browser-status")
            with Horizontal(id="file-browser-actions"):
                yield Button("Cancel", id="btn-file-browser-cancel")

    async def on_mount(self) -> None:
        await self._refresh_listing()

    async def _refresh_listing(self) -> None:
        listing = self.query_one("#file-browser-list", VerticalScroll)
        await listing.remove_children()
        self.query_one("#file-browser-path-input", Input).value = str(self._current_dir)
        self._set_status("")

        try:
            dirs, files = list_directory(self._current_dir)
        except OSError as exc:
            logger.warning("Cannot list %s: %s", self._current_dir, exc)
            self._set_status(f"[red]Cannot list directory: {exc.strerror or exc}[/red]")
            dirs, files = [], []

        self._entries = []
        if self._current_dir.parent != self._current_dir:
            self._add_entry(listing, self._current_dir.parent, "[bold cyan]📁 ..[/bold cyan]", True)
        for entry in dirs:
            self._add_entry(listing, entry, f"[cyan]📁 {escape(entry.name)}/[/cyan]", True)
        for entry in files:
            try:
                size = format_size(entry.stat().st_size)
            except OSError:
                size = "?"
            self._add_entry(
                listing, entry, f"[green]{escape(entry.name)}[/green] [dim]({size})[/dim]", False
            )

        if not dirs and not files:
            listing.mount(Static("[dim]No pattern files here[/dim]", markup=True))

    def _add_entry(self, listing: VerticalScroll, path: Path, label: str, is_dir: bool) -> None:
        index = len(self._entries)
        self._entries.append(path)
        listing.mount(_FileEntry(label, is_dir, index))

    def _set_status(self, message: str) -> None:
        self.query_one("#file-browser-status", Static).update(message)

    async def _open(self, raw: str) -> None:
        path = Path(raw.strip()).expanduser().resolve()
        if path.is_dir():
            self._current_dir = path
            await self._refresh_listing()
        elif path.is_file() or (not path.exists() and path.parent.is_dir()):
            # A missing file in an existing directory becomes a new pattern file.
            self.dismiss(path)
        else:
            self._set_status(f"[red]Invalid path: {path}[/red]")

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        btn_id = event.button.id or ""

        if btn_id == "btn-file-browser-cancel":
            self.dismiss(None)
        elif btn_id == "btn-file-browser-go":
            await self._open(self.query_one("#file-browser-path-input", Input).value)
        elif btn_id.startswith("btn-file-entry-"):
            path = self._entries[int(btn_id.removeprefix("btn-file-entry-"))]
            if path.is_dir():
                self._current_dir = path.resolve()
                await self._refresh_listing()
            else:
                self.dismiss(path)

    async def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "file-browser-path-input":
            await self._open(event.input.value)

    def action_cancel(self) -> None:
        self.dismiss(None)


class _FileEntry(Horizontal):
    """Single file/directory row in the browser."""

    def __init__(self, label: str, is_dir: bool, index: int, **kwargs) -> None:
        super().__init__(classes="file-browser-entry", **kwargs)
        self._label = label
        self._is_dir = is_dir
        self._index = index

    def compose(self) -> ComposeResult:
        yield Static(self._label, classes="file-browser-name", markup=True)
        yield Button(
            "Open" if self._is_dir else "Edit",
            variant="default" if self._is_dir else "success",
            id=f"btn-file-entry-{self._index}",
            classes="file-browser-entry-btn",
        )

"""Sample browser — filterable table of sample banks."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from textual import events, work
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.widgets import DataTable, Input, Static

from perigee.shared.services.samples import (
    Sample,
    filter_samples,
    format_size,
    iter_samples,
    load_sample_map,
)

logger = logging.getLogger(__name__)


class SampleBrowser(Vertical):
    """Side panel listing every sample as ``bank:index``.

    ``/`` filters by reference; Enter plays the highlighted sample
    through *on_select*.
    """

    def __init__(
        self,
        root: str | Path,
        on_select: Callable[[Path], None] | None = None,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.root = Path(root).expanduser()
        self.on_select = on_select
        self.samples: list[Sample] = []
        self.visible_samples: list[Sample] = []
        self._loaded = False

    def compose(self) -> ComposeResult:
        yield Static(f"[bold]Samples[/bold] [dim]{self.root}[/dim]", id="sample-title", markup=True)
        yield Input(placeholder="/ to filter", id="sample-filter")
        yield DataTable(id="sample-table", cursor_type="row", zebra_stripes=True)

    def on_mount(self) -> None:
        table = self.query_one("#sample-table", DataTable)
        table.add_columns("Ref", "Type", "Size")

    def focus_table(self) -> None:
        if not self._loaded:
            self.load()
        self.query_one("#sample-table", DataTable).focus()

    def load(self) -> None:
        self._loaded = True
        self.query_one("#sample-title", Static).update(
            f"[bold]Samples[/bold] [dim]loading {self.root}…[/dim]"
        )
        self._load_worker()

    @work(thread=True, exclusive=True, group="samples")
    def _load_worker(self) -> None:
        """Walk the sample directory off the event loop."""
        banks = load_sample_map(self.root)
        self.app.call_from_thread(self.set_samples, list(iter_samples(banks)))

    def set_samples(self, samples: list[Sample]) -> None:
        self.samples = samples
        self.query_one("#sample-title", Static).update(
            f"[bold]Samples[/bold] [dim]{len(samples)} in {self.root}[/dim]"
        )
        self._apply_filter(self.query_one("#sample-filter", Input).value)

    def _apply_filter(self, query: str) -> None:
        self.visible_samples = filter_samples(self.samples, query)
        table = self.query_one("#sample-table", DataTable)
        table.clear()
        for index, sample in enumerate(self.visible_samples):
            table.add_row(
                sample.ref, sample.file_type, format_size(sample.size), key=str(index)
            )

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id == "sample-filter":
            self._apply_filter(event.value)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "sample-filter":
            event.stop()
            self.query_one("#sample-table", DataTable).focus()

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        event.stop()
        index = int(event.row_key.value)
        if index >= len(self.visible_samples):
            return
        sample = self.visible_samples[index]
        logger.debug("Selected sample %s (%s)", sample.ref, sample.path)
        if self.on_select is not None:
            self.on_select(sample.path)

    def on_key(self, event: events.Key) -> None:
        filter_input = self.query_one("#sample-filter", Input)
        if event.key == "slash" and not filter_input.has_focus:
            event.stop()
            event.prevent_default()
            filter_input.focus()
        elif event.key == "escape" and filter_input.has_focus:
            event.stop()
            event.prevent_default()
            self.query_one("#sample-table", DataTable).focus()

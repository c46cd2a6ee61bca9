"""Console — scrolling log of one output source."""

from __future__ import annotations

from textual.widgets import RichLog


class Console(RichLog):
    """Append-only view of the lines produced by one session or listener.

    Interpreter output is shown verbatim, so markup is off. The log is
    never trimmed while the application runs.
    """

    def __init__(self, source: str, **kwargs) -> None:
        super().__init__(
            auto_scroll=True,
            wrap=True,
            markup=False,
            highlight=False,
            **kwargs,
        )
        self.source = source
        self.border_title = source

    def add_line(self, line: str) -> None:
        self.write(line)

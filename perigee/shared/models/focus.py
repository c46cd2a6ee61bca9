"""Focus data model — which view owns keyboard input.

No Textual dependency; the focus controller is the only writer.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class FocusKind(str, Enum):
    EDITOR = "editor"
    CONSOLE = "console"
    QUICK_SELECT = "quick_select"
    FILE_BROWSER = "file_browser"
    SAMPLE_BROWSER = "sample_browser"


@dataclass(frozen=True)
class Focus:
    """The single active input target.

    ``console`` names the console for CONSOLE focus and is None for
    every other kind.
    """
    kind: FocusKind = FocusKind.EDITOR
    console: str | None = None

    def __post_init__(self) -> None:
        if (self.kind is FocusKind.CONSOLE) != (self.console is not None):
            raise ValueError(
                f"console name is required for, and only for, CONSOLE focus "
                f"(kind={self.kind.value}, console={self.console!r})"
            )

    @classmethod
    def editor(cls) -> Focus:
        return cls(FocusKind.EDITOR)

    @classmethod
    def of_console(cls, name: str) -> Focus:
        return cls(FocusKind.CONSOLE, name)

    @property
    def label(self) -> str:
        if self.kind is FocusKind.CONSOLE:
            return f"console:{self.console}"
        return self.kind.value.replace("_", " ")


@dataclass(frozen=True)
class Panels:
    """Which optional panels are visible; input to the layout."""
    console: bool = False
    visuals: bool = False
    sample_browser: bool = False

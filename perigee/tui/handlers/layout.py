"""Panel sizes for the main screen.

A pure function of terminal size and visible panels, recomputed after
every focus or visibility change.
"""

from __future__ import annotations

from dataclasses import dataclass

from perigee.shared.models.focus import Panels

MIN_CONSOLE_HEIGHT = 10
MIN_VISUALS_WIDTH = 10
MIN_SAMPLE_WIDTH = 16
STATUS_ROWS = 1
# Borders plus title of side panels.
SIDE_PANEL_CHROME = 3


@dataclass(frozen=True)
class Layout:
    console_height: int
    visuals_width: int
    sample_width: int
    side_height: int
    editor_width: int
    editor_height: int
    popup_width: int
    popup_height: int


def compute_layout(width: int, height: int, panels: Panels) -> Layout:
    """Split *width* x *height* between the editor and visible panels.

    The console takes a quarter of the height (at least 10 rows), the
    visuals overlay and the sample browser a third of the width each
    (at least 10 and 16 columns); the editor gets what remains.
    """
    console_height = max(height // 4, MIN_CONSOLE_HEIGHT) if panels.console else 0
    visuals_width = max(width // 3, MIN_VISUALS_WIDTH) if panels.visuals else 0
    sample_width = max(width // 3, MIN_SAMPLE_WIDTH) if panels.sample_browser else 0
    side_height = max(height - console_height - SIDE_PANEL_CHROME, 0)

    return Layout(
        console_height=console_height,
        visuals_width=visuals_width,
        sample_width=sample_width,
        side_height=side_height,
        editor_width=max(width - sample_width - visuals_width, 0),
        editor_height=max(height - console_height - STATUS_ROWS, 0),
        popup_width=width // 2,
        popup_height=height // 2,
    )

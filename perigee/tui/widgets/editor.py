"""Code editor — modal TextArea that evaluates blocks into a session.

Command mode is read-only and takes vi-style motions plus the editor
bindings of the key map; insert mode behaves like a plain TextArea
until Escape. Keys the editor does not use in command mode bubble up
to the screen, where the focus controller sees them.
"""

from __future__ import annotations

import logging
from pathlib import Path

from textual import events
from textual.message import Message
from textual.widgets import TextArea
from textual.widgets.text_area import Selection

from perigee.engine.config import KeyMap
from perigee.shared.block import find_block, toggle_comment
from perigee.shared.services.pattern_files import load_pattern, save_pattern

logger = logging.getLogger(__name__)

COMMAND_MODE = "command"
INSERT_MODE = "insert"

# Seconds the evaluated block stays highlighted.
FLASH_SECONDS = 0.25


class CodeEditor(TextArea):
    """Pattern editor with command and insert modes."""

    class Evaluate(Message):
        """A block was chosen for evaluation."""

        def __init__(self, text: str, begin: int, end: int) -> None:
            self.text = text
            self.begin = begin
            self.end = end
            super().__init__()

    class Hush(Message):
        """Silence every pattern."""

    class ModeChanged(Message):
        def __init__(self, mode: str) -> None:
            self.mode = mode
            super().__init__()

    class StatusMessage(Message):
        def __init__(self, text: str, error: bool = False) -> None:
            self.text = text
            self.error = error
            super().__init__()

    def __init__(
        self,
        keys: KeyMap | None = None,
        *,
        comment_prefix: str = "-- ",
        **kwargs,
    ) -> None:
        kwargs.setdefault("show_line_numbers", True)
        kwargs.setdefault("tab_behavior", "indent")
        kwargs.setdefault("read_only", True)
        super().__init__(**kwargs)
        self._keys = keys or KeyMap()
        self._comment_prefix = comment_prefix
        self._mode = COMMAND_MODE
        self._pending: str | None = None
        self.path: Path | None = None

    # ── mode ─────────────────────────────────────────────────────────

    @property
    def mode(self) -> str:
        return self._mode

    @property
    def editing(self) -> bool:
        """True in insert mode, where every key belongs to the editor."""
        return self._mode == INSERT_MODE

    def set_mode(self, mode: str) -> None:
        if mode == self._mode:
            return
        self._mode = mode
        self._pending = None
        self.read_only = mode == COMMAND_MODE
        self.post_message(self.ModeChanged(mode))

    # ── files ────────────────────────────────────────────────────────

    def load_file(self, path: Path) -> bool:
        try:
            text = load_pattern(path)
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Cannot open %s: %s", path, exc)
            self.post_message(self.StatusMessage(f"cannot open {path.name}: {exc}", error=True))
            return False
        self.load_text(text)
        self.path = path
        self.move_cursor((0, 0))
        self.post_message(self.StatusMessage(f"opened {path.name}"))
        return True

    def save_file(self) -> bool:
        if self.path is None:
            self.post_message(self.StatusMessage("no file to save", error=True))
            return False
        try:
            save_pattern(self.path, self.text)
        except OSError as exc:
            logger.warning("Cannot save %s: %s", self.path, exc)
            self.post_message(self.StatusMessage(f"save failed: {exc}", error=True))
            return False
        self.post_message(self.StatusMessage(f"saved {self.path.name}"))
        return True

    # ── editor commands ──────────────────────────────────────────────

    def action_evaluate(self) -> None:
        row, _ = self.cursor_location
        span = find_block(self.document.lines, row)
        if span is None:
            return
        begin, end = span
        text = "\n".join(self.document.lines[begin:end + 1])
        if not text.strip():
            self.post_message(self.StatusMessage("nothing to evaluate"))
            return
        self._flash(begin, end)
        self.post_message(self.Evaluate(text, begin, end))

    def action_hush(self) -> None:
        self.post_message(self.Hush())

    def action_save(self) -> None:
        self.save_file()

    def action_comment(self) -> None:
        row, col = self.cursor_location
        line = self.document.get_line(row)
        updated = toggle_comment(line, self._comment_prefix)
        self.replace(updated, (row, 0), (row, len(line)))
        self.move_cursor((row, max(0, col + len(updated) - len(line))))

    def _flash(self, begin: int, end: int) -> None:
        cursor = self.cursor_location
        end_col = len(self.document.get_line(end))
        self.selection = Selection((begin, 0), (end, end_col))
        self.set_timer(FLASH_SECONDS, lambda: self.move_cursor(cursor))

    # ── keys ─────────────────────────────────────────────────────────

    async def _on_key(self, event: events.Key) -> None:
        if self._mode == INSERT_MODE:
            if event.key == "escape":
                event.stop()
                event.prevent_default()
                self.set_mode(COMMAND_MODE)
                return
            await super()._on_key(event)
            return

        action = self._keys.editor_action(event.key)
        if action is not None:
            event.stop()
            event.prevent_default()
            getattr(self, f"action_{action}")()
            return

        if event.character and self._command(event.character):
            event.stop()
            event.prevent_default()

    def _command(self, char: str) -> bool:
        """Run the command-mode command for *char*; False if unbound."""
        if self._pending == "d":
            self._pending = None
            if char == "d":
                self._delete_line()
                return True

        row, col = self.cursor_location
        line = self.document.get_line(row)
        motions = {
            "h": self.action_cursor_left,
            "l": self.action_cursor_right,
            "j": self.action_cursor_down,
            "k": self.action_cursor_up,
            "0": self.action_cursor_line_start,
            "$": self.action_cursor_line_end,
            "w": self.action_cursor_word_right,
            "b": self.action_cursor_word_left,
        }
        if char in motions:
            motions[char]()
        elif char == "g":
            self.move_cursor((0, 0))
        elif char == "G":
            self.move_cursor((self.document.line_count - 1, 0))
        elif char == "x":
            if col < len(line):
                self.delete((row, col), (row, col + 1))
        elif char == "d":
            self._pending = "d"
        elif char == "i":
            self.set_mode(INSERT_MODE)
        elif char == "a":
            self.move_cursor((row, min(col + 1, len(line))))
            self.set_mode(INSERT_MODE)
        elif char == "A":
            self.move_cursor((row, len(line)))
            self.set_mode(INSERT_MODE)
        elif char == "I":
            self.move_cursor((row, len(line) - len(line.lstrip())))
            self.set_mode(INSERT_MODE)
        elif char == "o":
            self.insert("\n", (row, len(line)))
            self.move_cursor((row + 1, 0))
            self.set_mode(INSERT_MODE)
        elif char == "O":
            self.insert("\n", (row, 0))
            self.move_cursor((row, 0))
            self.set_mode(INSERT_MODE)
        else:
            return False
        return True

    def _delete_line(self) -> None:
        row, _ = self.cursor_location
        last = self.document.line_count - 1
        if last == 0:
            self.clear()
        elif row < last:
            self.delete((row, 0), (row + 1, 0))
        else:
            prev = self.document.get_line(row - 1)
            self.delete((row - 1, len(prev)), (row, len(self.document.get_line(row))))
        self.move_cursor((min(row, self.document.line_count - 1), 0))

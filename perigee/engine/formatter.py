"""Formats editor fragments into interpreter input.

Interpreters reject literal tabs, and ghci only accepts multi-line
definitions between ``:{`` and ``:}`` marker lines.
"""
from __future__ import annotations

from dataclasses import dataclass

TAB_REPLACEMENT = "  "

GHCI_BLOCK_BEGIN = ":{"
GHCI_BLOCK_END = ":}"


def format_command(
    text: str,
    begin: str | None = GHCI_BLOCK_BEGIN,
    end: str | None = GHCI_BLOCK_END,
) -> str:
    """Return *text* as the exact string an interpreter expects on stdin.

    Tabs become two spaces. More than one line is wrapped with the
    *begin*/*end* marker lines when both are set. The result always
    ends with a single trailing newline.
    """
    lines = text.replace("\t", TAB_REPLACEMENT).split("\n")
    if len(lines) > 1 and begin is not None and end is not None:
        lines = [begin, *lines, end]
    return "\n".join(lines) + "\n"


def strip_markers(
    formatted: str,
    begin: str | None = GHCI_BLOCK_BEGIN,
    end: str | None = GHCI_BLOCK_END,
) -> str:
    """Inverse of :func:`format_command` for text without tabs."""
    lines = formatted.removesuffix("\n").split("\n")
    if (
        len(lines) > 2
        and begin is not None
        and lines[0] == begin
        and lines[-1] == end
    ):
        lines = lines[1:-1]
    return "\n".join(lines)


@dataclass(frozen=True)
class CommandFormatter:
    """Per-interpreter formatting settings.

    ``begin``/``end`` are the interpreter's multi-statement markers;
    leave them unset for interpreters that read each line on its own.
    """

    begin: str | None = GHCI_BLOCK_BEGIN
    end: str | None = GHCI_BLOCK_END
    encoding: str = "utf-8"

    @property
    def wraps(self) -> bool:
        return self.begin is not None and self.end is not None

    def format(self, text: str) -> bytes:
        return format_command(text, self.begin, self.end).encode(self.encoding)

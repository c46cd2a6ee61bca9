"""Evaluable blocks — the blank-line-delimited span around the cursor.

Shared between the editor widget and tests. No Textual dependency.
"""

from __future__ import annotations

from collections.abc import Sequence


def _is_blank(line: str) -> bool:
    return line.strip() == ""


def find_block(lines: Sequence[str], row: int) -> tuple[int, int] | None:
    """Return the inclusive ``(begin, end)`` line range around *row*.

    The range grows up and down from *row* until a blank line or a
    buffer edge. A cursor on a blank line yields just that line.
    Returns None for an empty buffer.
    """
    if not lines:
        return None
    row = max(0, min(row, len(lines) - 1))
    if _is_blank(lines[row]):
        return row, row

    begin = row
    while begin > 0 and not _is_blank(lines[begin - 1]):
        begin -= 1

    end = row
    while end < len(lines) - 1 and not _is_blank(lines[end + 1]):
        end += 1

    return begin, end


def block_text(lines: Sequence[str], row: int) -> str:
    """Text of the block around *row*, lines joined with newlines."""
    span = find_block(lines, row)
    if span is None:
        return ""
    begin, end = span
    return "\n".join(lines[begin:end + 1])


def toggle_comment(line: str, prefix: str = "-- ") -> str:
    """Comment *line* after its indentation, or uncomment it."""
    body = line.lstrip(" \t")
    indent = line[:len(line) - len(body)]
    if body.startswith(prefix):
        return indent + body[len(prefix):]
    return indent + prefix + body

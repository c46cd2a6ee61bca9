"""Tests for evaluable block extraction and line comments."""

from __future__ import annotations

from perigee.shared.block import block_text, find_block, toggle_comment

BUFFER = [
    'd1 $ s "bd"',
    '  # gain 1',
    "",
    'd2 $ s "hh*8"',
    "",
    "hush",
]


def test_block_around_cursor_stops_at_blank_lines():
    assert find_block(BUFFER, 0) == (0, 1)
    assert find_block(BUFFER, 1) == (0, 1)
    assert find_block(BUFFER, 3) == (3, 3)


def test_block_at_buffer_edges():
    assert find_block(BUFFER, 5) == (5, 5)
    assert find_block(["a", "b", "c"], 2) == (0, 2)
    assert find_block(["a", "b", "c"], 0) == (0, 2)


def test_cursor_on_blank_line_yields_that_line():
    assert find_block(BUFFER, 2) == (2, 2)
    assert block_text(BUFFER, 2) == ""


def test_row_past_end_is_clamped():
    assert find_block(BUFFER, 99) == (5, 5)


def test_empty_buffer_has_no_block():
    assert find_block([], 0) is None
    assert block_text([], 0) == ""


def test_block_text_joins_lines():
    assert block_text(BUFFER, 1) == 'd1 $ s "bd"\n  # gain 1'


def test_whitespace_only_line_counts_as_blank():
    lines = ["a", "   ", "b"]
    assert find_block(lines, 0) == (0, 0)
    assert find_block(lines, 2) == (2, 2)


def test_toggle_comment_keeps_indentation():
    assert toggle_comment('  # gain 1') == '  -- # gain 1'
    assert toggle_comment('  -- # gain 1') == '  # gain 1'


def test_toggle_comment_custom_prefix():
    assert toggle_comment("s.boot;", "// ") == "// s.boot;"
    assert toggle_comment("// s.boot;", "// ") == "s.boot;"

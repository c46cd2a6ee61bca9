"""Tests for interpreter input formatting."""

from __future__ import annotations

from perigee.engine.formatter import (
    CommandFormatter,
    format_command,
    strip_markers,
)


def test_single_line_gets_only_a_newline():
    assert format_command('d1 $ s "bd"') == 'd1 $ s "bd"\n'


def test_single_line_round_trip():
    text = 'd1 $ sound "bd*2 sn"'
    assert strip_markers(format_command(text)) == text


def test_multi_line_is_wrapped_in_block_markers():
    text = 'd1 $ s "bd"\n  # gain 1.2\n  # room 0.3'
    formatted = format_command(text)
    lines = formatted.split("\n")

    # n lines plus two markers plus the empty tail after the final newline
    assert len(lines) == 3 + 2 + 1
    assert lines[0] == ":{"
    assert lines[-2] == ":}"
    assert lines[-1] == ""
    assert lines[1:4] == text.split("\n")
    assert strip_markers(formatted) == text


def test_tabs_become_two_spaces():
    formatted = format_command("d1 $ s \"bd\"\n\t# speed 2")
    assert "\t" not in formatted
    assert "\n  # speed 2\n" in formatted


def test_no_markers_when_interpreter_has_none():
    formatted = format_command("a = 1;\nb = 2;", None, None)
    assert formatted == "a = 1;\nb = 2;\n"


def test_formatter_encodes_utf8():
    formatter = CommandFormatter()
    assert formatter.wraps
    assert formatter.format("x = \"é\"") == 'x = "é"\n'.encode("utf-8")


def test_formatter_without_markers_does_not_wrap():
    formatter = CommandFormatter(begin=None, end=None)
    assert not formatter.wraps
    assert formatter.format("s.boot;\n1 + 1") == b"s.boot;\n1 + 1\n"

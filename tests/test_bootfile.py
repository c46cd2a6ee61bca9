"""Tests for boot file discovery."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from perigee.engine.bootfile import (
    BOOT_FILE_NAME,
    BootFileResolver,
    expand_path,
    find_file_upwards,
)
from perigee.engine.errors import BootFileNotFound


def test_found_in_third_ancestor(tmp_path):
    boot = tmp_path / BOOT_FILE_NAME
    boot.write_text(":set prompt \"\"\n")
    start = tmp_path / "a" / "b" / "c"
    start.mkdir(parents=True)

    assert find_file_upwards(BOOT_FILE_NAME, start) == boot


def test_nearest_ancestor_wins(tmp_path):
    (tmp_path / BOOT_FILE_NAME).write_text("outer")
    inner = tmp_path / "project"
    inner.mkdir()
    (inner / BOOT_FILE_NAME).write_text("inner")

    assert find_file_upwards(BOOT_FILE_NAME, inner) == inner / BOOT_FILE_NAME


def test_not_found_up_to_root(tmp_path):
    start = tmp_path / "x" / "y"
    start.mkdir(parents=True)
    name = "NoSuchBootFile-7f3a.hs"

    with pytest.raises(BootFileNotFound) as excinfo:
        find_file_upwards(name, start)
    assert excinfo.value.filename == name
    assert excinfo.value.start_dir == str(start)


def test_directory_with_boot_name_is_ignored(tmp_path):
    name = "BootDir-9e1d.hs"
    (tmp_path / "a" / name).mkdir(parents=True)
    with pytest.raises(BootFileNotFound):
        find_file_upwards(name, tmp_path / "a")


def test_resolver_prefers_configured_path(tmp_path):
    (tmp_path / BOOT_FILE_NAME).write_text("found")
    resolver = BootFileResolver(configured="/opt/tidal/Boot.hs", start_dir=tmp_path)
    assert resolver.resolve() == Path("/opt/tidal/Boot.hs")


def test_resolver_caches_missing_result(tmp_path, caplog):
    resolver = BootFileResolver(filename="Missing-41c2.hs", start_dir=tmp_path)
    with caplog.at_level(logging.WARNING):
        assert resolver.resolve_or_none() is None
        assert resolver.resolve_or_none() is None
    warnings = [r for r in caplog.records if "Missing-41c2.hs" in r.getMessage()]
    assert len(warnings) == 1

    # Creating the file later does not change the cached outcome until reset.
    (tmp_path / "Missing-41c2.hs").write_text("")
    assert resolver.resolve_or_none() is None
    resolver.reset()
    assert resolver.resolve() == tmp_path / "Missing-41c2.hs"


def test_expand_path_only_touches_tilde():
    assert expand_path("relative/Boot.hs") == "relative/Boot.hs"
    assert expand_path("/abs/Boot.hs") == "/abs/Boot.hs"
    assert expand_path("~/Boot.hs") == str(Path.home() / "Boot.hs")

"""Tests for sample bank loading, pattern files and playback."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from perigee.shared.services.pattern_files import load_pattern, save_pattern
from perigee.shared.services.playback import play_audio
from perigee.shared.services.samples import (
    file_type,
    filter_samples,
    format_size,
    iter_samples,
    load_sample_map,
)


@pytest.fixture
def sample_root(tmp_path):
    for bank, names in {
        "bd": ["BT0A0D0.wav", "bt0a0a7.WAV", "notes.txt"],
        "hh": ["000_hh3closedhh.wav", ".hidden.wav"],
        "empty": [],
    }.items():
        bank_dir = tmp_path / bank
        bank_dir.mkdir()
        for name in names:
            (bank_dir / name).write_bytes(b"\x00" * 2048)
    return tmp_path


def test_banks_are_grouped_by_directory_and_sorted(sample_root):
    banks = load_sample_map(sample_root)

    assert list(banks) == ["bd", "hh"]
    assert [s.name for s in banks["bd"]] == ["bt0a0a7.WAV", "BT0A0D0.wav"]
    assert [s.ref for s in banks["bd"]] == ["bd:0", "bd:1"]
    assert banks["hh"][0].file_type == "WAV"
    assert banks["hh"][0].size == 2048


def test_missing_directory_gives_empty_map(tmp_path, caplog):
    assert load_sample_map(tmp_path / "nope") == {}
    assert any("not found" in r.getMessage() for r in caplog.records)


def test_filter_by_reference(sample_root):
    samples = list(iter_samples(load_sample_map(sample_root)))
    assert [s.ref for s in filter_samples(samples, "HH")] == ["hh:0"]
    assert [s.ref for s in filter_samples(samples, "bd:1")] == ["bd:1"]
    assert len(filter_samples(samples, "  ")) == 3


def test_format_size_and_type():
    assert format_size(512) == "512 B"
    assert format_size(2048) == "2.0 KB"
    assert format_size(3 * 1024 * 1024) == "3.0 MB"
    assert file_type(Path("a.aif")) == "AIFF"


def test_pattern_file_round_trip(tmp_path):
    path = tmp_path / "sets" / "live.tidal"
    assert load_pattern(path) == ""

    save_pattern(path, 'd1 $ s "bd"\n')
    assert load_pattern(path) == 'd1 $ s "bd"\n'
    assert [p.name for p in path.parent.iterdir()] == ["live.tidal"]


@pytest.mark.asyncio
async def test_missing_player_is_reported(tmp_path):
    assert await play_audio(tmp_path / "x.wav", ["perigee-no-player-1e7a"]) is False


@pytest.mark.asyncio
async def test_player_exit_code(tmp_path):
    ok = [sys.executable, "-c", "import sys; sys.exit(0)"]
    fail = [sys.executable, "-c", "import sys; sys.exit(3)"]
    assert await play_audio(tmp_path / "x.wav", ok) is True
    assert await play_audio(tmp_path / "x.wav", fail) is False


def test_same_named_folders_stay_separate_banks(tmp_path, caplog):
    for parent, names in {"a": ["one.wav", "two.wav"], "b": ["three.wav"]}.items():
        bank_dir = tmp_path / parent / "bd"
        bank_dir.mkdir(parents=True)
        for name in names:
            (bank_dir / name).write_bytes(b"\x00" * 16)

    banks = load_sample_map(tmp_path)

    assert list(banks) == ["b/bd", "bd"]
    assert [s.ref for s in banks["bd"]] == ["bd:0", "bd:1"]
    assert [s.path.parent.parent.name for s in banks["bd"]] == ["a", "a"]
    assert [s.ref for s in banks["b/bd"]] == ["b/bd:0"]
    assert any("clashes" in r.getMessage() for r in caplog.records)

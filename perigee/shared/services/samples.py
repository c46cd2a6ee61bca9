"""Sample banks — audio files grouped by their parent directory.

A bank is the directory name used by the pattern language (``bd``,
``hh``...); a sample is referenced as ``bank:index`` with files sorted
case-insensitively inside each bank.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

AUDIO_EXTENSIONS = frozenset({".wav", ".mp3", ".flac", ".ogg", ".aiff", ".aif"})

_FILE_TYPES = {
    ".wav": "WAV",
    ".mp3": "MP3",
    ".flac": "FLAC",
    ".ogg": "OGG",
    ".aiff": "AIFF",
    ".aif": "AIFF",
    ".alac": "ALAC",
    ".midi": "MIDI",
    ".mid": "MIDI",
}


@dataclass(frozen=True)
class Sample:
    path: Path
    bank: str
    index: int
    size: int

    @property
    def ref(self) -> str:
        return f"{self.bank}:{self.index}"

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def file_type(self) -> str:
        return file_type(self.path)


def format_size(size_bytes: int) -> str:
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / (1024 * 1024):.1f} MB"
    else:
        return f"{size_bytes / (1024 * 1024 * 1024):.1f} GB"


def file_type(path: Path) -> str:
    ext = path.suffix.lower()
    if not ext:
        return "DIR"
    return _FILE_TYPES.get(ext, ext)


def is_audio(path: Path) -> bool:
    return path.suffix.lower() in AUDIO_EXTENSIONS and not path.name.startswith(".")


def load_sample_map(root: str | Path) -> dict[str, list[Sample]]:
    """Walk *root* and return ``{bank: [samples sorted by name]}``.

    Unreadable directories are logged and skipped; a missing root
    yields an empty map.
    """
    root = Path(root).expanduser()
    logger.info("Loading samples from %s", root)
    if not root.is_dir():
        logger.warning("Sample directory not found: %s", root)
        return {}

    found: dict[Path, list[tuple[Path, int]]] = {}

    def _on_error(exc: OSError) -> None:
        logger.warning("Cannot read %s: %s", exc.filename, exc.strerror)

    for dirpath, _dirnames, filenames in os.walk(root, onerror=_on_error):
        for filename in filenames:
            path = Path(dirpath) / filename
            if not is_audio(path):
                continue
            try:
                size = path.stat().st_size
            except OSError as exc:
                logger.debug("Skipping %s: %s", path, exc)
                continue
            found.setdefault(path.parent, []).append((path, size))

    banks: dict[str, list[Sample]] = {}
    for bank, directory in sorted(_bank_names(root, found).items()):
        entries = sorted(found[directory], key=lambda e: e[0].name.lower())
        banks[bank] = [
            Sample(path=path, bank=bank, index=i, size=size)
            for i, (path, size) in enumerate(entries)
        ]
    logger.info("Loaded %d sample banks", len(banks))
    return banks


def _bank_names(root: Path, directories) -> dict[str, Path]:
    """Name each sample directory after its folder, like Tidal does.

    When two folders share a name the first one (by path) keeps it and
    the others are named by their path relative to *root*.
    """
    names: dict[str, Path] = {}
    for directory in sorted(directories, key=lambda d: d.relative_to(root).as_posix()):
        name = directory.name
        if name in names:
            alias = directory.relative_to(root).as_posix()
            logger.warning(
                "Sample bank %r in %s clashes with %s; using %r",
                name, directory, names[name], alias,
            )
            name = alias
        names[name] = directory
    return names


def iter_samples(banks: dict[str, list[Sample]]):
    for bank in sorted(banks):
        yield from banks[bank]


def filter_samples(samples, query: str) -> list[Sample]:
    """Samples whose ``bank:index`` reference contains *query* (any case)."""
    query = query.strip().lower()
    if not query:
        return list(samples)
    return [s for s in samples if query in s.ref.lower()]

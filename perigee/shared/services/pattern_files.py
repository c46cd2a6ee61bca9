"""Reading and durably writing pattern files edited in the editor."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)

PATTERN_EXTENSIONS = frozenset({".tidal", ".hs", ".scd", ".sc", ".txt"})


def is_pattern_file(path: Path) -> bool:
    return path.suffix.lower() in PATTERN_EXTENSIONS


def load_pattern(path: Path) -> str:
    """Return the file's text, or "" when it does not exist yet.

    Other OS errors propagate.
    """
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.info("New pattern file: %s", path)
        return ""


def _sync_directory(directory: Path) -> None:
    try:
        flags = os.O_RDONLY | getattr(os, "O_DIRECTORY", 0)
        fd = os.open(str(directory), flags)
        try:
            os.fsync(fd)
        finally:
            os.close(fd)
    except OSError:
        # Not supported everywhere.
        pass


def save_pattern(path: Path, text: str) -> None:
    """Replace *path* with *text* via a fsynced temporary file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent)
    )
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
        _sync_directory(path.parent)
    finally:
        if tmp_path.exists():
            tmp_path.unlink(missing_ok=True)
    logger.info("Saved %s (%d bytes)", path, len(text.encode("utf-8")))

"""Exception hierarchy for the session engine.

Specific exceptions for each failure mode. None of them is fatal to
the application; callers surface them as console or status messages.
"""
from __future__ import annotations

from pathlib import Path


class PerigeeError(Exception):
    """Base exception for all session engine errors."""


class SpawnError(PerigeeError):
    """The interpreter binary is missing or the OS refused to start it."""
    def __init__(self, session: str, reason: str):
        self.session = session
        self.reason = reason
        super().__init__(f"Failed to start session {session}: {reason}")


class WriteError(PerigeeError):
    """The session's input pipe is closed or broken."""
    def __init__(self, session: str, reason: str):
        self.session = session
        self.reason = reason
        super().__init__(f"Cannot write to session {session}: {reason}")


class BootFileNotFound(PerigeeError):
    """No ancestor directory contains the boot file."""
    def __init__(self, filename: str, start_dir: str | Path):
        self.filename = filename
        self.start_dir = str(start_dir)
        super().__init__(
            f"Boot file {filename} not found in {self.start_dir} "
            f"or any parent directory"
        )

"""Boot file resolution.

A session's optional startup script comes either from configuration
or from the first ancestor directory of the working directory that
contains the well-known file name.
"""
from __future__ import annotations

import logging
from pathlib import Path

from .errors import BootFileNotFound

logger = logging.getLogger(__name__)

BOOT_FILE_NAME = "BootTidal.hs"


def expand_path(path: str) -> str:
    """Expand a leading ``~``; any other path is returned unchanged."""
    if not path.startswith("~"):
        return path
    try:
        return str(Path(path).expanduser())
    except RuntimeError:
        # No resolvable home directory.
        return path


def find_file_upwards(name: str, start: str | Path | None = None) -> Path:
    """Return the first ``<dir>/<name>`` from *start* up to the root.

    Raises BootFileNotFound when no directory on the way contains it.
    """
    origin = Path(start) if start is not None else Path.cwd()
    origin = origin.absolute()
    for directory in (origin, *origin.parents):
        candidate = directory / name
        if candidate.is_file():
            return candidate
    raise BootFileNotFound(name, origin)


class BootFileResolver:
    """Resolves and caches one session's boot file."""

    _UNRESOLVED = object()

    def __init__(
        self,
        configured: str | None = None,
        filename: str = BOOT_FILE_NAME,
        start_dir: str | Path | None = None,
    ) -> None:
        self._configured = configured or None
        self._filename = filename
        self._start_dir = start_dir
        self._result: object = self._UNRESOLVED

    @property
    def filename(self) -> str:
        return self._filename

    def resolve(self) -> Path:
        """Return the boot file path, raising BootFileNotFound if absent.

        The first outcome, found or not, is reused by every later call.
        """
        if self._result is self._UNRESOLVED:
            self._result = self._lookup()
        if isinstance(self._result, BootFileNotFound):
            raise self._result
        return self._result  # type: ignore[return-value]

    def resolve_or_none(self) -> Path | None:
        try:
            return self.resolve()
        except BootFileNotFound:
            return None

    def reset(self, configured: str | None = None) -> None:
        """Forget the cached outcome, e.g. when loading a new session target."""
        self._configured = configured or None
        self._result = self._UNRESOLVED

    def _lookup(self) -> Path | BootFileNotFound:
        if self._configured:
            path = Path(expand_path(self._configured))
            logger.info("Using configured boot file %s", path)
            return path.absolute()
        try:
            found = find_file_upwards(self._filename, self._start_dir)
        except BootFileNotFound as exc:
            logger.warning("%s; starting without a boot script", exc)
            return exc
        logger.info("Found boot file %s", found)
        return found

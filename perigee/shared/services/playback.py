"""Sample playback through an external audio player."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


async def play_audio(path: str | Path, player: list[str]) -> bool:
    """Play *path* with *player* and wait for it to finish.

    Returns False (and logs) when the player is missing or fails.
    """
    argv = [*player, str(path)]
    logger.debug("Playing %s", " ".join(argv))
    try:
        proc = await asyncio.create_subprocess_exec(
            *argv,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.DEVNULL,
        )
    except FileNotFoundError:
        logger.warning("Audio player not found: %s", player[0] if player else "")
        return False
    except OSError as exc:
        logger.warning("Cannot start audio player %s: %s", argv[0], exc)
        return False

    returncode = await proc.wait()
    if returncode != 0:
        logger.warning("Audio player exited with code %d for %s", returncode, path)
        return False
    return True

"""One long-running interpreter process and its pipes.

The session writes formatted fragments to the interpreter's stdin and
reads stdout and stderr line by line into one bounded queue. Readers
suspend while the queue is full so no interpreter output is lost; the
router on the event loop is the only consumer.
"""
from __future__ import annotations

import asyncio
import logging
from enum import Enum
from pathlib import Path

from .bootfile import BootFileResolver
from .config import DEFAULT_QUEUE_CAPACITY, SessionConfig
from .errors import SpawnError, WriteError
from .formatter import CommandFormatter
from .subscription import Subscription

logger = logging.getLogger(__name__)

# Longest single output line accepted from an interpreter.
_LINE_LIMIT = 1024 * 1024
# Grace period for readers to reach end-of-stream after a kill.
_READER_DRAIN_SECONDS = 1.0


class SessionState(str, Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    STOPPED = "stopped"


class ProcessSession:
    """Start/stop lifecycle and stdin/stdout bridge for one interpreter."""

    def __init__(
        self,
        config: SessionConfig,
        *,
        resolver: BootFileResolver | None = None,
        capacity: int = DEFAULT_QUEUE_CAPACITY,
    ) -> None:
        self._config = config
        self._resolver = resolver
        if self._resolver is None and (config.boot_file or config.boot_file_name):
            self._resolver = BootFileResolver(
                configured=config.boot_file,
                filename=config.boot_file_name or "",
            )
        self._formatter = CommandFormatter(config.block_begin, config.block_end)
        self._queue: asyncio.Queue[str] = asyncio.Queue(maxsize=capacity)
        self._process: asyncio.subprocess.Process | None = None
        self._readers: list[asyncio.Task] = []
        self._supervisor: asyncio.Task | None = None
        self._state = SessionState.NOT_STARTED
        self._boot_file: Path | None = None

    # ── state ────────────────────────────────────────────────────────

    @property
    def name(self) -> str:
        return self._config.name

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def running(self) -> bool:
        return (
            self._state is SessionState.RUNNING
            and self._process is not None
            and self._process.returncode is None
        )

    @property
    def pid(self) -> int | None:
        return self._process.pid if self._process is not None else None

    @property
    def boot_file(self) -> Path | None:
        return self._boot_file

    @property
    def formatter(self) -> CommandFormatter:
        return self._formatter

    def subscription(self) -> Subscription:
        return Subscription(self.name, self._queue)

    # ── lifecycle ────────────────────────────────────────────────────

    def build_command(self) -> tuple[list[str], str | None]:
        """Return ``(argv, cwd)`` for the interpreter.

        With a resolved boot file the boot command runs from the boot
        file's directory; otherwise the plain command runs with no
        working directory override.
        """
        boot_file = None
        if self._config.boot_command and self._resolver is not None:
            boot_file = self._resolver.resolve_or_none()
        self._boot_file = boot_file
        if boot_file is None:
            if self._config.boot_command:
                logger.info("%s: no boot file, launching without", self.name)
            return list(self._config.command), None
        argv = [
            arg.replace("{boot_file}", str(boot_file))
            for arg in self._config.boot_command
        ]
        return argv, str(boot_file.parent)

    async def start(self) -> None:
        """Launch the interpreter and its two readers.

        Raises SpawnError if the binary is missing or cannot be executed;
        the session then stays NOT_STARTED.
        """
        if self._state is SessionState.RUNNING:
            logger.warning("%s: start() while already running", self.name)
            return

        argv, cwd = self.build_command()
        logger.info("Starting %s: %s (cwd=%s)", self.name, " ".join(argv), cwd)
        try:
            # argv is passed as a list, never through a shell
            proc = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=cwd,
                limit=_LINE_LIMIT,
            )
        except FileNotFoundError as exc:
            if cwd is not None and exc.filename == cwd:
                raise SpawnError(
                    self.name, f"boot file directory '{cwd}' not found"
                ) from exc
            raise SpawnError(self.name, f"'{argv[0]}' not found") from exc
        except OSError as exc:
            raise SpawnError(self.name, f"{type(exc).__name__}: {exc}") from exc

        self._process = proc
        self._state = SessionState.RUNNING
        self._readers = [
            asyncio.create_task(
                self._read_output(proc.stdout, "stdout"),
                name=f"{self.name}-stdout",
            ),
            asyncio.create_task(
                self._read_output(proc.stderr, "stderr"),
                name=f"{self.name}-stderr",
            ),
        ]
        self._supervisor = asyncio.create_task(
            self._watch_exit(proc), name=f"{self.name}-exit"
        )
        logger.info("%s started (pid=%d)", self.name, proc.pid)

    async def stop(self) -> None:
        """Close stdin, then kill the process.

        Safe before start() and on repeated calls; only the first call
        on a running session does anything.
        """
        proc = self._process
        if self._state is not SessionState.RUNNING or proc is None:
            logger.debug("%s: stop() with session %s", self.name, self._state.value)
            return
        self._state = SessionState.STOPPED
        logger.info("Stopping %s (pid=%d)", self.name, proc.pid)

        if proc.stdin is not None and not proc.stdin.is_closing():
            proc.stdin.close()
        if proc.returncode is None:
            try:
                proc.kill()
            except ProcessLookupError:
                pass
        await proc.wait()

        # Readers end at end-of-stream; one blocked on a full queue
        # would never see it.
        pending = [t for t in self._readers if not t.done()]
        if pending:
            _, still_running = await asyncio.wait(
                pending, timeout=_READER_DRAIN_SECONDS
            )
            for task in still_running:
                task.cancel()
        if self._supervisor is not None and not self._supervisor.done():
            self._supervisor.cancel()

    # ── I/O ──────────────────────────────────────────────────────────

    async def send(self, text: str) -> None:
        """Write *text* to the interpreter and echo it into the console.

        Raises WriteError when the session is not running or its input
        pipe is closed or broken.
        """
        proc = self._process
        if self._state is not SessionState.RUNNING or proc is None or proc.stdin is None:
            raise WriteError(self.name, f"session is {self._state.value}")
        if proc.returncode is not None or proc.stdin.is_closing():
            raise WriteError(self.name, "input pipe is closed")
        try:
            proc.stdin.write(self._formatter.format(text))
            await proc.stdin.drain()
        except (BrokenPipeError, ConnectionResetError) as exc:
            raise WriteError(self.name, f"{type(exc).__name__}: {exc}") from exc
        await self._queue.put(text)

    async def _read_output(
        self, stream: asyncio.StreamReader | None, label: str
    ) -> None:
        if stream is None:
            return
        while True:
            try:
                raw = await stream.readline()
            except ValueError:
                logger.warning(
                    "%s %s: line longer than %d bytes discarded",
                    self.name, label, _LINE_LIMIT,
                )
                continue
            if not raw:
                break
            line = raw.decode("utf-8", errors="replace").rstrip("\r\n")
            await self._queue.put(line)
        logger.debug("%s %s reached end of stream", self.name, label)

    async def _watch_exit(self, proc: asyncio.subprocess.Process) -> None:
        """Report an interpreter that exits without stop()."""
        returncode = await proc.wait()
        if self._state is not SessionState.RUNNING:
            return
        await asyncio.gather(*self._readers, return_exceptions=True)
        self._state = SessionState.STOPPED
        logger.warning("%s exited unexpectedly (rc=%s)", self.name, returncode)
        await self._queue.put(f"[{self.name} exited with code {returncode}]")

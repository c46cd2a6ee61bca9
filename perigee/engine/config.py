"""Configuration loaded from environment variables.

All settings have sensible defaults. Override via PERIGEE_* env vars,
or with a YAML file (see yaml_config.py) layered on top.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

from .bootfile import BOOT_FILE_NAME
from .formatter import GHCI_BLOCK_BEGIN, GHCI_BLOCK_END

logger = logging.getLogger(__name__)

OSC_CONSOLE = "osc"

# Bounded queue capacity for every output source.
DEFAULT_QUEUE_CAPACITY = 100


@dataclass
class SessionConfig:
    """How to launch and talk to one interpreter."""

    name: str
    command: list[str]
    # Used instead of ``command`` when a boot file resolves;
    # "{boot_file}" is replaced by its absolute path.
    boot_command: list[str] | None = None
    boot_file: str | None = None
    # Searched upwards from cwd when ``boot_file`` is unset.
    # None disables the search.
    boot_file_name: str | None = None
    block_begin: str | None = None
    block_end: str | None = None
    enabled: bool = True


def default_sessions() -> dict[str, SessionConfig]:
    return {
        "tidal": SessionConfig(
            name="tidal",
            command=["tidal"],
            boot_command=["ghci", "-ghci-script", "{boot_file}"],
            boot_file_name=BOOT_FILE_NAME,
            block_begin=GHCI_BLOCK_BEGIN,
            block_end=GHCI_BLOCK_END,
        ),
        "sclang": SessionConfig(
            name="sclang",
            command=["sclang"],
        ),
    }


@dataclass(frozen=True)
class KeyMap:
    """Key bindings for focus transitions and editor commands.

    Built once at startup and handed to the focus controller and the
    editor. Each field holds every key that triggers the action.
    """

    quit: tuple[str, ...] = ("ctrl+c", "ctrl+q")
    focus_editor: tuple[str, ...] = ("escape",)
    focus_console: tuple[str, ...] = ("2",)
    toggle_console: dict[str, tuple[str, ...]] = field(
        default_factory=lambda: {
            "tidal": ("ctrl+t",),
            "sclang": ("ctrl+l",),
            OSC_CONSOLE: ("ctrl+o",),
        }
    )
    focus_quick_select: tuple[str, ...] = ("ctrl+g",)
    focus_file_browser: tuple[str, ...] = ("ctrl+f",)
    toggle_sample_browser: tuple[str, ...] = ("ctrl+w",)
    toggle_visuals: tuple[str, ...] = ("ctrl+p",)
    # Editor command-mode bindings
    evaluate: tuple[str, ...] = ("ctrl+e",)
    hush: tuple[str, ...] = ("ctrl+x",)
    save: tuple[str, ...] = ("ctrl+s",)
    comment: tuple[str, ...] = ("ctrl+underscore", "ctrl+slash")

    FOCUS_ACTIONS = (
        "quit",
        "focus_editor",
        "focus_console",
        "focus_quick_select",
        "focus_file_browser",
        "toggle_sample_browser",
        "toggle_visuals",
    )
    EDITOR_ACTIONS = ("evaluate", "hush", "save", "comment")

    def focus_action(self, key: str) -> tuple[str, str | None] | None:
        """Return ``(action, console_name)`` bound to *key*, if any."""
        for action in self.FOCUS_ACTIONS:
            if key in getattr(self, action):
                return action, None
        for console, keys in self.toggle_console.items():
            if key in keys:
                return "toggle_console", console
        return None

    def editor_action(self, key: str) -> str | None:
        for action in self.EDITOR_ACTIONS:
            if key in getattr(self, action):
                return action
        return None

    def describe(self) -> list[tuple[str, str]]:
        """``(keys, action)`` rows for the help screen."""
        rows = [(", ".join(getattr(self, a)), a) for a in self.FOCUS_ACTIONS]
        rows.extend(
            (", ".join(keys), f"toggle_console:{name}")
            for name, keys in self.toggle_console.items()
        )
        rows.extend((", ".join(getattr(self, a)), a) for a in self.EDITOR_ACTIONS)
        return rows


@dataclass
class PerigeeConfig:
    """Application configuration."""

    sessions: dict[str, SessionConfig] = field(default_factory=default_sessions)
    keys: KeyMap = field(default_factory=KeyMap)

    # Editor
    editor_target: str = "tidal"
    editor_file: str = "perigee.tidal"
    comment_prefix: str = "-- "
    hush_command: str = "hush"

    # Browsers
    files_dir: str = "."
    samples_dir: str = "~/.local/share/SuperCollider/downloaded-quarks/Dirt-Samples"
    audio_player: list[str] = field(
        default_factory=lambda: ["mpv", "--really-quiet"]
    )

    # Network listener
    osc_enabled: bool = True
    osc_host: str = "127.0.0.1"
    osc_port: int = 9191
    osc_addresses: list[str] = field(default_factory=lambda: ["/play"])

    queue_capacity: int = DEFAULT_QUEUE_CAPACITY
    visual: str = "pulses"

    # Logging
    log_level: str = "INFO"
    log_file: str = "~/.perigee/logs/perigee.log"

    @property
    def console_names(self) -> list[str]:
        """One console per enabled session, then the network console."""
        names = [n for n, s in self.sessions.items() if s.enabled]
        names.append(OSC_CONSOLE)
        return names

    @classmethod
    def from_env(cls) -> PerigeeConfig:
        """Load configuration from PERIGEE_* environment variables."""
        perigee_vars = {
            k: v for k, v in os.environ.items() if k.startswith("PERIGEE_")
        }
        if perigee_vars:
            logger.info(
                "PerigeeConfig.from_env: env overrides: %s",
                ", ".join(f"{k}={v}" for k, v in sorted(perigee_vars.items())),
            )

        config = cls(
            editor_file=os.getenv("PERIGEE_EDITOR_FILE", cls.editor_file),
            files_dir=os.getenv("PERIGEE_FILES_DIR", cls.files_dir),
            samples_dir=os.getenv("PERIGEE_SAMPLES_DIR", cls.samples_dir),
            osc_host=os.getenv("PERIGEE_OSC_HOST", cls.osc_host),
            osc_port=int(os.getenv("PERIGEE_OSC_PORT", str(cls.osc_port))),
            log_level=os.getenv("PERIGEE_LOG_LEVEL", cls.log_level),
            log_file=os.getenv("PERIGEE_LOG_FILE", cls.log_file),
        )
        boot_file = os.getenv("PERIGEE_BOOT_FILE")
        if boot_file and config.editor_target in config.sessions:
            config.sessions[config.editor_target].boot_file = boot_file
        player = os.getenv("PERIGEE_AUDIO_PLAYER")
        if player:
            config.audio_player = player.split()
        return config

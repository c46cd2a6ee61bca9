"""YAML configuration loader.

Loads a single YAML file layered over the PERIGEE_* environment
defaults. Every section is optional.

Example YAML:
    sessions:
      tidal:
        command: [tidal]
        boot_command: [ghci, -ghci-script, "{boot_file}"]
        boot_file: ~/live/BootTidal.hs
        block: [":{", ":}"]
      sclang:
        command: [pw-jack, sclang]
      extra:
        enabled: false

    paths:
      files: ~/live
      samples: ~/samples

    editor:
      target: tidal
      file: perigee.tidal
      hush: hush

    osc:
      host: 127.0.0.1
      port: 9191
      addresses: [/play]

    keys:
      quit: [ctrl+c, ctrl+q]
      toggle_console:
        tidal: [ctrl+t]

    visuals:
      default: pulses

    playback:
      command: [mpv, --really-quiet]

    logging:
      level: DEBUG
"""
from __future__ import annotations

import dataclasses
import logging
from pathlib import Path

import yaml

from .config import KeyMap, PerigeeConfig, SessionConfig

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "perigee.yaml"


def _as_keys(value) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value,)
    return tuple(str(v) for v in value or ())


def _parse_keys(raw: dict, base: KeyMap) -> KeyMap:
    """Build a KeyMap from a ``keys:`` section, keeping unset defaults."""
    overrides: dict = {}
    for action in (*KeyMap.FOCUS_ACTIONS, *KeyMap.EDITOR_ACTIONS):
        if action in raw:
            overrides[action] = _as_keys(raw[action])
    if "toggle_console" in raw:
        consoles = dict(base.toggle_console)
        for name, keys in (raw.get("toggle_console") or {}).items():
            consoles[str(name)] = _as_keys(keys)
        overrides["toggle_console"] = consoles
    unknown = set(raw) - set(overrides)
    if unknown:
        logger.warning(
            "Ignoring unknown key binding action(s): %s",
            ", ".join(sorted(unknown)),
        )
    return dataclasses.replace(base, **overrides)


def _parse_session(name: str, raw: dict, base: SessionConfig | None) -> SessionConfig:
    session = base or SessionConfig(name=name, command=[name])
    block = raw.get("block")
    begin, end = session.block_begin, session.block_end
    if block is not None:
        if not block:
            begin = end = None
        elif len(block) != 2:
            raise ValueError(
                f"sessions.{name}.block must be a [begin, end] pair"
            )
        else:
            begin, end = str(block[0]), str(block[1])
    command = raw.get("command", session.command)
    if isinstance(command, str):
        command = command.split()
    boot_command = raw.get("boot_command", session.boot_command)
    if isinstance(boot_command, str):
        boot_command = boot_command.split()
    return SessionConfig(
        name=name,
        command=list(command),
        boot_command=list(boot_command) if boot_command else None,
        boot_file=raw.get("boot_file", session.boot_file),
        boot_file_name=raw.get("boot_file_name", session.boot_file_name),
        block_begin=begin,
        block_end=end,
        enabled=bool(raw.get("enabled", session.enabled)),
    )


def apply_yaml(config: PerigeeConfig, raw: dict) -> PerigeeConfig:
    """Apply parsed YAML sections onto *config* (mutated and returned)."""
    for name, section in (raw.get("sessions") or {}).items():
        config.sessions[name] = _parse_session(
            name, section or {}, config.sessions.get(name)
        )

    paths = raw.get("paths") or {}
    config.files_dir = paths.get("files", config.files_dir)
    config.samples_dir = paths.get("samples", config.samples_dir)

    editor = raw.get("editor") or {}
    config.editor_target = editor.get("target", config.editor_target)
    config.editor_file = editor.get("file", config.editor_file)
    config.hush_command = editor.get("hush", config.hush_command)
    config.comment_prefix = editor.get("comment_prefix", config.comment_prefix)

    osc = raw.get("osc") or {}
    config.osc_enabled = bool(osc.get("enabled", config.osc_enabled))
    config.osc_host = osc.get("host", config.osc_host)
    config.osc_port = int(osc.get("port", config.osc_port))
    if "addresses" in osc:
        config.osc_addresses = [str(a) for a in osc["addresses"]]

    if "keys" in raw:
        config.keys = _parse_keys(raw.get("keys") or {}, config.keys)

    visuals = raw.get("visuals") or {}
    config.visual = visuals.get("default", config.visual)

    playback = raw.get("playback") or {}
    if "command" in playback:
        command = playback["command"]
        config.audio_player = command.split() if isinstance(command, str) else list(command)

    logging_raw = raw.get("logging") or {}
    config.log_level = logging_raw.get("level", config.log_level)
    config.log_file = logging_raw.get("file", config.log_file)

    if config.editor_target not in config.sessions:
        logger.warning(
            "Editor target %r is not a configured session", config.editor_target
        )
    return config


def load_yaml_config(
    path: str | Path, base: PerigeeConfig | None = None
) -> PerigeeConfig:
    """Load and parse a YAML config file over *base* (env defaults)."""
    path = Path(path)
    logger.info(
        "load_yaml_config: loading %s (exists=%s)", path, path.exists()
    )
    try:
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.error("load_yaml_config: config file not found at %s", path)
        raise
    except yaml.YAMLError as exc:
        logger.error("load_yaml_config: YAML parse error in %s: %s", path, exc)
        raise

    if not isinstance(raw, dict):
        raise ValueError(f"{path}: top level must be a mapping")

    logger.info(
        "Parsed YAML config %s — sections: %s",
        path.name, ", ".join(sorted(raw)) if raw else "(empty)",
    )
    return apply_yaml(base or PerigeeConfig.from_env(), raw)


def discover_config_path(cwd: Path | None = None) -> Path | None:
    """Return ./perigee.yaml, else ~/.config/perigee/perigee.yaml, if present."""
    local = (cwd or Path.cwd()) / CONFIG_FILE_NAME
    if local.is_file():
        return local
    user = Path.home() / ".config" / "perigee" / CONFIG_FILE_NAME
    if user.is_file():
        return user
    return None


def load_config(path: str | Path | None = None) -> PerigeeConfig:
    """Env defaults, overlaid with the explicit or discovered YAML file."""
    config_path = Path(path) if path else discover_config_path()
    if config_path is None:
        logger.info("No config file found; using defaults")
        return PerigeeConfig.from_env()
    return load_yaml_config(config_path)

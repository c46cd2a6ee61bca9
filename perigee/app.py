"""Perigee CLI — main application entry point."""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path


def _configure_logging(level: str, log_file: str) -> Path:
    """Send every log record to a rotating file; the TUI owns the terminal."""
    path = Path(log_file).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()
    handler = RotatingFileHandler(
        path, maxBytes=2_000_000, backupCount=5, encoding="utf-8"
    )
    handler.setFormatter(logging.Formatter(
        "%(asctime)s %(levelname)s %(name)s [pid=%(process)d] %(message)s"
    ))
    root.addHandler(handler)
    return path


def _list_samples(samples_dir: str) -> int:
    from perigee.shared.services.samples import format_size, load_sample_map

    banks = load_sample_map(samples_dir)
    if not banks:
        print(f"No samples found in {Path(samples_dir).expanduser()}")
        return 1
    for bank, samples in banks.items():
        total = sum(s.size for s in samples)
        print(f"{bank:<24} {len(samples):>4} samples  {format_size(total):>9}")
    print(f"{len(banks)} banks")
    return 0


def main() -> None:
    import argparse

    parser = argparse.ArgumentParser(
        prog="perigee",
        description="Terminal front-end for live-coding interpreters",
    )
    parser.add_argument(
        "file", nargs="?", default=None,
        help="Pattern file to open in the editor (default: perigee.tidal)",
    )
    parser.add_argument(
        "--config", default=None,
        help="Path to a perigee.yaml configuration file",
    )
    parser.add_argument(
        "--boot-file", default=None,
        help="Boot file for the editor's target session (skips the upward search)",
    )
    parser.add_argument(
        "--no-sclang", action="store_true",
        help="Do not start the sclang session",
    )
    parser.add_argument(
        "--osc-port", type=int, default=None,
        help="UDP port of the OSC listener (default: 9191)",
    )
    parser.add_argument(
        "--list-samples", action="store_true",
        help="Print the sample banks found in the samples directory and exit",
    )
    args = parser.parse_args()

    import yaml

    from perigee.engine.yaml_config import load_config

    try:
        config = load_config(args.config)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        print(f"Error: cannot load config: {exc}", file=sys.stderr)
        sys.exit(2)

    if args.list_samples:
        sys.exit(_list_samples(config.samples_dir))

    if args.boot_file and config.editor_target in config.sessions:
        config.sessions[config.editor_target].boot_file = args.boot_file
    if args.no_sclang and "sclang" in config.sessions:
        config.sessions["sclang"].enabled = False
    if args.osc_port is not None:
        config.osc_port = args.osc_port

    log_path = _configure_logging(config.log_level, config.log_file)
    logger = logging.getLogger(__name__)
    logger.info(
        "Starting perigee cwd=%s config=%s sessions=%s log=%s",
        Path.cwd(),
        args.config or "<discovered>",
        ", ".join(config.console_names),
        log_path,
    )

    from perigee.tui.app import PerigeeApp

    app = PerigeeApp(config, Path(args.file) if args.file else None)
    app.run()
    logger.info("perigee exited")


if __name__ == "__main__":
    main()

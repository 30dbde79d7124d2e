from __future__ import annotations

import argparse
import logging
import os
import signal
import sys
from pathlib import Path
from typing import Optional

from PyQt6.QtCore import QTimer
from PyQt6.QtWidgets import QApplication

import load
from watermark_client.qt_host import QtHost
from watermark_client.settings_watcher import SettingsWatcher
from watermark_plugin.lifecycle import BUNDLED_PLUGIN_DIR, ExtensionMetadata
from watermark_plugin.logging_utils import (
    build_rotating_file_handler,
    configure_logger,
    resolve_logs_dir,
)
from watermark_plugin.settings import SETTINGS_FILE, SettingsStore

PLUGIN_DIR_ENV_VAR = "WATERMARK_PLUGIN_DIR"
DEFAULT_PLUGIN_DIR = BUNDLED_PLUGIN_DIR
CONFIG_DIR_NAME = "watermark"
LOG_FILENAME = "watermark.log"


def _explicit_plugin_dir(arg_dir: Optional[str]) -> Optional[Path]:
    raw = arg_dir or os.getenv(PLUGIN_DIR_ENV_VAR)
    if not raw:
        return None
    return Path(raw).expanduser().resolve()


def resolve_plugin_dir(arg_dir: Optional[str]) -> Path:
    return _explicit_plugin_dir(arg_dir) or DEFAULT_PLUGIN_DIR


def default_settings_path() -> Path:
    config_home = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return config_home / CONFIG_DIR_NAME / SETTINGS_FILE


def resolve_settings_path(arg_settings: Optional[str], arg_dir: Optional[str]) -> Path:
    """Explicit file, else next to an explicit plugin dir, else the user config dir."""
    if arg_settings:
        return Path(arg_settings).expanduser().resolve()
    explicit_dir = _explicit_plugin_dir(arg_dir)
    if explicit_dir is not None:
        return explicit_dir / SETTINGS_FILE
    return default_settings_path()


def _attach_file_logging(logger: logging.Logger) -> None:
    try:
        handler = build_rotating_file_handler(resolve_logs_dir(), LOG_FILENAME)
    except OSError as exc:
        logger.warning("File logging unavailable: %s", exc)
        return
    logger.addHandler(handler)


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Desktop watermark overlay")
    parser.add_argument("--plugin-dir", help="Directory holding metadata.json and the bundled icons/")
    parser.add_argument(
        "--settings",
        help="Path to the settings JSON file (default: <plugin-dir>/settings.json, or ~/.config/watermark/settings.json)",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    logger = configure_logger(debug_enabled=args.debug)
    _attach_file_logging(logger)

    plugin_dir = resolve_plugin_dir(args.plugin_dir)
    metadata = ExtensionMetadata.load(plugin_dir)
    settings = SettingsStore(resolve_settings_path(args.settings, args.plugin_dir))
    try:
        settings.path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        logger.warning("Settings directory %s unavailable: %s", settings.path.parent, exc)
    logger.info("Starting watermark overlay (pid=%s)", os.getpid())
    logger.debug("Plugin dir=%s settings=%s values=%s", plugin_dir, settings.path, settings.as_dict())

    app = QApplication(sys.argv[:1])
    app.setQuitOnLastWindowClosed(False)
    signal.signal(signal.SIGINT, lambda *_args: app.quit())
    # Wake the interpreter periodically so Ctrl+C reaches the handler.
    wake_timer = QTimer()
    wake_timer.timeout.connect(lambda: None)
    wake_timer.start(250)

    load.init(metadata, host=QtHost(app), settings=settings)
    watcher = SettingsWatcher(settings)
    load.enable()

    exit_code = app.exec()
    watcher.stop()
    load.shutdown()
    logger.info("Watermark overlay exiting with code %s", exit_code)
    return int(exit_code)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())

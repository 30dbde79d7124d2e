from __future__ import annotations

import logging
import os
import tempfile
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional

LOGGER_NAME = "Watermark"
LOG_TAG = "Watermark"
LOG_LEVEL_ENV_VAR = "WATERMARK_LOG_LEVEL"
LOG_DIR_ENV_VAR = "WATERMARK_LOG_DIR"
DEFAULT_LOG_LEVEL = logging.INFO
DEFAULT_LOG_RETENTION = 5
DEFAULT_LOG_MAX_BYTES = 512 * 1024
FILE_LOG_FORMAT = f"%(asctime)s [{LOG_TAG}] %(levelname)s %(name)s: %(message)s"

_LEVEL_NAME_MAP = {
    "CRITICAL": logging.CRITICAL,
    "FATAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
    "TRACE": logging.DEBUG,
}


def coerce_level(raw: Any) -> Optional[int]:
    if raw is None:
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str):
        token = raw.strip().upper()
        if token.isdigit():
            return int(token)
        return _LEVEL_NAME_MAP.get(token)
    return None


def resolve_log_level(debug_enabled: bool = False) -> int:
    """Pick the plugin log level: debug flag, then env override, then INFO."""
    if debug_enabled:
        return logging.DEBUG
    level = coerce_level(os.environ.get(LOG_LEVEL_ENV_VAR))
    if level is None or level == logging.NOTSET:
        return DEFAULT_LOG_LEVEL
    return level


def configure_logger(debug_enabled: bool = False) -> logging.Logger:
    """Attach the tagged console handler once and stop propagation to root."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(resolve_log_level(debug_enabled))
    if not any(getattr(handler, "_watermark_handler", False) for handler in logger.handlers):
        handler = logging.StreamHandler()
        handler._watermark_handler = True  # type: ignore[attr-defined]
        handler.setFormatter(logging.Formatter(f"[%(asctime)s] [{LOG_TAG}] %(message)s", "%H:%M:%S"))
        logger.addHandler(handler)
    logger.propagate = False
    return logger


def resolve_logs_dir(log_dir_name: str = "watermark") -> Path:
    """
    Resolve the directory to store plugin logs.

    Strategy:
    - Use WATERMARK_LOG_DIR if set.
    - Fall back to XDG state/cache locations, then `cwd/logs/<log_dir_name>`.
    - Final fallback: tempdir/<log_dir_name>.
    """
    candidates = []

    env_override = os.environ.get(LOG_DIR_ENV_VAR)
    if env_override:
        candidates.append(Path(env_override).expanduser())

    state_home = Path(os.environ.get("XDG_STATE_HOME", Path.home() / ".local" / "state"))
    cache_home = Path(os.environ.get("XDG_CACHE_HOME", Path.home() / ".cache"))
    candidates.append(state_home / "logs")
    candidates.append(cache_home / "logs")
    candidates.append(Path.cwd() / "logs")

    for base in candidates:
        try:
            target = base / log_dir_name
            target.mkdir(parents=True, exist_ok=True)
            return target
        except OSError:
            continue

    temp_fallback = Path(tempfile.gettempdir()) / log_dir_name
    temp_fallback.mkdir(parents=True, exist_ok=True)
    return temp_fallback


def build_rotating_file_handler(
    log_dir: Path,
    filename: str,
    *,
    retention: int = DEFAULT_LOG_RETENTION,
    max_bytes: int = DEFAULT_LOG_MAX_BYTES,
    formatter: Optional[logging.Formatter] = None,
) -> RotatingFileHandler:
    """Rotating file handler for ``log_dir/filename``.

    ``retention`` counts the live file plus its rotated copies. The file is
    only opened on the first record.
    """
    path = Path(log_dir) / filename
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        str(path),
        maxBytes=max_bytes,
        backupCount=max(retention, 1) - 1,
        encoding="utf-8",
        delay=True,
    )
    handler.setFormatter(formatter or logging.Formatter(FILE_LOG_FORMAT))
    return handler

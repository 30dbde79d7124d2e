"""Icon identifier resolution with the theme -> path -> bundled -> placeholder chain."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional

from watermark_plugin.host import IconKind, IconSource

_LOGGER = logging.getLogger("Watermark.Icons")

ERROR_ICON_NAME = "face-sad-symbolic"
BUNDLED_ICON_DIR = "icons"
BUNDLED_ICON_SUFFIX = "-symbolic.svg"


def bundled_icon_path(plugin_dir: Path, identifier: str) -> Path:
    """Return the bundled fallback candidate for ``identifier``."""
    stem = identifier.lower().replace(" ", "-")
    return Path(plugin_dir) / BUNDLED_ICON_DIR / f"{stem}{BUNDLED_ICON_SUFFIX}"


class IconResolver:
    """Turns a user-supplied icon identifier into an :class:`IconSource`.

    Theme lookup wins over path existence; the bundled directory is only
    consulted after both fail. Unresolvable identifiers never raise: one
    diagnostic is emitted and the placeholder is returned.
    """

    def __init__(
        self,
        plugin_uuid: str,
        plugin_dir: Path,
        *,
        has_theme_icon: Callable[[str], bool],
        path_exists: Callable[[str], bool],
        log_fn: Optional[Callable[[str], None]] = None,
    ) -> None:
        self._uuid = plugin_uuid
        self._plugin_dir = Path(plugin_dir)
        self._has_theme_icon = has_theme_icon
        self._path_exists = path_exists
        self._log = log_fn or _LOGGER.warning

    def resolve(self, identifier: str) -> IconSource:
        identifier = identifier or ""
        if identifier and self._has_theme_icon(identifier):
            return IconSource(IconKind.THEME, identifier)
        if identifier and self._path_exists(identifier):
            return IconSource(IconKind.FILE, identifier)
        candidate = str(bundled_icon_path(self._plugin_dir, identifier))
        if identifier and self._path_exists(candidate):
            return IconSource(IconKind.BUNDLED, candidate)
        self._log(f"{self._uuid}: could not find icon {identifier!r}; using {ERROR_ICON_NAME}")
        return IconSource(IconKind.ERROR, ERROR_ICON_NAME)

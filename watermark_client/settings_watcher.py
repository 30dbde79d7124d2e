from __future__ import annotations

import logging
from typing import Optional

from PyQt6.QtCore import QFileSystemWatcher, QObject, QTimer

from watermark_plugin.settings import SettingsStore

_LOGGER = logging.getLogger("Watermark.Settings")

RELOAD_DEBOUNCE_MS = 150


class SettingsWatcher(QObject):
    """Reloads the settings store when its file changes on disk.

    Editors often replace the file instead of writing it in place, which
    drops it from the watch list; the parent directory is watched too and the
    file is re-added after every reload.
    """

    def __init__(self, store: SettingsStore, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._store = store
        self._watcher = QFileSystemWatcher(self)
        self._watcher.fileChanged.connect(self._schedule_reload)
        self._watcher.directoryChanged.connect(self._schedule_reload)
        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.setInterval(RELOAD_DEBOUNCE_MS)
        self._timer.timeout.connect(self._reload)
        self._rewatch()

    def _rewatch(self) -> None:
        path = self._store.path
        directory = path.parent
        if directory.exists() and str(directory) not in self._watcher.directories():
            self._watcher.addPath(str(directory))
        if path.exists() and str(path) not in self._watcher.files():
            self._watcher.addPath(str(path))

    def _schedule_reload(self, _path: str) -> None:
        self._timer.start()

    def _reload(self) -> None:
        self._rewatch()
        changed = self._store.reload()
        if changed:
            _LOGGER.info("Applied settings change: %s", ", ".join(changed))

    def stop(self) -> None:
        self._timer.stop()
        watched = self._watcher.files() + self._watcher.directories()
        if watched:
            self._watcher.removePaths(watched)

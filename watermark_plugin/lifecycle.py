from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from watermark_plugin.host import Host
from watermark_plugin.manager import WatermarkManager
from watermark_plugin.settings import SettingsStore

METADATA_FILE = "metadata.json"
DEFAULT_UUID = "watermark@desktop"
# Installed alongside the code as package data: metadata.json and icons/.
BUNDLED_PLUGIN_DIR = Path(__file__).resolve().parent


class LifecycleTracker:
    """Tracks live host handles so teardown can be verified."""

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger
        self._handles: Dict[int, Any] = {}

    @property
    def handles(self) -> List[Any]:
        return list(self._handles.values())

    def track_handle(self, handle: Any) -> None:
        if handle is None:
            return
        self._handles[id(handle)] = handle

    def untrack_handle(self, handle: Any) -> None:
        if handle is None:
            return
        self._handles.pop(id(handle), None)

    def log_state(self, label: str) -> None:
        handles = list(self._handles.values())
        if handles:
            self._logger.debug("Tracked resources %s: handles=%s", label, handles)


@dataclass(frozen=True)
class ExtensionMetadata:
    """What the host tells the plugin about itself at ``init`` time."""

    uuid: str
    path: Path
    name: str = "Watermark"
    version: str = ""

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], path: Optional[Path] = None) -> "ExtensionMetadata":
        raw_path = path if path is not None else data.get("path")
        if not raw_path:
            raise ValueError("Extension metadata requires an install path")
        return cls(
            uuid=str(data.get("uuid") or DEFAULT_UUID),
            path=Path(raw_path),
            name=str(data.get("name") or "Watermark"),
            version=str(data.get("version") or ""),
        )

    @classmethod
    def load(cls, plugin_dir: Path) -> "ExtensionMetadata":
        """Read ``metadata.json`` from ``plugin_dir``; missing fields use defaults."""
        plugin_dir = Path(plugin_dir)
        try:
            data = json.loads((plugin_dir / METADATA_FILE).read_text(encoding="utf-8"))
        except FileNotFoundError:
            data = {}
        except json.JSONDecodeError:
            data = {}
        if not isinstance(data, dict):
            data = {}
        return cls.from_mapping(data, path=plugin_dir)


class ExtensionContext:
    """The single process-wide plugin instance handed to lifecycle hooks."""

    def __init__(
        self,
        metadata: ExtensionMetadata,
        host: Host,
        settings: Optional[SettingsStore] = None,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.metadata = metadata
        self.host = host
        self.settings = settings if settings is not None else SettingsStore.for_plugin_dir(metadata.path)
        self.logger = logger or logging.getLogger("Watermark")
        self.tracker = LifecycleTracker(self.logger)
        self.manager = WatermarkManager(metadata, self.settings, host, tracker=self.tracker)

    @property
    def enabled(self) -> bool:
        return self.manager.enabled

    def enable(self) -> None:
        self.manager.enable()

    def disable(self) -> None:
        self.manager.disable()
        self.tracker.log_state("after disable")

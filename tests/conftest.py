from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Set, Tuple

import pytest

from watermark_plugin.host import IconSource, Monitor
from watermark_plugin.lifecycle import ExtensionMetadata
from watermark_plugin.settings import SettingsStore


class FakeElement:
    """Records what the overlay asks of it; size follows ``configure``."""

    def __init__(self, monitor: Monitor, *, natural_size: int = 48, defer_size: bool = False) -> None:
        self.monitor = monitor
        self.natural_size = natural_size
        self.defer_size = defer_size
        self.width = 0
        self.height = 0
        self.configured: List[Tuple[IconSource, int]] = []
        self.opacity: Optional[int] = None
        self.style: Optional[str] = None
        self.position: Optional[Tuple[float, float]] = None
        self.callbacks: List[Callable[[int, int], None]] = []
        self.release_count = 0

    def configure(self, source: IconSource, size: int) -> None:
        self.configured.append((source, size))
        if not self.defer_size:
            extent = size if size > 0 else self.natural_size
            self.width, self.height = extent, extent

    def resolve_size(self, width: int, height: int) -> None:
        self.width, self.height = width, height
        for callback in list(self.callbacks):
            callback(width, height)

    def set_opacity(self, value: int) -> None:
        self.opacity = value

    def set_style(self, style: str) -> None:
        self.style = style

    def set_position(self, x: float, y: float) -> None:
        self.position = (x, y)

    def dimensions(self) -> Tuple[int, int]:
        return self.width, self.height

    def on_size_resolved(self, callback: Callable[[int, int], None]) -> None:
        self.callbacks.append(callback)

    def release(self) -> None:
        self.release_count += 1
        self.callbacks.clear()


class FakeHost:
    def __init__(
        self,
        monitors: Sequence[Monitor] = (),
        *,
        theme_icons: Sequence[str] = (),
        existing_paths: Sequence[str] = (),
        defer_size: bool = False,
    ) -> None:
        self._monitors = list(monitors)
        self.theme_icons: Set[str] = set(theme_icons)
        self.existing_paths: Set[str] = set(existing_paths)
        self.defer_size = defer_size
        self.elements: List[FakeElement] = []
        self.callbacks: Dict[int, Callable[[], None]] = {}
        self.disconnected: List[int] = []
        self.fail_on_create = False
        self._next = 0

    def monitors(self) -> List[Monitor]:
        return list(self._monitors)

    def set_monitors(self, monitors: Sequence[Monitor]) -> None:
        self._monitors = list(monitors)

    def connect_monitors_changed(self, callback: Callable[[], None]) -> int:
        handle = self._next
        self._next += 1
        self.callbacks[handle] = callback
        return handle

    def disconnect_monitors_changed(self, handle: Optional[int]) -> None:
        if handle is None:
            return
        self.callbacks.pop(handle, None)
        self.disconnected.append(handle)

    def fire_monitors_changed(self) -> None:
        for callback in list(self.callbacks.values()):
            callback()

    def create_element(self, monitor: Monitor) -> FakeElement:
        if self.fail_on_create:
            raise RuntimeError("element creation failed")
        element = FakeElement(monitor, defer_size=self.defer_size)
        self.elements.append(element)
        return element

    def has_theme_icon(self, name: str) -> bool:
        return name in self.theme_icons

    def path_exists(self, path: str) -> bool:
        return path in self.existing_paths

    def live_elements(self) -> List[FakeElement]:
        return [element for element in self.elements if element.release_count == 0]


TWO_MONITORS = (
    Monitor(index=0, x=0, y=0, width=1920, height=1080, name="DP-1"),
    Monitor(index=1, x=1920, y=0, width=2560, height=1440, name="HDMI-1"),
)


@pytest.fixture
def plugin_dir(tmp_path: Path) -> Path:
    (tmp_path / "icons").mkdir()
    return tmp_path


@pytest.fixture
def metadata(plugin_dir: Path) -> ExtensionMetadata:
    return ExtensionMetadata(uuid="watermark@test", path=plugin_dir)


@pytest.fixture
def settings(plugin_dir: Path) -> SettingsStore:
    return SettingsStore.for_plugin_dir(plugin_dir)


@pytest.fixture
def make_host():
    def _make(monitors: Sequence[Monitor] = TWO_MONITORS, **kwargs) -> FakeHost:
        return FakeHost(monitors, **kwargs)

    return _make


@pytest.fixture
def two_monitors() -> Tuple[Monitor, ...]:
    return TWO_MONITORS

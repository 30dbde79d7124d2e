"""Contracts between the watermark plugin and the windowing host.

The plugin never touches toolkit objects directly; a host (see
``watermark_client.qt_host``) implements these protocols.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Protocol, Sequence, Tuple


@dataclass(frozen=True)
class Monitor:
    index: int
    x: int
    y: int
    width: int
    height: int
    name: str = ""


class IconKind(str, Enum):
    THEME = "theme"
    FILE = "file"
    BUNDLED = "bundled"
    ERROR = "error"


@dataclass(frozen=True)
class IconSource:
    """Outcome of icon resolution: what to draw and where it came from."""

    kind: IconKind
    value: str

    @property
    def is_image(self) -> bool:
        return self.kind in (IconKind.FILE, IconKind.BUNDLED)


SizeCallback = Callable[[int, int], None]


class IconElement(Protocol):
    """A host-owned visual element. ``release`` must be called exactly once."""

    def configure(self, source: IconSource, size: int) -> None: ...
    def set_opacity(self, value: int) -> None: ...
    def set_style(self, style: str) -> None: ...
    def set_position(self, x: float, y: float) -> None: ...
    def dimensions(self) -> Tuple[int, int]: ...
    def on_size_resolved(self, callback: SizeCallback) -> None: ...
    def release(self) -> None: ...


class Host(Protocol):
    def monitors(self) -> Sequence[Monitor]: ...
    def connect_monitors_changed(self, callback: Callable[[], None]) -> Any: ...
    def disconnect_monitors_changed(self, handle: Optional[Any]) -> None: ...
    def create_element(self, monitor: Monitor) -> IconElement: ...
    def has_theme_icon(self, name: str) -> bool: ...
    def path_exists(self, path: str) -> bool: ...

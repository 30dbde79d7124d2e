"""One watermark element pinned to one monitor."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from watermark_plugin.geometry import compute_position, opacity_to_native
from watermark_plugin.host import IconElement, IconSource, Monitor

if TYPE_CHECKING:
    from watermark_plugin.manager import WatermarkManager

_LOGGER = logging.getLogger("Watermark.Overlay")


class WatermarkOverlay:
    """Owns the element drawn on ``monitor`` and keeps it in sync with settings.

    The element's real size may only be known after the host lays it out, so
    the position is recomputed every time the element reports a new size.
    """

    def __init__(self, monitor: Monitor, manager: "WatermarkManager") -> None:
        self.monitor = monitor
        self._manager: Optional["WatermarkManager"] = manager
        self._element: Optional[IconElement] = manager.host.create_element(monitor)
        self._alive = True
        self.source: Optional[IconSource] = None
        self._element.on_size_resolved(self._on_size_resolved)
        self.update()

    @property
    def alive(self) -> bool:
        return self._alive

    @property
    def element(self) -> Optional[IconElement]:
        return self._element

    def update(self) -> None:
        if not self._alive or self._element is None or self._manager is None:
            return
        settings = self._manager.settings
        self.source = self._manager.icon_resolver.resolve(settings.icon_name)
        self._element.configure(self.source, settings.icon_size)
        self.update_style()
        self.update_position()

    def update_position(self) -> None:
        if not self._alive or self._element is None or self._manager is None:
            return
        settings = self._manager.settings
        x, y = compute_position(
            self.monitor,
            self._element.dimensions(),
            settings.position_x,
            settings.position_y,
        )
        self._element.set_position(x, y)

    def update_style(self) -> None:
        if not self._alive or self._element is None or self._manager is None:
            return
        settings = self._manager.settings
        self._element.set_opacity(opacity_to_native(settings.icon_alpha))
        color = settings.icon_color
        self._element.set_style(f"color: {color}" if color else "")

    def _on_size_resolved(self, width: int, height: int) -> None:
        _LOGGER.debug("Monitor %d element resized to %dx%d", self.monitor.index, width, height)
        self.update_position()

    def destroy(self) -> None:
        if not self._alive:
            return
        self._alive = False
        element, self._element = self._element, None
        self._manager = None
        if element is not None:
            element.release()

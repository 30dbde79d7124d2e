"""Owns the per-monitor watermark overlays and the settings bindings."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, List, Optional, Tuple

from watermark_plugin.host import Host
from watermark_plugin.icon_resolver import IconResolver
from watermark_plugin.overlay import WatermarkOverlay
from watermark_plugin.settings import RECOGNIZED_KEYS, SettingsStore

if TYPE_CHECKING:
    from watermark_plugin.lifecycle import ExtensionMetadata, LifecycleTracker

_LOGGER = logging.getLogger("Watermark.Manager")


class WatermarkManager:
    """Keeps exactly one overlay per active monitor in sync with settings.

    The manager is the only writer of the overlay list. ``disable`` may be
    called any number of times, with or without a preceding ``enable``.
    """

    def __init__(
        self,
        metadata: "ExtensionMetadata",
        settings: SettingsStore,
        host: Host,
        *,
        tracker: Optional["LifecycleTracker"] = None,
    ) -> None:
        self.metadata = metadata
        self.settings = settings
        self.host = host
        self._tracker = tracker
        self.icon_resolver = IconResolver(
            metadata.uuid,
            metadata.path,
            has_theme_icon=host.has_theme_icon,
            path_exists=host.path_exists,
        )
        self._overlays: List[WatermarkOverlay] = []
        self._monitors_handle: Optional[Any] = None
        self._bindings: List[Tuple[str, Callable[[], None]]] = []
        self._enabled = False

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def overlays(self) -> Tuple[WatermarkOverlay, ...]:
        return tuple(self._overlays)

    # Lifecycle ------------------------------------------------------------

    def enable(self) -> None:
        if self._enabled:
            _LOGGER.debug("enable() called while already enabled; ignoring")
            return
        try:
            for key in RECOGNIZED_KEYS:
                callback = self.on_settings_updated
                self.settings.bind(key, callback)
                self._bindings.append((key, callback))
            self._monitors_handle = self.host.connect_monitors_changed(self._on_monitors_changed)
            # Each overlay applies the current settings as it is built.
            self._init_overlays()
            self._enabled = True
        except Exception:
            _LOGGER.error("Failed to enable %s; rolling back", self.metadata.uuid)
            self._teardown()
            raise
        _LOGGER.info("Watermark enabled on %d monitor(s)", len(self._overlays))

    def disable(self) -> None:
        was_enabled = self._enabled
        self._teardown()
        if was_enabled:
            _LOGGER.info("Watermark disabled")

    def _teardown(self) -> None:
        self._enabled = False
        bindings, self._bindings = self._bindings, []
        for key, callback in bindings:
            self.settings.unbind(key, callback)
        handle, self._monitors_handle = self._monitors_handle, None
        if handle is not None:
            self.host.disconnect_monitors_changed(handle)
        self._clear_overlays()

    # Overlays -------------------------------------------------------------

    def _init_overlays(self) -> None:
        monitors = sorted(self.host.monitors(), key=lambda monitor: monitor.index, reverse=True)
        for monitor in monitors:
            overlay = WatermarkOverlay(monitor, self)
            self._overlays.append(overlay)
            if self._tracker is not None:
                self._tracker.track_handle(overlay)
            _LOGGER.debug(
                "Created overlay for monitor %d (%s) at %d,%d %dx%d",
                monitor.index,
                monitor.name or "unnamed",
                monitor.x,
                monitor.y,
                monitor.width,
                monitor.height,
            )

    def _clear_overlays(self) -> None:
        overlays, self._overlays = self._overlays, []
        for overlay in overlays:
            overlay.destroy()
            if self._tracker is not None:
                self._tracker.untrack_handle(overlay)

    def _on_monitors_changed(self) -> None:
        if not self._enabled:
            return
        _LOGGER.debug("Monitor layout changed; rebuilding overlays")
        self._clear_overlays()
        try:
            self._init_overlays()
        except Exception:
            # Called from a host signal handler.
            _LOGGER.exception("Failed to rebuild overlays for %s; disabling", self.metadata.uuid)
            self._teardown()

    def on_settings_updated(self) -> None:
        for overlay in self._overlays:
            overlay.update()

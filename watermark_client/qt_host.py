"""PyQt6 implementation of the watermark host services."""
from __future__ import annotations

import logging
import os
from typing import Callable, Dict, List, Optional, Tuple

from PyQt6.QtCore import QSize, Qt, QTimer
from PyQt6.QtGui import QColor, QGuiApplication, QIcon, QImageReader, QPainter, QPixmap, QScreen
from PyQt6.QtWidgets import QApplication, QLabel, QStyle

from watermark_plugin.geometry import DEFAULT_ICON_SIZE, scaled_size
from watermark_plugin.host import IconKind, IconSource, Monitor, SizeCallback
from watermark_plugin.icon_resolver import ERROR_ICON_NAME

_LOGGER = logging.getLogger("Watermark.Qt")

_TINTED_KINDS = (IconKind.THEME, IconKind.BUNDLED, IconKind.ERROR)


def _style_color(style: str) -> str:
    """Pull the value of a ``color:`` declaration out of a raw style string."""
    for declaration in style.split(";"):
        name, _, value = declaration.partition(":")
        if name.strip().lower() == "color":
            return value.strip()
    return ""


def _tint(pixmap: QPixmap, color: str) -> QPixmap:
    qcolor = QColor(color)
    if not color or not qcolor.isValid() or pixmap.isNull():
        return pixmap
    tinted = QPixmap(pixmap.size())
    tinted.setDevicePixelRatio(pixmap.devicePixelRatio())
    tinted.fill(Qt.GlobalColor.transparent)
    painter = QPainter(tinted)
    painter.drawPixmap(0, 0, pixmap)
    painter.setCompositionMode(QPainter.CompositionMode.CompositionMode_SourceIn)
    painter.fillRect(tinted.rect(), qcolor)
    painter.end()
    return tinted


def _theme_pixmap(name: str, size: int) -> QPixmap:
    extent = size if size > 0 else DEFAULT_ICON_SIZE
    icon = QIcon.fromTheme(name)
    if icon.isNull():
        style = QApplication.style()
        if style is None:
            return QPixmap()
        icon = style.standardIcon(QStyle.StandardPixmap.SP_MessageBoxWarning)
    return icon.pixmap(QSize(extent, extent))


def _image_pixmap(path: str, size: int) -> QPixmap:
    reader = QImageReader(path)
    natural = reader.size()
    if size > 0 and natural.isValid():
        width, height = scaled_size((natural.width(), natural.height()), size)
        reader.setScaledSize(QSize(width, height))
    image = reader.read()
    if image.isNull():
        _LOGGER.warning("Could not decode %s: %s", path, reader.errorString())
        return QPixmap()
    return QPixmap.fromImage(image)


class _WatermarkLabel(QLabel):
    """Frameless, click-through label kept at the bottom of the stacking order."""

    def __init__(self, on_resize: Callable[[int, int], None]) -> None:
        super().__init__(None)
        self._on_resize = on_resize
        self.setWindowFlags(
            Qt.WindowType.FramelessWindowHint
            | Qt.WindowType.WindowStaysOnBottomHint
            | Qt.WindowType.Tool
            | Qt.WindowType.WindowTransparentForInput
        )
        self.setAttribute(Qt.WidgetAttribute.WA_TranslucentBackground, True)
        self.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents, True)
        self.setAttribute(Qt.WidgetAttribute.WA_ShowWithoutActivating, True)
        self.setAlignment(Qt.AlignmentFlag.AlignCenter)

    def resizeEvent(self, event) -> None:  # type: ignore[override]
        super().resizeEvent(event)
        size = event.size()
        self._on_resize(size.width(), size.height())


class QtIconElement:
    """One watermark window. Qt reports the final size on the first resize event."""

    def __init__(self, monitor: Monitor) -> None:
        self._label = _WatermarkLabel(self._emit_size)
        self._label.setWindowTitle(f"Watermark {monitor.index}")
        self._callbacks: List[SizeCallback] = []
        self._source: Optional[IconSource] = None
        self._size = 0
        self._color = ""
        self._released = False

    @property
    def widget(self) -> QLabel:
        return self._label

    def configure(self, source: IconSource, size: int) -> None:
        if self._released:
            return
        self._source = source
        self._size = size
        self._render()

    def _render(self) -> None:
        source = self._source
        if source is None:
            return
        if source.is_image:
            pixmap = _image_pixmap(source.value, self._size)
            if pixmap.isNull():
                pixmap = _theme_pixmap(ERROR_ICON_NAME, self._size)
        else:
            pixmap = _theme_pixmap(source.value, self._size)
        if source.kind in _TINTED_KINDS:
            pixmap = _tint(pixmap, self._color)
        self._label.setPixmap(pixmap)
        logical = pixmap.deviceIndependentSize()
        self._label.resize(max(1, int(round(logical.width()))), max(1, int(round(logical.height()))))
        if not self._label.isVisible():
            self._label.show()
        self._label.lower()

    def set_opacity(self, value: int) -> None:
        if self._released:
            return
        self._label.setWindowOpacity(value / 255)

    def set_style(self, style: str) -> None:
        if self._released:
            return
        self._label.setStyleSheet(style)
        color = _style_color(style)
        if color != self._color:
            self._color = color
            self._render()

    def set_position(self, x: float, y: float) -> None:
        if self._released:
            return
        self._label.move(int(round(x)), int(round(y)))

    def dimensions(self) -> Tuple[int, int]:
        return self._label.width(), self._label.height()

    def on_size_resolved(self, callback: SizeCallback) -> None:
        self._callbacks.append(callback)

    def _emit_size(self, width: int, height: int) -> None:
        for callback in list(self._callbacks):
            callback(width, height)

    def release(self) -> None:
        if self._released:
            return
        self._released = True
        self._callbacks.clear()
        self._label.hide()
        self._label.deleteLater()


class QtHost:
    """Monitor enumeration, theme lookup and element factory backed by Qt."""

    def __init__(self, app: Optional[QGuiApplication] = None) -> None:
        instance = app or QGuiApplication.instance()
        if instance is None:
            raise RuntimeError("QtHost requires a QApplication to be created first")
        self._app: QGuiApplication = instance  # type: ignore[assignment]
        self._callbacks: Dict[int, Callable[[], None]] = {}
        self._next_handle = 0
        self._pending = False
        self._app.screenAdded.connect(self._on_screen_added)
        self._app.screenRemoved.connect(self._on_screen_removed)
        for screen in self._app.screens():
            self._watch_screen(screen)

    def monitors(self) -> List[Monitor]:
        result: List[Monitor] = []
        for index, screen in enumerate(self._app.screens()):
            geometry = screen.geometry()
            result.append(
                Monitor(
                    index=index,
                    x=geometry.x(),
                    y=geometry.y(),
                    width=geometry.width(),
                    height=geometry.height(),
                    name=screen.name(),
                )
            )
        return result

    def connect_monitors_changed(self, callback: Callable[[], None]) -> int:
        handle = self._next_handle
        self._next_handle += 1
        self._callbacks[handle] = callback
        return handle

    def disconnect_monitors_changed(self, handle: Optional[int]) -> None:
        if handle is None:
            return
        self._callbacks.pop(handle, None)

    def create_element(self, monitor: Monitor) -> QtIconElement:
        return QtIconElement(monitor)

    def has_theme_icon(self, name: str) -> bool:
        return QIcon.hasThemeIcon(name)

    def path_exists(self, path: str) -> bool:
        return os.path.exists(path)

    def _watch_screen(self, screen: QScreen) -> None:
        screen.geometryChanged.connect(lambda _rect: self._notify("geometry changed"))

    def _on_screen_added(self, screen: QScreen) -> None:
        self._watch_screen(screen)
        self._notify(f"screen added: {screen.name()}")

    def _on_screen_removed(self, screen: QScreen) -> None:
        self._notify(f"screen removed: {screen.name()}")

    def _notify(self, reason: str) -> None:
        _LOGGER.debug("Monitors changed (%s)", reason)
        # Qt may still list a removed screen while the signal is delivered.
        if self._pending:
            return
        self._pending = True
        QTimer.singleShot(0, self._dispatch)

    def _dispatch(self) -> None:
        self._pending = False
        for callback in list(self._callbacks.values()):
            callback()

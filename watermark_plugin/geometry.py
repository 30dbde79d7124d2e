"""Placement and style arithmetic for watermark overlays.

Kept free of toolkit types so the numbers can be checked without a display.
"""
from __future__ import annotations

from typing import Tuple

from watermark_plugin.host import Monitor

NATIVE_OPACITY_MAX = 255
DEFAULT_ICON_SIZE = 48

Position = Tuple[float, float]
Size = Tuple[int, int]


def compute_position(
    monitor: Monitor,
    element_size: Size,
    position_x: float,
    position_y: float,
) -> Position:
    """Map percentage offsets onto the free space of ``monitor``.

    0 puts the element flush with the top/left edge and 100 flush with the
    bottom/right edge. Values outside 0-100 are not clamped and land
    off-monitor.
    """
    element_width, element_height = element_size
    x = monitor.x + (monitor.width - element_width) * position_x / 100
    y = monitor.y + (monitor.height - element_height) * position_y / 100
    return x, y


def opacity_to_native(alpha: float) -> int:
    """Convert a 0-100 percentage to the 0-255 scale used by the host."""
    return int(round(alpha * NATIVE_OPACITY_MAX / 100))


def scaled_size(natural: Size, height: int) -> Size:
    """Scale ``natural`` to ``height`` keeping the aspect ratio.

    A non-positive height (or a degenerate source) keeps the natural size.
    """
    natural_width, natural_height = natural
    if height <= 0 or natural_height <= 0:
        return natural
    width = height * natural_width / natural_height
    return max(1, int(round(width))), height

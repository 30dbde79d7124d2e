from __future__ import annotations

import pytest

from watermark_plugin.geometry import compute_position, opacity_to_native, scaled_size
from watermark_plugin.host import Monitor


MONITOR = Monitor(index=0, x=100, y=50, width=1920, height=1080)


@pytest.mark.parametrize(
    "px, py, expected",
    [
        (0, 0, (100, 50)),
        (100, 100, (100 + 1920 - 64, 50 + 1080 - 64)),
        (50, 50, (100 + (1920 - 64) / 2, 50 + (1080 - 64) / 2)),
        (100, 0, (100 + 1920 - 64, 50)),
    ],
)
def test_compute_position_interpolates_free_space(px, py, expected):
    assert compute_position(MONITOR, (64, 64), px, py) == pytest.approx(expected)


def test_compute_position_matches_formula_for_odd_sizes():
    monitor = Monitor(index=1, x=-1280, y=200, width=1280, height=1024)
    for px, py in [(0, 0), (13, 77), (33, 66), (99, 1)]:
        x, y = compute_position(monitor, (37, 91), px, py)
        assert x == pytest.approx(-1280 + (1280 - 37) * px / 100)
        assert y == pytest.approx(200 + (1024 - 91) * py / 100)


def test_compute_position_does_not_clamp_out_of_range_values():
    x, y = compute_position(MONITOR, (64, 64), 150, -10)
    assert x > MONITOR.x + MONITOR.width - 64
    assert y < MONITOR.y


def test_opacity_conversion_follows_round():
    for alpha in range(0, 101):
        native = opacity_to_native(alpha)
        assert native == round(alpha * 255 / 100)
        assert 0 <= native <= 255
    assert opacity_to_native(0) == 0
    assert opacity_to_native(100) == 255
    assert opacity_to_native(50) == 128


def test_opacity_conversion_passes_out_of_range_through():
    assert opacity_to_native(200) == 510
    assert opacity_to_native(-10) == -26


def test_scaled_size_uses_height_as_driving_dimension():
    assert scaled_size((200, 100), 50) == (100, 50)
    assert scaled_size((100, 300), 60) == (20, 60)


def test_scaled_size_keeps_natural_size_when_auto():
    assert scaled_size((200, 100), 0) == (200, 100)
    assert scaled_size((0, 0), 64) == (0, 0)

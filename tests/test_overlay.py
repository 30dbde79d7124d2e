from __future__ import annotations

from types import SimpleNamespace

import pytest

from watermark_plugin.host import IconKind, Monitor
from watermark_plugin.icon_resolver import IconResolver
from watermark_plugin.overlay import WatermarkOverlay
from watermark_plugin.settings import ICON_ALPHA, ICON_COLOR, ICON_NAME, ICON_SIZE, POSITION_X, POSITION_Y


MONITOR = Monitor(index=0, x=1920, y=0, width=2560, height=1440)


def _manager(host, settings, plugin_dir):
    resolver = IconResolver(
        "watermark@test",
        plugin_dir,
        has_theme_icon=host.has_theme_icon,
        path_exists=host.path_exists,
        log_fn=lambda _msg: None,
    )
    return SimpleNamespace(host=host, settings=settings, icon_resolver=resolver)


@pytest.fixture
def configured(settings):
    settings.set(ICON_NAME, "face-smile-symbolic")
    settings.set(ICON_SIZE, 64)
    settings.set(POSITION_X, 100)
    settings.set(POSITION_Y, 0)
    settings.set(ICON_ALPHA, 50)
    settings.set(ICON_COLOR, "#ff0000")
    return settings


def test_construction_resolves_styles_and_positions(make_host, configured, plugin_dir):
    host = make_host([MONITOR], theme_icons={"face-smile-symbolic"})
    overlay = WatermarkOverlay(MONITOR, _manager(host, configured, plugin_dir))

    element = host.elements[0]
    assert overlay.alive
    assert overlay.source.kind is IconKind.THEME
    assert element.configured[-1][1] == 64
    assert element.opacity == 128
    assert element.style == "color: #ff0000"
    assert element.position == pytest.approx((1920 + 2560 - 64, 0))


def test_update_replaces_icon_and_recomputes(make_host, configured, plugin_dir):
    image = str(plugin_dir / "logo.png")
    host = make_host([MONITOR], theme_icons={"face-smile-symbolic"}, existing_paths={image})
    overlay = WatermarkOverlay(MONITOR, _manager(host, configured, plugin_dir))
    element = host.elements[0]

    configured.set(ICON_NAME, image)
    configured.set(ICON_SIZE, 32)
    configured.set(POSITION_X, 0)
    configured.set(POSITION_Y, 100)
    overlay.update()

    assert len(host.elements) == 1
    assert overlay.source.kind is IconKind.FILE
    assert element.configured[-1][0].value == image
    assert element.position == pytest.approx((1920, 1440 - 32))


def test_empty_color_clears_style(make_host, configured, plugin_dir):
    host = make_host([MONITOR])
    configured.set(ICON_COLOR, "")
    WatermarkOverlay(MONITOR, _manager(host, configured, plugin_dir))

    assert host.elements[0].style == ""


def test_position_follows_late_size_resolution(make_host, configured, plugin_dir):
    host = make_host([MONITOR], theme_icons={"face-smile-symbolic"}, defer_size=True)
    WatermarkOverlay(MONITOR, _manager(host, configured, plugin_dir))
    element = host.elements[0]

    # Size unknown at construction: element treated as 0x0.
    assert element.position == pytest.approx((1920 + 2560, 0))

    element.resolve_size(80, 40)

    assert element.position == pytest.approx((1920 + 2560 - 80, 0))


def test_destroy_releases_once_and_is_idempotent(make_host, configured, plugin_dir):
    host = make_host([MONITOR])
    overlay = WatermarkOverlay(MONITOR, _manager(host, configured, plugin_dir))
    element = host.elements[0]

    overlay.destroy()
    overlay.destroy()

    assert element.release_count == 1
    assert overlay.alive is False
    assert overlay.element is None


def test_update_after_destroy_is_noop(make_host, configured, plugin_dir):
    host = make_host([MONITOR])
    overlay = WatermarkOverlay(MONITOR, _manager(host, configured, plugin_dir))
    element = host.elements[0]
    calls = len(element.configured)

    overlay.destroy()
    overlay.update()
    overlay.update_position()
    overlay.update_style()

    assert len(element.configured) == calls


def test_out_of_range_values_pass_through(make_host, configured, plugin_dir):
    host = make_host([MONITOR])
    configured.set(POSITION_X, 150)
    configured.set(ICON_ALPHA, 200)
    WatermarkOverlay(MONITOR, _manager(host, configured, plugin_dir))
    element = host.elements[0]

    assert element.opacity == 510
    assert element.position[0] == pytest.approx(1920 + (2560 - 64) * 1.5)

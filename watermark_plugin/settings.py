"""JSON-backed watermark settings with per-key change bindings."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Tuple

_LOGGER = logging.getLogger("Watermark.Settings")

SETTINGS_FILE = "settings.json"

ICON_NAME = "icon-name"
ICON_SIZE = "icon-size"
POSITION_X = "position-x"
POSITION_Y = "position-y"
ICON_ALPHA = "icon-alpha"
ICON_COLOR = "icon-color"


@dataclass(frozen=True)
class SettingSpec:
    key: str
    kind: type
    default: Any
    description: str = ""


SETTINGS_SCHEMA: Dict[str, SettingSpec] = {
    spec.key: spec
    for spec in (
        SettingSpec(ICON_NAME, str, "linux-logo", "Theme icon name or path to an image"),
        SettingSpec(ICON_SIZE, int, 64, "Icon height in pixels (0 keeps the natural size)"),
        SettingSpec(POSITION_X, int, 50, "Horizontal position, percent of free space"),
        SettingSpec(POSITION_Y, int, 50, "Vertical position, percent of free space"),
        SettingSpec(ICON_ALPHA, int, 50, "Opacity percent"),
        SettingSpec(ICON_COLOR, str, "#ffffff", "Color for symbolic icons"),
    )
}

RECOGNIZED_KEYS: Tuple[str, ...] = tuple(SETTINGS_SCHEMA)

SettingsCallback = Callable[[], None]


def _coerce(spec: SettingSpec, raw: Any) -> Any:
    if raw is None:
        return spec.default
    if spec.kind is int:
        try:
            return int(raw)
        except (TypeError, ValueError):
            return spec.default
    return str(raw)


class SettingsStore:
    """Settings file plus the subscription list that fans changes out.

    Values are coerced to their schema type but never range-checked; a
    position of 150 is stored and rendered as-is.
    """

    def __init__(self, path: Path, *, autoload: bool = True) -> None:
        self.path = Path(path)
        self._values: Dict[str, Any] = {key: spec.default for key, spec in SETTINGS_SCHEMA.items()}
        self._bindings: Dict[str, List[SettingsCallback]] = {}
        if autoload:
            self.load()

    @classmethod
    def for_plugin_dir(cls, plugin_dir: Path) -> "SettingsStore":
        return cls(Path(plugin_dir) / SETTINGS_FILE)

    # Persistence ---------------------------------------------------------

    def _read_file(self) -> Dict[str, Any]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, json.JSONDecodeError) as exc:
            _LOGGER.debug("Ignoring unreadable settings file %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            _LOGGER.debug("Ignoring settings file %s: expected an object", self.path)
            return {}
        return data

    def _parse(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        return {key: _coerce(spec, data.get(key)) for key, spec in SETTINGS_SCHEMA.items()}

    def load(self) -> None:
        self._values = self._parse(self._read_file())

    def save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self._values, indent=2), encoding="utf-8")

    def reload(self) -> List[str]:
        """Re-read the file and notify bindings for every key that changed."""
        fresh = self._parse(self._read_file())
        changed = [key for key in RECOGNIZED_KEYS if fresh[key] != self._values.get(key)]
        self._values = fresh
        if changed:
            _LOGGER.debug("Settings reloaded from %s; changed=%s", self.path, ", ".join(changed))
        self._notify(changed)
        return changed

    # Values --------------------------------------------------------------

    def get(self, key: str) -> Any:
        if key not in SETTINGS_SCHEMA:
            raise KeyError(f"Unknown setting {key!r}")
        return self._values[key]

    def set(self, key: str, value: Any, *, persist: bool = False) -> None:
        if key not in SETTINGS_SCHEMA:
            raise KeyError(f"Unknown setting {key!r}")
        coerced = _coerce(SETTINGS_SCHEMA[key], value)
        if coerced == self._values.get(key):
            return
        self._values[key] = coerced
        if persist:
            self.save()
        self._notify([key])

    def as_dict(self) -> Dict[str, Any]:
        return dict(self._values)

    @property
    def icon_name(self) -> str:
        return self._values[ICON_NAME]

    @property
    def icon_size(self) -> int:
        return self._values[ICON_SIZE]

    @property
    def position_x(self) -> int:
        return self._values[POSITION_X]

    @property
    def position_y(self) -> int:
        return self._values[POSITION_Y]

    @property
    def icon_alpha(self) -> int:
        return self._values[ICON_ALPHA]

    @property
    def icon_color(self) -> str:
        return self._values[ICON_COLOR]

    # Bindings ------------------------------------------------------------

    def bind(self, key: str, callback: SettingsCallback) -> None:
        if key not in SETTINGS_SCHEMA:
            raise KeyError(f"Cannot bind unknown setting {key!r}")
        self._bindings.setdefault(key, []).append(callback)

    def unbind(self, key: str, callback: SettingsCallback) -> None:
        """Drop one binding made with ``bind``; other subscribers are untouched."""
        callbacks = self._bindings.get(key)
        if not callbacks or callback not in callbacks:
            return
        callbacks.remove(callback)
        if not callbacks:
            del self._bindings[key]

    def bound_keys(self) -> List[str]:
        return [key for key, callbacks in self._bindings.items() if callbacks]

    def _notify(self, keys: List[str]) -> None:
        # One call per distinct callback, however many of its keys changed.
        seen: List[SettingsCallback] = []
        for key in keys:
            for callback in self._bindings.get(key, ()):
                if callback not in seen:
                    seen.append(callback)
        for callback in seen:
            callback()

"""Host lifecycle entry points for the Watermark plugin.

The host calls ``init(metadata)`` once, then ``enable()`` / ``disable()`` any
number of times, and finally ``shutdown()`` when the process ends.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping, Optional, Union

if __package__:
    from .version import __version__ as WATERMARK_VERSION
    from .watermark_plugin.host import Host
    from .watermark_plugin.lifecycle import ExtensionContext, ExtensionMetadata
    from .watermark_plugin.logging_utils import LOGGER_NAME, configure_logger
    from .watermark_plugin.settings import SettingsStore
else:  # pragma: no cover - loaded as a top-level module
    from version import __version__ as WATERMARK_VERSION
    from watermark_plugin.host import Host
    from watermark_plugin.lifecycle import ExtensionContext, ExtensionMetadata
    from watermark_plugin.logging_utils import LOGGER_NAME, configure_logger
    from watermark_plugin.settings import SettingsStore

PLUGIN_NAME = "Watermark"
PLUGIN_VERSION = WATERMARK_VERSION

LOGGER = configure_logger()

MetadataLike = Union[ExtensionMetadata, Mapping[str, Any], str, Path]

_context: Optional[ExtensionContext] = None


def _coerce_metadata(metadata: MetadataLike) -> ExtensionMetadata:
    if isinstance(metadata, ExtensionMetadata):
        return metadata
    if isinstance(metadata, (str, Path)):
        return ExtensionMetadata.load(Path(metadata))
    return ExtensionMetadata.from_mapping(metadata)


def _default_host() -> Host:
    from watermark_client.qt_host import QtHost

    return QtHost()


def init(
    metadata: MetadataLike,
    *,
    host: Optional[Host] = None,
    settings: Optional[SettingsStore] = None,
) -> ExtensionContext:
    """Create the process-wide context. Repeated calls return the first one."""
    global _context
    if _context is not None:
        LOGGER.debug("init() called again; keeping existing context for %s", _context.metadata.uuid)
        return _context
    resolved = _coerce_metadata(metadata)
    LOGGER.info("Initialising %s %s from %s", resolved.uuid, PLUGIN_VERSION, resolved.path)
    _context = ExtensionContext(resolved, host if host is not None else _default_host(), settings)
    return _context


def enable() -> None:
    if _context is None:
        raise RuntimeError("enable() called before init()")
    _context.enable()


def disable() -> None:
    if _context is None:
        return
    _context.disable()


def shutdown() -> None:
    global _context
    if _context is None:
        return
    try:
        _context.disable()
    finally:
        _context = None


def context() -> Optional[ExtensionContext]:
    return _context


__all__ = ["LOGGER_NAME", "PLUGIN_NAME", "PLUGIN_VERSION", "context", "disable", "enable", "init", "shutdown"]

"""Single source of truth for the Watermark version."""

__version__ = "1.2.0"

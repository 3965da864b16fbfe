"""LED state store."""

from .led_store import LedStateStore

__all__ = ["LedStateStore"]

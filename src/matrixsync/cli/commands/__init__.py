"""CLI commands for matrixsync."""

from .config import config_group
from .device import brightness, clear, status, toggle
from .monitor import monitor
from .pattern import pattern_group

__all__ = ["brightness", "clear", "config_group", "monitor", "pattern_group", "status", "toggle"]

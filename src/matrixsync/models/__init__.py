"""Data models for matrixsync."""

from .commands import BrightnessCommand, ClearCommand, Command, ToggleCommand
from .config import AppConfig, BrokerConfig, ReconnectConfig, TopicConfig
from .matrix import MatrixState, StoreSnapshot
from .pattern import PATTERN_FORMAT_VERSION, Pattern, PatternColumn, PatternRow
from .status import (
    BrightnessChanged,
    BulkState,
    Connected,
    Disconnected,
    ErrorStatus,
    LedChanged,
    StatusEvent,
    StatusMessage,
)

__all__ = [
    "PATTERN_FORMAT_VERSION",
    "AppConfig",
    "BrightnessChanged",
    "BrightnessCommand",
    "BrokerConfig",
    "BulkState",
    "ClearCommand",
    "Command",
    "Connected",
    "Disconnected",
    "ErrorStatus",
    "LedChanged",
    "MatrixState",
    "Pattern",
    "PatternColumn",
    "PatternRow",
    "ReconnectConfig",
    "StatusEvent",
    "StatusMessage",
    "StoreSnapshot",
    "ToggleCommand",
    "TopicConfig",
]

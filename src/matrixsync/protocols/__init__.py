"""Protocol definitions and shared enums for matrixsync."""

from .events import ConnectionState, ErrorCode, EventSource
from .observers import MatrixObserver, StatusObserver

__all__ = [
    "ConnectionState",
    "ErrorCode",
    "EventSource",
    "MatrixObserver",
    "StatusObserver",
]

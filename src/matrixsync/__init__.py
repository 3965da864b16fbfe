"""Matrixsync: device synchronization for an MQTT-controlled LED matrix."""

__version__ = "0.1.0"

from .addressing import LED_COUNT, MATRIX_HEIGHT, MATRIX_WIDTH, SerpentineMapper, to_coord, to_index
from .session import MatrixSession
from .store import LedStateStore
from .transport import TransportClient

__all__ = [
    "LED_COUNT",
    "MATRIX_HEIGHT",
    "MATRIX_WIDTH",
    "LedStateStore",
    "MatrixSession",
    "SerpentineMapper",
    "TransportClient",
    "to_coord",
    "to_index",
]

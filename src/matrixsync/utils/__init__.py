"""Generic utilities for matrixsync.

- observer: thread-safe observer list with callable subscriptions
- persistence: JSON load/save for Pydantic models
"""

from .observer import ObserverManager
from .persistence import PydanticPersistence

__all__ = ["ObserverManager", "PydanticPersistence"]

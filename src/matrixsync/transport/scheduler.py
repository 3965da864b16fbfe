"""Timer scheduling for reconnect attempts."""

import logging
import threading
from typing import Callable, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class Cancellable(Protocol):
    """Handle to a scheduled callback."""

    def cancel(self) -> None:
        ...


@runtime_checkable
class Scheduler(Protocol):
    """Runs a callback once after a delay."""

    def schedule(self, delay: float, callback: Callable[[], None]) -> Cancellable:
        ...


class TimerScheduler:
    """Scheduler backed by daemon ``threading.Timer`` instances."""

    def schedule(self, delay: float, callback: Callable[[], None]) -> Cancellable:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.name = f"matrixsync-timer-{delay:g}s"
        timer.start()
        logger.debug(f"Scheduled callback in {delay:g}s")
        return timer

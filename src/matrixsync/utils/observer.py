"""Generic observer list manager.

Holds both protocol observers (objects with an ``on_*`` method) and plain
callables registered through ``subscribe``. The list is snapshotted under
the lock and callbacks run after the lock is released, so listeners may
subscribe or unsubscribe from inside a callback.
"""

import logging
from collections.abc import Callable
from threading import Lock
from typing import Any, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)


class _FunctionObserver:
    """Adapter so plain callables can live in the observer list."""

    __slots__ = ("handler",)

    def __init__(self, handler: Callable[..., Any]):
        self.handler = handler

    def __eq__(self, other: object) -> bool:
        return isinstance(other, _FunctionObserver) and other.handler == self.handler

    def __hash__(self) -> int:
        return hash(self.handler)

    def __repr__(self) -> str:
        return f"<callable {getattr(self.handler, '__qualname__', self.handler)!r}>"


T = TypeVar("T", bound=object)


class ObserverManager(Generic[T]):
    """
    Thread-safe observer list with snapshot-then-notify delivery.

    Type Parameters:
        T: The observer protocol type (e.g., StatusObserver, MatrixObserver)

    Example:
        ```python
        class MyService:
            def __init__(self):
                self._observers = ObserverManager[StatusObserver](observer_type_name="status")

            def register_observer(self, observer: StatusObserver) -> None:
                self._observers.register(observer)

            def subscribe(self, handler) -> Callable[[], None]:
                return self._observers.subscribe(handler)

            def _emit(self, event):
                self._observers.notify("on_status_event", event)
        ```
    """

    def __init__(self, lock: Optional["Lock"] = None, observer_type_name: str = "observer"):
        """
        Initialize the observer manager.

        Args:
            lock: Optional threading lock to use. If None, creates a new lock.
            observer_type_name: Name of the observer type for logging (e.g., "status")
        """
        self._observers: list[T | _FunctionObserver] = []
        self._lock = lock or Lock()
        self._observer_type_name = observer_type_name

    def register(self, observer: T) -> None:
        """Register an observer (idempotent)."""
        with self._lock:
            if observer not in self._observers:
                self._observers.append(observer)
                logger.debug(f"Registered {self._observer_type_name} observer: {observer}")

    def unregister(self, observer: T) -> None:
        """Unregister an observer; unknown observers are logged and ignored."""
        with self._lock:
            if observer in self._observers:
                self._observers.remove(observer)
                logger.debug(f"Unregistered {self._observer_type_name} observer: {observer}")
            else:
                logger.warning(
                    f"Attempted to unregister unknown {self._observer_type_name} observer: {observer}"
                )

    def subscribe(self, handler: Callable[..., Any]) -> Callable[[], None]:
        """
        Register a plain callable.

        Args:
            handler: Called with the notification arguments

        Returns:
            A function that removes the handler again. Calling it more than
            once is harmless.
        """
        entry = _FunctionObserver(handler)
        with self._lock:
            self._observers.append(entry)
        logger.debug(f"Subscribed {self._observer_type_name} handler: {entry}")

        def unsubscribe() -> None:
            # Match by identity: the same handler may be subscribed more than once
            with self._lock:
                for i, current in enumerate(self._observers):
                    if current is entry:
                        del self._observers[i]
                        break

        return unsubscribe

    def notify(self, callback_name: str, *args: Any, **kwargs: Any) -> None:
        """
        Call ``callback_name`` on every observer, or the handler itself for
        subscribed callables.

        Exceptions raised by one observer are logged and do not stop delivery
        to the rest.
        """
        with self._lock:
            observers = list(self._observers)

        for observer in observers:
            if isinstance(observer, _FunctionObserver):
                callback = observer.handler
            else:
                callback = getattr(observer, callback_name, None)
                if callback is None:
                    logger.error(f"{self._observer_type_name} observer {observer} has no method '{callback_name}'")
                    continue
            try:
                callback(*args, **kwargs)
            except Exception as e:
                logger.error(
                    f"Error notifying {self._observer_type_name} observer {observer} via {callback_name}: {e}",
                    exc_info=True,
                )

    def clear(self) -> None:
        """Remove all observers and handlers."""
        with self._lock:
            count = len(self._observers)
            self._observers.clear()
        if count > 0:
            logger.debug(f"Cleared {count} {self._observer_type_name} observer(s)")

    def __contains__(self, observer: object) -> bool:
        with self._lock:
            return observer in self._observers

    def __len__(self) -> int:
        with self._lock:
            return len(self._observers)

    def __bool__(self) -> bool:
        with self._lock:
            return len(self._observers) > 0

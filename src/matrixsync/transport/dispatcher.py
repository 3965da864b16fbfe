"""Ordered event delivery.

All status events pass through one FIFO queue and are handed to the
delivery function one at a time, so events are never reordered, merged or
dropped. Delivery runs on a single daemon worker thread that starts on the
first post, or inline when ``drain()`` is called (threaded=False).
"""

import logging
import queue
import threading
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

_STOP = object()


class _FlushMarker:
    __slots__ = ("done",)

    def __init__(self) -> None:
        self.done = threading.Event()


class EventDispatcher:
    """
    Single-consumer FIFO dispatcher.

    Thread Safety:
        ``post`` may be called from any thread. Deliveries never overlap.
    """

    def __init__(self, deliver: Callable[[Any], None], threaded: bool = True, name: str = "matrixsync-dispatch"):
        """
        Initialize the dispatcher.

        Args:
            deliver: Called once per event, in post order
            threaded: Deliver on a worker thread (True) or only from drain() (False)
            name: Worker thread name
        """
        self._deliver = deliver
        self._threaded = threaded
        self._name = name
        self._queue: queue.Queue = queue.Queue()
        self._thread: Optional[threading.Thread] = None
        self._thread_lock = threading.Lock()
        self._draining = False

    @property
    def pending(self) -> int:
        """Approximate number of queued items."""
        return self._queue.qsize()

    def post(self, event: Any) -> None:
        """Queue an event for delivery."""
        self._queue.put(event)
        if self._threaded:
            self._ensure_worker()

    def drain(self, timeout: Optional[float] = None) -> bool:
        """
        Deliver everything queued so far.

        In threaded mode this waits for the worker to reach the current end of
        the queue. Inline, it delivers on the calling thread, including events
        posted by the handlers themselves; a nested call from a handler
        returns immediately.

        Returns:
            False if the timeout expired first
        """
        if self._threaded:
            if threading.current_thread() is self._thread:
                return True
            marker = _FlushMarker()
            self.post(marker)
            return marker.done.wait(timeout)

        if self._draining:
            return True
        self._draining = True
        try:
            while True:
                try:
                    item = self._queue.get_nowait()
                except queue.Empty:
                    return True
                self._handle(item)
        finally:
            self._draining = False

    def stop(self, timeout: float = 2.0) -> None:
        """Stop the worker after it finishes what is already queued."""
        with self._thread_lock:
            thread = self._thread
            self._thread = None
        if thread is None:
            return
        self._queue.put(_STOP)
        if thread is not threading.current_thread():
            thread.join(timeout)
            if thread.is_alive():
                logger.warning(f"Dispatcher thread {self._name} did not stop within {timeout}s")

    def _ensure_worker(self) -> None:
        with self._thread_lock:
            if self._thread is not None and self._thread.is_alive():
                return
            self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
            self._thread.start()
            logger.debug(f"Started dispatcher thread {self._name}")

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            if item is _STOP:
                logger.debug(f"Dispatcher thread {self._name} stopping")
                return
            self._handle(item)

    def _handle(self, item: Any) -> None:
        if isinstance(item, _FlushMarker):
            item.done.set()
            return
        try:
            self._deliver(item)
        except Exception as e:
            logger.error(f"Error delivering event {item!r}: {e}", exc_info=True)

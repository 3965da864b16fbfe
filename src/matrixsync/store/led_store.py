"""LED state store: the canonical in-memory view of the matrix."""

import logging
from collections.abc import Callable, Iterable, Mapping
from threading import Lock
from typing import Optional

from matrixsync.addressing import check_index, to_index
from matrixsync.codec import from_state, to_state
from matrixsync.exceptions import InvalidBrightnessError
from matrixsync.models import (
    BrightnessChanged,
    BrightnessCommand,
    BulkState,
    ClearCommand,
    Connected,
    Disconnected,
    ErrorStatus,
    LedChanged,
    MatrixState,
    Pattern,
    StatusEvent,
    StoreSnapshot,
    ToggleCommand,
)
from matrixsync.protocols import EventSource, MatrixObserver
from matrixsync.transport import TransportClient
from matrixsync.utils import ObserverManager

logger = logging.getLogger(__name__)


class LedStateStore:
    """
    Single source of truth for what the matrix is showing.

    Two slots are kept apart:
    - confirmed: changes only when the device reports back (LedChanged,
      BulkState, BrightnessChanged) or the connection flag flips
    - draft: a locally loaded pattern, shown by views but never mixed into
      confirmed state until the device echoes it

    User intents (toggle, set_brightness, clear_all, apply_draft) only send
    commands; they never touch confirmed state directly.
    """

    def __init__(self, transport: TransportClient):
        """
        Initialize the store and start listening to the transport.

        Args:
            transport: Client used to send commands and receive status events
        """
        self._transport = transport
        self._lock = Lock()
        self._confirmed = MatrixState()
        self._draft: Optional[frozenset[int]] = None
        self._last_error: Optional[ErrorStatus] = None
        # Separate lock from _lock so observers can read the store while being notified
        self._observers = ObserverManager[MatrixObserver](observer_type_name="matrix")

        transport.register_observer(self, start=False)

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def register_observer(self, observer: MatrixObserver) -> None:
        """Register a view; starts the transport if it has not started yet."""
        self._observers.register(observer)
        self._transport.ensure_started()

    def unregister_observer(self, observer: MatrixObserver) -> None:
        self._observers.unregister(observer)

    def subscribe(self, handler: Callable[[StoreSnapshot], None]) -> Callable[[], None]:
        """Register a callable that receives a snapshot after every change."""
        unsubscribe = self._observers.subscribe(handler)
        self._transport.ensure_started()
        return unsubscribe

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def snapshot(self) -> StoreSnapshot:
        with self._lock:
            return self._snapshot_locked()

    @property
    def state(self) -> MatrixState:
        """Confirmed matrix state."""
        with self._lock:
            return self._confirmed

    @property
    def draft(self) -> Optional[frozenset[int]]:
        with self._lock:
            return self._draft

    @property
    def last_error(self) -> Optional[ErrorStatus]:
        with self._lock:
            return self._last_error

    def is_on(self, index: int) -> bool:
        """Check confirmed state of one LED."""
        check_index(index)
        with self._lock:
            return index in self._confirmed.active_leds

    # ------------------------------------------------------------------
    # Intents
    # ------------------------------------------------------------------

    def toggle(self, index: int) -> bool:
        """
        Ask the device to flip one LED.

        Returns:
            True if the command was sent

        Raises:
            InvalidIndexError: If index is out of range
        """
        check_index(index)
        return self._transport.send_command(ToggleCommand(index=index))

    def toggle_at(self, row: int, col: int) -> bool:
        """Ask the device to flip the LED at logical (row, col)."""
        return self.toggle(to_index(row, col))

    def set_brightness(self, value: int) -> bool:
        """
        Ask the device to change global brightness.

        Raises:
            InvalidBrightnessError: If value is not an integer in 0-255
        """
        if not isinstance(value, int) or isinstance(value, bool) or not 0 <= value <= 255:
            raise InvalidBrightnessError(value)
        return self._transport.send_command(BrightnessCommand(brightness=value))

    def clear_all(self) -> bool:
        """Ask the device to turn every LED off."""
        return self._transport.send_command(ClearCommand())

    # ------------------------------------------------------------------
    # Draft
    # ------------------------------------------------------------------

    def load_pattern(self, leds: Iterable[int]) -> None:
        """
        Load a set of LEDs into the draft slot (local only).

        Raises:
            InvalidIndexError: If any index is out of range; the draft is left unchanged
        """
        draft = frozenset(check_index(i) for i in leds)
        with self._lock:
            self._draft = draft
            snapshot = self._snapshot_locked()
        logger.info(f"Loaded draft with {len(draft)} LED(s) on")
        self._notify(snapshot)

    def load_pattern_document(self, pattern: Pattern) -> None:
        """Load a validated Pattern into the draft slot."""
        active, _colors = to_state(pattern)
        self.load_pattern(active)

    def discard_draft(self) -> None:
        with self._lock:
            if self._draft is None:
                return
            self._draft = None
            snapshot = self._snapshot_locked()
        self._notify(snapshot)

    def apply_draft(self) -> int:
        """
        Send the commands that turn the device's LEDs into the draft.

        Toggles flip whatever the device shows, so the difference against
        confirmed state is only used once a full state report has arrived on
        the current connection. Before that the matrix is cleared first and
        every draft LED is toggled on. An empty draft is always a single
        clear. The draft stays loaded until the device's reports make
        confirmed state match it.

        Returns:
            Number of commands sent successfully
        """
        with self._lock:
            draft = self._draft
            confirmed = self._confirmed

        if draft is None:
            return 0

        if confirmed.synced and draft == confirmed.active_leds:
            self.discard_draft()
            return 0

        if not draft:
            return 1 if self.clear_all() else 0

        sent = 0
        if confirmed.synced:
            indices = sorted(confirmed.active_leds ^ draft)
        else:
            logger.info("No full state report yet, clearing the matrix before applying the draft")
            if not self.clear_all():
                return 0
            sent = 1
            indices = sorted(draft)

        for index in indices:
            if not self._transport.send_command(ToggleCommand(index=index)):
                logger.warning(f"Stopped applying draft after {sent} command(s)")
                break
            sent += 1
        return sent

    def export_pattern(
        self, name: Optional[str] = None, colors: Optional[Mapping[int, str]] = None
    ) -> Pattern:
        """Capture confirmed state as a Pattern."""
        with self._lock:
            active = self._confirmed.active_leds
        return from_state(active, colors, name=name)

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    def on_status_event(self, event: StatusEvent) -> None:
        """Apply one status event from the transport."""
        with self._lock:
            confirmed = self._confirmed

            if isinstance(event, LedChanged):
                active = set(confirmed.active_leds)
                if event.on:
                    active.add(event.index)
                else:
                    active.discard(event.index)
                confirmed = confirmed.model_copy(update={"active_leds": frozenset(active)})
            elif isinstance(event, BulkState):
                confirmed = confirmed.model_copy(update={"active_leds": event.active_leds, "synced": True})
            elif isinstance(event, BrightnessChanged):
                confirmed = confirmed.model_copy(update={"brightness": event.value})
            elif isinstance(event, (Connected, Disconnected)):
                online = isinstance(event, Connected)
                if event.source == EventSource.DEVICE:
                    confirmed = confirmed.model_copy(update={"device_online": online})
                else:
                    # Reports may have been missed while the connection changed
                    confirmed = confirmed.model_copy(update={"connected": online, "synced": False})
            elif isinstance(event, ErrorStatus):
                self._last_error = event
                logger.info(f"Status error ({event.code.value}): {event.message}")
            else:
                logger.warning(f"Unhandled status event: {event!r}")
                return

            self._confirmed = confirmed
            if self._draft is not None and self._draft == confirmed.active_leds:
                logger.debug("Draft confirmed by device")
                self._draft = None
            snapshot = self._snapshot_locked()

        # Notify observers AFTER releasing lock to avoid deadlock
        self._notify(snapshot)

    def close(self) -> None:
        """Stop listening to the transport and drop observers."""
        self._transport.unregister_observer(self)
        self._observers.clear()

    def _snapshot_locked(self) -> StoreSnapshot:
        return StoreSnapshot(confirmed=self._confirmed, draft=self._draft, last_error=self._last_error)

    def _notify(self, snapshot: StoreSnapshot) -> None:
        self._observers.notify("on_matrix_changed", snapshot)

"""Transport client: one logical broker connection per process."""

import logging
import secrets
import threading
import time
from collections.abc import Callable
from typing import Optional

from matrixsync.codec import decode_status, encode_command
from matrixsync.exceptions import (
    NotConnectedError,
    PayloadParseError,
    PublishError,
    ReconnectExhaustedError,
    TransportError,
)
from matrixsync.models import AppConfig, Command, Connected, Disconnected, ErrorStatus, StatusEvent
from matrixsync.protocols import ConnectionState, StatusObserver
from matrixsync.transport.connection import BrokerConnection, ConnectionFactory
from matrixsync.transport.dispatcher import EventDispatcher
from matrixsync.transport.scheduler import Cancellable, Scheduler, TimerScheduler
from matrixsync.utils import ObserverManager

logger = logging.getLogger(__name__)

COMMAND_QOS = 1
STATUS_QOS = 1


def _default_factory(client_id: str, config: AppConfig, listener) -> BrokerConnection:
    from matrixsync.transport.mqtt import PahoConnection

    return PahoConnection(client_id, config, listener)


class _AttemptListener:
    """Routes callbacks from one connection attempt back to the client."""

    def __init__(self, client: "TransportClient", generation: int):
        self._client = client
        self._generation = generation

    def on_connected(self) -> None:
        self._client._handle_connected(self._generation)

    def on_connection_lost(self, reason: str) -> None:
        self._client._handle_lost(self._generation, reason)

    def on_connect_failed(self, reason: str) -> None:
        self._client._handle_connect_failed(self._generation, reason)

    def on_message(self, topic: str, payload: bytes) -> None:
        self._client._handle_message(self._generation, topic, payload)


class TransportClient:
    """
    Keeps one broker connection alive and fans status events out to listeners.

    Lifecycle:
    - The connection starts lazily on the first subscribe/register/send, or
      explicitly via connect().
    - On loss (or a failed attempt) a reconnect is scheduled after
      ``reconnect.delay`` seconds, at most ``reconnect.max_attempts`` times
      in a row. When the budget is spent a single terminal ErrorStatus with
      code RECONNECT_EXHAUSTED is emitted and the client stays FAILED until
      connect() is called again. A TransportError marked not recoverable
      (unusable broker settings) skips the retries and fails at once.
    - Every attempt closes the previous connection first. Callbacks from a
      closed connection are ignored.

    Delivery:
        Lifecycle events and parsed status messages go through one
        EventDispatcher, so listeners see them in receipt order, once each.

    Commands:
        send_command() publishes at QoS 1 and returns immediately. While not
        connected it emits ErrorStatus(NOT_CONNECTED) and drops the command.
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        connection_factory: Optional[ConnectionFactory] = None,
        scheduler: Optional[Scheduler] = None,
        threaded_delivery: bool = True,
        autostart: bool = True,
    ):
        """
        Initialize the client (does not connect).

        Args:
            config: Application config (defaults to AppConfig())
            connection_factory: Builds one BrokerConnection per attempt
                (defaults to PahoConnection)
            scheduler: Timer source for reconnect delays
            threaded_delivery: Deliver events on a worker thread; if False,
                events are delivered when drain() is called
            autostart: Connect on first use rather than only via connect()
        """
        self.config = config or AppConfig()
        self._factory = connection_factory or _default_factory
        self._scheduler = scheduler or TimerScheduler()
        self._autostart = autostart

        self._lock = threading.Lock()
        self._state = ConnectionState.IDLE
        self._connection: Optional[BrokerConnection] = None
        self._generation = 0
        self._attempt = 0
        self._retry_timer: Optional[Cancellable] = None
        self._connected_event = threading.Event()

        self._session_token = secrets.token_hex(4)
        self._client_id: Optional[str] = None

        self._observers = ObserverManager[StatusObserver](observer_type_name="status")
        self._dispatcher = EventDispatcher(self._deliver, threaded=threaded_delivery)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def state(self) -> ConnectionState:
        with self._lock:
            return self._state

    @property
    def is_connected(self) -> bool:
        with self._lock:
            return self._state == ConnectionState.CONNECTED

    @property
    def client_id(self) -> Optional[str]:
        """Client id of the current (or last) attempt."""
        with self._lock:
            return self._client_id

    @property
    def reconnect_attempts(self) -> int:
        """Reconnect attempts made since the last successful connect."""
        with self._lock:
            return self._attempt

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def subscribe(self, handler: Callable[[StatusEvent], None]) -> Callable[[], None]:
        """
        Register a callable for status events.

        Returns:
            Function that unsubscribes the handler
        """
        unsubscribe = self._observers.subscribe(handler)
        self.ensure_started()
        return unsubscribe

    def register_observer(self, observer: StatusObserver, start: bool = True) -> None:
        """
        Register an object implementing StatusObserver.

        Args:
            observer: Receives on_status_event for every event
            start: Start connecting if idle (set False to listen passively)
        """
        self._observers.register(observer)
        if start:
            self.ensure_started()

    def unregister_observer(self, observer: StatusObserver) -> None:
        self._observers.unregister(observer)

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------

    def connect(self) -> None:
        """
        Start connecting, with a fresh reconnect budget.

        No-op while a connection is live or an attempt is in progress.
        """
        with self._lock:
            if self._state in (
                ConnectionState.CONNECTED,
                ConnectionState.CONNECTING,
                ConnectionState.RECONNECTING,
            ):
                return
            logger.info(f"Starting broker connection to {self.config.broker.url}")
            old = self._connection
            self._connection = None
            self._attempt = 0
            self._state = ConnectionState.CONNECTING
            self._generation += 1
            generation = self._generation

        if old is not None:
            old.close()
        self._open(generation)

    def ensure_started(self) -> None:
        """Connect if the client has never been started and autostart is on."""
        if not self._autostart:
            return
        with self._lock:
            idle = self._state == ConnectionState.IDLE
        if idle:
            self.connect()

    def disconnect(self) -> None:
        """Close the connection and cancel any pending reconnect."""
        with self._lock:
            if self._state in (ConnectionState.IDLE, ConnectionState.CLOSED):
                return
            was_connected = self._state == ConnectionState.CONNECTED
            old = self._connection
            self._connection = None
            self._generation += 1
            self._state = ConnectionState.CLOSED
            self._cancel_retry_locked()
            self._connected_event.clear()

        if old is not None:
            old.close()
        logger.info("Disconnected from broker")
        if was_connected:
            self._post(Disconnected(reason="client disconnected"))

    def close(self, timeout: float = 2.0) -> None:
        """Disconnect, deliver pending events and stop the dispatcher."""
        self.disconnect()
        self._dispatcher.drain(timeout)
        self._dispatcher.stop(timeout)

    def wait_until_connected(self, timeout: Optional[float] = None) -> bool:
        """Block until connected; False on timeout."""
        self.ensure_started()
        return self._connected_event.wait(timeout)

    def drain(self, timeout: Optional[float] = None) -> bool:
        """Deliver every event received so far (see EventDispatcher.drain)."""
        return self._dispatcher.drain(timeout)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def send_command(self, command: Command) -> bool:
        """
        Publish a command to the device, fire-and-forget.

        Returns:
            True if the command was handed to the broker client. False if the
            client was not connected or the publish was refused; in both cases
            an ErrorStatus event is emitted and nothing is queued.
        """
        self.ensure_started()

        with self._lock:
            connection = self._connection if self._state == ConnectionState.CONNECTED else None

        if connection is None:
            error = NotConnectedError(command.action)
            error.log(logger)
            self._post(ErrorStatus.from_error(error))
            return False

        topic = self.config.topics.commands
        if not connection.publish(topic, encode_command(command), COMMAND_QOS):
            error = PublishError(command.action, topic)
            error.log(logger)
            self._post(ErrorStatus.from_error(error))
            return False

        logger.debug(f"Sent command: {command}")
        return True

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _next_client_id(self) -> str:
        prefix = self.config.broker.client_id_prefix
        return f"{prefix}-{self._session_token}-{int(time.time() * 1000)}-{self._attempt}"

    def _open(self, generation: int) -> None:
        """Create and start a connection for ``generation`` unless superseded."""
        with self._lock:
            if generation != self._generation or self._state != ConnectionState.CONNECTING:
                return
            client_id = self._next_client_id()
            self._client_id = client_id

        try:
            connection = self._factory(client_id, self.config, _AttemptListener(self, generation))
        except TransportError as e:
            logger.error(f"Cannot create broker connection: {e.technical_message}")
            self._handle_connect_failed(generation, e.user_message, retry=e.recoverable)
            return

        with self._lock:
            superseded = generation != self._generation or self._state != ConnectionState.CONNECTING
            if not superseded:
                self._connection = connection
        if superseded:
            connection.close()
            return

        try:
            connection.start()
        except TransportError as e:
            logger.error(f"Connection attempt failed to start: {e.technical_message}")
            self._handle_connect_failed(generation, e.user_message, retry=e.recoverable)

    def _retry(self, generation: int) -> None:
        """Timer callback: tear down the old connection and try again."""
        with self._lock:
            if generation != self._generation or self._state != ConnectionState.RECONNECTING:
                return
            self._retry_timer = None
            old = self._connection
            self._connection = None
            self._generation += 1
            new_generation = self._generation
            self._state = ConnectionState.CONNECTING
            attempt = self._attempt

        logger.info(
            f"Reconnect attempt {attempt}/{self.config.reconnect.max_attempts} to {self.config.broker.url}"
        )
        if old is not None:
            old.close()
        self._open(new_generation)

    def _schedule_retry_locked(self) -> bool:
        """
        Schedule the next attempt, or mark the client FAILED.

        Returns:
            True if a retry was scheduled, False if the budget is spent
        """
        max_attempts = self.config.reconnect.max_attempts
        if self._attempt >= max_attempts:
            self._state = ConnectionState.FAILED
            self._cancel_retry_locked()
            return False

        self._attempt += 1
        self._state = ConnectionState.RECONNECTING
        self._cancel_retry_locked()
        generation = self._generation
        self._retry_timer = self._scheduler.schedule(
            self.config.reconnect.delay, lambda: self._retry(generation)
        )
        return True

    def _cancel_retry_locked(self) -> None:
        if self._retry_timer is not None:
            self._retry_timer.cancel()
            self._retry_timer = None

    def _give_up(self, reason: Optional[str] = None) -> None:
        """Close whatever is left of the last attempt and emit the terminal error."""
        with self._lock:
            old = self._connection
            self._connection = None
            attempts = self._attempt
        if old is not None:
            old.close()

        error = ReconnectExhaustedError(attempts, self.config.broker.url, reason)
        error.log(logger)
        self._post(ErrorStatus.from_error(error))

    def _handle_connected(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation or self._state != ConnectionState.CONNECTING:
                return
            connection = self._connection
        if connection is None:
            return

        try:
            connection.subscribe(self.config.topics.status, STATUS_QOS)
        except TransportError as e:
            logger.error(f"Could not subscribe to status topic: {e.technical_message}")
            self._handle_connect_failed(generation, e.user_message)
            return

        with self._lock:
            if generation != self._generation or self._state != ConnectionState.CONNECTING:
                return
            self._state = ConnectionState.CONNECTED
            self._attempt = 0
            self._connected_event.set()
            client_id = self._client_id

        logger.info(f"Connected as {client_id}, listening on {self.config.topics.status}")
        self._post(Connected())

    def _handle_lost(self, generation: int, reason: str) -> None:
        with self._lock:
            if generation != self._generation or self._state != ConnectionState.CONNECTED:
                return
            self._connected_event.clear()
            scheduled = self._schedule_retry_locked()

        logger.warning(f"Connection lost: {reason}")
        self._post(Disconnected(reason=reason))
        if not scheduled:
            self._give_up()

    def _handle_connect_failed(self, generation: int, reason: str, retry: bool = True) -> None:
        """Schedule the next attempt, or give up if ``retry`` is False or the budget is spent."""
        with self._lock:
            if generation != self._generation or self._state != ConnectionState.CONNECTING:
                return
            if retry:
                scheduled = self._schedule_retry_locked()
            else:
                self._state = ConnectionState.FAILED
                self._cancel_retry_locked()
                scheduled = False
            attempt = self._attempt

        if scheduled:
            logger.warning(
                f"Connection attempt failed ({reason}); retrying in {self.config.reconnect.delay:g}s "
                f"({attempt}/{self.config.reconnect.max_attempts})"
            )
        else:
            self._give_up(None if retry else reason)

    def _handle_message(self, generation: int, topic: str, payload: bytes) -> None:
        with self._lock:
            if generation != self._generation:
                return
        if topic != self.config.topics.status:
            logger.debug(f"Ignoring message on unexpected topic {topic}")
            return

        try:
            events = decode_status(payload)
        except PayloadParseError as e:
            logger.warning(f"Dropping malformed status message: {e.technical_message}")
            return

        for event in events:
            self._post(event)

    def _post(self, event: StatusEvent) -> None:
        self._dispatcher.post(event)

    def _deliver(self, event: StatusEvent) -> None:
        logger.debug(f"Delivering {event.kind} event")
        self._observers.notify("on_status_event", event)
